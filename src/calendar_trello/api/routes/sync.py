"""Sync and rollover routes.

The rollover route accepts GET so a cron scheduler can call it. It answers
200 even when the rollover fails, with `success: false`, so the scheduler does
not retry; the next scheduled run converges.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from calendar_trello.api.dependencies import get_sync_service
from calendar_trello.exceptions import AuthError
from calendar_trello.sync.service import CalendarBoardSync, SyncResult

logger = logging.getLogger(__name__)

router = APIRouter()


class ListSyncResponse(BaseModel):
    """Outcome for one list."""

    list_name: str
    events_found: int
    created: int
    skipped: int
    errors: list[str]

    @classmethod
    def from_result(cls, result: SyncResult) -> ListSyncResponse:
        return cls(
            list_name=result.list_name,
            events_found=result.events_found,
            created=result.created_count,
            skipped=result.skipped,
            errors=[f"{f.title}: {f.error}" for f in result.failures],
        )


class SyncResponse(BaseModel):
    """Today + Tomorrow sync response."""

    success: bool
    today: ListSyncResponse
    tomorrow: ListSyncResponse
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class RolloverResponse(BaseModel):
    """Daily rollover response."""

    success: bool
    moved: int = 0
    created: int = 0
    skipped: int = 0
    errors: list[str] = Field(default_factory=list)
    error: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class EventResponse(BaseModel):
    """A calendar event as seen by the sync."""

    id: str
    title: str
    calendar_id: str
    start: str
    all_day: bool
    location: str | None
    declined: bool


class EventsResponse(BaseModel):
    """Events of one day."""

    day: date
    events: list[EventResponse]
    events_found: int
    outside_window: int
    duplicates: int
    errors: list[str]


@router.post("/sync", response_model=SyncResponse)
async def sync_today_and_tomorrow(
    sync: CalendarBoardSync = Depends(get_sync_service),
) -> SyncResponse:
    """Sync today's and tomorrow's events to their lists."""
    try:
        result = await sync.sync_today_and_tomorrow()
    except AuthError as e:
        logger.error(f"Sync failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Google authentication failed: {e}",
        )

    return SyncResponse(
        success=result.today.success and result.tomorrow.success,
        today=ListSyncResponse.from_result(result.today),
        tomorrow=ListSyncResponse.from_result(result.tomorrow),
    )


@router.api_route("/rollover", methods=["GET", "POST"], response_model=RolloverResponse)
async def daily_rollover(
    sync: CalendarBoardSync = Depends(get_sync_service),
) -> RolloverResponse:
    """Move Tomorrow to Today and repopulate Tomorrow."""
    try:
        result = await sync.perform_daily_rollover()
    except AuthError as e:
        logger.error(f"Daily rollover failed: {e}")
        return RolloverResponse(success=False, error=str(e))

    errors = [f"{f.title}: {f.error}" for f in result.moves.failures]
    errors += [f"{f.title}: {f.error}" for f in result.tomorrow.failures]

    return RolloverResponse(
        success=result.success,
        moved=result.moved,
        created=result.created,
        skipped=result.skipped,
        errors=errors,
    )


@router.get("/events", response_model=EventsResponse)
async def list_events(
    day: str = Query(default="today", pattern="^(today|tomorrow)$"),
    sync: CalendarBoardSync = Depends(get_sync_service),
) -> EventsResponse:
    """Preview the events a sync would consider for a day."""
    try:
        result = await sync.fetch_events_for_day(day)
    except AuthError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Google authentication failed: {e}",
        )

    tz = sync.settings.tzinfo
    return EventsResponse(
        day=result.window.day,
        events=[
            EventResponse(
                id=e.id,
                title=e.title,
                calendar_id=e.calendar_id,
                start=e.start_instant(tz).isoformat(),
                all_day=e.is_all_day,
                location=e.location,
                declined=e.self_declined,
            )
            for e in result.events
        ],
        events_found=result.events_found,
        outside_window=result.outside_window,
        duplicates=result.duplicates,
        errors=[f"{f.calendar_id}: {f.error}" for f in result.failures],
    )
