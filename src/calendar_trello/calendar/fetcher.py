"""Multi-calendar event fetching for one local day.

## Process

1. Query each calendar for events overlapping the window
2. On a rejected access token, refresh once and retry that calendar once
3. Drop events whose start does not fall on the window's date
4. Drop duplicates by (title, start), first calendar wins

A calendar that still fails after its retry, or fails for any other reason,
contributes no events. Only an `AuthError` (no credential can be produced)
aborts the fetch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Sequence

from calendar_trello.auth.authenticator import Authenticator
from calendar_trello.calendar.google_calendar import (
    DEFAULT_MAX_RESULTS,
    GoogleCalendarClient,
)
from calendar_trello.exceptions import AuthError, CalendarAuthError
from calendar_trello.models.event import CalendarEvent, calendar_label
from calendar_trello.models.window import TimeWindow

logger = logging.getLogger(__name__)


@dataclass
class CalendarFailure:
    """A calendar whose events could not be read."""

    calendar_id: str
    error: str


@dataclass
class FetchResult:
    """Events of one day across calendars."""

    window: TimeWindow
    events: list[CalendarEvent] = field(default_factory=list)
    events_found: int = 0
    outside_window: int = 0
    duplicates: int = 0
    failures: list[CalendarFailure] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return len(self.failures) == 0


def filter_to_day(events: Sequence[CalendarEvent], window: TimeWindow) -> list[CalendarEvent]:
    """Keep events whose local start date is the window's day."""
    return [e for e in events if window.contains_date(e.local_start_date(window.tz))]


def deduplicate(events: Sequence[CalendarEvent]) -> list[CalendarEvent]:
    """Drop events repeating an earlier (title, start), keeping order."""
    seen: set[tuple[str, date | datetime]] = set()
    unique = []
    for event in events:
        key = event.dedup_key
        if key in seen:
            logger.debug(f"Skipping duplicate: {event.title}")
            continue
        seen.add(key)
        unique.append(event)
    return unique


class EventFetcher:
    """Fetches the events of a day from several calendars.

    Example:
        ```python
        fetcher = EventFetcher(client, authenticator)
        events = await fetcher.fetch_events(TimeWindow.tomorrow(tz), ["primary"])
        ```
    """

    def __init__(
        self,
        client: GoogleCalendarClient,
        authenticator: Authenticator,
        max_results: int = DEFAULT_MAX_RESULTS,
    ):
        self.client = client
        self.authenticator = authenticator
        self.max_results = max_results

    async def fetch_events(
        self,
        window: TimeWindow,
        calendar_ids: Sequence[str],
    ) -> list[CalendarEvent]:
        """Deduplicated, date-filtered events of `window`, in calendar order."""
        result = await self.fetch(window, calendar_ids)
        return result.events

    async def fetch(
        self,
        window: TimeWindow,
        calendar_ids: Sequence[str],
    ) -> FetchResult:
        """Fetch events and report per-calendar failures.

        Raises:
            AuthError: If a token refresh was needed and could not be done
        """
        logger.info(f"Fetching events for {window} from {len(calendar_ids)} calendars")
        result = FetchResult(window=window)
        collected: list[CalendarEvent] = []

        for calendar_id in calendar_ids:
            try:
                events = await self._fetch_calendar(calendar_id, window)
            except AuthError:
                raise
            except Exception as e:
                logger.error(f"Failed to get events from {calendar_id}: {e}")
                result.failures.append(CalendarFailure(calendar_id=calendar_id, error=str(e)))
                continue

            on_day = filter_to_day(events, window)
            result.events_found += len(events)
            result.outside_window += len(events) - len(on_day)
            collected.extend(on_day)
            logger.info(
                f"{calendar_label(calendar_id)}: {len(events)} events, "
                f"{len(on_day)} on {window}"
            )

        result.events = deduplicate(collected)
        result.duplicates = len(collected) - len(result.events)

        logger.info(f"Total unique events for {window}: {len(result.events)}")
        return result

    async def _fetch_calendar(
        self,
        calendar_id: str,
        window: TimeWindow,
    ) -> list[CalendarEvent]:
        try:
            return await self.client.list_events(calendar_id, window, self.max_results)
        except CalendarAuthError:
            logger.info(f"Token rejected while reading {calendar_id}, refreshing")

        await self.authenticator.refresh()
        return await self.client.list_events(calendar_id, window, self.max_results)

