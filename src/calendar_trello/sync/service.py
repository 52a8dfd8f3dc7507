"""Calendar → Trello synchronization service.

## Operations

- **sync_events_to_list**: reconcile a day's events against one list and
  create the missing cards, one at a time, paced by a rate limiter
- **sync_today_and_tomorrow**: the Today and Tomorrow pipelines, run
  concurrently (they write to different lists)
- **perform_daily_rollover**: move every Tomorrow card to Today, then
  populate Tomorrow from the next day's events

## Failure Handling

Authentication failures abort the operation and propagate. Every other
failure (one calendar, one card) is logged, recorded in the result's
`failures` and skipped; the next scheduled run converges because card
creation is idempotent.

## Card Order

New cards are added at `new_card_position` (default bottom) in event order.
Rollover keeps the Tomorrow list's relative order: cards are moved last to
first, each to the top of Today, so the moved block sits above the existing
Today cards in its original order.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Callable, Literal, Sequence

from calendar_trello.auth.authenticator import Authenticator
from calendar_trello.auth.google import GoogleOAuth
from calendar_trello.auth.session import GoogleSession
from calendar_trello.calendar.fetcher import EventFetcher, FetchResult
from calendar_trello.calendar.google_calendar import GoogleCalendarClient
from calendar_trello.config import Settings
from calendar_trello.models.card import Card
from calendar_trello.models.event import CalendarEvent
from calendar_trello.models.window import TimeWindow
from calendar_trello.sync.formatting import DuePolicy, format_event_for_card
from calendar_trello.sync.pacing import RateLimiter
from calendar_trello.sync.reconciler import reconcile
from calendar_trello.trello.client import TrelloClient

logger = logging.getLogger(__name__)

Day = Literal["today", "tomorrow"]


@dataclass
class ItemFailure:
    """One card operation that did not succeed."""

    item_id: str
    title: str
    error: str


@dataclass
class SyncResult:
    """Result of syncing events into one list."""

    list_name: str
    list_id: str
    events_found: int = 0
    created: list[Card] = field(default_factory=list)
    skipped: int = 0
    failures: list[ItemFailure] = field(default_factory=list)
    synced_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def created_count(self) -> int:
        return len(self.created)

    @property
    def success(self) -> bool:
        return len(self.failures) == 0


@dataclass
class MoveResult:
    """Result of moving the Tomorrow cards to Today."""

    moved: list[Card] = field(default_factory=list)
    failures: list[ItemFailure] = field(default_factory=list)

    @property
    def moved_count(self) -> int:
        return len(self.moved)


@dataclass
class DailySyncResult:
    """Result of the Today + Tomorrow sync."""

    today: SyncResult
    tomorrow: SyncResult


@dataclass
class RolloverResult:
    """Result of the daily rollover."""

    moves: MoveResult
    tomorrow: SyncResult

    @property
    def created(self) -> int:
        return self.tomorrow.created_count

    @property
    def skipped(self) -> int:
        return self.tomorrow.skipped

    @property
    def moved(self) -> int:
        return self.moves.moved_count

    @property
    def success(self) -> bool:
        return not self.moves.failures and self.tomorrow.success


class CalendarBoardSync:
    """Service for mirroring calendar days into Trello lists.

    One instance serves one invocation: it owns the Google session and the
    Trello HTTP client.

    Example:
        ```python
        async with CalendarBoardSync.from_settings(get_settings()) as sync:
            result = await sync.perform_daily_rollover()
            print(result.moved, result.created, result.skipped)
        ```
    """

    def __init__(
        self,
        settings: Settings,
        trello: TrelloClient,
        fetcher: EventFetcher,
        authenticator: Authenticator,
        limiter_factory: Callable[[], RateLimiter] | None = None,
        now: Callable[[], datetime] | None = None,
    ):
        """Initialize the sync service.

        Args:
            settings: Application settings (list ids, calendars, timezone)
            trello: Trello client
            fetcher: Event fetcher bound to the invocation's session
            authenticator: Authenticator bound to the same session
            limiter_factory: Creates the pacing limiter for one pipeline
            now: Current time source (used for day windows)
        """
        self.settings = settings
        self.trello = trello
        self.fetcher = fetcher
        self.authenticator = authenticator
        self._limiter_factory = limiter_factory or (
            lambda: RateLimiter(
                rate=settings.trello_requests_per_second,
                capacity=settings.trello_burst,
            )
        )
        self._now = now or (lambda: datetime.now(timezone.utc))

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        oauth: GoogleOAuth | None = None,
        trello: TrelloClient | None = None,
    ) -> CalendarBoardSync:
        """Wire up a service with a fresh session from configuration."""
        session = GoogleSession.from_settings(settings)
        calendar_client = GoogleCalendarClient(
            session,
            probe_calendar_id=settings.calendar_ids[0],
            timeout=settings.http_timeout_seconds,
        )
        oauth = oauth or GoogleOAuth(
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
            token_uri=settings.google_token_uri,
            timeout=settings.http_timeout_seconds,
        )
        authenticator = Authenticator(session, oauth, calendar_client.probe)
        fetcher = EventFetcher(
            calendar_client,
            authenticator,
            max_results=settings.calendar_max_results,
        )
        trello = trello or TrelloClient(
            api_key=settings.trello_api_key,
            token=settings.trello_token,
            timeout=settings.http_timeout_seconds,
        )
        return cls(settings, trello, fetcher, authenticator)

    async def __aenter__(self) -> CalendarBoardSync:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.trello.close()

    def window_for(self, day: Day) -> TimeWindow:
        """Window of today or tomorrow in the configured timezone."""
        tz = self.settings.tzinfo
        if day == "tomorrow":
            return TimeWindow.tomorrow(tz, now=self._now())
        return TimeWindow.today(tz, now=self._now())

    async def fetch_events(self, window: TimeWindow) -> list[CalendarEvent]:
        """Events of a window across the configured calendars."""
        return await self.fetcher.fetch_events(window, self.settings.calendar_ids)

    async def fetch_events_for_day(self, day: Day) -> FetchResult:
        """Authenticate and fetch one day's events without touching Trello."""
        await self.authenticator.ensure_authenticated()
        return await self.fetcher.fetch(self.window_for(day), self.settings.calendar_ids)

    async def sync_events_to_list(
        self,
        events: Sequence[CalendarEvent],
        list_id: str,
        list_name: str,
        due_policy: DuePolicy = DuePolicy.EVENT_START,
        target_day: date | None = None,
    ) -> SyncResult:
        """Create cards for events not yet represented in a list.

        Args:
            events: Events in the order their cards should appear
            list_id: Trello list ID
            list_name: Display name used in logs and results
            due_policy: How card due dates are derived
            target_day: Day used by `DuePolicy.END_OF_DAY`

        Returns:
            SyncResult with created cards, skip count and failures
        """
        result = SyncResult(list_name=list_name, list_id=list_id, events_found=len(events))

        try:
            existing = await self.trello.get_list_cards(list_id)
        except Exception as e:
            # Without the current cards duplicates cannot be ruled out
            logger.exception(f"Error listing {list_name} cards: {e}")
            result.failures.append(ItemFailure(item_id=list_id, title=list_name, error=str(e)))
            return result

        plan = reconcile(events, existing)
        result.skipped = plan.skipped

        tz = self.settings.tzinfo
        limiter = self._limiter_factory()

        for event in plan.to_create:
            try:
                payload = format_event_for_card(event, tz, due_policy, target_day)
            except ValueError as e:
                logger.error(f"Cannot format card for {event.title}: {e}")
                result.failures.append(
                    ItemFailure(item_id=event.id, title=event.title, error=str(e))
                )
                continue

            await limiter.acquire()
            try:
                card = await self.trello.create_card(
                    list_id, payload, position=self.settings.new_card_position
                )
            except Exception as e:
                logger.exception(f"Failed to create card for {event.title}: {e}")
                result.failures.append(
                    ItemFailure(item_id=event.id, title=event.title, error=str(e))
                )
                continue

            result.created.append(card)
            logger.info(f"Created {list_name} card: {payload.name}")

        logger.info(
            f"{list_name}: {result.created_count} created, {result.skipped} skipped, "
            f"{len(result.failures)} failed"
        )
        return result

    async def sync_today_and_tomorrow(self) -> DailySyncResult:
        """Sync today's and tomorrow's events into their lists.

        Raises:
            AuthError: If Google credentials cannot be used or refreshed
        """
        logger.info("Starting calendar sync")
        await self.authenticator.ensure_authenticated()

        today = self.window_for("today")
        tomorrow = self.window_for("tomorrow")

        today_events, tomorrow_events = await asyncio.gather(
            self.fetch_events(today),
            self.fetch_events(tomorrow),
        )

        today_result, tomorrow_result = await asyncio.gather(
            self.sync_events_to_list(
                today_events, self.settings.today_list_id, "Today"
            ),
            self.sync_events_to_list(
                tomorrow_events, self.settings.tomorrow_list_id, "Tomorrow"
            ),
        )

        logger.info(
            f"Sync completed: Today {today_result.created_count} created, "
            f"Tomorrow {tomorrow_result.created_count} created"
        )
        return DailySyncResult(today=today_result, tomorrow=tomorrow_result)

    async def move_tomorrow_to_today(self) -> MoveResult:
        """Move every Tomorrow card to the top of Today, keeping their order."""
        result = MoveResult()

        try:
            cards = await self.trello.get_list_cards(self.settings.tomorrow_list_id)
        except Exception as e:
            logger.exception(f"Error listing Tomorrow cards: {e}")
            result.failures.append(
                ItemFailure(item_id=self.settings.tomorrow_list_id, title="Tomorrow", error=str(e))
            )
            return result

        limiter = self._limiter_factory()

        # Last card first: each lands on top, so the block keeps its order
        for card in reversed(cards):
            await limiter.acquire()
            try:
                moved = await self.trello.move_card(
                    card.id, self.settings.today_list_id, position="top"
                )
            except Exception as e:
                logger.exception(f"Failed to move card {card.name}: {e}")
                result.failures.append(ItemFailure(item_id=card.id, title=card.name, error=str(e)))
                continue

            result.moved.append(moved)
            logger.info(f"Moved to Today: {card.name}")

        # Report in list order
        result.moved.reverse()
        logger.info(f"Moved {result.moved_count} cards from Tomorrow to Today")
        return result

    async def perform_daily_rollover(self) -> RolloverResult:
        """Advance Tomorrow into Today and repopulate Tomorrow.

        Raises:
            AuthError: If Google credentials cannot be used or refreshed
        """
        logger.info("Starting daily rollover")
        await self.authenticator.ensure_authenticated()

        moves = await self.move_tomorrow_to_today()

        window = self.window_for("tomorrow")
        events = await self.fetch_events(window)

        tomorrow = await self.sync_events_to_list(
            events,
            self.settings.tomorrow_list_id,
            "Tomorrow",
            due_policy=DuePolicy.END_OF_DAY,
            target_day=window.day,
        )

        logger.info(
            f"Daily rollover completed: {moves.moved_count} moved, "
            f"{tomorrow.created_count} created, {tomorrow.skipped} skipped"
        )
        return RolloverResult(moves=moves, tomorrow=tomorrow)
