"""Pytest fixtures for calendar → Trello sync tests.

This module provides test fixtures that ensure:
1. No external API calls are made (Google Calendar, Google OAuth, Trello)
2. Time-dependent code sees a fixed "now"
3. Isolated test environment with controlled configuration
"""

import os
from datetime import datetime, timezone
from typing import Any
from zoneinfo import ZoneInfo

import pytest

# Set test environment BEFORE importing application modules
os.environ.setdefault("TRELLO_API_KEY", "test-trello-key")
os.environ.setdefault("TRELLO_TOKEN", "test-trello-token")
os.environ.setdefault("TRELLO_BOARD_ID", "board-1")
os.environ.setdefault("TODAY_LIST_ID", "list-today")
os.environ.setdefault("TOMORROW_LIST_ID", "list-tomorrow")
os.environ.setdefault("GOOGLE_CLIENT_ID", "test-client-id")
os.environ.setdefault("GOOGLE_CLIENT_SECRET", "test-client-secret")
os.environ.setdefault("GOOGLE_ACCESS_TOKEN", "test-access-token")
os.environ.setdefault("GOOGLE_REFRESH_TOKEN", "test-refresh-token")
os.environ.setdefault("CALENDAR_IDS", '["primary", "family@group.calendar.google.com"]')
os.environ.setdefault("TIMEZONE", "Europe/Stockholm")
os.environ.setdefault("ENVIRONMENT", "development")

from calendar_trello.auth.authenticator import Authenticator
from calendar_trello.auth.google import GoogleTokens
from calendar_trello.auth.session import GoogleSession
from calendar_trello.calendar.fetcher import EventFetcher
from calendar_trello.config import get_settings_uncached
from calendar_trello.exceptions import AuthError, TrelloError
from calendar_trello.models.card import Card
from calendar_trello.models.event import CalendarEvent
from calendar_trello.sync.pacing import RateLimiter
from calendar_trello.sync.service import CalendarBoardSync
from calendar_trello.trello.client import BoardInfo, CardPayload

STOCKHOLM = ZoneInfo("Europe/Stockholm")

# 10:00 local time on 2026-06-01 (CEST, UTC+2)
NOW = datetime(2026, 6, 1, 8, 0, tzinfo=timezone.utc)

PRIMARY = "primary"
FAMILY = "family@group.calendar.google.com"


# =============================================================================
# Builders
# =============================================================================


def api_event(
    id: str,
    summary: str | None = "Meeting",
    start: str = "2026-06-01T09:00:00+02:00",
    end: str | None = None,
    all_day: bool = False,
    **extra: Any,
) -> dict[str, Any]:
    """A Google Calendar API event resource."""
    key = "date" if all_day else "dateTime"
    data: dict[str, Any] = {
        "id": id,
        "status": "confirmed",
        "start": {key: start},
        "end": {key: end or start},
    }
    if summary is not None:
        data["summary"] = summary
    data.update(extra)
    return data


def make_event(id: str, calendar_id: str = PRIMARY, **kwargs: Any) -> CalendarEvent:
    return CalendarEvent.from_api(api_event(id, **kwargs), calendar_id)


def declined_by_me() -> list[dict[str, Any]]:
    return [
        {"email": "me@example.com", "self": True, "responseStatus": "declined"},
        {"email": "boss@example.com", "responseStatus": "accepted"},
    ]


# =============================================================================
# Fakes
# =============================================================================


class FakeClock:
    """Monotonic clock whose sleep advances time instantly."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeTrello:
    """In-memory Trello board."""

    def __init__(self, lists: dict[str, list[Card]] | None = None) -> None:
        self.lists: dict[str, list[Card]] = {k: list(v) for k, v in (lists or {}).items()}
        self.created: list[tuple[str, CardPayload, str]] = []
        self.moves: list[tuple[str, str, str]] = []
        self.fail_create_for: set[str] = set()
        self.fail_move_for: set[str] = set()
        self.fail_list_for: set[str] = set()
        self.closed = False
        self._counter = 0

    async def get_list_cards(self, list_id: str) -> list[Card]:
        if list_id in self.fail_list_for:
            raise TrelloError("Trello API error: 503", status_code=503)
        return list(self.lists.get(list_id, []))

    async def create_card(self, list_id: str, payload: CardPayload, position: str = "bottom") -> Card:
        if payload.name in self.fail_create_for:
            raise TrelloError("Trello API error: 500", status_code=500)
        self._counter += 1
        card = Card(
            id=f"new-{self._counter}",
            name=payload.name,
            desc=payload.description,
            due=payload.due,
            id_list=list_id,
        )
        cards = self.lists.setdefault(list_id, [])
        if position == "top":
            cards.insert(0, card)
        else:
            cards.append(card)
        self.created.append((list_id, payload, position))
        return card

    async def move_card(self, card_id: str, list_id: str, position: str = "top") -> Card:
        if card_id in self.fail_move_for:
            raise TrelloError("Trello API error: 500", status_code=500)
        for cards in self.lists.values():
            for card in cards:
                if card.id == card_id:
                    cards.remove(card)
                    moved = card.model_copy(update={"id_list": list_id})
                    target = self.lists.setdefault(list_id, [])
                    if position == "top":
                        target.insert(0, moved)
                    else:
                        target.append(moved)
                    self.moves.append((card_id, list_id, position))
                    return moved
        raise TrelloError("Trello API error: 404", status_code=404)

    async def get_board(self, board_id: str) -> BoardInfo:
        return BoardInfo(id=board_id, name="Daily Planner")

    async def close(self) -> None:
        self.closed = True

    def names(self, list_id: str) -> list[str]:
        return [c.name for c in self.lists.get(list_id, [])]


class FakeCalendarClient:
    """Calendar client serving canned API resources per calendar."""

    def __init__(
        self,
        events: dict[str, list[dict[str, Any]]] | None = None,
        failures: dict[str, list[Exception]] | None = None,
        probe_failures: list[Exception] | None = None,
    ) -> None:
        self.events = events or {}
        self.failures = failures or {}
        self.probe_failures = probe_failures or []
        self.calls: list[str] = []
        self.probes = 0

    async def list_events(self, calendar_id, window, max_results=50) -> list[CalendarEvent]:
        self.calls.append(calendar_id)
        pending = self.failures.get(calendar_id)
        if pending:
            raise pending.pop(0)
        return [CalendarEvent.from_api(d, calendar_id) for d in self.events.get(calendar_id, [])]

    async def probe(self) -> None:
        self.probes += 1
        if self.probe_failures:
            raise self.probe_failures.pop(0)


class FakeOAuth:
    """Token endpoint stand-in."""

    def __init__(self, error: AuthError | None = None) -> None:
        self.error = error
        self.calls = 0

    async def refresh_access_token(self, refresh_token: str) -> GoogleTokens:
        self.calls += 1
        if self.error:
            raise self.error
        return GoogleTokens(
            access_token=f"refreshed-access-{self.calls}",
            refresh_token=refresh_token,
            token_type="Bearer",
            expires_at=None,
            scope="",
        )


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Reset settings cache before each test to ensure clean state."""
    from calendar_trello.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings():
    return get_settings_uncached()


@pytest.fixture
def tz():
    return STOCKHOLM


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def trello() -> FakeTrello:
    return FakeTrello()


@pytest.fixture
def calendar_client() -> FakeCalendarClient:
    return FakeCalendarClient()


@pytest.fixture
def oauth() -> FakeOAuth:
    return FakeOAuth()


@pytest.fixture
def session() -> GoogleSession:
    return GoogleSession(access_token="test-access-token", refresh_token="test-refresh-token")


@pytest.fixture
def authenticator(session, oauth, calendar_client) -> Authenticator:
    return Authenticator(session, oauth, calendar_client.probe)


@pytest.fixture
def fetcher(calendar_client, authenticator) -> EventFetcher:
    return EventFetcher(calendar_client, authenticator)


@pytest.fixture
def sync_service(settings, trello, fetcher, authenticator, clock) -> CalendarBoardSync:
    """Sync service wired to fakes, with a fixed clock."""
    return CalendarBoardSync(
        settings,
        trello,
        fetcher,
        authenticator,
        limiter_factory=lambda: RateLimiter(
            rate=settings.trello_requests_per_second,
            clock=clock,
            sleep=clock.sleep,
        ),
        now=lambda: NOW,
    )
