"""Tests for multi-calendar event fetching."""

from datetime import date

import pytest

from calendar_trello.auth import Authenticator
from calendar_trello.calendar.fetcher import EventFetcher, deduplicate, filter_to_day
from calendar_trello.exceptions import AuthError, CalendarAPIError, CalendarAuthError
from calendar_trello.models import TimeWindow
from tests.conftest import FAMILY, PRIMARY, FakeCalendarClient, FakeOAuth, api_event, make_event

CALENDARS = [PRIMARY, FAMILY]


@pytest.fixture
def today(tz) -> TimeWindow:
    return TimeWindow.for_day(date(2026, 6, 1), tz)


@pytest.fixture
def tomorrow(tz) -> TimeWindow:
    return TimeWindow.for_day(date(2026, 6, 2), tz)


def fetcher_for(client: FakeCalendarClient, session, oauth: FakeOAuth) -> EventFetcher:
    return EventFetcher(client, Authenticator(session, oauth, client.probe))


class TestFilterToDay:
    """Tests for bucketing events by local start date."""

    def test_boundary_events(self, today, tomorrow):
        """23:59 on D belongs to D; 00:01 on D+1 belongs to D+1."""
        late = make_event("late", start="2026-06-01T23:59:00+02:00")
        early = make_event("early", start="2026-06-02T00:01:00+02:00")

        assert filter_to_day([late, early], today) == [late]
        assert filter_to_day([late, early], tomorrow) == [early]

    def test_utc_event_bucketed_locally(self, today, tomorrow):
        """22:30 UTC on June 1 starts on June 2 in Stockholm."""
        event = make_event("e", start="2026-06-01T22:30:00Z")
        assert filter_to_day([event], today) == []
        assert filter_to_day([event], tomorrow) == [event]

    def test_multi_day_event_started_earlier(self, today):
        """An event overlapping the window but starting the day before is dropped."""
        event = make_event("trip", start="2026-05-31T18:00:00+02:00", end="2026-06-01T10:00:00+02:00")
        assert filter_to_day([event], today) == []

    def test_all_day(self, today, tomorrow):
        event = make_event("holiday", start="2026-06-02", end="2026-06-03", all_day=True)
        assert filter_to_day([event], today) == []
        assert filter_to_day([event], tomorrow) == [event]


class TestDeduplicate:
    """Tests for cross-calendar duplicate removal."""

    def test_same_title_and_start(self):
        a = make_event("a", calendar_id=PRIMARY, summary="Dinner", start="2026-06-01T18:00:00+02:00")
        b = make_event("b", calendar_id=FAMILY, summary="Dinner", start="2026-06-01T16:00:00Z")
        assert deduplicate([a, b]) == [a]

    def test_different_start(self):
        a = make_event("a", summary="Dinner", start="2026-06-01T18:00:00+02:00")
        b = make_event("b", summary="Dinner", start="2026-06-01T19:00:00+02:00")
        assert deduplicate([a, b]) == [a, b]

    def test_all_day_and_timed_are_distinct(self):
        a = make_event("a", summary="Dinner", start="2026-06-01", all_day=True)
        b = make_event("b", summary="Dinner", start="2026-06-01T00:00:00+02:00")
        assert deduplicate([a, b]) == [a, b]


class TestEventFetcher:
    """Tests for fetching across calendars."""

    async def test_merges_calendars_in_order(self, session, oauth, today):
        client = FakeCalendarClient(
            events={
                PRIMARY: [api_event("p1", summary="Standup", start="2026-06-01T09:00:00+02:00")],
                FAMILY: [api_event("f1", summary="Dinner", start="2026-06-01T18:00:00+02:00")],
            }
        )

        events = await fetcher_for(client, session, oauth).fetch_events(today, CALENDARS)

        assert [e.id for e in events] == ["p1", "f1"]
        assert client.calls == CALENDARS

    async def test_duplicate_across_calendars_returned_once(self, session, oauth, today):
        """The first calendar's copy wins."""
        shared = {"summary": "Dinner", "start": "2026-06-01T18:00:00+02:00"}
        client = FakeCalendarClient(
            events={PRIMARY: [api_event("p1", **shared)], FAMILY: [api_event("f1", **shared)]}
        )

        result = await fetcher_for(client, session, oauth).fetch(today, CALENDARS)

        assert [e.id for e in result.events] == ["p1"]
        assert result.events_found == 2
        assert result.duplicates == 1

    async def test_outside_window_counted(self, session, oauth, today):
        client = FakeCalendarClient(
            events={
                PRIMARY: [
                    api_event("late", start="2026-06-01T23:59:00+02:00"),
                    api_event("early", start="2026-06-02T00:01:00+02:00"),
                ]
            }
        )

        result = await fetcher_for(client, session, oauth).fetch(today, [PRIMARY])

        assert [e.id for e in result.events] == ["late"]
        assert result.outside_window == 1

    async def test_refresh_and_retry_once(self, session, oauth, today):
        client = FakeCalendarClient(
            events={PRIMARY: [api_event("p1")]},
            failures={PRIMARY: [CalendarAuthError("rejected", status_code=401)]},
        )

        result = await fetcher_for(client, session, oauth).fetch(today, [PRIMARY])

        assert [e.id for e in result.events] == ["p1"]
        assert oauth.calls == 1
        assert session.access_token == "refreshed-access-1"
        assert client.calls == [PRIMARY, PRIMARY]
        assert result.success

    async def test_retry_failure_skips_calendar(self, session, oauth, today):
        """A calendar still rejected after the refresh contributes nothing."""
        client = FakeCalendarClient(
            events={PRIMARY: [api_event("p1")], FAMILY: [api_event("f1", summary="Dinner")]},
            failures={
                PRIMARY: [
                    CalendarAuthError("rejected", status_code=401),
                    CalendarAuthError("rejected", status_code=401),
                ]
            },
        )

        result = await fetcher_for(client, session, oauth).fetch(today, CALENDARS)

        assert [e.id for e in result.events] == ["f1"]
        assert [f.calendar_id for f in result.failures] == [PRIMARY]
        assert not result.success
        assert oauth.calls == 1

    async def test_other_error_skips_without_refresh(self, session, oauth, today):
        client = FakeCalendarClient(
            events={FAMILY: [api_event("f1")]},
            failures={PRIMARY: [CalendarAPIError("Calendar API error: 404", status_code=404)]},
        )

        result = await fetcher_for(client, session, oauth).fetch(today, CALENDARS)

        assert [e.id for e in result.events] == ["f1"]
        assert result.failures[0].error == "Calendar API error: 404"
        assert oauth.calls == 0

    async def test_refresh_rejected_aborts(self, session, today):
        oauth = FakeOAuth(error=AuthError("Token refresh failed: invalid_grant"))
        client = FakeCalendarClient(
            events={FAMILY: [api_event("f1")]},
            failures={PRIMARY: [CalendarAuthError("rejected", status_code=401)]},
        )

        with pytest.raises(AuthError):
            await fetcher_for(client, session, oauth).fetch(today, CALENDARS)

        assert client.calls == [PRIMARY]

    async def test_passes_max_results(self, session, oauth, today):
        seen = {}

        class RecordingClient(FakeCalendarClient):
            async def list_events(self, calendar_id, window, max_results=50):
                seen["max_results"] = max_results
                return []

        client = RecordingClient()
        fetcher = EventFetcher(client, Authenticator(session, oauth, client.probe), max_results=7)

        await fetcher.fetch_events(today, [PRIMARY])

        assert seen["max_results"] == 7
