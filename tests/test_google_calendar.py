"""Tests for the Google Calendar API client."""

from datetime import date
from unittest.mock import MagicMock, patch

import httplib2
import pytest
from google.auth.exceptions import RefreshError, TransportError
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.errors import HttpError

from calendar_trello.auth import GoogleSession
from calendar_trello.calendar.google_calendar import GoogleCalendarClient
from calendar_trello.exceptions import CalendarAPIError, CalendarAuthError
from calendar_trello.models import TimeWindow
from tests.conftest import api_event


def http_error(status: int, reason: str = "error") -> HttpError:
    resp = MagicMock(status=status, reason=reason)
    return HttpError(resp, b'{"error": {"message": "%s"}}' % reason.encode())


@pytest.fixture
def service():
    return MagicMock()


@pytest.fixture
def build(service):
    with patch("calendar_trello.calendar.google_calendar.build", return_value=service) as build:
        yield build


@pytest.fixture
def client(build) -> GoogleCalendarClient:
    return GoogleCalendarClient(GoogleSession(access_token="token-1", refresh_token="r"))


class TestListEvents:
    """Tests for reading a window of events."""

    def test_query_parameters(self, client, service, tz):
        service.events.return_value.list.return_value.execute.return_value = {"items": []}
        window = TimeWindow.for_day(date(2026, 6, 1), tz)

        client.list_events_sync("primary", window, max_results=25)

        service.events.return_value.list.assert_called_once_with(
            calendarId="primary",
            timeMin="2026-06-01T00:00:00+02:00",
            timeMax="2026-06-01T23:59:59.999000+02:00",
            singleEvents=True,
            orderBy="startTime",
            maxResults=25,
        )

    def test_parses_and_drops_cancelled(self, client, service, tz):
        service.events.return_value.list.return_value.execute.return_value = {
            "items": [
                api_event("evt1", summary="Standup"),
                api_event("evt2", status="cancelled"),
                api_event("evt3", summary="Lunch", start="2026-06-01T12:00:00+02:00"),
            ]
        }

        events = client.list_events_sync("primary", TimeWindow.for_day(date(2026, 6, 1), tz))

        assert [e.id for e in events] == ["evt1", "evt3"]
        assert all(e.calendar_id == "primary" for e in events)

    async def test_async_wrapper(self, client, service, tz):
        service.events.return_value.list.return_value.execute.return_value = {
            "items": [api_event("evt1")]
        }

        events = await client.list_events("primary", TimeWindow.for_day(date(2026, 6, 1), tz))

        assert [e.id for e in events] == ["evt1"]


class TestErrors:
    """Tests for translating Google errors."""

    def test_401_is_auth_error(self, client, service, tz):
        service.events.return_value.list.return_value.execute.side_effect = http_error(401)

        with pytest.raises(CalendarAuthError) as exc_info:
            client.list_events_sync("primary", TimeWindow.for_day(date(2026, 6, 1), tz))

        assert exc_info.value.status_code == 401

    def test_other_http_error(self, client, service, tz):
        service.events.return_value.list.return_value.execute.side_effect = http_error(404, "Not Found")

        with pytest.raises(CalendarAPIError) as exc_info:
            client.list_events_sync("missing", TimeWindow.for_day(date(2026, 6, 1), tz))

        assert not isinstance(exc_info.value, CalendarAuthError)
        assert exc_info.value.status_code == 404
        assert exc_info.value.service == "google_calendar"

    def test_refresh_error_is_auth_error(self, client, service):
        service.calendars.return_value.get.return_value.execute.side_effect = RefreshError(
            "The credentials do not contain the necessary fields"
        )

        with pytest.raises(CalendarAuthError):
            client.get_calendar_sync("primary")

    def test_network_error(self, client, service):
        service.calendars.return_value.get.return_value.execute.side_effect = TimeoutError("timed out")

        with pytest.raises(CalendarAPIError, match="timed out"):
            client.get_calendar_sync("primary")

    def test_unresolvable_host(self, client, service):
        service.calendars.return_value.get.return_value.execute.side_effect = (
            httplib2.ServerNotFoundError("Unable to find the server at www.googleapis.com")
        )

        with pytest.raises(CalendarAPIError, match="Unable to find the server"):
            client.get_calendar_sync("primary")

    def test_transport_error(self, client, service, tz):
        service.events.return_value.list.return_value.execute.side_effect = TransportError(
            "connection aborted"
        )

        with pytest.raises(CalendarAPIError) as exc_info:
            client.list_events_sync("primary", TimeWindow.for_day(date(2026, 6, 1), tz))

        assert not isinstance(exc_info.value, CalendarAuthError)

    def test_no_access_token(self, build):
        client = GoogleCalendarClient(GoogleSession(refresh_token="r"))

        with pytest.raises(CalendarAuthError):
            client.get_calendar_sync("primary")

        build.assert_not_called()


class TestProbe:
    """Tests for the authentication probe."""

    async def test_probe_reads_calendar(self, build, service):
        service.calendars.return_value.get.return_value.execute.return_value = {
            "id": "family@group.calendar.google.com",
            "summary": "Family",
            "timeZone": "Europe/Stockholm",
        }
        client = GoogleCalendarClient(
            GoogleSession(access_token="token-1"),
            probe_calendar_id="family@group.calendar.google.com",
        )

        info = await client.probe()

        service.calendars.return_value.get.assert_called_once_with(
            calendarId="family@group.calendar.google.com"
        )
        assert info.summary == "Family"
        assert info.time_zone == "Europe/Stockholm"

    def test_service_rebuilt_after_refresh(self, client, build, service):
        """A new access token in the session is picked up on the next call."""
        service.calendars.return_value.get.return_value.execute.return_value = {"id": "primary"}

        client.get_calendar_sync("primary")
        client.get_calendar_sync("primary")
        assert build.call_count == 1

        client.session.access_token = "token-2"
        client.get_calendar_sync("primary")
        assert build.call_count == 2
        assert build.call_args.kwargs["credentials"].token == "token-2"


class TestTransport:
    """Tests for the per-request HTTP transport."""

    def test_each_request_gets_own_connection(self, client, service):
        """Executor threads never share an httplib2.Http."""
        execute = service.calendars.return_value.get.return_value.execute
        execute.return_value = {"id": "primary"}

        client.get_calendar_sync("primary")
        client.get_calendar_sync("primary")

        first, second = (c.kwargs["http"] for c in execute.call_args_list)
        assert isinstance(first, AuthorizedHttp)
        assert first is not second
        assert first.http is not second.http
        assert first.credentials.token == "token-1"

    def test_timeout_applied(self, build, service):
        execute = service.calendars.return_value.get.return_value.execute
        execute.return_value = {"id": "primary"}
        client = GoogleCalendarClient(GoogleSession(access_token="token-1"), timeout=7.5)

        client.get_calendar_sync("primary")

        assert execute.call_args.kwargs["http"].http.timeout == 7.5
