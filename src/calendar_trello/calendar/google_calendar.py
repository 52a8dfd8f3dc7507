"""Google Calendar API client.

Provides the two reads the sync needs:
- Get calendar metadata (used as the cheap authentication probe)
- List the events of one calendar inside a time window

## API Documentation

https://developers.google.com/calendar/api/v3/reference

## Authentication

Requests use the access token currently held by the `GoogleSession`. The
client never refreshes tokens itself: an expired or revoked token surfaces as
`CalendarAuthError` and the caller decides whether to refresh and retry.

## Rate Limits

Google Calendar API has quotas:
- 1,000,000 queries per day (default)
- 500 queries per 100 seconds per user
"""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import Any

import httplib2
from google.auth.exceptions import RefreshError, TransportError
from google.oauth2.credentials import Credentials
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from calendar_trello.auth.session import GoogleSession
from calendar_trello.exceptions import CalendarAPIError, CalendarAuthError
from calendar_trello.models.event import CalendarEvent
from calendar_trello.models.window import TimeWindow

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 50


@dataclass
class CalendarInfo:
    """Information about a calendar."""

    id: str
    summary: str
    time_zone: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> CalendarInfo:
        """Create from Google Calendar API response."""
        return cls(
            id=data["id"],
            summary=data.get("summary", ""),
            time_zone=data.get("timeZone"),
        )


class GoogleCalendarClient:
    """Client for Google Calendar API.

    Example:
        ```python
        client = GoogleCalendarClient(session, probe_calendar_id="primary")

        # Cheap authenticated read
        await client.probe()

        # Events of one day
        events = await client.list_events("primary", TimeWindow.today(tz))
        ```
    """

    def __init__(
        self,
        session: GoogleSession,
        probe_calendar_id: str = "primary",
        timeout: float = 30.0,
    ):
        """Initialize the client.

        Args:
            session: Credential holder; its current access token is used per call
            probe_calendar_id: Calendar read by `probe()`
            timeout: Socket timeout in seconds for each API request
        """
        self.session = session
        self.probe_calendar_id = probe_calendar_id
        self.timeout = timeout
        self._service = None
        self._service_token: str | None = None
        self._credentials: Credentials | None = None
        self._lock = threading.Lock()

    def _get_service(self):
        """Build the API service for the session's current access token."""
        token = self.session.access_token
        if not token:
            raise CalendarAuthError("No access token available")

        with self._lock:
            if self._service is None or self._service_token != token:
                self._credentials = Credentials(token=token)
                self._service = build("calendar", "v3", credentials=self._credentials)
                self._service_token = token
            return self._service

    def _authorized_http(self) -> AuthorizedHttp:
        """A fresh transport for one request.

        httplib2.Http is not thread-safe and requests run on executor threads.
        """
        return AuthorizedHttp(self._credentials, http=httplib2.Http(timeout=self.timeout))

    def _execute(self, request: Any) -> dict[str, Any]:
        """Execute an API request, translating failures."""
        try:
            return request.execute(http=self._authorized_http())
        except HttpError as e:
            status = e.resp.status
            body = e.content.decode("utf-8", "replace") if e.content else None
            if status == 401:
                raise CalendarAuthError(
                    "Access token rejected", status_code=401, response_body=body
                ) from e
            raise CalendarAPIError(
                f"Calendar API error: {status}", status_code=status, response_body=body
            ) from e
        except RefreshError as e:
            # Credentials without refresh fields: google-auth gives up on 401
            raise CalendarAuthError(f"Access token rejected: {e}") from e
        except (httplib2.HttpLib2Error, TransportError, OSError, TimeoutError) as e:
            raise CalendarAPIError(f"Calendar API request failed: {e!r}") from e

    def get_calendar_sync(self, calendar_id: str) -> CalendarInfo:
        """Get calendar metadata.

        Args:
            calendar_id: Calendar ID (use 'primary' for primary calendar)

        Returns:
            CalendarInfo
        """
        service = self._get_service()
        result = self._execute(service.calendars().get(calendarId=calendar_id))
        return CalendarInfo.from_api(result)

    def list_events_sync(
        self,
        calendar_id: str,
        window: TimeWindow,
        max_results: int = DEFAULT_MAX_RESULTS,
    ) -> list[CalendarEvent]:
        """List events overlapping a window.

        Recurring events are expanded into single occurrences and ordered by
        start time. Only the first page is read; `max_results` is the cap.

        Args:
            calendar_id: Calendar ID
            window: Local-day window to query
            max_results: Maximum events to return

        Returns:
            Events in start-time order, cancelled occurrences removed
        """
        service = self._get_service()
        result = self._execute(
            service.events().list(
                calendarId=calendar_id,
                timeMin=window.start.isoformat(),
                timeMax=window.end.isoformat(),
                singleEvents=True,  # Expand recurring events
                orderBy="startTime",
                maxResults=max_results,
            )
        )

        events = []
        for item in result.get("items", []):
            if item.get("status") == "cancelled":
                continue
            events.append(CalendarEvent.from_api(item, calendar_id))

        return events

    async def get_calendar(self, calendar_id: str) -> CalendarInfo:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.get_calendar_sync, calendar_id)

    async def list_events(
        self,
        calendar_id: str,
        window: TimeWindow,
        max_results: int = DEFAULT_MAX_RESULTS,
    ) -> list[CalendarEvent]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, self.list_events_sync, calendar_id, window, max_results
        )

    async def probe(self) -> CalendarInfo:
        """Cheap authenticated read used to validate the access token."""
        return await self.get_calendar(self.probe_calendar_id)
