"""Error kinds raised by the sync core.

Authentication failures are fatal to an operation and propagate to the caller.
Upstream failures describe a single failed external call; the sync service
recovers from those locally (retry once for auth, otherwise skip the item) and
reports them in its result records instead of raising.
"""

from __future__ import annotations


class SyncError(Exception):
    """Base exception for calendar/board sync errors."""


class AuthError(SyncError):
    """No usable Google credential could be produced."""

    def __init__(
        self,
        message: str,
        provider_error: str | None = None,
        description: str | None = None,
    ):
        super().__init__(message)
        self.provider_error = provider_error
        self.description = description


class UpstreamError(SyncError):
    """A single call to an external service failed."""

    def __init__(
        self,
        message: str,
        service: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.service = service
        self.status_code = status_code
        self.response_body = response_body


class CalendarAPIError(UpstreamError):
    """Google Calendar API call failed."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(
            message,
            service="google_calendar",
            status_code=status_code,
            response_body=response_body,
        )


class CalendarAuthError(CalendarAPIError):
    """Google Calendar rejected the access token (HTTP 401)."""


class TrelloError(UpstreamError):
    """Trello API call failed."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(
            message,
            service="trello",
            status_code=status_code,
            response_body=response_body,
        )


class TrelloRateLimitError(TrelloError):
    """Raised when Trello answers 429."""

    def __init__(self, retry_after: int | None = None):
        super().__init__("Rate limit exceeded for trello", status_code=429)
        self.retry_after = retry_after
