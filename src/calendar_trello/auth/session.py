"""Per-invocation Google credential state.

A `GoogleSession` is created for one sync/rollover invocation and passed to
the collaborators that need the access token. Nothing here is module-global,
so concurrent invocations in one process never see each other's tokens.

Refreshed tokens live only in the session. Persisting them (environment,
key-value store) is up to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from calendar_trello.auth.google import GoogleTokens
from calendar_trello.config import Settings


@dataclass
class GoogleSession:
    """Access/refresh token pair held for one invocation."""

    access_token: str | None = None
    refresh_token: str | None = None
    expires_at: datetime | None = None
    refreshed_at: datetime | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> GoogleSession:
        return cls(
            access_token=settings.google_access_token or None,
            refresh_token=settings.google_refresh_token or None,
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.access_token or self.refresh_token)

    @property
    def can_refresh(self) -> bool:
        return bool(self.refresh_token)

    @property
    def is_expired(self) -> bool:
        """True only when a known expiry has passed."""
        if self.expires_at is None:
            return False
        return datetime.now(timezone.utc) >= self.expires_at

    def apply(self, tokens: GoogleTokens) -> None:
        """Replace the held credentials with freshly issued ones."""
        self.access_token = tokens.access_token
        if tokens.refresh_token:
            self.refresh_token = tokens.refresh_token
        self.expires_at = tokens.expires_at
        self.refreshed_at = datetime.now(timezone.utc)
