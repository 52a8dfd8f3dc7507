"""Access-token lifecycle for one invocation.

## States

```
UNAUTHENTICATED --(probe ok)--------------------> AUTHENTICATED
AUTHENTICATED   --(probe fails)-----------------> REFRESHING
REFRESHING      --(refresh ok)------------------> AUTHENTICATED
REFRESHING      --(refresh rejected / no token)-> UNAUTHENTICATED (AuthError)
```

The probe is a cheap read against the calendar service. Repeated
`ensure_authenticated()` calls while the token is good cost one probe each.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Awaitable, Callable

from calendar_trello.auth.google import GoogleOAuth
from calendar_trello.auth.session import GoogleSession
from calendar_trello.exceptions import AuthError, UpstreamError

logger = logging.getLogger(__name__)


class AuthState(str, Enum):
    """Authenticator state."""

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    REFRESHING = "refreshing"


class Authenticator:
    """Keeps the session's access token usable.

    Example:
        ```python
        authenticator = Authenticator(session, GoogleOAuth(), calendar_client.probe)
        await authenticator.ensure_authenticated()
        ```
    """

    def __init__(
        self,
        session: GoogleSession,
        oauth: GoogleOAuth,
        probe: Callable[[], Awaitable[Any]],
    ):
        """Initialize the authenticator.

        Args:
            session: Credential holder mutated on refresh
            oauth: Token endpoint client
            probe: Cheap authenticated call; raises UpstreamError on failure
        """
        self.session = session
        self.oauth = oauth
        self._probe = probe
        self.state = AuthState.UNAUTHENTICATED

    async def ensure_authenticated(self) -> None:
        """Verify the access token, refreshing it if the probe fails.

        Raises:
            AuthError: If no credential is held or the refresh is rejected
        """
        if not self.session.has_credentials:
            self.state = AuthState.UNAUTHENTICATED
            raise AuthError(
                "No Google credentials found. Set GOOGLE_ACCESS_TOKEN and "
                "GOOGLE_REFRESH_TOKEN."
            )

        if self.session.access_token and not self.session.is_expired:
            try:
                await self._probe()
            except UpstreamError as e:
                logger.info(f"Access token rejected ({e}), refreshing")
            else:
                self.state = AuthState.AUTHENTICATED
                logger.debug("Using existing access token")
                return

        await self.refresh()

    async def refresh(self) -> None:
        """Exchange the refresh token for a new access token.

        Raises:
            AuthError: If no refresh token is held or Google rejects it
        """
        if not self.session.can_refresh:
            self.state = AuthState.UNAUTHENTICATED
            raise AuthError("No refresh token available")

        self.state = AuthState.REFRESHING
        try:
            tokens = await self.oauth.refresh_access_token(self.session.refresh_token)
        except AuthError:
            self.state = AuthState.UNAUTHENTICATED
            raise

        self.session.apply(tokens)
        self.state = AuthState.AUTHENTICATED
        logger.info("Access token refreshed")
