"""Google authentication for the calendar side of the sync.

## Flow

1. A `GoogleSession` is seeded from configuration (access + refresh token)
2. `Authenticator.ensure_authenticated()` probes the calendar API
3. If the probe fails, the refresh token is exchanged for a new access token
4. Every calendar call made during the invocation reads the session's token

## Scopes

The refresh token must have been granted
`https://www.googleapis.com/auth/calendar.readonly`.
"""

from calendar_trello.auth.authenticator import AuthState, Authenticator
from calendar_trello.auth.google import GoogleOAuth, GoogleTokens
from calendar_trello.auth.session import GoogleSession

__all__ = [
    "AuthState",
    "Authenticator",
    "GoogleOAuth",
    "GoogleTokens",
    "GoogleSession",
]
