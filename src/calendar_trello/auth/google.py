"""Google OAuth token refresh.

Only the refresh-token grant is implemented here. Obtaining the first refresh
token (authorization code flow) happens outside this service; the resulting
tokens are supplied through configuration.

## OAuth Endpoints

- Token: https://oauth2.googleapis.com/token

## Refresh Request

Form-encoded POST with `client_id`, `client_secret`, `refresh_token` and
`grant_type=refresh_token`. Error responses carry `error` and usually
`error_description` (e.g. `invalid_grant` / "Token has been expired or
revoked.").
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import httpx

from calendar_trello.config import GOOGLE_TOKEN_URL, get_settings
from calendar_trello.exceptions import AuthError

logger = logging.getLogger(__name__)


@dataclass
class GoogleTokens:
    """OAuth tokens from Google."""

    access_token: str
    refresh_token: str | None
    token_type: str
    expires_at: datetime | None
    scope: str


class GoogleOAuth:
    """Google OAuth 2.0 token endpoint client.

    Example:
        ```python
        oauth = GoogleOAuth()
        tokens = await oauth.refresh_access_token(refresh_token)
        ```
    """

    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        token_uri: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize Google OAuth client.

        Args:
            client_id: Google OAuth client ID (or from settings)
            client_secret: Google OAuth client secret (or from settings)
            token_uri: Token endpoint (or from settings)
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        if client_id is None or client_secret is None or token_uri is None:
            settings = get_settings()
            client_id = client_id or settings.google_client_id
            client_secret = client_secret or settings.google_client_secret
            token_uri = token_uri or settings.google_token_uri

        self.client_id = client_id
        self.client_secret = client_secret
        self.token_uri = token_uri or GOOGLE_TOKEN_URL
        self.timeout = timeout
        self._transport = transport

        if not self.is_configured:
            logger.warning(
                "Google OAuth not configured. Set GOOGLE_CLIENT_ID and "
                "GOOGLE_CLIENT_SECRET environment variables."
            )

    @property
    def is_configured(self) -> bool:
        """Check if Google OAuth is properly configured."""
        return bool(self.client_id and self.client_secret)

    async def refresh_access_token(self, refresh_token: str) -> GoogleTokens:
        """Exchange a refresh token for a new access token.

        Args:
            refresh_token: The refresh token

        Returns:
            New GoogleTokens (refresh_token may be the same)

        Raises:
            AuthError: If the client is not configured or Google rejects the grant
        """
        if not self.is_configured:
            raise AuthError("Google OAuth not configured")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self.token_uri,
                    data={
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "refresh_token": refresh_token,
                        "grant_type": "refresh_token",
                    },
                )
        except httpx.HTTPError as e:
            raise AuthError(f"Token refresh request failed: {e}") from e

        data = _json_or_empty(response)

        if response.status_code != 200:
            error = data.get("error")
            description = data.get("error_description")
            logger.error(f"Token refresh failed: {response.status_code} {error}")
            raise AuthError(
                f"Token refresh failed: {description or error or response.status_code}",
                provider_error=error,
                description=description,
            )

        if "access_token" not in data:
            raise AuthError("Token refresh response did not contain an access token")

        expires_at = None
        if "expires_in" in data:
            expires_at = datetime.now(timezone.utc).replace(microsecond=0) + timedelta(
                seconds=int(data["expires_in"])
            )

        return GoogleTokens(
            access_token=data["access_token"],
            # Google may not return a new refresh token
            refresh_token=data.get("refresh_token", refresh_token),
            token_type=data.get("token_type", "Bearer"),
            expires_at=expires_at,
            scope=data.get("scope", ""),
        )


def _json_or_empty(response: httpx.Response) -> dict:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
