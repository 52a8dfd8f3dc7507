"""Application configuration.

Configuration is loaded from environment variables using pydantic-settings.
Credentials (Google tokens, Trello key/token) should be provided via
environment variables, not config files.

## Required Environment Variables

- TRELLO_API_KEY / TRELLO_TOKEN: Trello REST credentials
- TODAY_LIST_ID / TOMORROW_LIST_ID: Target Trello lists

## Optional Environment Variables

- GOOGLE_CLIENT_ID / GOOGLE_CLIENT_SECRET: OAuth client used for token refresh
- GOOGLE_ACCESS_TOKEN / GOOGLE_REFRESH_TOKEN: Seed credentials for the session
- CALENDAR_IDS: JSON list of calendar ids, in dedup priority order
- TIMEZONE: IANA zone defining "today" (default: host local zone)
- TRELLO_BOARD_ID: Board checked by the health check
- LOG_LEVEL: Logging level (default: INFO)

## Example .env file

```
TRELLO_API_KEY=your-trello-key
TRELLO_TOKEN=your-trello-token
TODAY_LIST_ID=5f0c...
TOMORROW_LIST_ID=5f0d...
GOOGLE_CLIENT_ID=your-google-client-id.apps.googleusercontent.com
GOOGLE_CLIENT_SECRET=your-google-client-secret
GOOGLE_REFRESH_TOKEN=1//0g...
CALENDAR_IDS=["primary", "family@group.calendar.google.com"]
TIMEZONE=Europe/Stockholm
```
"""

from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from functools import lru_cache
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Calendar Trello Sync"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Google OAuth
    google_client_id: str | None = None
    google_client_secret: str | None = None
    google_access_token: str | None = None
    google_refresh_token: str | None = None
    google_token_uri: str = GOOGLE_TOKEN_URL

    # Google Calendar API
    calendar_ids: list[str] = Field(
        default=["primary"],
        min_length=1,
        description="Calendars to mirror; earlier calendars win duplicate events",
    )
    calendar_max_results: int = Field(default=50, ge=1, le=2500)
    timezone: str | None = Field(
        default=None,
        description="IANA timezone defining the local day (default: host zone)",
    )

    # Trello
    trello_api_key: str = Field(..., min_length=1)
    trello_token: str = Field(..., min_length=1)
    trello_board_id: str | None = None
    today_list_id: str = Field(..., min_length=1)
    tomorrow_list_id: str = Field(..., min_length=1)

    # Pacing of sequential Trello writes (Trello allows 100 requests / 10s per token)
    trello_requests_per_second: float = Field(default=10.0, gt=0, le=100)
    trello_burst: int = Field(default=1, ge=1, le=100)
    new_card_position: Literal["top", "bottom"] = "bottom"

    http_timeout_seconds: float = Field(default=30.0, gt=0)

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalise and check the logging level name."""
        level = str(v).upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str | None) -> str | None:
        """Reject timezone names zoneinfo cannot resolve."""
        if v is None or v == "":
            return None
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def google_oauth_configured(self) -> bool:
        """Check if Google OAuth is configured."""
        return bool(self.google_client_id and self.google_client_secret)

    @property
    def tzinfo(self) -> tzinfo:
        """Timezone used to derive the local day."""
        if self.timezone:
            return ZoneInfo(self.timezone)
        return datetime.now().astimezone().tzinfo


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are loaded once and cached. To reload, clear the cache:
    ```python
    get_settings.cache_clear()
    ```
    """
    return Settings()


def get_settings_uncached() -> Settings:
    """Get fresh settings without caching.

    Useful for testing when environment variables change.
    """
    return Settings()
