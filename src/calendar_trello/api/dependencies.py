"""FastAPI dependencies."""

from __future__ import annotations

from typing import AsyncGenerator

from fastapi import Depends

from calendar_trello.config import Settings, get_settings
from calendar_trello.sync.service import CalendarBoardSync


async def get_sync_service(
    settings: Settings = Depends(get_settings),
) -> AsyncGenerator[CalendarBoardSync, None]:
    """One sync service (and Google session) per request."""
    async with CalendarBoardSync.from_settings(settings) as sync:
        yield sync
