"""Deployment health check.

Checks, in order:
1. Configuration: Trello settings present, Google OAuth client configured,
   Google tokens present
2. Google Calendar authentication (probe, refresh if needed)
3. Trello API access (board details; skipped without TRELLO_BOARD_ID)

Each check reports PASS, WARN, FAIL or SKIPPED. The overall status is FAIL
when any check fails.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from calendar_trello.config import Settings
from calendar_trello.exceptions import SyncError
from calendar_trello.sync.service import CalendarBoardSync

logger = logging.getLogger(__name__)


class CheckStatus(str, Enum):
    PASS = "PASS"
    WARN = "WARN"
    FAIL = "FAIL"
    SKIPPED = "SKIPPED"


@dataclass
class CheckDetail:
    name: str
    status: CheckStatus
    message: str


@dataclass
class HealthReport:
    """Outcome of all health checks."""

    details: list[CheckDetail] = field(default_factory=list)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def overall_status(self) -> CheckStatus:
        if any(d.status == CheckStatus.FAIL for d in self.details):
            return CheckStatus.FAIL
        return CheckStatus.PASS

    @property
    def healthy(self) -> bool:
        return self.overall_status == CheckStatus.PASS

    def add(self, name: str, status: CheckStatus, message: str) -> CheckDetail:
        detail = CheckDetail(name=name, status=status, message=message)
        self.details.append(detail)
        return detail


def check_trello_config(settings: Settings) -> tuple[CheckStatus, str]:
    """Validate the Trello settings the sync cannot run without."""
    missing = [
        name
        for name, value in (
            ("TRELLO_API_KEY", settings.trello_api_key),
            ("TRELLO_TOKEN", settings.trello_token),
            ("TODAY_LIST_ID", settings.today_list_id),
            ("TOMORROW_LIST_ID", settings.tomorrow_list_id),
        )
        if not value or not value.strip()
    ]
    if missing:
        return CheckStatus.FAIL, f"Missing: {', '.join(missing)}"
    if settings.today_list_id == settings.tomorrow_list_id:
        return CheckStatus.FAIL, "TODAY_LIST_ID and TOMORROW_LIST_ID are the same list"
    return CheckStatus.PASS, "API key, token and list ids set"


async def run_health_check(sync: CalendarBoardSync) -> HealthReport:
    """Run all checks against a wired-up sync service."""
    settings = sync.settings
    report = HealthReport()

    report.add("Config: Trello", *check_trello_config(settings))

    if settings.google_oauth_configured:
        report.add("Config: Google OAuth", CheckStatus.PASS, "Client id and secret set")
    else:
        report.add(
            "Config: Google OAuth",
            CheckStatus.WARN,
            "GOOGLE_CLIENT_ID/GOOGLE_CLIENT_SECRET missing; tokens cannot be refreshed",
        )

    session = sync.authenticator.session
    if session.has_credentials:
        report.add("Config: Google tokens", CheckStatus.PASS, "Tokens present")
        try:
            await sync.authenticator.ensure_authenticated()
        except SyncError as e:
            report.add("Google Calendar Auth", CheckStatus.FAIL, f"Authentication failed: {e}")
        else:
            report.add(
                "Google Calendar Auth",
                CheckStatus.PASS,
                "Authenticated successfully with Google Calendar",
            )
    else:
        report.add(
            "Config: Google tokens",
            CheckStatus.FAIL,
            "GOOGLE_ACCESS_TOKEN/GOOGLE_REFRESH_TOKEN missing",
        )
        report.add(
            "Google Calendar Auth",
            CheckStatus.SKIPPED,
            "Skipped: no Google tokens configured",
        )

    if settings.trello_board_id:
        try:
            board = await sync.trello.get_board(settings.trello_board_id)
        except SyncError as e:
            report.add("Trello API Access", CheckStatus.FAIL, str(e))
        else:
            if board.id == settings.trello_board_id:
                report.add(
                    "Trello API Access",
                    CheckStatus.PASS,
                    f'Fetched board details for "{board.name}"',
                )
            else:
                report.add(
                    "Trello API Access",
                    CheckStatus.FAIL,
                    "Fetched board details, but ID mismatch",
                )
    else:
        report.add(
            "Trello API Access",
            CheckStatus.SKIPPED,
            "Skipped: TRELLO_BOARD_ID not set",
        )

    logger.info(f"Health check: {report.overall_status.value}")
    return report
