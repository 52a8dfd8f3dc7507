"""Command-line interface for the calendar → Trello sync."""

import argparse
import asyncio
import logging
import sys

from calendar_trello.config import get_settings
from calendar_trello.exceptions import AuthError
from calendar_trello.health import run_health_check
from calendar_trello.logging_setup import configure_logging
from calendar_trello.sync.service import CalendarBoardSync

logger = logging.getLogger(__name__)


async def _sync() -> int:
    async with CalendarBoardSync.from_settings(get_settings()) as sync:
        result = await sync.sync_today_and_tomorrow()
    for r in (result.today, result.tomorrow):
        print(f"{r.list_name}: {r.created_count} created, {r.skipped} skipped, {len(r.failures)} failed")
    return 0


async def _rollover() -> int:
    async with CalendarBoardSync.from_settings(get_settings()) as sync:
        result = await sync.perform_daily_rollover()
    print(f"Moved {result.moved} cards from Tomorrow to Today")
    print(f"Tomorrow: {result.created} created, {result.skipped} skipped")
    return 0


async def _events(day: str) -> int:
    async with CalendarBoardSync.from_settings(get_settings()) as sync:
        result = await sync.fetch_events_for_day(day)
        tz = sync.settings.tzinfo
    print(f"Events for {result.window.day}:")
    for event in result.events:
        start = "all day" if event.is_all_day else f"{event.start_instant(tz).astimezone(tz):%H:%M}"
        declined = " (declined)" if event.self_declined else ""
        print(f"  {start:>7}  {event.title}{declined}")
    for failure in result.failures:
        print(f"  ! {failure.calendar_id}: {failure.error}")
    return 0


async def _health() -> int:
    async with CalendarBoardSync.from_settings(get_settings()) as sync:
        report = await run_health_check(sync)
    for detail in report.details:
        print(f"[{detail.status.value:>7}] {detail.name}: {detail.message}")
    print(f"Overall: {report.overall_status.value}")
    return 0 if report.healthy else 1


def main() -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Calendar Trello Sync - Mirror Google Calendar days into Trello lists"
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("sync", help="Sync today's and tomorrow's events")
    subparsers.add_parser("rollover", help="Move Tomorrow to Today and repopulate Tomorrow")

    events_parser = subparsers.add_parser("events", help="List the events of a day")
    events_parser.add_argument(
        "--day",
        choices=["today", "tomorrow"],
        default="today",
        help="Day to list",
    )

    subparsers.add_parser("health", help="Check configuration and API access")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default=None, help="Bind address")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port")

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        return 0

    settings = get_settings()
    configure_logging(settings.log_level)

    if args.command == "serve":
        import uvicorn

        from calendar_trello.api import create_app

        uvicorn.run(
            create_app(),
            host=args.host or settings.host,
            port=args.port or settings.port,
        )
        return 0

    commands = {
        "sync": _sync,
        "rollover": _rollover,
        "events": lambda: _events(args.day),
        "health": _health,
    }

    try:
        return asyncio.run(commands[args.command]())
    except AuthError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
