"""FastAPI application and routes.

Thin HTTP surface over the sync service, suitable for a cron scheduler.

## API Structure

- /health - Liveness
- /api/health-check - Configuration, Google and Trello checks
- /api/sync - Sync today and tomorrow (POST)
- /api/rollover - Daily rollover (GET or POST)
- /api/events - Preview a day's events
"""

from calendar_trello.api.app import create_app

__all__ = ["create_app"]
