"""Calendar → Trello synchronization.

## Sync Process

1. Make sure the Google access token works (refresh if needed)
2. Fetch the day's events from every configured calendar
3. Compare against the cards already in the target list
4. Create the missing cards one at a time, paced for Trello's rate limit

## Daily Rollover

1. Move all Tomorrow cards to Today
2. Populate Tomorrow from the next day's events
"""

from calendar_trello.sync.formatting import DuePolicy, format_event_for_card
from calendar_trello.sync.pacing import RateLimiter
from calendar_trello.sync.reconciler import ReconcilePlan, reconcile
from calendar_trello.sync.service import (
    CalendarBoardSync,
    DailySyncResult,
    ItemFailure,
    MoveResult,
    RolloverResult,
    SyncResult,
)

__all__ = [
    "CalendarBoardSync",
    "DailySyncResult",
    "DuePolicy",
    "ItemFailure",
    "MoveResult",
    "RateLimiter",
    "ReconcilePlan",
    "RolloverResult",
    "SyncResult",
    "format_event_for_card",
    "reconcile",
]
