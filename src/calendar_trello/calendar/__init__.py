"""Calendar integration module.

Reads events from Google Calendar for a local day.

## Google Calendar API

Uses the Google Calendar API v3:
- https://developers.google.com/calendar/api/v3/reference

## Event Processing

1. Query each configured calendar for the day's window
2. Keep events whose start date is that day
3. Drop cross-calendar duplicates
"""

from calendar_trello.calendar.fetcher import (
    CalendarFailure,
    EventFetcher,
    FetchResult,
    deduplicate,
    filter_to_day,
)
from calendar_trello.calendar.google_calendar import (
    CalendarInfo,
    GoogleCalendarClient,
)

__all__ = [
    "CalendarFailure",
    "CalendarInfo",
    "EventFetcher",
    "FetchResult",
    "GoogleCalendarClient",
    "deduplicate",
    "filter_to_day",
]
