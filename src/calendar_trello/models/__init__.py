"""Domain models for calendar/board sync."""

from calendar_trello.models.card import (
    EVENT_ID_MARKER,
    MARKER_VERSION,
    Card,
    extract_event_id,
    format_event_id_marker,
)
from calendar_trello.models.event import (
    UNTITLED_EVENT,
    Attendee,
    CalendarEvent,
    EventTime,
    calendar_label,
)
from calendar_trello.models.window import TimeWindow

__all__ = [
    # Event
    "Attendee",
    "CalendarEvent",
    "EventTime",
    "UNTITLED_EVENT",
    "calendar_label",
    # Card
    "Card",
    "EVENT_ID_MARKER",
    "MARKER_VERSION",
    "extract_event_id",
    "format_event_id_marker",
    # Window
    "TimeWindow",
]
