"""Rendering of calendar events as Trello card payloads.

## Description Layout

```
<event description>

📅 **Calendar Event**
• Start: Sat, Oct 17, 2026 9:00 AM
• End: Sat, Oct 17, 2026 10:00 AM
• Location: <location>
• Attendees: a@example.com, b@example.com
• Source: <calendar>
• [View in Google Calendar](<htmlLink>)

🔗 Event ID: <event id>
```

Only the last line is machine-readable; see `calendar_trello.models.card`.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, tzinfo
from enum import Enum

from calendar_trello.models.card import format_event_id_marker
from calendar_trello.models.event import CalendarEvent, EventTime, calendar_label
from calendar_trello.models.window import END_OF_DAY
from calendar_trello.trello.client import CardPayload


class DuePolicy(str, Enum):
    """How a card's due date is derived."""

    EVENT_START = "event_start"  # Due when the event starts
    END_OF_DAY = "end_of_day"  # Due at 23:59:59.999 of the target day


def format_event_for_card(
    event: CalendarEvent,
    tz: tzinfo,
    due_policy: DuePolicy = DuePolicy.EVENT_START,
    target_day: date | None = None,
) -> CardPayload:
    """Build the card payload for an event.

    Args:
        event: Calendar event
        tz: Zone used for display and for end-of-day due dates
        due_policy: Due date policy
        target_day: Day used by END_OF_DAY (default: the event's start date)

    Returns:
        CardPayload ready for `TrelloClient.create_card`
    """
    return CardPayload(
        name=event.title,
        description=format_description(event, tz),
        due=due_date(event, tz, due_policy, target_day),
        event_id=event.id,
    )


def format_description(event: CalendarEvent, tz: tzinfo) -> str:
    description = ""
    if event.description:
        description += f"{event.description}\n\n"

    description += "📅 **Calendar Event**\n"
    description += f"• Start: {format_event_time(event.start, tz)}\n"
    if event.end is not None:
        description += f"• End: {format_event_time(event.end, tz, is_end=True)}\n"

    if event.location:
        description += f"• Location: {event.location}\n"

    emails = event.attendee_emails
    if emails:
        description += f"• Attendees: {', '.join(emails)}\n"

    if event.calendar_id:
        description += f"• Source: {calendar_label(event.calendar_id)}\n"

    if event.html_link:
        description += f"• [View in Google Calendar]({event.html_link})\n"

    description += f"\n{format_event_id_marker(event.id)}"
    return description


def format_event_time(value: EventTime, tz: tzinfo, is_end: bool = False) -> str:
    """Human-readable rendering of an event start or end."""
    if value.is_all_day:
        day = value.day
        # All-day end dates are exclusive
        if is_end:
            day = day - timedelta(days=1)
        return f"{day:%a, %b} {day.day}, {day:%Y} (all day)"

    local = value.instant(tz).astimezone(tz)
    return f"{local:%a, %b} {local.day}, {local:%Y} {local.hour % 12 or 12}:{local:%M %p}"


def due_date(
    event: CalendarEvent,
    tz: tzinfo,
    due_policy: DuePolicy,
    target_day: date | None = None,
) -> datetime:
    if due_policy == DuePolicy.END_OF_DAY:
        day = target_day or event.local_start_date(tz)
        return datetime.combine(day, END_OF_DAY, tzinfo=tz)
    return event.start_instant(tz)
