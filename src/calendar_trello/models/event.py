"""Calendar event models.

Events are read-only snapshots of Google Calendar API resources. The only
fields kept are the ones needed to decide whether an event belongs to a day,
whether it duplicates another event, and how to render it on a card.
"""

from __future__ import annotations

from datetime import date, datetime, time, tzinfo
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

UNTITLED_EVENT = "Untitled Event"
DECLINED = "declined"


class Attendee(BaseModel):
    """An attendee entry of a calendar event."""

    model_config = ConfigDict(populate_by_name=True)

    email: str | None = None
    display_name: str | None = Field(default=None, alias="displayName")
    is_self: bool = Field(default=False, alias="self")
    response_status: str = Field(default="needsAction", alias="responseStatus")


class EventTime(BaseModel):
    """Start or end of an event: either a whole date or an instant."""

    day: date | None = None
    date_time: datetime | None = None
    time_zone: str | None = None

    @model_validator(mode="after")
    def validate_has_value(self) -> Self:
        """Ensure either a date or a date-time is present."""
        if self.day is None and self.date_time is None:
            raise ValueError("Either day or date_time must be provided")
        return self

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Self:
        """Create from a Google Calendar `start`/`end` object."""
        date_time = None
        if data.get("dateTime"):
            date_time = datetime.fromisoformat(data["dateTime"].replace("Z", "+00:00"))
        return cls(
            day=data.get("date") if date_time is None else None,
            date_time=date_time,
            time_zone=data.get("timeZone"),
        )

    @property
    def is_all_day(self) -> bool:
        return self.date_time is None

    @property
    def value(self) -> date | datetime:
        """The raw start value; aware datetimes compare by instant."""
        return self.date_time if self.date_time is not None else self.day

    def instant(self, tz: tzinfo) -> datetime:
        """Resolve to an aware datetime.

        All-day values resolve to local midnight. Naive date-times are taken
        to be in `tz`.
        """
        if self.date_time is None:
            return datetime.combine(self.day, time.min, tzinfo=tz)
        if self.date_time.tzinfo is None:
            return self.date_time.replace(tzinfo=tz)
        return self.date_time

    def local_date(self, tz: tzinfo) -> date:
        """Calendar date of this value in `tz`."""
        if self.date_time is None:
            return self.day
        return self.instant(tz).astimezone(tz).date()


class CalendarEvent(BaseModel):
    """A single (expanded) occurrence from a Google calendar."""

    id: str
    calendar_id: str
    summary: str | None = None
    description: str | None = None
    location: str | None = None
    html_link: str | None = None
    status: str = "confirmed"  # confirmed, tentative, cancelled
    start: EventTime
    end: EventTime | None = None
    attendees: list[Attendee] = Field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict[str, Any], calendar_id: str) -> Self:
        """Create from Google Calendar API response."""
        end_data = data.get("end")
        return cls(
            id=data["id"],
            calendar_id=calendar_id,
            summary=data.get("summary"),
            description=data.get("description"),
            location=data.get("location"),
            html_link=data.get("htmlLink"),
            status=data.get("status", "confirmed"),
            start=EventTime.from_api(data.get("start", {})),
            end=EventTime.from_api(end_data) if end_data else None,
            attendees=[
                Attendee.model_validate(a) for a in data.get("attendees", [])
            ],
        )

    @property
    def title(self) -> str:
        return self.summary or UNTITLED_EVENT

    @property
    def is_all_day(self) -> bool:
        return self.start.is_all_day

    @property
    def dedup_key(self) -> tuple[str, date | datetime]:
        """Events sharing title and start instant are treated as one."""
        return (self.title, self.start.value)

    @property
    def self_declined(self) -> bool:
        """True if the calendar owner declined this event."""
        return any(a.is_self and a.response_status == DECLINED for a in self.attendees)

    @property
    def attendee_emails(self) -> list[str]:
        return [a.email for a in self.attendees if a.email]

    def start_instant(self, tz: tzinfo) -> datetime:
        return self.start.instant(tz)

    def local_start_date(self, tz: tzinfo) -> date:
        return self.start.local_date(tz)


def calendar_label(calendar_id: str) -> str:
    """Short display form of a calendar id."""
    if "@" in calendar_id:
        return calendar_id.split("@")[0]
    if len(calendar_id) > 20:
        return calendar_id[:20] + "..."
    return calendar_id
