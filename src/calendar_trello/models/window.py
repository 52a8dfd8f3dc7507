"""Local-day time windows used to query calendars."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo

END_OF_DAY = time(23, 59, 59, 999000)


@dataclass(frozen=True)
class TimeWindow:
    """One calendar day in local time, [00:00:00.000, 23:59:59.999].

    The window is only a coarse filter for the calendar query; an event belongs
    to the day when its start date in `tz` equals `day`.
    """

    day: date
    start: datetime
    end: datetime
    tz: tzinfo

    @classmethod
    def for_day(cls, day: date, tz: tzinfo) -> TimeWindow:
        return cls(
            day=day,
            start=datetime.combine(day, time.min, tzinfo=tz),
            end=datetime.combine(day, END_OF_DAY, tzinfo=tz),
            tz=tz,
        )

    @classmethod
    def today(cls, tz: tzinfo, now: datetime | None = None) -> TimeWindow:
        now = now or datetime.now(tz)
        return cls.for_day(now.astimezone(tz).date(), tz)

    @classmethod
    def tomorrow(cls, tz: tzinfo, now: datetime | None = None) -> TimeWindow:
        now = now or datetime.now(tz)
        return cls.for_day(now.astimezone(tz).date() + timedelta(days=1), tz)

    def contains_date(self, value: date) -> bool:
        return value == self.day

    def __str__(self) -> str:
        return self.day.isoformat()
