"""Trello card model and the event-id marker format.

Every card created by the sync carries a marker line at the end of its
description:

```
🔗 Event ID: <google event id>
```

The marker is the only machine-readable part of a card and is how later runs
recognise which events already have a card. Its text must stay byte-stable;
boards written by earlier versions are read with the same pattern.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field

MARKER_VERSION = 1
EVENT_ID_MARKER = "🔗 Event ID: "
EVENT_ID_PATTERN = re.compile(re.escape(EVENT_ID_MARKER) + r"(\S+)")


def format_event_id_marker(event_id: str) -> str:
    """Render the marker line for an event id."""
    if not event_id or any(c.isspace() for c in event_id):
        raise ValueError(f"Event id cannot be embedded in a marker: {event_id!r}")
    return f"{EVENT_ID_MARKER}{event_id}"


def extract_event_id(description: str | None) -> str | None:
    """Recover the event id from a card description.

    The marker is written last, so when a description contains more than one
    (e.g. the event's own description quoted another card) the last one wins.
    """
    if not description:
        return None
    matches = EVENT_ID_PATTERN.findall(description)
    return matches[-1] if matches else None


class Card(BaseModel):
    """A Trello card as returned by the REST API."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    name: str = ""
    desc: str = ""
    due: datetime | None = None
    id_list: str | None = Field(default=None, alias="idList")
    pos: float | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Self:
        """Create from a Trello API card object."""
        return cls.model_validate(data)

    @property
    def event_id(self) -> str | None:
        """Id of the calendar event this card represents, if any."""
        return extract_event_id(self.desc)
