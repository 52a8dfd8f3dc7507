"""Event-to-card reconciliation.

Decides which events of a day still need a card in a list. The decision is
pure: it looks only at the events and the cards already in the list, so
running it again after the cards were created yields nothing to create.

## Rules (in input order)

1. An event already represented by a card (matching event-id marker) is skipped
2. An event the calendar owner declined is skipped
3. Everything else is created, in input order
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from calendar_trello.models.card import Card
from calendar_trello.models.event import CalendarEvent

logger = logging.getLogger(__name__)


@dataclass
class ReconcilePlan:
    """Create/skip decisions for one list."""

    to_create: list[CalendarEvent] = field(default_factory=list)
    already_present: list[str] = field(default_factory=list)
    declined: list[str] = field(default_factory=list)

    @property
    def skipped(self) -> int:
        return len(self.already_present) + len(self.declined)


def represented_event_ids(cards: Iterable[Card]) -> set[str]:
    """Event ids carried by the cards' markers."""
    return {card.event_id for card in cards if card.event_id}


def reconcile(
    events: Sequence[CalendarEvent],
    existing_cards: Iterable[Card],
) -> ReconcilePlan:
    """Compute which events need a new card.

    Args:
        events: Candidate events, in display order
        existing_cards: Cards currently in the target list

    Returns:
        ReconcilePlan whose `to_create` preserves the order of `events`
    """
    represented = represented_event_ids(existing_cards)
    plan = ReconcilePlan()

    for event in events:
        if event.id in represented:
            logger.debug(f"Card already exists for {event.title} ({event.id})")
            plan.already_present.append(event.id)
            continue

        if event.self_declined:
            logger.debug(f"Skipping declined event: {event.title}")
            plan.declined.append(event.id)
            continue

        plan.to_create.append(event)
        # The same event id must not be planned twice
        represented.add(event.id)

    return plan
