"""Trello board integration."""

from calendar_trello.trello.client import (
    BoardInfo,
    CardPayload,
    TrelloClient,
)

__all__ = [
    "BoardInfo",
    "CardPayload",
    "TrelloClient",
]
