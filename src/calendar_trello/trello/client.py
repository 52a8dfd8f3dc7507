"""Trello REST API client.

## API Documentation

https://developer.atlassian.com/cloud/trello/rest/

## Endpoints Used

| Operation | Method | Path |
|-----------|--------|------|
| List cards | GET | /1/lists/{id}/cards |
| Create card | POST | /1/cards |
| Move card | PUT | /1/cards/{id} |
| Board details | GET | /1/boards/{id} |

## Authentication

`key` and `token` query parameters on every request.

## Rate Limits

- 100 requests per 10 seconds per token
- 300 requests per 10 seconds per API key
- Exceeding the limit returns 429
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal

import httpx
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from calendar_trello.exceptions import TrelloError, TrelloRateLimitError
from calendar_trello.models.card import Card

logger = logging.getLogger(__name__)

TRELLO_API_URL = "https://api.trello.com/1"

Position = Literal["top", "bottom"]

# Requests Trello may safely receive twice
IDEMPOTENT_METHODS = frozenset({"GET", "PUT"})


def _is_retryable(exc: BaseException) -> bool:
    """Whether a failed request may be sent again.

    Connect-phase failures never reached Trello. Any later failure of a POST
    may have created the card already, so only idempotent methods retry those.
    """
    if isinstance(exc, (httpx.ConnectError, httpx.ConnectTimeout, httpx.PoolTimeout)):
        return True
    if isinstance(exc, (httpx.TimeoutException, httpx.NetworkError)):
        try:
            return exc.request.method in IDEMPOTENT_METHODS
        except RuntimeError:
            return False
    return False


@dataclass
class CardPayload:
    """Fields of a card to be created."""

    name: str
    description: str
    due: datetime | None = None
    event_id: str | None = None


@dataclass
class BoardInfo:
    """Board details."""

    id: str
    name: str
    url: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> BoardInfo:
        return cls(id=data["id"], name=data.get("name", ""), url=data.get("url"))


class TrelloClient:
    """Async client for the Trello REST API.

    Example:
        ```python
        async with TrelloClient(api_key, token) as trello:
            cards = await trello.get_list_cards(list_id)
            await trello.move_card(cards[0].id, other_list_id, position="top")
        ```
    """

    def __init__(
        self,
        api_key: str,
        token: str,
        base_url: str = TRELLO_API_URL,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the client.

        Args:
            api_key: Trello API key
            token: Trello member token
            base_url: API root
            timeout: Request timeout in seconds
            client: Optional preconfigured httpx client (used by tests)
        """
        self.api_key = api_key
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    async def __aenter__(self) -> TrelloClient:
        """Enter async context manager."""
        self._get_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context manager."""
        await self.close()

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    def _auth_params(self) -> dict[str, str]:
        return {"key": self.api_key, "token": self.token}

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Send a request, retrying transient network errors.

        Args:
            method: HTTP method
            path: Path below the API root
            params: Query parameters (auth is added)

        Returns:
            Decoded JSON body

        Raises:
            TrelloRateLimitError: If rate limit is exceeded
            TrelloError: If the request fails or Trello cannot be reached
        """
        try:
            return await self._send(method, path, params)
        except httpx.HTTPError as e:
            raise TrelloError(f"Trello request failed: {e!r}") from e

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception(_is_retryable),
        reraise=True,
    )
    async def _send(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        client = self._get_client()
        query = self._auth_params()
        if params:
            query.update({k: v for k, v in params.items() if v is not None})

        response = await client.request(
            method,
            f"{self.base_url}{path}",
            params=query,
            headers={"Accept": "application/json"},
        )

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise TrelloRateLimitError(
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None
            )

        if response.status_code >= 400:
            raise TrelloError(
                f"Trello API error: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
                response_body=response.text,
            )

        return response.json()

    async def get_list_cards(self, list_id: str) -> list[Card]:
        """List the open cards of a list, in list order."""
        data = await self._request("GET", f"/lists/{list_id}/cards")
        return [Card.from_api(item) for item in data]

    async def create_card(
        self,
        list_id: str,
        payload: CardPayload,
        position: Position = "bottom",
    ) -> Card:
        """Create a card in a list."""
        data = await self._request(
            "POST",
            "/cards",
            params={
                "idList": list_id,
                "name": payload.name,
                "desc": payload.description,
                "due": payload.due.isoformat() if payload.due else None,
                "pos": position,
            },
        )
        return Card.from_api(data)

    async def move_card(
        self,
        card_id: str,
        list_id: str,
        position: Position = "top",
    ) -> Card:
        """Move a card to another list."""
        data = await self._request(
            "PUT",
            f"/cards/{card_id}",
            params={"idList": list_id, "pos": position},
        )
        return Card.from_api(data)

    async def get_board(self, board_id: str) -> BoardInfo:
        """Get board details."""
        data = await self._request("GET", f"/boards/{board_id}")
        return BoardInfo.from_api(data)
