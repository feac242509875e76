"""HTTP Page Fetcher — one GET per page against the list endpoint, via httpx.

Invariants:
    - Exactly one request per fetch_page() call; no retry (retry policy lives below, in the transport)
    - Query: order=<key>, limit=<n>, cursor=<token> (cursor omitted for the first page)
    - Non-2xx, network failure, timeout → TransportError
    - Non-JSON body, missing items/paging, wrong shapes → ProtocolError
    - limit <= 0 → InvalidRequestError before any IO

Design Decisions:
    - AsyncClient injected, not created per call: connection pooling, and tests
      swap in httpx.MockTransport without patching
    - items_field configurable: collaborators name the collection "foods",
      "reviews", ... — mapped onto the canonical {items, paging} shape here
    - Direction is not sent: the server orders by key, the projector applies the sign
"""

import logging

import httpx
from pydantic import ValidationError

from listsync.config import Settings
from listsync.core.domain_types import Cursor
from listsync.core.errors import (
    ErrorContext,
    InvalidRequestError,
    ProtocolError,
    TransportError,
)
from listsync.core.order_spec import OrderSpec
from listsync.core.page import Page
from listsync.schemas.page import PageBody

logger = logging.getLogger(__name__)


def build_query(order: OrderSpec, cursor: Cursor | None, limit: int) -> dict:
    """Query parameters for one page request."""
    params: dict[str, str | int] = {"order": order.key, "limit": limit}
    if cursor is not None:
        params["cursor"] = cursor
    return params


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    """AsyncClient bound to the configured data source."""
    return httpx.AsyncClient(
        base_url=settings.api_base_url,
        timeout=settings.request_timeout_seconds,
        headers={"Accept": "application/json"},
    )


class HttpPageFetcher:
    """PageFetcher backed by an httpx.AsyncClient."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        resource_path: str = "/items",
        items_field: str = "items",
    ):
        self.client = client
        self.resource_path = resource_path
        self.items_field = items_field

    @classmethod
    def from_settings(
        cls, settings: Settings, client: httpx.AsyncClient | None = None,
    ) -> "HttpPageFetcher":
        return cls(
            client or create_http_client(settings),
            resource_path=settings.resource_path,
            items_field=settings.items_field,
        )

    async def fetch_page(
        self, order: OrderSpec, cursor: Cursor | None, limit: int,
    ) -> Page:
        if limit <= 0:
            raise InvalidRequestError(
                f"limit must be a positive integer, got {limit}", "limit",
            )
        context = ErrorContext(order_key=order.key, cursor=cursor)
        logger.debug(
            "Requesting page",
            extra={"order_key": order.key, "cursor": cursor, "path": self.resource_path},
        )

        try:
            response = await self.client.get(
                self.resource_path, params=build_query(order, cursor, limit),
            )
        except httpx.TimeoutException as e:
            raise TransportError(f"Request timed out: {e}", context=context)
        except httpx.RequestError as e:
            raise TransportError(f"Network error: {e}", context=context)

        if not response.is_success:
            raise TransportError(
                f"Data source returned HTTP {response.status_code}",
                status_code=response.status_code,
                context=context,
            )

        page = self._parse(response, context)
        logger.info(
            "Page received",
            extra={
                "order_key": order.key,
                "cursor": cursor,
                "item_count": len(page),
                "status_code": response.status_code,
            },
        )
        return page

    def _parse(self, response: httpx.Response, context: ErrorContext) -> Page:
        """Map the collaborator's body onto Page, or raise ProtocolError."""
        try:
            body = response.json()
        except ValueError:
            raise ProtocolError("Response body is not valid JSON", context)

        if not isinstance(body, dict):
            raise ProtocolError("Response body must be a JSON object", context)

        try:
            parsed = PageBody.model_validate({
                "items": body.get(self.items_field),
                "paging": body.get("paging"),
            })
        except ValidationError as e:
            context.debug_info = {"errors": e.errors(include_url=False)}
            fields = ", ".join(
                ".".join(str(loc) for loc in err["loc"]) for err in e.errors()
            )
            raise ProtocolError(
                f"Response does not match the page contract ({fields})", context,
            )

        return Page(
            items=tuple(parsed.items),
            next_cursor=(
                Cursor(parsed.paging.next_cursor)
                if parsed.paging.next_cursor is not None else None
            ),
            has_next=parsed.paging.has_next,
            total_count=parsed.paging.count,
        )

    async def aclose(self) -> None:
        await self.client.aclose()
