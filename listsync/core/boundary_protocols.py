"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - The data source is reached only through PageFetcher
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Async in Protocol: the only suspension point of the engine is the page request
"""

from typing import Protocol

from listsync.core.domain_types import Cursor
from listsync.core.order_spec import OrderSpec
from listsync.core.page import Page


class PageFetcher(Protocol):
    """Issues exactly one bounded page request. Never retries.

    Raises TransportError on network/HTTP failure and ProtocolError when the
    response violates the page contract.
    """
    async def fetch_page(
        self, order: OrderSpec, cursor: Cursor | None, limit: int,
    ) -> Page: ...
