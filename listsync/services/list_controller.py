"""List Controller — composition root wiring user intents to store, coordinator and projector.

Invariants:
    - view always equals project(store.snapshot(), active order); callers get a fresh list
    - can_load_more = has_more AND not loading AND not in ERROR
    - Intents issued while a fetch is in flight are rejected (return False), never queued
    - delete() is synchronous, idempotent and never fails
    - A failed order change keeps the previous order and items on screen

Design Decisions:
    - Intents return bool ("accepted") instead of raising BusyError: Busy is not
      user-visible, the rendering layer just disables the control
    - View memoized on (store.version, order): repeated reads are free and still pure
    - set_order() with the already-loaded order is a no-op; anything else resets
"""

import logging
from dataclasses import dataclass

from listsync.config import Settings
from listsync.core.boundary_protocols import PageFetcher
from listsync.core.domain_types import (
    FetchMode,
    FetchOutcome,
    Item,
    RequestStatus,
    SortDirection,
)
from listsync.core.errors import BusyError, ErrorInfo
from listsync.core.list_store import ListStore
from listsync.core.order_spec import OrderSpec
from listsync.core.sort_projector import project
from listsync.services.fetch_coordinator import FetchCoordinator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ListView:
    """Everything the rendering layer needs, at one instant."""

    items: list[Item]
    status: RequestStatus
    is_loading: bool
    can_load_more: bool
    error: ErrorInfo | None
    order: OrderSpec
    total_count: int | None = None

    @property
    def error_message(self) -> str | None:
        return self.error.message if self.error else None


class ListController:
    """Exposes the current view plus status flags, and accepts intents."""

    def __init__(
        self,
        fetcher: PageFetcher,
        order: OrderSpec,
        page_limit: int = 10,
        id_field: str = "id",
    ):
        self.store = ListStore(id_field=id_field)
        self.coordinator = FetchCoordinator(fetcher, self.store, order, page_limit)
        self._view_key: tuple[int, OrderSpec] | None = None
        self._view: list[Item] = []

    @classmethod
    def from_settings(cls, settings: Settings, fetcher: PageFetcher) -> "ListController":
        return cls(
            fetcher,
            OrderSpec(
                settings.default_order_key,
                SortDirection(settings.default_order_direction),
            ),
            page_limit=settings.page_limit,
            id_field=settings.id_field,
        )

    # ─── Status ──────────────────────────────────────────────────

    @property
    def order(self) -> OrderSpec:
        return self.coordinator.order

    @property
    def status(self) -> RequestStatus:
        return self.coordinator.state.status

    @property
    def is_loading(self) -> bool:
        return self.coordinator.state.in_flight

    @property
    def error(self) -> ErrorInfo | None:
        return self.coordinator.state.error

    @property
    def error_message(self) -> str | None:
        return self.error.message if self.error else None

    @property
    def can_load_more(self) -> bool:
        return (
            self.store.has_more
            and not self.is_loading
            and self.status is not RequestStatus.ERROR
        )

    @property
    def view(self) -> list[Item]:
        key = (self.store.version, self.order)
        if key != self._view_key:
            self._view = project(self.store.snapshot(), self.order)
            self._view_key = key
        return list(self._view)

    def snapshot(self) -> ListView:
        return ListView(
            items=self.view,
            status=self.status,
            is_loading=self.is_loading,
            can_load_more=self.can_load_more,
            error=self.error,
            order=self.order,
            total_count=self.store.total_count,
        )

    # ─── Intents ─────────────────────────────────────────────────

    async def refresh(self) -> bool:
        """Reload from the first page with the active order."""
        return await self._dispatch(FetchMode.RESET)

    async def set_order(self, key: str, direction: int = SortDirection.DESC) -> bool:
        """Switch ordering. Raises InvalidOrderError for an unusable key/direction."""
        order = OrderSpec(key, direction)
        if order == self.order and self.status is RequestStatus.LOADED:
            return False
        return await self._dispatch(FetchMode.RESET, order)

    async def set_order_preset(self, name: str) -> bool:
        preset = OrderSpec.from_preset(name)
        return await self.set_order(preset.key, preset.direction)

    async def load_more(self) -> bool:
        """Append the next page. Disabled while an error is unresolved."""
        if self.status is RequestStatus.ERROR:
            return False
        return await self._dispatch(FetchMode.CONTINUE)

    async def retry(self) -> bool:
        """Re-issue the failed request."""
        try:
            outcome = await self.coordinator.retry()
        except BusyError:
            return False
        return outcome is not FetchOutcome.SKIPPED

    def delete(self, item_id: object) -> bool:
        """Remove an item locally. Absent ids are a no-op."""
        removed = self.store.remove(item_id)
        logger.info(
            "Item deleted locally" if removed else "Delete ignored: item not present",
            extra={"item_id": str(item_id)},
        )
        return removed

    async def _dispatch(
        self, mode: FetchMode, order: OrderSpec | None = None,
    ) -> bool:
        try:
            outcome = await self.coordinator.fetch(mode, order)
        except BusyError:
            return False
        return outcome is not FetchOutcome.SKIPPED
