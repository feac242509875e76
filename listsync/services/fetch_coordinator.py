"""Fetch Coordinator — single-flight page fetching with a transactional state bracket.

Invariants:
    - At most one fetch in flight; a second call raises BusyError before any IO
    - Busy check precedes every other precondition
    - CONTINUE without has_more and a cursor is a no-op (SKIPPED), no request issued
    - Store is mutated only after the page is fully received and validated
      (failure leaves items, cursor and has_more untouched)
    - RequestState leaves LOADING on every exit path, including cancellation
    - Active order changes only when a RESET with a new order succeeds

Design Decisions:
    - Transport/Protocol failures are recorded, not raised: the caller reads
      RequestState (ADR: rendering layer polls status, it does not catch)
    - BaseException bracket re-raises after recording: CancelledError and
      programming errors must still propagate
    - Page items checked for id + order field here, before the store sees them,
      so the projector can index item[order.key] unconditionally; a CONTINUE page
      is also checked against a value already stored, so the merged list stays sortable
    - Store mutation and the LOADED transition sit inside the bracket: a failure
      while applying still moves the machine out of LOADING
"""

import logging

from listsync.core.boundary_protocols import PageFetcher
from listsync.core.domain_types import FetchMode, FetchOutcome
from listsync.core.errors import BusyError, ErrorContext, ErrorInfo, ListSyncError
from listsync.core.list_store import ListStore
from listsync.core.order_spec import OrderSpec
from listsync.core.page import check_page_items
from listsync.core.request_state import RequestState

logger = logging.getLogger(__name__)

ABORTED = ErrorInfo(
    code="FETCH_ABORTED",
    message="The request was interrupted before it completed",
    category="internal",
)


class FetchCoordinator:
    """Wraps a PageFetcher with single-flight and loading/error state."""

    def __init__(
        self,
        fetcher: PageFetcher,
        store: ListStore,
        order: OrderSpec,
        page_limit: int = 10,
    ):
        self.fetcher = fetcher
        self.store = store
        self.order = order
        self.page_limit = page_limit
        self.state = RequestState()

    async def fetch(
        self, mode: FetchMode, order: OrderSpec | None = None,
    ) -> FetchOutcome:
        """Fetch one page. RESET may carry a new order; CONTINUE uses the active one."""
        if self.state.in_flight:
            logger.debug(
                "Fetch rejected: another request is in flight",
                extra={"mode": mode.value, "error_code": "FETCH_BUSY"},
            )
            raise BusyError(ErrorContext(order_key=self.order.key))

        if mode is FetchMode.RESET:
            target = order or self.order
            cursor = None
        else:
            if not self.store.can_continue:
                logger.debug(
                    "Continue skipped: no further pages",
                    extra={"mode": mode.value, "order_key": self.order.key},
                )
                return FetchOutcome.SKIPPED
            target = self.order
            cursor = self.store.cursor

        self.state.begin(mode, target)
        logger.info(
            "Fetch started",
            extra={
                "mode": mode.value,
                "order_key": target.key,
                "direction": int(target.direction),
                "cursor": cursor,
            },
        )
        try:
            page = await self.fetcher.fetch_page(target, cursor, self.page_limit)
            check_page_items(
                page, self.store.id_field, target.key,
                reference=(
                    self.store.sample_value(target.key)
                    if mode is FetchMode.CONTINUE else None
                ),
            )
            if mode is FetchMode.RESET:
                self.store.replace(page)
                self.order = target
            else:
                self.store.append(page)
            self.state.succeed()
        except ListSyncError as e:
            self.state.fail(e.to_error_info())
            logger.warning(
                f"Fetch failed: {e.message}",
                extra={
                    "mode": mode.value,
                    "order_key": target.key,
                    "cursor": cursor,
                    "error_code": e.code,
                    "status_code": e.context.status_code,
                },
            )
            return FetchOutcome.FAILED
        except BaseException:
            self.state.fail(ABORTED)
            logger.warning(
                "Fetch aborted",
                extra={"mode": mode.value, "error_code": ABORTED.code},
            )
            raise

        logger.info(
            "Fetch applied",
            extra={
                "mode": mode.value,
                "order_key": target.key,
                "item_count": len(page),
                "cursor": page.next_cursor,
            },
        )
        return FetchOutcome.APPLIED

    async def retry(self) -> FetchOutcome:
        """Re-issue the request that failed, with the same mode and order."""
        if not self.state.can_retry:
            return FetchOutcome.SKIPPED
        return await self.fetch(self.state.pending_mode, self.state.pending_order)
