"""Fetch Coordinator — tests for single-flight fetching and the state bracket.

Tests cover:
    - RESET requests cursor=None and replaces the store
    - CONTINUE requests the stored cursor and appends
    - CONTINUE without more pages is SKIPPED and issues no request
    - Concurrent fetch rejected with BusyError, no second request
    - Failure records error, leaves store untouched, clears in_flight
    - Pages violating the item contract fail as ProtocolError before mutation
    - Cancellation mid-request leaves the machine out of LOADING
    - retry() re-issues the failed mode and order
    - Active order only changes when a RESET with a new order succeeds
"""

import asyncio

import pytest

from listsync.core.domain_types import FetchMode, FetchOutcome, RequestStatus
from listsync.core.errors import BusyError, ProtocolError, TransportError
from listsync.core.list_store import ListStore
from listsync.core.order_spec import OrderSpec
from listsync.services.fetch_coordinator import FetchCoordinator

from tests.services.fake_fetcher import GatedFetcher, ScriptedFetcher, page

T_DESC = OrderSpec("t", -1)
T_ASC = OrderSpec("t", 1)


def _coordinator(fetcher, order=T_DESC, limit=2):
    return FetchCoordinator(fetcher, ListStore(), order, page_limit=limit)


def _ids(coordinator):
    return [item["id"] for item in coordinator.store.snapshot().items]


async def test_reset_fetches_first_page_and_replaces():
    fetcher = ScriptedFetcher(page({"id": 1, "t": 10}, {"id": 2, "t": 20}, cursor="c1"))
    coord = _coordinator(fetcher)

    outcome = await coord.fetch(FetchMode.RESET)

    assert outcome is FetchOutcome.APPLIED
    assert fetcher.calls == [{"order": T_DESC, "cursor": None, "limit": 2}]
    assert _ids(coord) == [1, 2]
    assert coord.store.cursor == "c1"
    assert coord.state.status is RequestStatus.LOADED


async def test_continue_uses_stored_cursor_and_appends():
    fetcher = ScriptedFetcher(
        page({"id": 1, "t": 10}, cursor="c1"),
        page({"id": 2, "t": 20}, cursor=None),
    )
    coord = _coordinator(fetcher)
    await coord.fetch(FetchMode.RESET)

    outcome = await coord.fetch(FetchMode.CONTINUE)

    assert outcome is FetchOutcome.APPLIED
    assert fetcher.calls[1]["cursor"] == "c1"
    assert _ids(coord) == [1, 2]
    assert coord.store.has_more is False


async def test_continue_at_end_is_skipped_without_request():
    fetcher = ScriptedFetcher(page({"id": 1, "t": 10}, cursor=None))
    coord = _coordinator(fetcher)
    await coord.fetch(FetchMode.RESET)

    outcome = await coord.fetch(FetchMode.CONTINUE)

    assert outcome is FetchOutcome.SKIPPED
    assert len(fetcher.calls) == 1
    assert coord.state.status is RequestStatus.LOADED


async def test_continue_before_first_page_is_skipped():
    fetcher = ScriptedFetcher()
    coord = _coordinator(fetcher)
    assert await coord.fetch(FetchMode.CONTINUE) is FetchOutcome.SKIPPED
    assert fetcher.calls == []
    assert coord.state.status is RequestStatus.IDLE


async def test_concurrent_fetch_is_busy():
    fetcher = GatedFetcher(page({"id": 1, "t": 10}, cursor="c1"))
    coord = _coordinator(fetcher)

    first = asyncio.create_task(coord.fetch(FetchMode.RESET))
    await fetcher.entered.wait()
    assert coord.state.in_flight

    with pytest.raises(BusyError):
        await coord.fetch(FetchMode.CONTINUE)
    with pytest.raises(BusyError):
        await coord.fetch(FetchMode.RESET, T_ASC)

    fetcher.release.set()
    assert await first is FetchOutcome.APPLIED
    assert len(fetcher.calls) == 1
    assert coord.order == T_DESC


async def test_failure_keeps_items_and_records_error():
    fetcher = ScriptedFetcher(
        page({"id": 1, "t": 10}, cursor="c1"),
        TransportError("network down"),
    )
    coord = _coordinator(fetcher)
    await coord.fetch(FetchMode.RESET)

    outcome = await coord.fetch(FetchMode.CONTINUE)

    assert outcome is FetchOutcome.FAILED
    assert coord.state.status is RequestStatus.ERROR
    assert coord.state.error.message == "network down"
    assert not coord.state.in_flight
    assert _ids(coord) == [1]
    assert coord.store.cursor == "c1"


async def test_failed_reset_keeps_previous_order_and_items():
    fetcher = ScriptedFetcher(
        page({"id": 1, "t": 10}, cursor="c1"),
        TransportError("HTTP 500", status_code=500),
    )
    coord = _coordinator(fetcher)
    await coord.fetch(FetchMode.RESET)

    await coord.fetch(FetchMode.RESET, T_ASC)

    assert coord.order == T_DESC
    assert _ids(coord) == [1]
    assert coord.state.pending_order == T_ASC


async def test_item_missing_order_field_is_protocol_error():
    fetcher = ScriptedFetcher(page({"id": 1, "rating": 3}, cursor="c1"))
    coord = _coordinator(fetcher)

    outcome = await coord.fetch(FetchMode.RESET)

    assert outcome is FetchOutcome.FAILED
    assert coord.state.error.code == "PROTOCOL_ERROR"
    assert len(coord.store) == 0
    assert coord.store.has_more is True


async def test_protocol_error_from_fetcher_is_recorded():
    coord = _coordinator(ScriptedFetcher(ProtocolError("missing paging")))
    assert await coord.fetch(FetchMode.RESET) is FetchOutcome.FAILED
    assert coord.state.error.code == "PROTOCOL_ERROR"


async def test_cancellation_clears_in_flight():
    fetcher = GatedFetcher(page({"id": 1, "t": 10}))
    coord = _coordinator(fetcher)

    task = asyncio.create_task(coord.fetch(FetchMode.RESET))
    await fetcher.entered.wait()
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert not coord.state.in_flight
    assert coord.state.status is RequestStatus.ERROR
    assert coord.state.error.code == "FETCH_ABORTED"
    assert len(coord.store) == 0


async def test_unexpected_exception_propagates_and_clears_in_flight():
    coord = _coordinator(ScriptedFetcher(KeyError("boom")))
    with pytest.raises(KeyError):
        await coord.fetch(FetchMode.RESET)
    assert not coord.state.in_flight


async def test_retry_reissues_failed_continue():
    fetcher = ScriptedFetcher(
        page({"id": 1, "t": 10}, cursor="c1"),
        TransportError("network down"),
        page({"id": 2, "t": 5}, cursor=None),
    )
    coord = _coordinator(fetcher)
    await coord.fetch(FetchMode.RESET)
    await coord.fetch(FetchMode.CONTINUE)

    outcome = await coord.retry()

    assert outcome is FetchOutcome.APPLIED
    assert fetcher.calls[2]["cursor"] == "c1"
    assert _ids(coord) == [1, 2]
    assert coord.state.error is None


async def test_retry_reissues_failed_order_change():
    fetcher = ScriptedFetcher(
        page({"id": 1, "t": 10}, cursor="c1"),
        TransportError("network down"),
        page({"id": 3, "t": 1}, cursor=None),
    )
    coord = _coordinator(fetcher)
    await coord.fetch(FetchMode.RESET)
    await coord.fetch(FetchMode.RESET, T_ASC)

    await coord.retry()

    assert fetcher.calls[2] == {"order": T_ASC, "cursor": None, "limit": 2}
    assert coord.order == T_ASC
    assert _ids(coord) == [3]


async def test_retry_without_error_is_skipped():
    fetcher = ScriptedFetcher(page({"id": 1, "t": 10}))
    coord = _coordinator(fetcher)
    await coord.fetch(FetchMode.RESET)
    assert await coord.retry() is FetchOutcome.SKIPPED
    assert len(fetcher.calls) == 1


async def test_successful_reset_with_new_order_commits_it():
    fetcher = ScriptedFetcher(
        page({"id": 1, "t": 10}, cursor="c1"),
        page({"id": 2, "t": 20}, cursor="x1"),
    )
    coord = _coordinator(fetcher)
    await coord.fetch(FetchMode.RESET)

    await coord.fetch(FetchMode.RESET, T_ASC)

    assert coord.order == T_ASC
    assert _ids(coord) == [2]
    assert coord.store.cursor == "x1"


async def test_continue_page_with_incomparable_order_values_is_rejected():
    fetcher = ScriptedFetcher(
        page({"id": 1, "t": 10}, cursor="c1"),
        page({"id": 2, "t": "20"}, cursor=None),
    )
    coord = _coordinator(fetcher)
    await coord.fetch(FetchMode.RESET)

    outcome = await coord.fetch(FetchMode.CONTINUE)

    assert outcome is FetchOutcome.FAILED
    assert coord.state.error.code == "PROTOCOL_ERROR"
    assert _ids(coord) == [1]
    assert coord.store.cursor == "c1"


async def test_reset_accepts_new_value_kind():
    fetcher = ScriptedFetcher(
        page({"id": 1, "t": 10}, cursor="c1"),
        page({"id": 2, "t": "2024-01-01"}, cursor=None),
    )
    coord = _coordinator(fetcher)
    await coord.fetch(FetchMode.RESET)

    assert await coord.fetch(FetchMode.RESET) is FetchOutcome.APPLIED
    assert _ids(coord) == [2]


async def test_failure_while_applying_page_leaves_loading():
    fetcher = ScriptedFetcher(page({"id": 1, "t": 10}))
    coord = _coordinator(fetcher)

    def broken_replace(page):
        raise RuntimeError("store unavailable")

    coord.store.replace = broken_replace

    with pytest.raises(RuntimeError):
        await coord.fetch(FetchMode.RESET)
    assert not coord.state.in_flight
    assert coord.state.status is RequestStatus.ERROR
    assert coord.state.error.code == "FETCH_ABORTED"
