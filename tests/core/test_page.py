"""Page — tests for has_more mapping and item contract checks.

Tests cover:
    - has_more derived from next_cursor when has_next absent
    - has_next honored, but never continuable without a cursor
    - check_page_items rejects missing id / missing order field
"""

import pytest

from listsync.core.errors import ProtocolError
from listsync.core.page import Page, check_page_items


def test_cursor_means_more():
    assert Page(items=(), next_cursor="c1").has_more


def test_null_cursor_means_end():
    assert not Page(items=()).has_more


def test_has_next_false_wins_over_cursor():
    assert not Page(items=(), next_cursor="c1", has_next=False).has_more


def test_has_next_true_without_cursor_is_end():
    assert not Page(items=(), next_cursor=None, has_next=True).has_more


def test_len_counts_items():
    assert len(Page(items=({"id": 1}, {"id": 2}))) == 2


def test_check_accepts_complete_items():
    check_page_items(Page(items=({"id": 1, "t": 0},)), "id", "t")


def test_check_rejects_missing_id():
    with pytest.raises(ProtocolError) as exc:
        check_page_items(Page(items=({"t": 1},)), "id", "t")
    assert "position 0" in exc.value.message


def test_check_rejects_missing_order_field():
    with pytest.raises(ProtocolError) as exc:
        check_page_items(Page(items=({"id": 5, "rating": 3},)), "id", "createdAt")
    assert "createdAt" in exc.value.message
    assert exc.value.context.order_key == "createdAt"


def test_check_rejects_null_order_field():
    with pytest.raises(ProtocolError):
        check_page_items(Page(items=({"id": 5, "t": None},)), "id", "t")


def test_check_rejects_mixed_kinds_within_page():
    with pytest.raises(ProtocolError) as exc:
        check_page_items(Page(items=({"id": 1, "t": 10}, {"id": 2, "t": "20"})), "id", "t")
    assert "text" in exc.value.message


def test_check_rejects_kind_differing_from_reference():
    with pytest.raises(ProtocolError):
        check_page_items(Page(items=({"id": 2, "t": "20"},)), "id", "t", reference=10)


def test_check_accepts_ints_and_floats_together():
    check_page_items(
        Page(items=({"id": 1, "t": 1.5}, {"id": 2, "t": 2})), "id", "t", reference=3,
    )


def test_check_rejects_non_orderable_value():
    with pytest.raises(ProtocolError):
        check_page_items(Page(items=({"id": 1, "t": {"nested": 1}},)), "id", "t")
