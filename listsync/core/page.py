"""Page — one bounded slice of the remote list plus its continuation token.

Invariants:
    - next_cursor is None ⇒ no continuation token was issued
    - has_more is tracked separately from next_cursor (a null cursor on a
      request means "first page", on a response it means "end of list")
    - check_page_items is PURE: raises ProtocolError, never repairs items
    - Order values in one list share a comparison family (number or text), so
      sorting the merged collection can never raise

Design Decisions:
    - Items kept as plain mappings: the core only reads the id and the order field
    - has_next override: some collaborators report has-more explicitly; a page
      is only continuable when it also carries a cursor
"""

from dataclasses import dataclass

from listsync.core.domain_types import Cursor, Item
from listsync.core.errors import ErrorContext, ProtocolError


@dataclass(frozen=True)
class Page:
    """One page of items as returned by the data source."""

    items: tuple[Item, ...]
    next_cursor: Cursor | None = None
    has_next: bool | None = None
    total_count: int | None = None

    @property
    def has_more(self) -> bool:
        if self.has_next is not None:
            return self.has_next and self.next_cursor is not None
        return self.next_cursor is not None

    def __len__(self) -> int:
        return len(self.items)


def order_kind(value: object) -> str | None:
    """Comparison family of an order value; None when it cannot be ordered."""
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "text"
    return None


def check_page_items(
    page: Page, id_field: str, order_key: str, reference: object = None,
) -> None:
    """Every item must carry the identifier and an order value comparable with
    the rest of the page and with reference (a value already in the store).
    """
    expected = order_kind(reference) if reference is not None else None
    for position, item in enumerate(page.items):
        if item.get(id_field) is None:
            raise ProtocolError(
                f"Item at position {position} has no '{id_field}' field",
                ErrorContext(order_key=order_key),
            )
        if item.get(order_key) is None:
            raise ProtocolError(
                f"Item '{item[id_field]}' has no '{order_key}' field to order by",
                ErrorContext(order_key=order_key),
            )
        kind = order_kind(item[order_key])
        if kind is None:
            raise ProtocolError(
                f"Item '{item[id_field]}' has a non-orderable '{order_key}' value",
                ErrorContext(order_key=order_key),
            )
        if expected is None:
            expected = kind
        elif kind != expected:
            raise ProtocolError(
                f"Item '{item[id_field]}' has a {kind} '{order_key}' value "
                f"but the list is ordered by {expected} values",
                ErrorContext(order_key=order_key),
            )
