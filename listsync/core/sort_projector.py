"""Sort Projector — derives the display order from a store snapshot.

Invariants:
    - project() is PURE: reads the snapshot, returns a new list, mutates nothing
    - Stable: items with equal order values keep insertion order in both directions
    - Same (snapshot, order) ⇒ same output, every call

Design Decisions:
    - sorted(reverse=True) for DESC: Python's sort stays stable under reverse,
      so ties are broken by insertion order without a secondary key
      (ADR: re-projecting after a delete must not reshuffle untouched items)
    - Operates on StoreSnapshot, never on ListStore: the view path has no
      handle on the mutation path
"""

from listsync.core.domain_types import Item
from listsync.core.list_store import StoreSnapshot
from listsync.core.order_spec import OrderSpec


def project(snapshot: StoreSnapshot, order: OrderSpec) -> list[Item]:
    """Return snapshot items ordered by order.key, signed by order.direction."""
    return sorted(
        snapshot.items,
        key=lambda item: item[order.key],
        reverse=order.descending,
    )
