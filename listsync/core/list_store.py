"""List Store — keyed, insertion-ordered collection plus pagination position.

Invariants:
    - At most one entry per ItemKey (dict keys); duplicates resolve last-write-wins
    - Overwritten items keep their original position with refreshed contents
    - remove() on an absent key is a no-op, never an error
    - cursor and has_more are always set together, from the same page
    - Fresh store: empty, cursor=None, has_more=True (optimistic until a page says otherwise)
    - snapshot() hands out read-only views: nothing outside the store can mutate it

Design Decisions:
    - dict over list + index: Python dicts preserve insertion order and keep
      position on key reassignment, which is exactly the overwrite rule
    - Items copied on insert: the caller's page objects never alias store state
    - version counter bumps on every effective mutation so readers can memoize projections
"""

from dataclasses import dataclass
from types import MappingProxyType

from listsync.core.domain_types import Cursor, Item, ItemKey, item_key
from listsync.core.page import Page


@dataclass(frozen=True)
class StoreSnapshot:
    """Immutable read of the store at one version."""

    items: tuple[Item, ...]
    cursor: Cursor | None
    has_more: bool
    version: int
    total_count: int | None = None

    def __len__(self) -> int:
        return len(self.items)

    @property
    def can_continue(self) -> bool:
        return self.has_more and self.cursor is not None


class ListStore:
    """Merged item collection and pagination cursor."""

    def __init__(self, id_field: str = "id"):
        self.id_field = id_field
        self._items: dict[ItemKey, dict] = {}
        self._cursor: Cursor | None = None
        self._has_more: bool = True
        self._total_count: int | None = None
        self._version: int = 0

    # ─── Reads ───────────────────────────────────────────────────

    @property
    def cursor(self) -> Cursor | None:
        return self._cursor

    @property
    def has_more(self) -> bool:
        return self._has_more

    @property
    def version(self) -> int:
        return self._version

    @property
    def total_count(self) -> int | None:
        return self._total_count

    @property
    def can_continue(self) -> bool:
        return self._has_more and self._cursor is not None

    def sample_value(self, field: str) -> object:
        """Value of field on the first stored item, or None when empty."""
        for item in self._items.values():
            return item.get(field)
        return None

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, raw_id: object) -> bool:
        return item_key(raw_id) in self._items

    def keys(self) -> list[ItemKey]:
        return list(self._items)

    def get(self, raw_id: object) -> Item | None:
        item = self._items.get(item_key(raw_id))
        return MappingProxyType(item) if item is not None else None

    def snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(
            items=tuple(MappingProxyType(item) for item in self._items.values()),
            cursor=self._cursor,
            has_more=self._has_more,
            version=self._version,
            total_count=self._total_count,
        )

    # ─── Mutations ───────────────────────────────────────────────

    def replace(self, page: Page) -> None:
        """Discard everything and load page as the new first page."""
        self._items.clear()
        self._insert_all(page)
        self._set_position(page)

    def append(self, page: Page) -> None:
        """Merge page after existing items; repeated ids overwrite in place."""
        self._insert_all(page)
        self._set_position(page)

    def remove(self, raw_id: object) -> bool:
        """Delete an entry if present. Returns whether anything was removed."""
        removed = self._items.pop(item_key(raw_id), None) is not None
        if removed:
            self._version += 1
        return removed

    def _insert_all(self, page: Page) -> None:
        for item in page.items:
            self._items[item_key(item[self.id_field])] = dict(item)

    def _set_position(self, page: Page) -> None:
        self._cursor = page.next_cursor
        self._has_more = page.has_more
        if page.total_count is not None:
            self._total_count = page.total_count
        self._version += 1
