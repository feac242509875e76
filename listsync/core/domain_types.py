"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - ItemKey is the normalized (str) form of an item identifier — never key the store by raw ids
    - Cursor is opaque: core never parses or builds one
    - SortDirection is exactly +1 or -1
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders (ADR: API surface is JSON)
    - Identifiers normalized via str(): servers send ints, HTTP paths carry strings,
      both must address the same entry
"""

from enum import Enum, IntEnum
from typing import Any, Mapping, NewType


# ─── Identity Types ──────────────────────────────────────────────

ItemKey = NewType("ItemKey", str)
Cursor = NewType("Cursor", str)

# Items are opaque records; core only reads the identifier and the order field
Item = Mapping[str, Any]


def item_key(raw_id: object) -> ItemKey:
    """Normalize a raw identifier (int, str, UUID) into a store key."""
    return ItemKey(str(raw_id))


# ─── Enums ───────────────────────────────────────────────────────

class SortDirection(IntEnum):
    """Comparison sign applied by the projector."""
    ASC = 1
    DESC = -1


class FetchMode(str, Enum):
    """Reset discards and starts over; continue appends the next page."""
    RESET = "reset"
    CONTINUE = "continue"


class RequestStatus(str, Enum):
    """Request lifecycle states — one machine per coordinator."""
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


class FetchOutcome(str, Enum):
    """What a coordinator fetch call ended up doing."""
    APPLIED = "applied"
    SKIPPED = "skipped"   # continue requested with nothing left to load
    FAILED = "failed"
