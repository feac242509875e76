"""Page Schemas — Pydantic models for the wire shape of one list page.

Invariants:
    - items must be a list of JSON objects
    - paging must be present (may be empty); nextCursor null, a string or an integer token,
      always surfaced as str
    - Extra fields on the body and on paging are ignored (collaborators add their own)

Design Decisions:
    - Pydantic at the boundary, dataclass Page in core: the core never sees
      pydantic models (ADR: core has no third-party imports)
    - Empty-string cursor treated as null: some servers send "" for end-of-list
    - Integer cursors (offset-style servers) stringified: the core only passes them back
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PagingBody(BaseModel):
    """Pagination block — field names as the server sends them."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    next_cursor: str | None = Field(default=None, alias="nextCursor")
    has_next: bool | None = Field(default=None, alias="hasNext")
    count: int | None = Field(default=None, ge=0)

    @field_validator("next_cursor", mode="before")
    @classmethod
    def normalize_cursor(cls, v: Any) -> Any:
        """Opaque token: numeric cursors kept as their string form, blanks dropped."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        if isinstance(v, str) and not v.strip():
            return None
        return v


class PageBody(BaseModel):
    """Response body: {items: [...], paging: {nextCursor: ...}}."""

    model_config = ConfigDict(extra="ignore")

    items: list[dict[str, Any]]
    paging: PagingBody
