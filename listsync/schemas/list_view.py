"""List View Schemas — Pydantic models for the rendering boundary.

Invariants:
    - OrderRequest accepts either {key, direction} or {preset}, never both
    - direction is constrained to +1 / -1 at the API boundary
    - ListViewResponse mirrors ListController.snapshot() one-to-one

Design Decisions:
    - model_validator for cross-field rules (same as the rest of the API layer)
"""

from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator


class OrderRequest(BaseModel):
    """Body of PUT /order."""

    key: str | None = Field(default=None, min_length=1, max_length=100)
    direction: Literal[1, -1] = -1
    preset: str | None = None

    @model_validator(mode="after")
    def key_or_preset(self) -> "OrderRequest":
        if self.key is None and self.preset is None:
            raise ValueError("Either 'key' or 'preset' is required")
        if self.key is not None and self.preset is not None:
            raise ValueError("Provide 'key' or 'preset', not both")
        return self


class OrderBody(BaseModel):
    key: str
    direction: int


class ErrorBody(BaseModel):
    code: str
    message: str
    retryable: bool


class ListViewResponse(BaseModel):
    """Current view plus status flags."""

    items: list[dict[str, Any]]
    status: str
    is_loading: bool
    can_load_more: bool
    error: ErrorBody | None = None
    order: OrderBody
    total_count: int | None = None


class IntentResponse(BaseModel):
    """Result of an intent: whether it was accepted, and the resulting view."""

    accepted: bool
    view: ListViewResponse
