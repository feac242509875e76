"""Error Hierarchy — typed, categorized exceptions for all ListSync failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Fetch failures (TransportError, ProtocolError) never carry partial state —
      they are raised before any store mutation
    - to_response() produces the REST envelope; to_error_info() produces the
      displayable record kept in RequestState
    - No raw response bodies leaked in user-facing messages

Design Decisions:
    - Single hierarchy with ListSyncError base: FastAPI global handler catches all (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - BusyError is INFO severity: a rejected concurrent fetch is flow control, not a failure
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    CONFLICT = "conflict"
    EXTERNAL_API = "external_api"
    PROTOCOL = "protocol"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    order_key: str | None = None
    cursor: str | None = None
    status_code: int | None = None
    debug_info: dict[str, Any] | None = None


@dataclass(frozen=True)
class ErrorInfo:
    """Displayable error record — what the rendering layer sees."""
    code: str
    message: str
    category: str
    retryable: bool = True


class ListSyncError(Exception):
    """Base exception for all ListSync errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "order_key": self.context.order_key,
                    "cursor": self.context.cursor,
                    "status_code": self.context.status_code,
                },
            }
        }

    def to_error_info(self) -> ErrorInfo:
        """Convert to the record stored on RequestState."""
        return ErrorInfo(
            code=self.code,
            message=self.message,
            category=self.category.value,
            retryable=self.category in (
                ErrorCategory.EXTERNAL_API, ErrorCategory.PROTOCOL,
            ),
        )


# ─── Flow Control ───────────────────────────────────────────────

class BusyError(ListSyncError):
    """A fetch is already in flight — the new one is rejected, not queued."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "A fetch is already in progress",
            "FETCH_BUSY", ErrorCategory.CONFLICT,
            ErrorSeverity.INFO, context, 409,
        )


# ─── Validation Errors (400-level) ──────────────────────────────

class InvalidOrderError(ListSyncError):
    """OrderSpec key or direction is not usable."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_ORDER", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )


class InvalidRequestError(ListSyncError):
    """Page request parameters are out of range."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_REQUEST", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


# ─── Boundary Errors (502-level) ────────────────────────────────

class TransportError(ListSyncError):
    """Network failure, timeout, or non-success HTTP status."""
    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.status_code = status_code
        super().__init__(
            message, "TRANSPORT_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, ctx, 502,
        )
        self.status_code = status_code


class ProtocolError(ListSyncError):
    """Response does not match the page contract."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "PROTOCOL_ERROR", ErrorCategory.PROTOCOL,
            ErrorSeverity.ERROR, context, 502,
        )
