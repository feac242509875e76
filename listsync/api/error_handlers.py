"""Error Handlers — map exceptions raised at the list boundary onto JSON envelopes.

Invariants:
    - ListSyncError → its own to_response() envelope and http_status
    - Log level follows ErrorSeverity: a Busy rejection (INFO) or a bad order
      (ERROR, 400) never logs like an unhandled crash (CRITICAL)
    - Pydantic request errors → 400 with one detail per offending field
    - Anything else → opaque 500, details only in the log

Design Decisions:
    - Fetch failures never reach these handlers: the controller records them in
      RequestState and the routes answer 200 with view.error; what arrives here
      is input validation or a programming error
    - One _envelope() for the two non-domain shapes, so every error body shares
      the keys the domain errors already use (code, message, category, severity)
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from listsync.core.errors import ErrorCategory, ErrorSeverity, ListSyncError

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.WARNING,
    ErrorSeverity.CRITICAL: logging.ERROR,
}


def _envelope(
    code: str, message: str, category: ErrorCategory, severity: ErrorSeverity,
    **extra: object,
) -> dict:
    return {
        "error": {
            "code": code,
            "message": message,
            "category": category.value,
            "severity": severity.value,
            **extra,
        },
    }


async def listsync_error_handler(request: Request, exc: ListSyncError):
    logger.log(
        _LOG_LEVELS.get(exc.severity, logging.ERROR),
        f"{exc.code} on {request.url.path}: {exc.message}",
        extra={
            "error_code": exc.code,
            "path": request.url.path,
            "order_key": exc.context.order_key,
        },
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = [
        {
            "field": ".".join(str(loc) for loc in e["loc"] if loc != "body"),
            "message": e["msg"],
        }
        for e in exc.errors()
    ]
    logger.info(
        f"Rejected request body on {request.url.path}",
        extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_envelope(
            "VALIDATION_ERROR", "Invalid request data",
            ErrorCategory.VALIDATION, ErrorSeverity.ERROR, details=details,
        ),
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(
        f"Unhandled exception on {request.url.path}: {exc}",
        exc_info=True,
        extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(
            "INTERNAL_ERROR", "An unexpected error occurred",
            ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL,
        ),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach the three handlers, most specific first."""
    app.add_exception_handler(ListSyncError, listsync_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
