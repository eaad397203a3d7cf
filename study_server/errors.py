"""Map engine exceptions onto HTTP responses."""

import logging
from typing import Any, Tuple

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from reading_engine.errors import (
    ConditionLockedError,
    ConfigurationError,
    DuplicateError,
    InvalidResultError,
    InvariantViolationError,
    NotFoundError,
    ReaderDisabledError,
    SessionClosedError,
    StoreError,
    StudyError,
    TimerStateError,
)

logger = logging.getLogger(__name__)

SAVE_FAILED_MESSAGE = "保存に失敗しました。再度お試しください。 / Saving failed. Please try again."


def status_and_detail(exc: StudyError) -> Tuple[int, Any]:
    """HTTP status code and response detail for an engine error."""
    if isinstance(exc, NotFoundError):
        return 404, str(exc)
    if isinstance(exc, InvalidResultError):
        return 400, {"message": str(exc), "errors": exc.errors}
    if isinstance(exc, ConditionLockedError):
        return 409, {
            "message": str(exc),
            "condition": exc.condition,
            "reason": exc.reason,
            "unlock_at": exc.unlock_at.isoformat() if exc.unlock_at else None,
        }
    if isinstance(exc, (SessionClosedError, DuplicateError, TimerStateError)):
        return 409, str(exc)
    if isinstance(exc, ReaderDisabledError):
        return 403, str(exc)
    if isinstance(exc, ConfigurationError):
        return 503, str(exc)
    if isinstance(exc, StoreError):
        return 503, SAVE_FAILED_MESSAGE
    return 500, str(exc)


def register_error_handlers(app: FastAPI) -> None:
    """Translate StudyError raised by any route into a JSON error response."""

    @app.exception_handler(StudyError)
    def handle_study_error(request: Request, exc: StudyError):
        status, detail = status_and_detail(exc)
        if isinstance(exc, InvariantViolationError):
            logger.error("[api] invariant violation on %s %s: %s", request.method, request.url.path, exc)
        elif isinstance(exc, StoreError):
            logger.warning("[api] store failure on %s %s: %s", request.method, request.url.path, exc)
        elif status >= 500:
            logger.error("[api] %s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
        return JSONResponse(status_code=status, content={"detail": detail})
