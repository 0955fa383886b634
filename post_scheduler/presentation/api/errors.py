"""Maps domain errors to HTTP responses for the scheduling API."""

import structlog
from fastapi import Request, status
from fastapi.responses import JSONResponse

from ...domain.exceptions import (
    AccountNotFound,
    CancelFailed,
    PersistenceError,
    QueueUnavailable,
    ScheduleConflict,
    ScheduleNotFound,
    ScheduleValidationError,
    SchedulingError,
)

logger = structlog.get_logger()

STATUS_BY_ERROR: list[tuple[type[SchedulingError], int]] = [
    (ScheduleValidationError, status.HTTP_422_UNPROCESSABLE_CONTENT),
    (ScheduleNotFound, status.HTTP_404_NOT_FOUND),
    (AccountNotFound, status.HTTP_404_NOT_FOUND),
    (ScheduleConflict, status.HTTP_409_CONFLICT),
    (QueueUnavailable, status.HTTP_503_SERVICE_UNAVAILABLE),
    (CancelFailed, status.HTTP_503_SERVICE_UNAVAILABLE),
    (PersistenceError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def status_for(error: SchedulingError) -> int:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def scheduling_error_handler(request: Request, exc: SchedulingError) -> JSONResponse:
    status_code = status_for(exc)
    log = logger.warning if status_code < 500 else logger.error
    log("Scheduling request failed", code=exc.code, status_code=status_code)
    return JSONResponse(
        status_code=status_code,
        content={"detail": {"code": exc.code, "message": exc.message}},
    )
