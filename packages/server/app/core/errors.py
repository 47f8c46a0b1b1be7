"""
HTTP mapping for scheduling errors.

Responses use the same envelope as the CSRF middleware:
{"error": {"code": ..., "message": ..., "status": ...}}
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.scheduling.errors import (
    InvalidScheduleParameters,
    PersistenceError,
    SchedulingError,
    UnsupportedFrequency,
)

log = structlog.get_logger()

STATUS_BY_ERROR: dict[type[SchedulingError], int] = {
    UnsupportedFrequency: 422,
    InvalidScheduleParameters: 422,
    PersistenceError: 503,
}


def error_response(status: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content={"error": {"code": code, "message": message, "status": status}},
    )


def status_for(exc: SchedulingError) -> int:
    for error_type, status in STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return status
    return 500


async def scheduling_error_handler(request: Request, exc: SchedulingError) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        log.error("request.scheduling_error", code=exc.code, error=str(exc))
        if isinstance(exc, PersistenceError):
            message = "Job storage is temporarily unavailable. Retry later."
        else:
            message = "Scheduling failed."
    else:
        log.info("request.scheduling_rejected", code=exc.code, error=str(exc))
        message = str(exc)
    return error_response(status, exc.code, message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SchedulingError, scheduling_error_handler)
