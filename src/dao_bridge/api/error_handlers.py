# dao_bridge/api/error_handlers.py
"""
FastAPI exception handlers for hosts that serve translated errors over HTTP.

    from fastapi import FastAPI
    from dao_bridge.api.error_handlers import register_exception_handlers

    app = FastAPI()
    register_exception_handlers(app)

Status and payload come from the exception classes (`http_status()`,
`to_payload()`). Client errors (4xx) return the payload as-is. Server-side
failures (5xx) return only the error code: their messages carry driver text
and SQL, which stay in the logs.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
import logging

from dao_bridge.exceptions.base import DataAccessError, DuplicateKeyError, DataIntegrityViolationError

logger = logging.getLogger(__name__)

GENERIC_DETAIL = "Data access failure"


async def integrity_error_handler(request: Request, exc: DataIntegrityViolationError) -> JSONResponse:
    """
    409 for duplicates, 422 for other integrity violations.
    Payload: {"detail": "...", "code": "duplicate", "fields": [...]}
    """
    logger.info(
        "http.integrity_violation",
        extra={"method": request.method, "path": request.url.path, "error_code": exc.error_code, "fields": exc.fields},
    )
    return JSONResponse(status_code=exc.http_status(), content=exc.to_payload())


async def data_access_error_handler(request: Request, exc: DataAccessError) -> JSONResponse:
    status = exc.http_status()
    if status < 500:
        logger.info("http.data_access_error", extra={"path": request.url.path, "error_code": exc.error_code})
        return JSONResponse(status_code=status, content=exc.to_payload())

    logger.error(
        "http.data_access_failure",
        extra={"method": request.method, "path": request.url.path, "error_code": exc.error_code},
        exc_info=exc,
    )
    return JSONResponse(status_code=status, content={"detail": GENERIC_DETAIL, "code": exc.error_code})


def register_exception_handlers(app) -> None:
    # Starlette picks the handler of the closest class in the MRO
    app.add_exception_handler(DuplicateKeyError, integrity_error_handler)
    app.add_exception_handler(DataIntegrityViolationError, integrity_error_handler)
    app.add_exception_handler(DataAccessError, data_access_error_handler)


__all__ = ["register_exception_handlers", "integrity_error_handler", "data_access_error_handler"]
