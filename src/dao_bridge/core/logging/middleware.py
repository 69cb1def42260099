# dao_bridge/core/logging/middleware.py
"""
Correlation id middleware for FastAPI / Starlette hosts.

Each request runs with a correlation id in the contextvar read by
CorrelationIdFilter, so translator and accessor log lines emitted while
serving it can be grouped. An incoming `X-Correlation-ID` header is reused
when it is a UUID; otherwise a fresh UUID4 is generated. The id is echoed
back in the response header.

    app.add_middleware(CorrelationIdMiddleware)
"""

import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from .filters import set_correlation_id, reset_correlation_id

HEADER = "X-Correlation-ID"


def _incoming_or_new(value: str | None) -> str:
    if value:
        try:
            # clients may only supply UUIDs
            return str(uuid.UUID(value))
        except ValueError:
            pass
    return str(uuid.uuid4())


class CorrelationIdMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next):
        cid = _incoming_or_new(request.headers.get(HEADER))
        token = set_correlation_id(cid)
        try:
            response = await call_next(request)
            response.headers[HEADER] = cid
            return response
        finally:
            reset_correlation_id(token)
