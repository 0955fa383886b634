"""
Correlation ID middleware.

API calls carry X-Request-ID or X-Correlation-ID. QStash callbacks carry
Upstash-Message-Id, so every log line of a delivery joins the line that
registered the job. Missing or malformed ids are replaced by a uuid4.
"""

import re
from uuid import uuid4

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from ...infrastructure.logging import Timer, set_correlation_id

logger = structlog.get_logger()

CORRELATION_HEADERS = ("X-Request-ID", "X-Correlation-ID", "Upstash-Message-Id")
_VALID_ID = re.compile(r"^[A-Za-z0-9_.:\-]{1,128}$")


def extract_correlation_id(request: Request) -> str:
    for header in CORRELATION_HEADERS:
        value = request.headers.get(header)
        if value and _VALID_ID.match(value):
            return value
    return str(uuid4())


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Binds a correlation ID to every log line of a request and echoes it back."""

    async def dispatch(self, request: Request, call_next) -> Response:
        cid = extract_correlation_id(request)
        set_correlation_id(cid)

        with structlog.contextvars.bound_contextvars(
            correlation_id=cid,
            method=request.method,
            path=request.url.path,
        ):
            logger.info(
                "Request started",
                client_ip=request.client.host if request.client else None,
            )
            with Timer() as t:
                response = await call_next(request)
            logger.info(
                "Request completed",
                status_code=response.status_code,
                duration_ms=t.duration_ms,
            )

        response.headers["X-Request-ID"] = cid
        response.headers["X-Correlation-ID"] = cid
        return response
