"""
Request logging middleware for FastAPI using Loguru.

Every request gets an ``X-Request-ID`` header and one log line at the
custom ``REQUEST`` level with method, path, status and duration. Records
logged while the request is handled carry ``request_id`` in their extra.
"""

import time
import uuid

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from shortlinks.core.logging import REQUEST_LEVEL, register_request_level

REQUEST_ID_HEADER = "X-Request-ID"


def client_ip(request: Request) -> str:
    """Best-effort client address, honouring the first X-Forwarded-For hop."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return request.client.host if request.client else "unknown"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request and tag the response with its request id."""

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        register_request_level()

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        start_time = time.perf_counter()

        with logger.contextualize(request_id=request_id):
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            process_time_ms = round((time.perf_counter() - start_time) * 1000, 2)

            logger.log(
                REQUEST_LEVEL,
                "{method} {path} {status_code} {process_time_ms}ms",
                client_ip=client_ip(request),
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                process_time_ms=process_time_ms,
            )
        return response
