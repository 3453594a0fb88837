"""Span and request metrics middleware."""

import time

from fastapi import Request
from opentelemetry.trace import SpanKind
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from shortlinks.core.telemetry import get_meter, get_tracer

tracer = get_tracer("shortlinks.middleware")
meter = get_meter("shortlinks.middleware")

request_counter = meter.create_counter(
    name="shortlinks.http.requests",
    description="Number of HTTP requests",
    unit="1",
)

request_duration = meter.create_histogram(
    name="shortlinks.http.duration",
    description="Duration of HTTP requests",
    unit="ms",
)


class TracingMiddleware(BaseHTTPMiddleware):
    """Wrap each request in a server span and record count and duration."""

    async def dispatch(self, request: Request, call_next) -> Response:
        start_time = time.perf_counter()
        method = request.method
        path = request.url.path

        attributes = {
            "http.method": method,
            "http.path": path,
            "http.flavor": request.scope.get("http_version", ""),
            "http.host": request.headers.get("host", ""),
            "http.user_agent": request.headers.get("user-agent", ""),
        }
        with tracer.start_as_current_span(f"{method} {path}", attributes=attributes, kind=SpanKind.SERVER) as span:
            response = await call_next(request)
            span.set_attribute("http.status_code", response.status_code)

        attributes["http.status_code"] = response.status_code
        duration_ms = (time.perf_counter() - start_time) * 1000
        request_counter.add(1, attributes)
        request_duration.record(duration_ms, attributes)
        return response
