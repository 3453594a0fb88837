"""HTTP middleware for the short links application."""

from shortlinks.middleware.logging import REQUEST_ID_HEADER, RequestLoggingMiddleware
from shortlinks.middleware.tracing import TracingMiddleware

__all__ = ["REQUEST_ID_HEADER", "RequestLoggingMiddleware", "TracingMiddleware"]
