"""Request context, access logging and request metrics middleware."""

import logging
import re
import time
import uuid
from typing import Callable, Optional

import structlog
from fastapi import FastAPI, Request, Response
from opentelemetry import trace
from starlette.middleware.base import BaseHTTPMiddleware

from .exceptions import generic_exception_handler
from .observability import metrics_collector

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# W3C trace context, version 00 only
_TRACEPARENT = re.compile(r"^00-([0-9a-f]{32})-([0-9a-f]{16})-([0-9a-f]{2})$")


def parse_traceparent(value: Optional[str]) -> Optional[tuple[str, str, str]]:
    """Return ``(trace_id, parent_id, flags)`` for a valid traceparent header."""
    match = _TRACEPARENT.match(value or "")
    if not match:
        return None
    trace_id, parent_id, flags = match.groups()
    if trace_id == "0" * 32 or parent_id == "0" * 16:
        return None
    return trace_id, parent_id, flags


def _current_trace(request: Request) -> tuple[str, str, str]:
    span_context = trace.get_current_span().get_span_context()
    if span_context.is_valid:
        return (
            format(span_context.trace_id, "032x"),
            format(span_context.span_id, "016x"),
            format(span_context.trace_flags, "02x"),
        )

    incoming = parse_traceparent(request.headers.get("traceparent"))
    trace_id = incoming[0] if incoming else uuid.uuid4().hex
    flags = incoming[2] if incoming else "01"
    return trace_id, uuid.uuid4().hex[:16], flags


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Give every request an id and a trace context.

    The request id comes from ``X-Request-ID`` or is generated; the trace
    context comes from the active OpenTelemetry span, falling back to the
    incoming ``traceparent`` header. Both are bound into the structlog
    context and echoed on the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        trace_id, span_id, flags = _current_trace(request)

        request.state.request_id = request_id
        request.state.trace_id = trace_id

        structlog.contextvars.bind_contextvars(request_id=request_id, trace_id=trace_id)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id", "trace_id")

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["traceparent"] = f"00-{trace_id}-{span_id}-{flags}"
        tracestate = request.headers.get("tracestate")
        if tracestate:
            response.headers["tracestate"] = tracestate
        return response


class AccessLogMiddleware(BaseHTTPMiddleware):
    """
    Log each request and record its count and latency.

    Bodies are never logged because payment submissions carry card numbers.
    Probe and scrape endpoints are skipped.
    """

    SKIP_PATHS = frozenset({"/health", "/ready", "/metrics", "/favicon.ico"})

    @staticmethod
    def _client_ip(request: Request) -> str:
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()
        return request.client.host if request.client else "unknown"

    @staticmethod
    def _route_label(request: Request) -> str:
        # Route templates keep label cardinality bounded
        route = request.scope.get("route")
        return getattr(route, "path", None) or "unmatched"

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.SKIP_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        request_id = getattr(request.state, "request_id", "unknown")
        log_data = {
            "request_id": request_id,
            "trace_id": getattr(request.state, "trace_id", "unknown"),
            "method": request.method,
            "path": request.url.path,
            "client_ip": self._client_ip(request),
        }

        try:
            response = await call_next(request)
        except Exception as e:
            # No handler below this layer caught it
            response = await generic_exception_handler(request, e)

        duration = time.perf_counter() - started
        metrics_collector.record_request(request.method, self._route_label(request), response.status_code, duration)

        log_data.update(status_code=response.status_code, duration_ms=round(duration * 1000, 2))
        if response.status_code >= 500:
            logger.error("Request failed", extra=log_data)
        elif response.status_code >= 400:
            logger.warning("Request rejected", extra=log_data)
        else:
            logger.info("Request completed", extra=log_data)

        return response


def setup_middleware(app: FastAPI, enable_access_log: bool = True) -> None:
    """Install request middleware; the last one added runs first."""
    if enable_access_log:
        app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestContextMiddleware)
