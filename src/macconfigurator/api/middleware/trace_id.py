"""Trace ID propagation and request logging."""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from macconfigurator.logging_config import bind_request_context, clear_request_context

logger = logging.getLogger(__name__)


class TraceIdMiddleware(BaseHTTPMiddleware):
    """Reuse X-Trace-Id from the request or mint one; bind it to the log context."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        trace_id = request.headers.get("x-trace-id") or f"trc_{uuid.uuid4().hex[:16]}"
        request.state.trace_id = trace_id
        bind_request_context(trace_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
            logger.info(
                "[configurator] %s %s -> %d (%.1fms)",
                request.method,
                request.url.path,
                response.status_code,
                (time.perf_counter() - started) * 1000,
            )
            response.headers["X-Trace-Id"] = trace_id
            return response
        finally:
            clear_request_context()
