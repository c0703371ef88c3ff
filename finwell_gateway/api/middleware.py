"""Request context middleware: correlation id and latency metric"""

import uuid
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from finwell_gateway.infrastructure.observability.logging import request_id_var
from finwell_gateway.infrastructure.observability.metrics import request_duration_histogram

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Per-request bookkeeping.

    Reuses the caller's X-Request-ID (or mints one), exposes it on
    request.state and to log records, echoes it on the response, and
    observes latency labelled by route template so ids never become
    label values.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        route = request.scope.get("route")
        request_duration_histogram.labels(
            method=request.method,
            endpoint=getattr(route, "path", "unmatched"),
            status=response.status_code,
        ).observe(time.perf_counter() - start_time)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
