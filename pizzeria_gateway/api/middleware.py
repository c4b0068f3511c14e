"""Request tracing and latency metrics for the storefront API"""

import re
import time
import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from pizzeria_gateway.infrastructure.observability.metrics import request_duration_histogram

REQUEST_ID_HEADER = "X-Request-ID"

# Caller ids end up in JSON logs; anything else is replaced
_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")

UNMATCHED_ROUTE = "unmatched"


def resolve_request_id(incoming: str | None) -> str:
    """Reuse the caller's id (checkout frontend, proxy) when well-formed, else mint one"""
    if incoming and _SAFE_REQUEST_ID.match(incoming):
        return incoming
    return str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Observe request latency per route template.

    /v1/store/closures/{closure_id} is one series regardless of the id;
    paths that match no route share the "unmatched" label.
    """

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)

        route = request.scope.get("route")
        request_duration_histogram.labels(
            method=request.method,
            endpoint=getattr(route, "path", UNMATCHED_ROUTE),
            status=response.status_code,
        ).observe(time.perf_counter() - started)

        return response
