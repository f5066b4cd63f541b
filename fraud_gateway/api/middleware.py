"""
FastAPI middleware for the scoring API.

The request ID set here is what the engine writes into its analysis log
line, so an upstream payment service can pass its own ID and later find
the scoring decision for a transaction in our logs.
"""

import re
import time
import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from fraud_gateway.infrastructure.observability.metrics import request_duration_histogram

REQUEST_ID_HEADER = "X-Request-ID"

# Caller IDs end up in log records and response headers
VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")

# Health checks and scrapes would drown the scoring latency distribution
UNTIMED_PATHS = frozenset({"/health", "/metrics"})


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Reuse the payment service's request ID when it is well formed, otherwise mint one"""

    async def dispatch(self, request: Request, call_next):
        incoming = request.headers.get(REQUEST_ID_HEADER, "")
        request_id = incoming if VALID_REQUEST_ID.match(incoming) else str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Record latency of the analysis, profile and statistics endpoints"""

    async def dispatch(self, request: Request, call_next):
        if request.url.path in UNTIMED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()

        response = await call_next(request)

        # Route template, so transaction and user ids stay out of the labels
        route = request.scope.get("route")
        endpoint = getattr(route, "path", request.url.path)
        request_duration_histogram.labels(
            method=request.method,
            endpoint=endpoint,
            status=response.status_code,
        ).observe(time.perf_counter() - start_time)

        return response
