"""Correlation ID middleware for request tracing."""

import re
import uuid

from fastapi import Request
from shared_models import clear_context, set_correlation_id, set_thread_id
from starlette.middleware.base import BaseHTTPMiddleware

CORRELATION_ID_HEADER = "X-Correlation-ID"
THREAD_PATH_PATTERN = re.compile(r"^/api/threads/([^/]+)")


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    Middleware that extracts or generates correlation_id for each request.

    The correlation_id is:
    1. Taken from X-Correlation-ID header if present
    2. Generated as UUID if not present
    3. Added to response headers
    4. Set in context for logging

    Requests addressed to a thread also carry its thread_id into the log
    context. Routing has not run yet, so it is read from the raw path.
    """

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get(CORRELATION_ID_HEADER)
        if not correlation_id:
            correlation_id = str(uuid.uuid4())

        set_correlation_id(correlation_id)

        match = THREAD_PATH_PATTERN.match(request.url.path)
        if match:
            set_thread_id(match.group(1))

        try:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = correlation_id
            return response
        finally:
            clear_context()
