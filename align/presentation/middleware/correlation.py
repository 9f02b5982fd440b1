"""Correlation ID middleware for request tracing"""
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from align.shared.context import correlation_id_var

CORRELATION_HEADER = "X-Correlation-ID"


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """
    Tag every request with a correlation ID.

    Accepts X-Correlation-ID from the client (bounded length) or generates
    one, stores it for the rest of the request and echoes it on the response.
    Log records pick it up through RequestContextFilter.
    """

    max_length = 128

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get(CORRELATION_HEADER, "")[: self.max_length]
        if not correlation_id:
            correlation_id = str(uuid.uuid4())

        token = correlation_id_var.set(correlation_id)
        try:
            response = await call_next(request)
        finally:
            correlation_id_var.reset(token)

        response.headers[CORRELATION_HEADER] = correlation_id
        return response
