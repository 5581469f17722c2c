"""Correlation and request ID propagation.

The correlation ID is taken from the ``X-Correlation-ID`` header when the
caller supplies one, so a chain of services shares it. The request ID is
always unique to this request. Both are stored in ``RequestContext``, bound
to every log line emitted while the request is processed and echoed back in
the response headers.
"""

from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.api.constants import CORRELATION_ID_HEADER, REQUEST_ID_HEADER
from src.core.context import (
    RequestContext,
    generate_correlation_id,
    generate_request_id,
)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Attach correlation and request IDs to the request and its logs."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Process the request with context management.

        Args:
            request: The incoming request.
            call_next: The next middleware/endpoint.

        Returns:
            Response: Response with correlation and request ID headers.
        """
        RequestContext.clear()
        correlation_id = (
            request.headers.get(CORRELATION_ID_HEADER) or generate_correlation_id()
        )
        request_id = generate_request_id()
        RequestContext.set_correlation_id(correlation_id)
        request.state.request_id = request_id

        with logger.contextualize(correlation_id=correlation_id, request_id=request_id):
            response = await call_next(request)

        response.headers[CORRELATION_ID_HEADER] = correlation_id
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
