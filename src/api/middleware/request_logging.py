"""Access logging with timing and slow request detection."""

import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from src.api.constants import MAX_USER_AGENT_LENGTH, UNKNOWN_CLIENT
from src.api.utils.client import get_client_ip
from src.core.config import LogConfig
from src.core.constants import MILLISECONDS_PER_SECOND


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log the start and outcome of each request.

    Requests slower than ``log_config.slow_request_threshold_ms`` are logged
    again at WARNING level. Paths listed in ``log_config.excluded_paths`` are
    passed through silently.

    Args:
        app: The ASGI application.
        log_config: Logging configuration.
    """

    def __init__(self, app: ASGIApp, *, log_config: LogConfig) -> None:
        super().__init__(app)
        self.log_config = log_config
        self.excluded_paths = frozenset(log_config.excluded_paths)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Process the request and log details.

        Args:
            request: The incoming request.
            call_next: The next middleware/endpoint.

        Returns:
            Response: The response from the application.

        Raises:
            Exception: Any exception raised by the application is re-raised
                after logging.
        """
        if request.url.path in self.excluded_paths:
            return await call_next(request)

        user_agent = request.headers.get("user-agent", "")[:MAX_USER_AGENT_LENGTH]
        with logger.contextualize(
            method=request.method,
            path=request.url.path,
            client_host=get_client_ip(request),
            user_agent=user_agent or UNKNOWN_CLIENT,
        ):
            logger.info("Request started")
            start_time = time.perf_counter()

            try:
                response = await call_next(request)
            except Exception as exc:
                logger.error(
                    "Request failed",
                    duration_ms=self._elapsed_ms(start_time),
                    error_type=type(exc).__name__,
                )
                raise

            duration_ms = self._elapsed_ms(start_time)
            logger.info(
                "Request completed",
                status_code=response.status_code,
                duration_ms=duration_ms,
            )
            if duration_ms > self.log_config.slow_request_threshold_ms:
                logger.warning(
                    "Slow request detected",
                    duration_ms=duration_ms,
                    threshold_ms=self.log_config.slow_request_threshold_ms,
                )
            return response

    @staticmethod
    def _elapsed_ms(start_time: float) -> float:
        return round((time.perf_counter() - start_time) * MILLISECONDS_PER_SECOND, 2)
