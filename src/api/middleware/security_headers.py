"""Security headers added to every response."""

from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from src.api.constants import DEFAULT_HSTS_MAX_AGE

_STATIC_HEADERS: dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    # Responses carry account data and tokens
    "Cache-Control": "no-store",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add hardening headers, plus HSTS when enabled.

    Args:
        app: The ASGI application to wrap.
        hsts_enabled: Whether to include HSTS header (defaults to True).
        hsts_max_age: Max age for HSTS in seconds (defaults to 1 year).
        hsts_include_subdomains: Whether to include subdomains in HSTS.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        hsts_enabled: bool = True,
        hsts_max_age: int = DEFAULT_HSTS_MAX_AGE,
        hsts_include_subdomains: bool = True,
    ) -> None:
        super().__init__(app)
        self.hsts_value: str | None = None
        if hsts_enabled:
            self.hsts_value = f"max-age={hsts_max_age}"
            if hsts_include_subdomains:
                self.hsts_value += "; includeSubDomains"

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        response = await call_next(request)
        for header, value in _STATIC_HEADERS.items():
            response.headers.setdefault(header, value)
        if self.hsts_value:
            response.headers["Strict-Transport-Security"] = self.hsts_value
        return response
