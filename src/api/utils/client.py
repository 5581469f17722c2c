"""Client identification from request metadata."""

from starlette.requests import Request

from src.api.constants import UNKNOWN_CLIENT
from src.core.config import get_settings


def get_client_ip(request: Request) -> str:
    """Best guess at the caller's IP address.

    Proxy headers are only trusted in production, where the service runs
    behind a load balancer that sets them.

    Args:
        request: The incoming request.

    Returns:
        str: The client IP address, or ``"unknown"``.
    """
    if get_settings().environment == "production":
        if forwarded_for := request.headers.get("x-forwarded-for"):
            return forwarded_for.split(",")[0].strip()
        if real_ip := request.headers.get("x-real-ip"):
            return real_ip.strip()

    if request.client:
        return request.client.host
    return UNKNOWN_CLIENT
