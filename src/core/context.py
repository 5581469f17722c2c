"""Request scoped context: correlation IDs and the authenticated user."""

import uuid
from contextvars import ContextVar

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)
_user_id_var: ContextVar[int | None] = ContextVar("user_id", default=None)


class RequestContext:
    """Async-safe storage for data that lives as long as one request.

    Values are kept in ``contextvars`` so concurrent requests served by the
    same event loop never see each other's state.
    """

    @staticmethod
    def set_correlation_id(correlation_id: str) -> None:
        """Set the correlation ID for the current context.

        Args:
            correlation_id: The correlation ID to store in the context.
        """
        _correlation_id_var.set(correlation_id)

    @staticmethod
    def get_correlation_id() -> str | None:
        """Get the correlation ID from the current context.

        Returns:
            str | None: The correlation ID if set, None otherwise.
        """
        return _correlation_id_var.get()

    @staticmethod
    def set_user_id(user_id: int) -> None:
        """Remember which user the current request is authenticated as."""
        _user_id_var.set(user_id)

    @staticmethod
    def get_user_id() -> int | None:
        """Return the authenticated user's id, if any."""
        return _user_id_var.get()

    @staticmethod
    def clear() -> None:
        """Reset every context variable to its default."""
        _correlation_id_var.set(None)
        _user_id_var.set(None)


def generate_correlation_id() -> str:
    """Generate a unique correlation ID for request tracking.

    Returns:
        str: A string representation of a UUID4.

    Examples:
        >>> len(generate_correlation_id())
        36
    """
    return str(uuid.uuid4())


def generate_request_id() -> str:
    """Generate a unique request ID for individual request tracking.

    Request IDs are unique per request, while correlation IDs can span
    multiple services.

    Returns:
        str: A prefixed UUID4 string in format 'req-<uuid4>'.
    """
    return f"req-{uuid.uuid4()}"
