"""Application exception hierarchy.

Every error the API reports deliberately is a ``BudgetForgeError``. Each one
carries:

- an ``ErrorCode`` that clients can switch on,
- a ``Severity`` that decides how loudly it is logged,
- optional structured ``context`` rendered as response details,
- a fingerprint that groups occurrences raised from the same place.

Subclasses map one to one onto HTTP status codes in
``src.api.middleware.error_handler``.
"""

import hashlib
import traceback
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes returned to API clients."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred in the system."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    """Input validation failed due to invalid or malformed data."""

    NOT_FOUND = "NOT_FOUND"
    """The requested resource could not be found."""

    UNAUTHORIZED = "UNAUTHORIZED"
    """Authentication failed or the credentials are no longer valid."""

    CONFLICT = "CONFLICT"
    """The request collides with existing state (duplicate resource)."""

    BUSINESS_RULE_VIOLATION = "BUSINESS_RULE_VIOLATION"
    """The request is well formed but breaks a domain rule."""

    CACHE_UNAVAILABLE = "CACHE_UNAVAILABLE"
    """The cache backend could not be reached."""


class Severity(Enum):
    """How much attention an error deserves in logs and alerts."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class BudgetForgeError(Exception):
    """Base exception class for all application exceptions.

    Args:
        error_code: Unique identifier for the error type (string or ErrorCode enum)
        message: Human-readable error message
        severity: Severity level of the error (defaults to MEDIUM)
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        error_code: str | ErrorCode,
        message: str,
        severity: Severity = Severity.MEDIUM,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.error_code = (
            error_code.value if isinstance(error_code, ErrorCode) else error_code
        )
        self.message = message
        self.severity = severity
        self.context = context or {}
        self.cause = cause
        self.stack_trace = traceback.format_stack()[:-1]
        self.fingerprint = self._generate_fingerprint()

        super().__init__(message)
        if cause:
            self.__cause__ = cause

    def _generate_fingerprint(self) -> str:
        """Hash the error type and the raising application frames.

        Returns:
            str: A 16 character hex digest used to group identical errors.
        """
        max_frames = 5
        fingerprint_data = f"{self.__class__.__name__}:{self.error_code}"
        for frame in self.stack_trace[-max_frames:]:
            if "site-packages" not in frame and "src/" in frame:
                fingerprint_data += f":{frame.strip().splitlines()[0]}"
        return hashlib.sha256(fingerprint_data.encode()).hexdigest()[:16]

    @property
    def is_expected(self) -> bool:
        """Whether the error is part of normal operation (LOW or MEDIUM)."""
        return self.severity in (Severity.LOW, Severity.MEDIUM)

    @property
    def should_alert(self) -> bool:
        """Whether the error warrants an alert (HIGH or CRITICAL)."""
        return self.severity in (Severity.HIGH, Severity.CRITICAL)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        context_str = f", context={self.context}" if self.context else ""
        return (
            f"{self.__class__.__name__}(error_code='{self.error_code}', "
            f"message='{self.message}', severity={self.severity.value}{context_str})"
        )


class ValidationError(BudgetForgeError):
    """Raised when input does not meet format or range requirements.

    Args:
        message: Description of the validation failure
        error_code: Error code (defaults to VALIDATION_ERROR)
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.VALIDATION_ERROR,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.LOW, context, cause)


class NotFoundError(BudgetForgeError):
    """Raised when a resource does not exist or is not visible to the caller.

    Resources owned by another user are reported as missing so their
    existence is not disclosed.
    """

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.NOT_FOUND,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.LOW, context, cause)


class UnauthorizedError(BudgetForgeError):
    """Raised when credentials are missing, wrong, expired or revoked."""

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.UNAUTHORIZED,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.MEDIUM, context, cause)


class ConflictError(BudgetForgeError):
    """Raised when creating something that already exists."""

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.CONFLICT,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.LOW, context, cause)


class BusinessRuleError(BudgetForgeError):
    """Raised when an operation violates a domain rule.

    Args:
        message: Description of the business rule violation
        error_code: Error code (defaults to BUSINESS_RULE_VIOLATION)
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.BUSINESS_RULE_VIOLATION,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.MEDIUM, context, cause)


class CacheUnavailableError(BudgetForgeError):
    """Raised when the cache backend cannot serve a request."""

    def __init__(
        self,
        message: str = "Cache backend is unavailable",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            ErrorCode.CACHE_UNAVAILABLE, message, Severity.HIGH, context, cause
        )
