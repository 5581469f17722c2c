"""Error body shared by every failing response."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field


class ServiceInfo(BaseModel):
    """Identifies the service instance that produced the error."""

    name: str = Field(..., description="Name of the service", examples=["BudgetForge"])
    version: str = Field(..., description="Version of the service", examples=["1.0.0"])
    environment: str = Field(
        ...,
        description="Environment where the service is running",
        examples=["development", "staging", "production"],
    )


class ErrorResponse(BaseModel):
    """Standardized error response model for API errors."""

    error_code: str = Field(
        ...,
        description="Machine readable error code",
        examples=["VALIDATION_ERROR", "NOT_FOUND", "UNAUTHORIZED", "CONFLICT"],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Account 42 not found", "Invalid email or password"],
    )
    details: dict[str, Any] | None = Field(
        default=None,
        description="Structured details such as field-level validation errors",
        examples=[
            {"validation_errors": {"amount": ["Input should be greater than 0"]}}
        ],
    )
    correlation_id: str | None = Field(
        default=None,
        description="Correlation ID propagated from or returned in X-Correlation-ID",
        examples=["550e8400-e29b-41d4-a716-446655440000"],
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When the error occurred (UTC)",
    )
    severity: str | None = Field(
        default=None,
        description="Error severity (LOW, MEDIUM, HIGH, CRITICAL)",
        examples=["LOW"],
    )
    service_info: ServiceInfo | None = Field(default=None)
    request_id: str | None = Field(
        default=None,
        description="Identifier of this single request",
        examples=["req-660e8400-e29b-41d4-a716-446655440000"],
    )
    debug_info: dict[str, Any] | None = Field(
        default=None,
        description="Exception type and stack trace, development only",
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "error_code": "NOT_FOUND",
                    "message": "Bill not found",
                    "details": {"bill_id": "0b7f9a52-3c59-4c1e-9a43-8d1f1f0e6c2a"},
                    "correlation_id": "550e8400-e29b-41d4-a716-446655440001",
                    "request_id": "req-660e8400-e29b-41d4-a716-446655440001",
                    "timestamp": "2025-03-01T12:00:00+00:00",
                    "severity": "LOW",
                    "service_info": {
                        "name": "BudgetForge",
                        "version": "1.0.0",
                        "environment": "production",
                    },
                },
            ]
        }
    }
