"""Error response schema shared by every exception handler.

Whatever goes wrong while a request is dispatched (a controller raising, a
route that does not exist, a malformed body), clients receive an
``ErrorResponse`` with a machine-readable code, a message and the
correlation data needed to find the matching log lines.
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field


class ServiceInfo(BaseModel):
    """Identifies the service instance that produced an error."""

    name: str = Field(..., description="Name of the service", examples=["Waypost"])

    version: str = Field(..., description="Version of the service", examples=["0.1.0"])

    environment: str = Field(
        ...,
        description="Environment where the service is running",
        examples=["development", "staging", "production"],
    )


class ErrorResponse(BaseModel):
    """Body of every error response."""

    error_code: str = Field(
        ...,
        description="Machine-readable error code",
        examples=["VALIDATION_ERROR", "NOT_FOUND", "METHOD_NOT_ALLOWED"],
    )

    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Malformed JSON body", "Animal 42 not found"],
    )

    details: dict[str, Any] | None = Field(
        default=None,
        description="Additional, sanitized error details",
        examples=[{"allowed_methods": ["GET", "PUT"]}],
    )

    correlation_id: str | None = Field(
        default=None,
        description="Correlation ID of the failed request",
        examples=["550e8400-e29b-41d4-a716-446655440000"],
    )

    request_id: str | None = Field(
        default=None,
        description="Identifier unique to this request",
        examples=["req-550e8400-e29b-41d4-a716-446655440000"],
    )

    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When the error occurred (timezone aware)",
        examples=["2026-10-17T12:00:00+00:00"],
    )

    severity: str | None = Field(
        default=None,
        description="Severity of the error (LOW, MEDIUM, HIGH, CRITICAL)",
        examples=["LOW", "CRITICAL"],
    )

    service_info: ServiceInfo | None = Field(
        default=None,
        description="The service that generated the error",
    )

    debug_info: dict[str, Any] | None = Field(
        default=None,
        description="Exception type and stack trace, development only",
        examples=[
            {
                "exception_type": "ZeroDivisionError",
                "stack_trace": ["Traceback (most recent call last):", "..."],
            }
        ],
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "error_code": "VALIDATION_ERROR",
                    "message": "Malformed JSON body",
                    "correlation_id": "550e8400-e29b-41d4-a716-446655440000",
                    "request_id": "req-660e8400-e29b-41d4-a716-446655440000",
                    "timestamp": "2026-10-17T12:00:00+00:00",
                    "severity": "LOW",
                },
                {
                    "error_code": "METHOD_NOT_ALLOWED",
                    "message": "Method Not Allowed",
                    "details": {"allowed_methods": ["GET", "PUT"]},
                    "timestamp": "2026-10-17T12:00:01+00:00",
                    "severity": "LOW",
                    "service_info": {
                        "name": "Waypost",
                        "version": "0.1.0",
                        "environment": "production",
                    },
                },
            ]
        }
    }
