"""
Wonder Journal Backend — Shared Schema Base and Error/Health Models
=====================================================================

What:  `CamelModel`, the base for every API schema, plus the error envelope
       and health check response.
How:   `alias_generator=to_camel` serializes `first_name` as `firstName`;
       `populate_by_name=True` lets services build models with snake_case
       keyword arguments; `from_attributes=True` accepts ORM rows.
"""

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model: camelCase aliases on the wire, snake_case attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class StrictCamelModel(CamelModel):
    """Request body base: unknown fields are rejected with 400."""

    model_config = ConfigDict(extra="forbid")


# ══════════════════════════════════════════════════════════════════════════
# Error Response Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorDetail(BaseModel):
    """
    Fields:
        message: Human-readable description, or one entry per invalid field
        status:  HTTP status code, repeated for clients that only see the body
    """
    message: Union[str, List[str]] = Field(description="Error message(s)")
    status: int = Field(description="HTTP status code")


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": {"message": "No moment: 42", "status": 404},
            "request_id": "a1b2c3d4"
        }
    """
    error: ErrorDetail
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and database status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
