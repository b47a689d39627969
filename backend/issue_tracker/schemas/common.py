"""
Common Pydantic schemas shared across the application.

Provides:
- Pagination request params
- Error response schema
- Health check schema
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "PaginationParams",
    "ErrorResponse",
    "HealthResponse",
]


class PaginationParams(BaseModel):
    """Query parameters for paginated endpoints."""

    page: int = Field(default=1, ge=1, description="Page number (1-indexed)")
    page_size: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Items per page (max 100)",
    )

class ErrorResponse(BaseModel):
    """Standard error response format."""

    success: bool = Field(default=False)
    errors: list[str] = Field(description="Human-readable error messages")

    model_config = ConfigDict(
        json_schema_extra={"example": {"success": False, "errors": ["Issue not found"]}}
    )


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Health status")
    database: str = Field(default="ok", description="Database connectivity")
    app: str = Field(description="Application name")
    version: str | None = Field(default=None, description="Application version")
