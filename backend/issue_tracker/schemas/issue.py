"""
Issue request/response schemas.

Patterns:
- IssueCreate / IssueBatchCreate: POST request body
- CreateIssueInput: service-level input (body + caller's workspace)
- PropertyOperation / IssueUpdate: PATCH request body
- CreateIssueResult / UpdateIssueResult: per-call outcome with human-readable errors
- IssueRead / IssueListResult: hydrated issues
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, computed_field

from issue_tracker.schemas.enums import PropertyOperationType

__all__ = [
    "IssueCreate",
    "IssueBatchCreate",
    "CreateIssueInput",
    "CreateIssueResult",
    "PropertyOperation",
    "IssueUpdate",
    "UpdateIssueResult",
    "PropertyValue",
    "IssueRead",
    "IssueListResult",
]


# =============================================================================
# Creation
# =============================================================================


class IssueCreate(BaseModel):
    """Property values for one new issue, keyed by property id."""

    property_values: dict[str, Any] = Field(
        default_factory=dict,
        description="Raw values keyed by property id (e.g., {'property0002': 'Fan failure'})",
    )


class IssueBatchCreate(BaseModel):
    """Schema for creating several issues at once."""

    issues: list[IssueCreate] = Field(min_length=1, max_length=100)


class CreateIssueInput(IssueCreate):
    """One issue to create, scoped to the caller's workspace."""

    workspace_id: str = Field(min_length=1, max_length=255)


class CreateIssueResult(BaseModel):
    """Outcome for one issue of a creation batch."""

    success: bool
    issue_id: str | None = Field(default=None, description="Opaque issue key")
    sequence_id: int | None = Field(default=None, description="Human-facing issue number")
    errors: list[str] = Field(default_factory=list)


# =============================================================================
# Mutation
# =============================================================================


class PropertyOperation(BaseModel):
    """
    One mutation of one property.

    Payload shapes:
    - set / add: {"value": ...}
    - update: {"values": [...]}
    - remove: {}
    """

    property_id: str = Field(min_length=1)
    operation_type: PropertyOperationType
    operation_payload: dict[str, Any] = Field(default_factory=dict)


class IssueUpdate(BaseModel):
    """Schema for PATCH /issues/{id}. Operations apply in order."""

    operations: list[PropertyOperation] = Field(default_factory=list)


class UpdateIssueResult(BaseModel):
    """Outcome of a multi-operation update."""

    success: bool
    issue_id: str | None = None
    errors: list[str] = Field(default_factory=list)


# =============================================================================
# Read
# =============================================================================


class PropertyValue(BaseModel):
    """A property's value: a string (or null) for scalars, a list for list types."""

    property_id: str
    value: str | list[str] | None = None


class IssueRead(BaseModel):
    """An issue with every stored property value."""

    issue_id: str
    property_values: list[PropertyValue] = Field(default_factory=list)

    def get_value(self, property_id: str) -> str | list[str] | None:
        """Value of one property, None when absent."""
        for property_value in self.property_values:
            if property_value.property_id == property_id:
                return property_value.value
        return None


class IssueListResult(BaseModel):
    """One page of issues plus the total across all pages."""

    issues: list[IssueRead]
    total: int = Field(description="Total number of matching issues")
    page: int = Field(description="Current page number")
    page_size: int = Field(description="Items per page")

    @computed_field
    @property
    def pages(self) -> int:
        """Total number of pages, serialized alongside the page."""
        if self.total == 0:
            return 0
        return (self.total + self.page_size - 1) // self.page_size
