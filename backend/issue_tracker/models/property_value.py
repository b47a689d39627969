"""
Property value models - the value side of the EAV layout.

Design notes:
- value is always TEXT; number_value is a redundant numeric projection used
  only for numeric filtering/sorting and is set only for numeric types
- property_type is captured at write time and not migrated on type changes
- scalar properties have at most one PropertySingleValue per (issue, property)
- list properties have zero-or-more PropertyMultiValue rows ordered by position
"""

from __future__ import annotations

from sqlalchemy import Column, Float, ForeignKey, Index, String, Text, UniqueConstraint
from sqlmodel import Field

from issue_tracker.models.base import BaseTableModel

__all__ = ["PropertySingleValue", "PropertyMultiValue"]


class PropertySingleValue(BaseTableModel, table=True):
    """One value of a scalar property for one issue."""

    __tablename__ = "property_single_values"
    __table_args__ = (
        UniqueConstraint("issue_id", "property_id", name="uq_psv_issue_property"),
        Index("idx_psv_property_value", "property_id", "value"),
        Index("idx_psv_property_number", "property_id", "number_value"),
    )

    id: int | None = Field(default=None, primary_key=True)

    issue_id: str = Field(
        sa_column=Column(String(36), ForeignKey("issues.id"), nullable=False),
    )
    property_id: str = Field(
        sa_column=Column(String(64), ForeignKey("property_definitions.id"), nullable=False),
    )
    property_type: str = Field(
        sa_column=Column(String(50), nullable=False),
    )

    value: str | None = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
    )
    number_value: float | None = Field(
        default=None,
        sa_column=Column(Float, nullable=True),
    )


class PropertyMultiValue(BaseTableModel, table=True):
    """One element of a list property for one issue."""

    __tablename__ = "property_multi_values"
    __table_args__ = (
        UniqueConstraint(
            "issue_id", "property_id", "position",
            name="uq_pmv_issue_property_position"
        ),
        Index("idx_pmv_issue_property", "issue_id", "property_id"),
        Index("idx_pmv_property_value", "property_id", "value"),
    )

    id: int | None = Field(default=None, primary_key=True)

    issue_id: str = Field(
        sa_column=Column(String(36), ForeignKey("issues.id"), nullable=False),
    )
    property_id: str = Field(
        sa_column=Column(String(64), ForeignKey("property_definitions.id"), nullable=False),
    )
    property_type: str = Field(
        sa_column=Column(String(50), nullable=False),
    )

    value: str | None = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
    )
    number_value: float | None = Field(
        default=None,
        sa_column=Column(Float, nullable=True),
    )

    # Stable ordering and the unit of addressing for partial updates
    position: int = Field(default=0)
