"""
PropertyDefinition model - defines issue attributes for the EAV pattern.

Design notes:
- ids are stable strings ("property0003") so system properties can be
  referenced from code and from saved filters/sorts
- type is a PropertyType tag; it selects the processors used for the property
- config holds type-specific options (select choices, max length, ...) and is
  decoded into a typed model by the service layer, never read raw by processors
- definitions are tombstoned, never hard-deleted while rows reference them
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, Boolean, Column, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field

from issue_tracker.models.base import BaseTableModel

__all__ = ["PropertyDefinition"]


class PropertyDefinition(BaseTableModel, table=True):
    """
    Defines a property that can be attached to issues.

    Part of the Entity-Attribute-Value (EAV) pattern:
    - Entity = Issue
    - Attribute = PropertyDefinition (this model)
    - Value = PropertySingleValue / PropertyMultiValue
    """

    __tablename__ = "property_definitions"
    __table_args__ = (
        Index("idx_property_definitions_type", "type"),
        Index("idx_property_definitions_display_order", "display_order"),
    )

    id: str = Field(
        sa_column=Column(String(64), primary_key=True),
        description="Stable property id (e.g., 'property0002')",
    )

    name: str = Field(
        sa_column=Column(String(255), nullable=False),
        max_length=255,
        description="Human-readable label (e.g., 'Status')",
    )
    description: str | None = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
    )

    # PropertyType tag - the key into the processor registries
    type: str = Field(
        sa_column=Column(String(50), nullable=False),
        description="Property type tag: text, select, miners, ...",
    )

    # Type-specific options, stored with camelCase keys
    config: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(
            JSON().with_variant(JSONB(), "postgresql"),
            nullable=False,
            server_default="{}",
        ),
    )

    readonly: bool = Field(
        default=False,
        sa_column=Column(Boolean, nullable=False, server_default="false"),
        description="Rejected by every mutation path when set",
    )
    nullable: bool = Field(
        default=True,
        sa_column=Column(Boolean, nullable=False, server_default="true"),
        description="Whether a null value may be stored",
    )

    display_order: int = Field(
        default=0,
        description="Order for UI display (lower = first)",
    )
