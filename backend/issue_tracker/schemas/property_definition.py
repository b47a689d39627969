"""
PropertyDefinition request/response schemas.

Patterns:
- PropertyDefinitionCreate: POST request body
- PropertyDefinitionRead: Response body, and the decoded form handed to
  processors (config is already a typed model, never a raw dict)
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_serializer, model_validator

from issue_tracker.models.property_definition import PropertyDefinition
from issue_tracker.schemas.enums import PropertyType
from issue_tracker.schemas.property_config import (
    EmptyConfig,
    PropertyConfig,
    dump_property_config,
    parse_property_config,
)

__all__ = [
    "PropertyDefinitionCreate",
    "PropertyDefinitionRead",
]


class PropertyDefinitionCreate(BaseModel):
    """Schema for creating a new property definition."""

    id: str = Field(
        min_length=1,
        max_length=64,
        pattern=r"^[A-Za-z][A-Za-z0-9_]*$",
        description="Stable property id (e.g., 'property0100')",
    )
    name: str = Field(
        min_length=1,
        max_length=255,
        description="Human-readable label (e.g., 'Severity')",
    )
    description: str | None = Field(
        default=None,
        description="Explanation of what this property represents",
    )
    type: PropertyType = Field(description="Property type tag")
    config: dict[str, Any] = Field(
        default_factory=dict,
        description="Type-specific options (camelCase keys)",
    )
    readonly: bool = Field(default=False)
    nullable: bool = Field(default=True)
    display_order: int = Field(
        default=0,
        ge=0,
        description="Order for display (lower = first)",
    )

    @model_validator(mode="after")
    def normalize_config(self) -> PropertyDefinitionCreate:
        """Reject config that does not match the property type."""
        try:
            config = parse_property_config(self.type, self.config)
        except ValidationError as e:
            raise ValueError(f"Invalid config for {self.type} property: {e}") from e
        self.config = dump_property_config(config)
        return self


class PropertyDefinitionRead(BaseModel):
    """A property definition with its config decoded."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Stable property id")
    name: str = Field(description="Human-readable label")
    description: str | None = Field(default=None, description="Property description")
    type: PropertyType = Field(description="Property type tag")
    config: PropertyConfig = Field(default_factory=EmptyConfig, description="Decoded config")
    readonly: bool = Field(default=False, description="Rejected by every mutation")
    nullable: bool = Field(default=True, description="Whether null may be stored")
    display_order: int = Field(default=0, description="Display order")

    @model_validator(mode="before")
    @classmethod
    def decode_config(cls, data: Any) -> Any:
        """Decode a raw config with the model of the definition's type, not by union matching."""
        if isinstance(data, dict) and "type" in data and not isinstance(data.get("config"), BaseModel):
            data = {**data, "config": parse_property_config(data["type"], data.get("config"))}
        return data

    @field_serializer("config")
    def serialize_config(self, config: PropertyConfig) -> dict[str, Any]:
        return dump_property_config(config)

    @classmethod
    def from_model(cls, definition: PropertyDefinition) -> PropertyDefinitionRead:
        """Build from a table row, decoding config for the row's type."""
        return cls(
            id=definition.id,
            name=definition.name,
            description=definition.description,
            type=PropertyType(definition.type),
            config=parse_property_config(definition.type, definition.config),
            readonly=definition.readonly,
            nullable=definition.nullable,
            display_order=definition.display_order,
        )
