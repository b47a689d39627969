"""
Typed Pydantic models for the property_definitions.config JSON column.

These models define the expected structure of config per property type.
Using typed schemas instead of raw dicts prevents data structure drift:
config is decoded once when a definition is loaded and processors only ever
see the typed model.

Keys are stored camelCase (maxLength, maxSelect, ...) and accepted in either
spelling on input.

Usage in service layer:
    # Validate config before saving
    config = parse_property_config(PropertyType.SELECT, raw_config_dict)
    definition.config = dump_property_config(config)

    # Parse config from DB
    config = parse_property_config(definition.type, definition.config)
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from issue_tracker.schemas.enums import PropertyType
from issue_tracker.schemas.validators import parse_json_field

__all__ = [
    "PropertyConfigBase",
    "EmptyConfig",
    "TextConfig",
    "RichTextConfig",
    "SelectOption",
    "SelectConfig",
    "MultiSelectConfig",
    "MinersConfig",
    "NumberConfig",
    "PropertyConfig",
    "CONFIG_MODELS",
    "parse_property_config",
    "dump_property_config",
]


class PropertyConfigBase(BaseModel):
    """Shared settings: camelCase aliases, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class EmptyConfig(PropertyConfigBase):
    """Config for types without options (id, user, datetime, ...)."""


# =============================================================================
# Text
# =============================================================================


class TextConfig(PropertyConfigBase):
    """Structure of config for text properties."""

    min_length: int | None = Field(default=None, ge=0)
    max_length: int | None = Field(default=None, ge=0)
    pattern: str | None = None
    # Shown instead of the generic message when pattern does not match
    pattern_error_message: str | None = None


class RichTextConfig(PropertyConfigBase):
    """Structure of config for rich text properties."""

    max_length: int | None = Field(default=None, ge=0)


# =============================================================================
# Select
# =============================================================================


class SelectOption(PropertyConfigBase):
    """One choice of a select / multi-select property."""

    id: str
    name: str
    color: str | None = None


class SelectConfig(PropertyConfigBase):
    """Structure of config for single select properties."""

    options: list[SelectOption] = Field(default_factory=list)

    @property
    def option_ids(self) -> set[str]:
        return {option.id for option in self.options}


class MultiSelectConfig(SelectConfig):
    """Structure of config for multi select properties."""

    max_select: int | None = Field(default=None, ge=1)


class MinersConfig(PropertyConfigBase):
    """Structure of config for miner list properties."""

    max_select: int | None = Field(default=None, ge=1)


# =============================================================================
# Number
# =============================================================================


class NumberConfig(PropertyConfigBase):
    """Structure of config for number properties."""

    min: float | None = None
    max: float | None = None


PropertyConfig = (
    EmptyConfig
    | TextConfig
    | RichTextConfig
    | SelectConfig
    | MultiSelectConfig
    | MinersConfig
    | NumberConfig
)

CONFIG_MODELS: dict[PropertyType, type[PropertyConfigBase]] = {
    PropertyType.TEXT: TextConfig,
    PropertyType.RICH_TEXT: RichTextConfig,
    PropertyType.SELECT: SelectConfig,
    PropertyType.MULTI_SELECT: MultiSelectConfig,
    PropertyType.MINERS: MinersConfig,
    PropertyType.NUMBER: NumberConfig,
}


def parse_property_config(property_type: str, raw: Any) -> PropertyConfig:
    """
    Decode a raw config value into the typed model for property_type.

    Accepts a dict, a JSON string (SQLite storage) or None.
    Raises pydantic.ValidationError when the config does not match.
    """
    try:
        model = CONFIG_MODELS.get(PropertyType(property_type), EmptyConfig)
    except ValueError:
        model = EmptyConfig
    return model.model_validate(parse_json_field(raw))


def dump_property_config(config: PropertyConfigBase) -> dict[str, Any]:
    """Serialize a typed config to its stored (camelCase) form."""
    return config.model_dump(by_alias=True, exclude_none=True)
