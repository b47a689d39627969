"""
Listing request schemas: filter conditions and sort keys.

Both travel in the query string as JSON arrays with camelCase keys:
    ?filters=[{"propertyId":"property0003","propertyType":"select","operator":"in","value":["open"]}]
    &sort=[{"id":"property0001","desc":true}]
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from issue_tracker.schemas.validators import parse_json_list_field
from issue_tracker.services.exceptions import FormatError

__all__ = [
    "FilterCondition",
    "SortConfig",
    "parse_filters",
    "parse_sort",
]


class FilterCondition(BaseModel):
    """One conjunctive per-property predicate."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    property_id: str = Field(min_length=1)
    property_type: str = Field(min_length=1)
    # Kept as a plain string so unknown operators reach the transformer
    operator: str = Field(min_length=1)
    value: Any = None
    config: dict[str, Any] | None = None


class SortConfig(BaseModel):
    """One sort key; keys compose left-to-right as tie-breakers."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1, description="Property id to sort by")
    desc: bool = False


_filters_adapter = TypeAdapter(list[FilterCondition])
_sort_adapter = TypeAdapter(list[SortConfig])


def parse_filters(raw: str | None) -> list[FilterCondition]:
    """Decode the `filters` query parameter. Blank input means no filters."""
    try:
        return _filters_adapter.validate_python(parse_json_list_field(raw))
    except (json.JSONDecodeError, PydanticValidationError) as e:
        raise FormatError(f"Invalid filters parameter: {e}", field="filters") from e


def parse_sort(raw: str | None) -> list[SortConfig]:
    """Decode the `sort` query parameter. Blank input means default order."""
    try:
        return _sort_adapter.validate_python(parse_json_list_field(raw))
    except (json.JSONDecodeError, PydanticValidationError) as e:
        raise FormatError(f"Invalid sort parameter: {e}", field="sort") from e
