"""
Enum definitions for the Issue Tracker application.

All enums are defined as StrEnum for JSON serialization compatibility.
Database stores these as VARCHAR - validation happens at Pydantic/FastAPI layer.

Property type tags and operator strings are the contract between the engine and
its callers: adding a new type means registering a creation processor, an update
processor and a filter transformer for it.
"""

from enum import StrEnum

__all__ = [
    "PropertyType",
    "PropertyOperationType",
    "FilterOperator",
    "SystemPropertyId",
    "NUMBER_VALUE_TYPES",
    "MULTI_VALUE_TYPES",
    "SYSTEM_PROPERTY_ORDER",
]


class PropertyType(StrEnum):
    """
    Type tag of a property definition.

    Note: All values are stored as TEXT in the EAV tables.
    Numeric types additionally fill number_value for filtering/sorting.
    """

    ID = "id"
    TEXT = "text"
    NUMBER = "number"
    SELECT = "select"
    MULTI_SELECT = "multi_select"
    DATETIME = "datetime"
    BOOLEAN = "boolean"
    USER = "user"
    RELATIONSHIP = "relationship"
    RICH_TEXT = "rich_text"
    MINERS = "miners"


class PropertyOperationType(StrEnum):
    """Mutation applied to an existing issue's property."""

    SET = "set"  # scalar types
    REMOVE = "remove"  # scalar and list types
    ADD = "add"  # list types, append one element
    UPDATE = "update"  # list types, replace the whole list


class FilterOperator(StrEnum):
    """Comparison operator of a filter condition."""

    EQ = "eq"
    IN = "in"
    CONTAINS = "contains"
    STARTS_WITH = "startsWith"
    ENDS_WITH = "endsWith"


class SystemPropertyId(StrEnum):
    """Fixed ids of the built-in property catalogue."""

    ID = "property0001"
    TITLE = "property0002"
    STATUS = "property0003"
    CREATED_AT = "property0004"
    UPDATED_AT = "property0005"
    DESCRIPTION = "property0006"
    PRIORITY = "property0007"
    CATEGORY = "property0008"
    DIAGNOSIS = "property0009"
    LABEL = "property0010"
    MINERS = "property0011"
    ASSIGNEE = "property0012"
    REPORTER = "property0013"


# Types whose rows carry number_value
NUMBER_VALUE_TYPES: frozenset[PropertyType] = frozenset({PropertyType.ID, PropertyType.NUMBER})

# Types stored in property_multi_values
MULTI_VALUE_TYPES: frozenset[PropertyType] = frozenset({PropertyType.MULTI_SELECT, PropertyType.MINERS})

# Display priority of the system catalogue
SYSTEM_PROPERTY_ORDER: tuple[SystemPropertyId, ...] = (
    SystemPropertyId.ID,
    SystemPropertyId.TITLE,
    SystemPropertyId.STATUS,
    SystemPropertyId.PRIORITY,
    SystemPropertyId.CATEGORY,
    SystemPropertyId.DIAGNOSIS,
    SystemPropertyId.MINERS,
    SystemPropertyId.ASSIGNEE,
    SystemPropertyId.REPORTER,
    SystemPropertyId.CREATED_AT,
    SystemPropertyId.UPDATED_AT,
)
