"""
Pydantic schemas for request/response validation.

Re-exports all schemas for convenient importing:
    from issue_tracker.schemas import IssueRead, PropertyType, FilterCondition
"""

# Common schemas
from issue_tracker.schemas.common import (
    ErrorResponse,
    HealthResponse,
    PaginationParams,
)

# Enums
from issue_tracker.schemas.enums import (
    MULTI_VALUE_TYPES,
    NUMBER_VALUE_TYPES,
    FilterOperator,
    PropertyOperationType,
    PropertyType,
    SystemPropertyId,
)

# Issue schemas
from issue_tracker.schemas.issue import (
    CreateIssueInput,
    CreateIssueResult,
    IssueBatchCreate,
    IssueCreate,
    IssueListResult,
    IssueRead,
    IssueUpdate,
    PropertyOperation,
    PropertyValue,
    UpdateIssueResult,
)

# Property config (JSON column)
from issue_tracker.schemas.property_config import (
    EmptyConfig,
    MinersConfig,
    MultiSelectConfig,
    NumberConfig,
    PropertyConfig,
    RichTextConfig,
    SelectConfig,
    SelectOption,
    TextConfig,
    parse_property_config,
)

# Property definition schemas
from issue_tracker.schemas.property_definition import (
    PropertyDefinitionCreate,
    PropertyDefinitionRead,
)

# Listing
from issue_tracker.schemas.query import (
    FilterCondition,
    SortConfig,
    parse_filters,
    parse_sort,
)

__all__ = [
    # Common
    "PaginationParams",
    "ErrorResponse",
    "HealthResponse",
    # Enums
    "PropertyType",
    "PropertyOperationType",
    "FilterOperator",
    "SystemPropertyId",
    "NUMBER_VALUE_TYPES",
    "MULTI_VALUE_TYPES",
    # Issue
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
    # Property config
    "PropertyConfig",
    "EmptyConfig",
    "TextConfig",
    "RichTextConfig",
    "SelectOption",
    "SelectConfig",
    "MultiSelectConfig",
    "MinersConfig",
    "NumberConfig",
    "parse_property_config",
    # Property definition
    "PropertyDefinitionCreate",
    "PropertyDefinitionRead",
    # Listing
    "FilterCondition",
    "SortConfig",
    "parse_filters",
    "parse_sort",
]
