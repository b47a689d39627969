"""
SQLModel/SQLAlchemy ORM models.

Models are imported lazily to avoid circular import issues.
Import specific models directly:
    from issue_tracker.models.issue import Issue
    from issue_tracker.models.property_value import PropertySingleValue

Or import all at once (after all modules are loaded):
    from issue_tracker.models import Issue, PropertyDefinition, Counter
"""

# Re-export SQLModel for convenience
from sqlmodel import SQLModel

# Lazy imports - these are only resolved when accessed
# This avoids import-time type resolution issues in SQLModel

__all__ = [
    "SQLModel",
    # Base
    "BaseTableModel",
    # Models
    "Issue",
    "PropertyDefinition",
    "PropertySingleValue",
    "PropertyMultiValue",
    "Counter",
]


def __getattr__(name: str):
    """
    Lazy import of models to avoid circular import issues.

    This is called when an attribute is accessed that doesn't exist
    in the module namespace. We use it to defer model imports until
    they're actually needed.
    """
    if name == "BaseTableModel":
        from issue_tracker.models.base import BaseTableModel
        return BaseTableModel
    elif name == "Issue":
        from issue_tracker.models.issue import Issue
        return Issue
    elif name == "PropertyDefinition":
        from issue_tracker.models.property_definition import PropertyDefinition
        return PropertyDefinition
    elif name == "PropertySingleValue":
        from issue_tracker.models.property_value import PropertySingleValue
        return PropertySingleValue
    elif name == "PropertyMultiValue":
        from issue_tracker.models.property_value import PropertyMultiValue
        return PropertyMultiValue
    elif name == "Counter":
        from issue_tracker.models.counter import Counter
        return Counter

    raise AttributeError(f"module 'issue_tracker.models' has no attribute '{name}'")
