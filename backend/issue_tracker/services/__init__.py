"""
Services package - business logic layer.

Re-exports the exception hierarchy for convenient importing. Service classes
are imported from their modules (issue_tracker.services.issue_service, ...).
"""

from issue_tracker.services.exceptions import (
    AllocationExhaustedError,
    BusinessRuleError,
    ConflictError,
    FormatError,
    NotFoundError,
    ServiceError,
    StorageError,
    UnsupportedOperationError,
    UnsupportedOperatorError,
    UnsupportedPropertyTypeError,
    ValidationError,
)

__all__ = [
    "ServiceError",
    "ValidationError",
    "FormatError",
    "BusinessRuleError",
    "UnsupportedPropertyTypeError",
    "UnsupportedOperationError",
    "UnsupportedOperatorError",
    "NotFoundError",
    "ConflictError",
    "AllocationExhaustedError",
    "StorageError",
]
