"""
Domain exceptions for the service layer.

These exceptions are raised by services and the property processors and
caught by API routes to convert into appropriate HTTP responses.

Every error exposes `messages`, a list of human-readable strings that can be
shown to the user as-is.
"""

from __future__ import annotations

from collections.abc import Iterable


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, messages: Iterable[str] | None = None):
        self.message = message
        self.messages = list(messages) if messages else [message]
        super().__init__(message)


class NotFoundError(ServiceError):
    """Entity not found."""

    def __init__(self, entity: str, identifier: str | None = None):
        self.entity = entity
        self.identifier = identifier
        message = f"{entity} not found"
        if identifier:
            message = f"{entity} with identifier '{identifier}' not found"
        super().__init__(message)


class ConflictError(ServiceError):
    """Entity already exists or conflict occurred."""

    def __init__(self, entity: str, field: str, value: str):
        self.entity = entity
        self.field = field
        self.value = value
        message = f"{entity} with {field} '{value}' already exists"
        super().__init__(message)


class ValidationError(ServiceError):
    """Validation error in service layer."""

    def __init__(self, messages: str | Iterable[str], field: str | None = None):
        if isinstance(messages, str):
            messages = [messages]
        messages = list(messages)
        self.field = field
        super().__init__("; ".join(messages), messages)


class FormatError(ValidationError):
    """Value has the wrong shape (not a string, not a list, ...)."""


class BusinessRuleError(ValidationError):
    """Value is well-formed but violates the property's config."""


class UnsupportedPropertyTypeError(ServiceError):
    """No processor is registered for a property type."""

    def __init__(self, property_type: str):
        self.property_type = property_type
        super().__init__(f"Unsupported property type: '{property_type}'")


class UnsupportedOperationError(ServiceError):
    """Operation is not defined for a property type."""

    def __init__(self, property_type: str, operation_type: str, supported: Iterable[str] = ()):
        self.property_type = property_type
        self.operation_type = operation_type
        message = f"Operation '{operation_type}' is not supported for {property_type} properties"
        supported = sorted(supported)
        if supported:
            message = f"{message} (supported: {', '.join(supported)})"
        super().__init__(message)


class UnsupportedOperatorError(ServiceError):
    """Filter operator is not defined for a property type."""

    def __init__(self, property_type: str, operator: str):
        self.property_type = property_type
        self.operator = operator
        super().__init__(f"Filter operator '{operator}' is not supported for {property_type} properties")


class AllocationExhaustedError(ServiceError):
    """Sequence allocation kept losing the optimistic race. Safe to retry."""

    def __init__(self, entity_name: str, attempts: int):
        self.entity_name = entity_name
        self.attempts = attempts
        super().__init__(
            f"Could not allocate ids for '{entity_name}' after {attempts} attempts, please retry"
        )


class StorageError(ServiceError):
    """Underlying database failure. The transaction has been rolled back."""
