"""
Filter transformers - turn a filter condition into a value predicate.

A ValuePredicate describes "issues having a row for property P whose column C
matches operator O against operand X" without committing to a query backend;
IssueQueryService translates it to SQL.

Operators per type:
- text: contains, eq, startsWith, endsWith
- rich_text: contains
- id, number: eq, in (compared on number_value)
- select, user, multi_select, miners: in only; single "equals" is a
  one-element in so every choice type shares one code path
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from issue_tracker.properties.coercion import is_scalar_input, to_number, to_text
from issue_tracker.schemas.enums import FilterOperator, PropertyType
from issue_tracker.schemas.query import FilterCondition
from issue_tracker.services.exceptions import FormatError, UnsupportedOperatorError

__all__ = [
    "ValueStorage",
    "ValueColumn",
    "ValuePredicate",
    "FilterTransformer",
    "DefaultFilterTransformer",
    "TextFilterTransformer",
    "RichTextFilterTransformer",
    "IdFilterTransformer",
    "NumberFilterTransformer",
    "SelectFilterTransformer",
    "UserFilterTransformer",
    "MultiSelectFilterTransformer",
    "MinersFilterTransformer",
]


class ValueStorage(StrEnum):
    """Which EAV table holds the property's rows."""

    SINGLE = "single"
    MULTI = "multi"


class ValueColumn(StrEnum):
    """Which column the predicate compares."""

    VALUE = "value"
    NUMBER_VALUE = "number_value"


@dataclass(frozen=True)
class ValuePredicate:
    """Backend-neutral description of one filter lookup."""

    storage: ValueStorage
    property_id: str
    column: ValueColumn
    operator: FilterOperator
    operand: Any
    property_type: str | None = None
    # Set when the condition can never match (e.g. an empty "in" list)
    match_nothing: bool = False


class FilterTransformer:
    """
    Base class for filter transformers.

    build() is the entry point: operator check, preprocess, validate, to_query.
    """

    operators: frozenset[FilterOperator] = frozenset()
    storage = ValueStorage.SINGLE
    column = ValueColumn.VALUE

    def check_operator(self, condition: FilterCondition) -> FilterOperator:
        try:
            operator = FilterOperator(condition.operator)
        except ValueError:
            operator = None
        if operator not in self.operators:
            raise UnsupportedOperatorError(condition.property_type, condition.operator)
        return operator

    def preprocess(self, condition: FilterCondition) -> FilterCondition:
        return condition

    def validate(self, condition: FilterCondition) -> bool:
        return True

    def to_query(self, condition: FilterCondition) -> ValuePredicate:
        return ValuePredicate(
            storage=self.storage,
            property_id=condition.property_id,
            column=self.column,
            operator=FilterOperator(condition.operator),
            operand=condition.value,
        )

    def build(self, condition: FilterCondition) -> ValuePredicate:
        self.check_operator(condition)
        processed = self.preprocess(condition)
        if not self.validate(processed):
            raise FormatError(
                f"Invalid value for filter on property {condition.property_id}", field="filters"
            )
        return self.to_query(processed)


class DefaultFilterTransformer(FilterTransformer):
    """Fallback for types without a transformer: equality on the raw string."""

    def check_operator(self, condition: FilterCondition) -> FilterOperator:
        return FilterOperator.EQ

    def validate(self, condition: FilterCondition) -> bool:
        return bool(condition.property_id and condition.property_type and condition.operator)

    def to_query(self, condition: FilterCondition) -> ValuePredicate:
        operand = None if condition.value is None else to_text(condition.value)
        return ValuePredicate(
            storage=ValueStorage.SINGLE,
            property_id=condition.property_id,
            column=ValueColumn.VALUE,
            operator=FilterOperator.EQ,
            operand=operand,
        )


# =============================================================================
# Text
# =============================================================================


class TextFilterTransformer(FilterTransformer):
    operators = frozenset(
        {
            FilterOperator.CONTAINS,
            FilterOperator.EQ,
            FilterOperator.STARTS_WITH,
            FilterOperator.ENDS_WITH,
        }
    )

    def preprocess(self, condition: FilterCondition) -> FilterCondition:
        if isinstance(condition.value, str):
            return condition.model_copy(update={"value": condition.value.strip()})
        if is_scalar_input(condition.value):
            return condition.model_copy(update={"value": to_text(condition.value)})
        return condition

    def validate(self, condition: FilterCondition) -> bool:
        return isinstance(condition.value, str) and condition.value != ""


class RichTextFilterTransformer(TextFilterTransformer):
    operators = frozenset({FilterOperator.CONTAINS})


# =============================================================================
# Numeric
# =============================================================================


class IdFilterTransformer(FilterTransformer):
    """Human-facing issue numbers, compared numerically."""

    operators = frozenset({FilterOperator.EQ, FilterOperator.IN})
    column = ValueColumn.NUMBER_VALUE
    property_type: PropertyType | None = PropertyType.ID

    def preprocess(self, condition: FilterCondition) -> FilterCondition:
        if condition.operator == FilterOperator.IN:
            values = condition.value if isinstance(condition.value, list) else [condition.value]
            return condition.model_copy(update={"value": [to_number(v) for v in values]})
        return condition.model_copy(update={"value": to_number(condition.value)})

    def validate(self, condition: FilterCondition) -> bool:
        if condition.operator == FilterOperator.IN:
            return all(v is not None for v in condition.value)
        return condition.value is not None

    def to_query(self, condition: FilterCondition) -> ValuePredicate:
        operator = FilterOperator(condition.operator)
        return ValuePredicate(
            storage=self.storage,
            property_id=condition.property_id,
            column=self.column,
            operator=operator,
            operand=condition.value,
            property_type=self.property_type,
            match_nothing=operator is FilterOperator.IN and not condition.value,
        )


class NumberFilterTransformer(IdFilterTransformer):
    property_type = PropertyType.NUMBER


# =============================================================================
# Choices
# =============================================================================


class ChoiceFilterTransformer(FilterTransformer):
    """Membership in a list of stored values."""

    operators = frozenset({FilterOperator.IN})
    property_type: PropertyType | None = None

    def preprocess(self, condition: FilterCondition) -> FilterCondition:
        values = condition.value if isinstance(condition.value, list) else [condition.value]
        cleaned = [to_text(v).strip() for v in values if v is not None]
        return condition.model_copy(update={"value": [v for v in cleaned if v]})

    def validate(self, condition: FilterCondition) -> bool:
        return isinstance(condition.value, list)

    def to_query(self, condition: FilterCondition) -> ValuePredicate:
        return ValuePredicate(
            storage=self.storage,
            property_id=condition.property_id,
            column=self.column,
            operator=FilterOperator.IN,
            operand=condition.value,
            property_type=self.property_type,
            match_nothing=not condition.value,
        )


class SelectFilterTransformer(ChoiceFilterTransformer):
    pass


class UserFilterTransformer(ChoiceFilterTransformer):
    property_type = PropertyType.USER


class MultiSelectFilterTransformer(ChoiceFilterTransformer):
    storage = ValueStorage.MULTI


class MinersFilterTransformer(ChoiceFilterTransformer):
    storage = ValueStorage.MULTI
