"""
Creation processors - turn a raw input value into rows for a new issue.

Each processor runs in three steps:
1. validate_format: structural check only (string? list of strings?), raises FormatError
2. validate_business_rules: checks against the decoded config, raises BusinessRuleError
3. transform_to_db_format: pure, returns DbInsertData

Design notes:
- scalar types always produce exactly one single value row; an empty input
  becomes an explicit null row so "no value yet" stays distinguishable from
  "never evaluated"
- list types produce one multi value row per element, positions 0..n-1 in
  input order; an empty input produces no rows
- rows carry the definition's type, captured at write time
- readonly is checked by the caller before any processor runs
"""

from __future__ import annotations

import logging
import re
from typing import Any

from issue_tracker.properties.coercion import is_blank, is_scalar_input, to_number, to_text
from issue_tracker.properties.rows import DbInsertData, MultiValueRow, SingleValueRow
from issue_tracker.schemas.property_config import (
    MinersConfig,
    MultiSelectConfig,
    NumberConfig,
    RichTextConfig,
    SelectConfig,
    TextConfig,
)
from issue_tracker.schemas.property_definition import PropertyDefinitionRead
from issue_tracker.services.exceptions import BusinessRuleError, FormatError

logger = logging.getLogger(__name__)

__all__ = [
    "CreationProcessor",
    "TextCreationProcessor",
    "RichTextCreationProcessor",
    "SelectCreationProcessor",
    "MultiSelectCreationProcessor",
    "MinersCreationProcessor",
    "UserCreationProcessor",
    "NumberCreationProcessor",
]


class CreationProcessor:
    """
    Base class for creation processors.

    Subclasses implement the three steps; process() runs them in order.
    """

    def validate_format(self, prop: PropertyDefinitionRead, value: Any) -> None:
        raise NotImplementedError

    def validate_business_rules(self, prop: PropertyDefinitionRead, value: Any) -> None:
        raise NotImplementedError

    def transform_to_db_format(
        self, prop: PropertyDefinitionRead, value: Any, issue_id: str
    ) -> DbInsertData:
        raise NotImplementedError

    def process(self, prop: PropertyDefinitionRead, value: Any, issue_id: str) -> DbInsertData:
        """Validate and transform in one call."""
        self.validate_format(prop, value)
        self.validate_business_rules(prop, value)
        return self.transform_to_db_format(prop, value, issue_id)

    # Row helpers

    @staticmethod
    def single_row(
        prop: PropertyDefinitionRead,
        issue_id: str,
        value: str | None,
        number_value: float | None = None,
    ) -> SingleValueRow:
        return SingleValueRow(
            issue_id=issue_id,
            property_id=prop.id,
            property_type=str(prop.type),
            value=value,
            number_value=number_value,
        )

    @staticmethod
    def multi_row(
        prop: PropertyDefinitionRead,
        issue_id: str,
        value: str | None,
        position: int,
        number_value: float | None = None,
    ) -> MultiValueRow:
        return MultiValueRow(
            issue_id=issue_id,
            property_id=prop.id,
            property_type=str(prop.type),
            value=value,
            position=position,
            number_value=number_value,
        )

    @staticmethod
    def check_nullable(prop: PropertyDefinitionRead, value: Any) -> None:
        if value is None and not prop.nullable:
            raise FormatError(f"Property {prop.name} cannot be empty", field=prop.id)


# =============================================================================
# Scalar types
# =============================================================================


class TextCreationProcessor(CreationProcessor):
    """Plain text: length bounds and an optional regex pattern."""

    def validate_format(self, prop: PropertyDefinitionRead, value: Any) -> None:
        self.check_nullable(prop, value)
        if value is not None and not is_scalar_input(value):
            raise FormatError(f"Property {prop.name} must be a string", field=prop.id)

    def validate_business_rules(self, prop: PropertyDefinitionRead, value: Any) -> None:
        if value is None:
            return
        config = prop.config if isinstance(prop.config, TextConfig) else TextConfig()
        text = to_text(value)
        errors: list[str] = []

        if config.min_length is not None and len(text) < config.min_length:
            errors.append(f"Property {prop.name} must be at least {config.min_length} characters")
        if config.max_length is not None and len(text) > config.max_length:
            errors.append(f"Property {prop.name} must be at most {config.max_length} characters")

        if config.pattern:
            try:
                regex = re.compile(config.pattern)
            except re.error as e:
                logger.warning(f"Ignoring invalid pattern for property {prop.id}: {e}")
            else:
                if not regex.search(text):
                    errors.append(
                        config.pattern_error_message or f"Property {prop.name} has an invalid format"
                    )

        if errors:
            raise BusinessRuleError(errors, field=prop.id)

    def transform_to_db_format(
        self, prop: PropertyDefinitionRead, value: Any, issue_id: str
    ) -> DbInsertData:
        text = None if value is None else to_text(value)
        return DbInsertData(single_values=[self.single_row(prop, issue_id, text)])


class RichTextCreationProcessor(TextCreationProcessor):
    """Rich text (serialized editor content): max length only."""

    def validate_business_rules(self, prop: PropertyDefinitionRead, value: Any) -> None:
        if value is None:
            return
        config = prop.config if isinstance(prop.config, RichTextConfig) else RichTextConfig()
        if config.max_length is not None and len(to_text(value)) > config.max_length:
            raise BusinessRuleError(
                f"Property {prop.name} must be at most {config.max_length} characters",
                field=prop.id,
            )


class SelectCreationProcessor(CreationProcessor):
    """Single choice among the configured options. An empty string clears it."""

    def validate_format(self, prop: PropertyDefinitionRead, value: Any) -> None:
        self.check_nullable(prop, None if value == "" else value)
        if value is not None and not is_scalar_input(value):
            raise FormatError(f"Property {prop.name} must be a string or a number", field=prop.id)

    def validate_business_rules(self, prop: PropertyDefinitionRead, value: Any) -> None:
        if value is None:
            return
        config = prop.config if isinstance(prop.config, SelectConfig) else SelectConfig()
        if not config.options:
            raise BusinessRuleError(f"Property {prop.name} has no options configured", field=prop.id)
        if value == "":
            return
        if to_text(value) not in config.option_ids:
            raise BusinessRuleError(
                f"Property {prop.name}: '{to_text(value)}' is not a valid option", field=prop.id
            )

    def transform_to_db_format(
        self, prop: PropertyDefinitionRead, value: Any, issue_id: str
    ) -> DbInsertData:
        text = None if value is None or value == "" else to_text(value)
        return DbInsertData(single_values=[self.single_row(prop, issue_id, text)])


class UserCreationProcessor(CreationProcessor):
    """Reference to a user id. No business rules: the directory is external."""

    def validate_format(self, prop: PropertyDefinitionRead, value: Any) -> None:
        self.check_nullable(prop, None if value == "" else value)
        if value is not None and not isinstance(value, str):
            raise FormatError(f"Property {prop.name} must be a user id string", field=prop.id)

    def validate_business_rules(self, prop: PropertyDefinitionRead, value: Any) -> None:
        return None

    def transform_to_db_format(
        self, prop: PropertyDefinitionRead, value: Any, issue_id: str
    ) -> DbInsertData:
        text = value if value else None
        return DbInsertData(single_values=[self.single_row(prop, issue_id, text)])


class NumberCreationProcessor(CreationProcessor):
    """Numeric value. Fills number_value for numeric filtering and sorting. Blank input is empty."""

    def validate_format(self, prop: PropertyDefinitionRead, value: Any) -> None:
        self.check_nullable(prop, None if is_blank(value) else value)
        if not is_blank(value) and to_number(value) is None:
            raise FormatError(f"Property {prop.name} must be a number", field=prop.id)

    def validate_business_rules(self, prop: PropertyDefinitionRead, value: Any) -> None:
        if is_blank(value):
            return
        config = prop.config if isinstance(prop.config, NumberConfig) else NumberConfig()
        number = to_number(value)
        errors: list[str] = []
        if config.min is not None and number < config.min:
            errors.append(f"Property {prop.name} must be at least {to_text(config.min)}")
        if config.max is not None and number > config.max:
            errors.append(f"Property {prop.name} must be at most {to_text(config.max)}")
        if errors:
            raise BusinessRuleError(errors, field=prop.id)

    def transform_to_db_format(
        self, prop: PropertyDefinitionRead, value: Any, issue_id: str
    ) -> DbInsertData:
        number = None if is_blank(value) else to_number(value)
        if number is None:
            return DbInsertData(single_values=[self.single_row(prop, issue_id, None)])
        return DbInsertData(single_values=[self.single_row(prop, issue_id, to_text(number), number)])


# =============================================================================
# List types
# =============================================================================


class ListCreationProcessor(CreationProcessor):
    """Shared handling for list types: element shape, duplicates, max count."""

    item_label = "item"

    def validate_format(self, prop: PropertyDefinitionRead, value: Any) -> None:
        if value is None:
            return
        if not isinstance(value, list):
            raise FormatError(f"Property {prop.name} must be a list", field=prop.id)
        for index, item in enumerate(value, start=1):
            if not is_scalar_input(item):
                raise FormatError(
                    f"Property {prop.name}: {self.item_label} #{index} must be a string or a number",
                    field=prop.id,
                )

    def max_select(self, prop: PropertyDefinitionRead) -> int | None:
        return getattr(prop.config, "max_select", None)

    def validate_business_rules(self, prop: PropertyDefinitionRead, value: Any) -> None:
        if not value:
            return
        items = [to_text(item) for item in value]
        errors = self.check_items(prop, items)

        if len(set(items)) != len(items):
            errors.append(f"Property {prop.name} contains duplicate values")

        max_select = self.max_select(prop)
        if max_select is not None and len(items) > max_select:
            errors.append(f"Property {prop.name} allows at most {max_select} values")

        if errors:
            raise BusinessRuleError(errors, field=prop.id)

    def check_items(self, prop: PropertyDefinitionRead, items: list[str]) -> list[str]:
        return []

    def transform_to_db_format(
        self, prop: PropertyDefinitionRead, value: Any, issue_id: str
    ) -> DbInsertData:
        if not value:
            return DbInsertData()
        return DbInsertData(
            multi_values=[
                self.multi_row(prop, issue_id, to_text(item), position)
                for position, item in enumerate(value)
            ]
        )


class MultiSelectCreationProcessor(ListCreationProcessor):
    """Several choices among the configured options."""

    item_label = "option"

    def check_items(self, prop: PropertyDefinitionRead, items: list[str]) -> list[str]:
        config = prop.config if isinstance(prop.config, MultiSelectConfig) else MultiSelectConfig()
        if not config.options:
            return [f"Property {prop.name} has no options configured"]
        option_ids = config.option_ids
        return [
            f"Property {prop.name}: '{item}' is not a valid option"
            for item in items
            if item not in option_ids
        ]


class MinersCreationProcessor(ListCreationProcessor):
    """List of miner ids. Ids are not checked against an inventory."""

    item_label = "miner id"

    def max_select(self, prop: PropertyDefinitionRead) -> int | None:
        config = prop.config if isinstance(prop.config, MinersConfig) else MinersConfig()
        return config.max_select
