"""
Update processors - turn one operation on an existing issue into a row diff.

Operations per kind:
- scalar types (text, rich_text, select, user, number): set, remove
- list types (multi_select, miners): add, update, remove

Value checks are shared with the creation processors, so a value accepted by
"set" is exactly a value accepted at creation time.

Design notes:
- remove on a list deletes every element by issue + property, with no
  position bound
- update on a list replaces the whole list: remove all, then re-create
  positions 0..n-1 in the new order
- add on a list carries no position; the applier appends after the current
  max position and enforces max_items against the current element count
"""

from __future__ import annotations

from typing import Any

from issue_tracker.properties.coercion import is_blank, is_scalar_input, to_text
from issue_tracker.properties.creation import (
    CreationProcessor,
    ListCreationProcessor,
    MinersCreationProcessor,
    MultiSelectCreationProcessor,
    NumberCreationProcessor,
    RichTextCreationProcessor,
    SelectCreationProcessor,
    TextCreationProcessor,
    UserCreationProcessor,
)
from issue_tracker.properties.rows import DbOperationResult, MultiValueData, SingleValueUpdate
from issue_tracker.schemas.enums import PropertyOperationType, SystemPropertyId
from issue_tracker.schemas.property_definition import PropertyDefinitionRead
from issue_tracker.services.exceptions import BusinessRuleError, FormatError, UnsupportedOperationError

__all__ = [
    "UpdateProcessor",
    "ScalarUpdateProcessor",
    "ListUpdateProcessor",
    "TextUpdateProcessor",
    "RichTextUpdateProcessor",
    "SelectUpdateProcessor",
    "UserUpdateProcessor",
    "NumberUpdateProcessor",
    "MultiSelectUpdateProcessor",
    "MinersUpdateProcessor",
]

Payload = dict[str, Any]


class UpdateProcessor:
    """Base class for update processors."""

    supported_operations: frozenset[PropertyOperationType] = frozenset()

    def check_operation(
        self, prop: PropertyDefinitionRead, operation_type: str
    ) -> PropertyOperationType:
        """Return the operation as an enum member, or raise UnsupportedOperationError."""
        try:
            operation = PropertyOperationType(operation_type)
        except ValueError:
            operation = None
        if operation not in self.supported_operations:
            raise UnsupportedOperationError(
                prop.type, str(operation_type), [str(op) for op in self.supported_operations]
            )
        return operation

    def validate_format(
        self, prop: PropertyDefinitionRead, operation_type: str, payload: Payload
    ) -> None:
        raise NotImplementedError

    def validate_business_rules(
        self, prop: PropertyDefinitionRead, operation_type: str, payload: Payload
    ) -> None:
        raise NotImplementedError

    def transform_to_db_operations(
        self,
        prop: PropertyDefinitionRead,
        operation_type: str,
        payload: Payload,
        issue_id: str,
    ) -> DbOperationResult:
        raise NotImplementedError

    def process(
        self,
        prop: PropertyDefinitionRead,
        operation_type: str,
        payload: Payload,
        issue_id: str,
    ) -> DbOperationResult:
        """Validate and transform in one call."""
        self.validate_format(prop, operation_type, payload)
        self.validate_business_rules(prop, operation_type, payload)
        return self.transform_to_db_operations(prop, operation_type, payload, issue_id)


# =============================================================================
# Scalar types
# =============================================================================


class ScalarUpdateProcessor(UpdateProcessor):
    """set / remove on a single value row, validated by a creation processor."""

    supported_operations = frozenset({PropertyOperationType.SET, PropertyOperationType.REMOVE})
    value_processor: CreationProcessor

    def validate_format(
        self, prop: PropertyDefinitionRead, operation_type: str, payload: Payload
    ) -> None:
        operation = self.check_operation(prop, operation_type)
        if operation is PropertyOperationType.SET:
            if "value" not in payload:
                raise FormatError("set payload must include 'value'", field=prop.id)
            self.value_processor.validate_format(prop, payload["value"])

    def validate_business_rules(
        self, prop: PropertyDefinitionRead, operation_type: str, payload: Payload
    ) -> None:
        operation = self.check_operation(prop, operation_type)
        if operation is PropertyOperationType.REMOVE:
            if not prop.nullable:
                raise BusinessRuleError(f"Property {prop.name} cannot be removed", field=prop.id)
            return
        self.value_processor.validate_business_rules(prop, payload["value"])

    def transform_to_db_operations(
        self,
        prop: PropertyDefinitionRead,
        operation_type: str,
        payload: Payload,
        issue_id: str,
    ) -> DbOperationResult:
        operation = self.check_operation(prop, operation_type)
        if operation is PropertyOperationType.REMOVE:
            return DbOperationResult(single_value_remove=True)

        rows = self.value_processor.transform_to_db_format(prop, payload["value"], issue_id)
        row = rows.single_values[0]
        return DbOperationResult(
            single_value_update=SingleValueUpdate(value=row.value, number_value=row.number_value)
        )


class TextUpdateProcessor(ScalarUpdateProcessor):
    value_processor = TextCreationProcessor()

    def validate_business_rules(
        self, prop: PropertyDefinitionRead, operation_type: str, payload: Payload
    ) -> None:
        # The title may never be blanked, whatever the definition says
        if prop.id == SystemPropertyId.TITLE and operation_type == PropertyOperationType.SET:
            if is_blank(payload.get("value")):
                raise BusinessRuleError("Title cannot be empty", field=prop.id)
        super().validate_business_rules(prop, operation_type, payload)


class RichTextUpdateProcessor(ScalarUpdateProcessor):
    value_processor = RichTextCreationProcessor()


class SelectUpdateProcessor(ScalarUpdateProcessor):
    value_processor = SelectCreationProcessor()


class UserUpdateProcessor(ScalarUpdateProcessor):
    value_processor = UserCreationProcessor()


class NumberUpdateProcessor(ScalarUpdateProcessor):
    value_processor = NumberCreationProcessor()


# =============================================================================
# List types
# =============================================================================


class ListUpdateProcessor(UpdateProcessor):
    """add / update / remove on multi value rows."""

    supported_operations = frozenset(
        {PropertyOperationType.ADD, PropertyOperationType.UPDATE, PropertyOperationType.REMOVE}
    )
    value_processor: ListCreationProcessor

    def validate_format(
        self, prop: PropertyDefinitionRead, operation_type: str, payload: Payload
    ) -> None:
        operation = self.check_operation(prop, operation_type)
        if operation is PropertyOperationType.ADD:
            if "value" not in payload:
                raise FormatError("add payload must include 'value'", field=prop.id)
            if not is_scalar_input(payload["value"]):
                raise FormatError("add value must be a string or a number", field=prop.id)
        elif operation is PropertyOperationType.UPDATE:
            if "values" not in payload:
                raise FormatError("update payload must include 'values'", field=prop.id)
            if not isinstance(payload["values"], list):
                raise FormatError("update values must be a list", field=prop.id)
            self.value_processor.validate_format(prop, payload["values"])

    def validate_business_rules(
        self, prop: PropertyDefinitionRead, operation_type: str, payload: Payload
    ) -> None:
        operation = self.check_operation(prop, operation_type)
        if operation is PropertyOperationType.ADD:
            self.value_processor.validate_business_rules(prop, [payload["value"]])
        elif operation is PropertyOperationType.UPDATE:
            self.value_processor.validate_business_rules(prop, payload["values"])

    def transform_to_db_operations(
        self,
        prop: PropertyDefinitionRead,
        operation_type: str,
        payload: Payload,
        issue_id: str,
    ) -> DbOperationResult:
        operation = self.check_operation(prop, operation_type)
        if operation is PropertyOperationType.REMOVE:
            return DbOperationResult(multi_value_remove_all=True)

        if operation is PropertyOperationType.ADD:
            return DbOperationResult(
                multi_value_creates=[MultiValueData(value=to_text(payload["value"]))],
                max_items=self.value_processor.max_select(prop),
            )

        rows = self.value_processor.transform_to_db_format(prop, payload["values"], issue_id)
        return DbOperationResult(
            multi_value_remove_all=True,
            multi_value_creates=[
                MultiValueData(value=row.value, position=row.position, number_value=row.number_value)
                for row in rows.multi_values
            ],
        )


class MultiSelectUpdateProcessor(ListUpdateProcessor):
    value_processor = MultiSelectCreationProcessor()


class MinersUpdateProcessor(ListUpdateProcessor):
    value_processor = MinersCreationProcessor()
