"""
Issue service - creation, property mutation and deletion.

Creation (batch, two-phase):
1. validate every property value of every issue, collecting all messages
2. if any issue failed, fail the whole batch: no ids allocated, no rows written
3. allocate one sequence id per issue
4. in one transaction: bulk insert issues, then single rows, then multi rows
   (plus the synthesized ID and CREATED_AT rows)

Mutation (fail fast):
1. the issue must exist; every referenced property must exist and be writable
2. every operation is validated and turned into a row diff before any row is touched
3. diffs are applied in order in one transaction, then issues.updated_at and
   the UPDATED_AT property row are stamped; any failure rolls everything back

Removals hard-delete value rows; deleting an issue soft-deletes it and its rows.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime

from sqlalchemy import delete, insert, select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from issue_tracker.core.config import Settings, get_settings
from issue_tracker.models.base import utc_now
from issue_tracker.models.issue import Issue, new_issue_id
from issue_tracker.models.property_value import PropertyMultiValue, PropertySingleValue
from issue_tracker.properties.registry import PropertyRegistry, get_default_registry
from issue_tracker.properties.rows import (
    DbOperationResult,
    MultiValueData,
    MultiValueRow,
    SingleValueRow,
    SingleValueUpdate,
)
from issue_tracker.schemas.enums import PropertyType, SystemPropertyId
from issue_tracker.schemas.issue import (
    CreateIssueInput,
    CreateIssueResult,
    PropertyOperation,
    UpdateIssueResult,
)
from issue_tracker.schemas.property_definition import PropertyDefinitionRead
from issue_tracker.services.base import BaseService
from issue_tracker.services.counter_service import IdAllocationService
from issue_tracker.services.exceptions import (
    BusinessRuleError,
    FormatError,
    NotFoundError,
    ServiceError,
    StorageError,
    UnsupportedOperationError,
    UnsupportedPropertyTypeError,
    ValidationError,
)
from issue_tracker.services.property_service import PropertyDefinitionService

logger = logging.getLogger(__name__)

BATCH_REJECTED_MESSAGE = "Not created because another issue in the batch failed validation"


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 with millisecond precision and UTC offset: 2025-01-31T08:15:02.123+00:00"""
    return moment.astimezone(UTC).isoformat(timespec="milliseconds")


def upsert_insert(dialect_name: str):
    """INSERT construct with ON CONFLICT support for the session's backend."""
    if dialect_name == "sqlite":
        return sqlite_insert
    return postgresql_insert


class IssueService(BaseService[Issue, CreateIssueInput]):
    """Creates, mutates and deletes issues through the property processors."""

    def __init__(
        self,
        db: AsyncSession,
        registry: PropertyRegistry | None = None,
        allocator: IdAllocationService | None = None,
        settings: Settings | None = None,
    ):
        super().__init__(db, Issue)
        self.settings = settings or get_settings()
        self.registry = registry or get_default_registry()
        self.properties = PropertyDefinitionService(db)
        self.allocator = allocator or IdAllocationService(db, self.settings.id_allocation)

    async def get_active_issue(self, issue_id: str, workspace_id: str | None = None) -> Issue:
        """Fetch a non-deleted issue, optionally scoped to a workspace."""
        stmt = select(Issue).where(Issue.id == issue_id, Issue.deleted_at.is_(None))
        if workspace_id is not None:
            stmt = stmt.where(Issue.workspace_id == workspace_id)
        result = await self.db.execute(stmt)
        issue = result.scalar_one_or_none()
        if issue is None:
            raise NotFoundError("Issue", issue_id)
        return issue

    # =========================================================================
    # Creation
    # =========================================================================

    async def create_issues(self, inputs: Sequence[CreateIssueInput]) -> list[CreateIssueResult]:
        """
        Create several issues atomically.

        Returns one result per input, in input order. Either every result
        succeeds or none does.

        Raises:
            AllocationExhaustedError: sequence ids could not be allocated
            StorageError: the insert transaction failed and was rolled back
        """
        if not inputs:
            return []

        property_ids = {property_id for item in inputs for property_id in item.property_values}
        definitions = await self.properties.get_definitions(property_ids)

        errors_per_issue = [self._validate_input(item, definitions) for item in inputs]
        if any(errors_per_issue):
            failed = sum(1 for errors in errors_per_issue if errors)
            logger.info(f"Rejected batch of {len(inputs)} issues, {failed} failed validation")
            return [
                CreateIssueResult(success=False, errors=errors or [BATCH_REJECTED_MESSAGE])
                for errors in errors_per_issue
            ]

        sequence_ids = await self.allocator.allocate_ids(
            self.settings.id_allocation.issue_entity_name, len(inputs)
        )

        now = utc_now()
        created_at = format_timestamp(now)
        issue_rows: list[dict] = []
        single_rows: list[SingleValueRow] = []
        multi_rows: list[MultiValueRow] = []
        results: list[CreateIssueResult] = []

        for item, sequence_id in zip(inputs, sequence_ids, strict=True):
            issue_id = new_issue_id()
            issue_rows.append(
                {
                    "id": issue_id,
                    "workspace_id": item.workspace_id,
                    "created_at": now,
                    "updated_at": now,
                }
            )
            single_rows.append(
                SingleValueRow(
                    issue_id=issue_id,
                    property_id=str(SystemPropertyId.ID),
                    property_type=str(PropertyType.ID),
                    value=str(sequence_id),
                    number_value=float(sequence_id),
                )
            )
            single_rows.append(
                SingleValueRow(
                    issue_id=issue_id,
                    property_id=str(SystemPropertyId.CREATED_AT),
                    property_type=str(PropertyType.DATETIME),
                    value=created_at,
                )
            )
            for property_id, value in item.property_values.items():
                definition = definitions[property_id]
                processor = self.registry.creation_processor(definition.type)
                rows = processor.transform_to_db_format(definition, value, issue_id)
                single_rows.extend(rows.single_values)
                multi_rows.extend(rows.multi_values)

            results.append(CreateIssueResult(success=True, issue_id=issue_id, sequence_id=sequence_id))

        timestamps = {"created_at": now, "updated_at": now}
        try:
            await self.db.execute(insert(Issue), issue_rows)
            await self.db.execute(
                insert(PropertySingleValue), [row.to_params() | timestamps for row in single_rows]
            )
            if multi_rows:
                await self.db.execute(
                    insert(PropertyMultiValue), [row.to_params() | timestamps for row in multi_rows]
                )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.exception(f"Failed to insert batch of {len(inputs)} issues")
            raise StorageError("Failed to create issues") from e

        logger.info(
            f"Created {len(results)} issues "
            f"(#{sequence_ids[0]}..#{sequence_ids[-1]}, {len(single_rows)} single rows, {len(multi_rows)} multi rows)"
        )
        return results

    async def create_issue(self, item: CreateIssueInput) -> CreateIssueResult:
        """Create one issue."""
        results = await self.create_issues([item])
        return results[0]

    def _validate_input(
        self,
        item: CreateIssueInput,
        definitions: dict[str, PropertyDefinitionRead],
    ) -> list[str]:
        """All validation messages for one issue. Empty means valid."""
        errors: list[str] = []
        for property_id, value in item.property_values.items():
            definition = definitions.get(property_id)
            if definition is None:
                errors.append(f"Property {property_id} does not exist")
                continue
            if definition.readonly:
                errors.append(f"Property {definition.name} is readonly")
                continue
            try:
                processor = self.registry.creation_processor(definition.type)
                processor.validate_format(definition, value)
                processor.validate_business_rules(definition, value)
            except ValidationError as e:
                errors.extend(e.messages)
            except UnsupportedPropertyTypeError as e:
                logger.error(f"No creation processor for property {property_id}: {e.message}")
                errors.append(f"Property {definition.name} cannot be set: {e.message}")
        return errors

    # =========================================================================
    # Mutation
    # =========================================================================

    async def update_issue(
        self,
        issue_id: str,
        operations: Sequence[PropertyOperation],
        workspace_id: str | None = None,
    ) -> UpdateIssueResult:
        """
        Apply operations in order, atomically.

        Validation problems are returned as a failed result; nothing is written.

        Raises:
            NotFoundError: the issue does not exist (or is deleted)
            StorageError: the transaction failed and was rolled back
        """
        await self.get_active_issue(issue_id, workspace_id)

        try:
            planned = await self._plan_operations(issue_id, operations)
        except ServiceError as e:
            return UpdateIssueResult(success=False, issue_id=issue_id, errors=e.messages)

        now = utc_now()
        try:
            for definition, diff in planned:
                await self._apply_diff(issue_id, definition, diff, now)

            await self.db.execute(
                update(Issue).where(Issue.id == issue_id).values(updated_at=now)
            )
            await self._upsert_single_value(
                issue_id,
                SystemPropertyId.UPDATED_AT,
                PropertyType.DATETIME,
                SingleValueUpdate(value=format_timestamp(now)),
                now,
            )
            await self.db.commit()
        except BusinessRuleError as e:
            await self.db.rollback()
            return UpdateIssueResult(success=False, issue_id=issue_id, errors=e.messages)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.exception(f"Failed to update issue {issue_id}")
            raise StorageError(f"Failed to update issue {issue_id}") from e

        logger.info(f"Applied {len(planned)} operations to issue {issue_id}")
        return UpdateIssueResult(success=True, issue_id=issue_id)

    async def _plan_operations(
        self,
        issue_id: str,
        operations: Sequence[PropertyOperation],
    ) -> list[tuple[PropertyDefinitionRead, DbOperationResult]]:
        """Validate every operation and compute its diff. Touches no rows."""
        if not operations:
            raise FormatError("At least one operation is required", field="operations")

        definitions = await self.properties.get_definitions(op.property_id for op in operations)

        for operation in operations:
            definition = definitions.get(operation.property_id)
            if definition is None:
                raise NotFoundError("Property", operation.property_id)
            if definition.readonly:
                raise BusinessRuleError(f"Property {definition.name} is readonly", field=definition.id)

        planned: list[tuple[PropertyDefinitionRead, DbOperationResult]] = []
        for operation in operations:
            definition = definitions[operation.property_id]
            try:
                processor = self.registry.update_processor(definition.type)
                diff = processor.process(
                    definition,
                    operation.operation_type,
                    operation.operation_payload,
                    issue_id,
                )
            except (UnsupportedPropertyTypeError, UnsupportedOperationError) as e:
                logger.error(f"Rejected operation on property {definition.id}: {e.message}")
                raise
            planned.append((definition, diff))
        return planned

    async def _apply_diff(
        self,
        issue_id: str,
        definition: PropertyDefinitionRead,
        diff: DbOperationResult,
        now: datetime,
    ) -> None:
        """Apply one operation's row diff inside the open transaction."""
        if diff.is_empty:
            return

        if diff.single_value_remove:
            await self.db.execute(
                delete(PropertySingleValue).where(
                    PropertySingleValue.issue_id == issue_id,
                    PropertySingleValue.property_id == definition.id,
                )
            )
        elif diff.single_value_update is not None:
            await self._upsert_single_value(
                issue_id, definition.id, definition.type, diff.single_value_update, now
            )

        multi_scope = (
            PropertyMultiValue.issue_id == issue_id,
            PropertyMultiValue.property_id == definition.id,
        )
        if diff.multi_value_remove_all:
            await self.db.execute(delete(PropertyMultiValue).where(*multi_scope))
        elif diff.multi_value_remove_positions:
            await self.db.execute(
                delete(PropertyMultiValue).where(
                    *multi_scope,
                    PropertyMultiValue.position.in_(diff.multi_value_remove_positions),
                )
            )

        for position, data in diff.multi_value_updates.items():
            await self.db.execute(
                update(PropertyMultiValue)
                .where(*multi_scope, PropertyMultiValue.position == position)
                .values(value=data.value, number_value=data.number_value, updated_at=now)
            )

        if diff.multi_value_creates:
            rows = await self._position_creates(issue_id, definition, diff)
            await self.db.execute(
                insert(PropertyMultiValue),
                [row.to_params() | {"created_at": now, "updated_at": now} for row in rows],
            )

    async def _position_creates(
        self,
        issue_id: str,
        definition: PropertyDefinitionRead,
        diff: DbOperationResult,
    ) -> list[MultiValueRow]:
        """Resolve appended elements to max(position) + 1, enforcing uniqueness and max_items."""
        appends: list[MultiValueData] = [data for data in diff.multi_value_creates if data.position is None]
        existing_values: list[str | None] = []
        next_position = 0

        if appends:
            result = await self.db.execute(
                select(PropertyMultiValue.value, PropertyMultiValue.position).where(
                    PropertyMultiValue.issue_id == issue_id,
                    PropertyMultiValue.property_id == definition.id,
                    PropertyMultiValue.deleted_at.is_(None),
                )
            )
            current = result.all()
            existing_values = [row.value for row in current]
            next_position = max((row.position for row in current), default=-1) + 1

            if diff.max_items is not None and len(current) + len(appends) > diff.max_items:
                raise BusinessRuleError(
                    f"Property {definition.name} allows at most {diff.max_items} values",
                    field=definition.id,
                )

        rows: list[MultiValueRow] = []
        for data in diff.multi_value_creates:
            position = data.position
            if position is None:
                if data.value in existing_values:
                    raise BusinessRuleError(
                        f"Property {definition.name} already contains '{data.value}'",
                        field=definition.id,
                    )
                existing_values.append(data.value)
                position = next_position
                next_position += 1
            rows.append(
                MultiValueRow(
                    issue_id=issue_id,
                    property_id=definition.id,
                    property_type=str(definition.type),
                    value=data.value,
                    position=position,
                    number_value=data.number_value,
                )
            )
        return rows

    async def _upsert_single_value(
        self,
        issue_id: str,
        property_id: str,
        property_type: str,
        data: SingleValueUpdate,
        now: datetime,
    ) -> None:
        """Insert or overwrite the (issue, property) row, reviving it if tombstoned."""
        values = {
            "value": data.value,
            "number_value": data.number_value,
            "property_type": str(property_type),
            "updated_at": now,
            "deleted_at": None,
        }
        stmt = upsert_insert(self.db.get_bind().dialect.name)(PropertySingleValue).values(
            issue_id=issue_id, property_id=str(property_id), created_at=now, **values
        )
        await self.db.execute(
            stmt.on_conflict_do_update(index_elements=["issue_id", "property_id"], set_=values)
        )

    # =========================================================================
    # Deletion
    # =========================================================================

    async def delete_issue(self, issue_id: str, workspace_id: str | None = None) -> None:
        """
        Soft-delete an issue and all of its value rows in one transaction.

        Raises:
            NotFoundError: the issue does not exist (or is already deleted)
            StorageError: the transaction failed and was rolled back
        """
        issue = await self.get_active_issue(issue_id, workspace_id)
        issue.soft_delete()
        issue.updated_at = issue.deleted_at
        try:
            for model in (PropertySingleValue, PropertyMultiValue):
                await self.db.execute(
                    update(model)
                    .where(model.issue_id == issue_id, model.deleted_at.is_(None))
                    .values(deleted_at=issue.deleted_at)
                )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.exception(f"Failed to delete issue {issue_id}")
            raise StorageError(f"Failed to delete issue {issue_id}") from e

        logger.info(f"Deleted issue {issue_id}")
