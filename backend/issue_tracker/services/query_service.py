"""
Issue query service - filtered, sorted, paginated listing over the EAV tables.

Algorithm:
1. each filter condition becomes a narrow lookup of matching issue ids in the
   single or multi value table; the id sets are intersected in order, and an
   empty intersection short-circuits to an empty page
2. ORDER BY is built from correlated scalar subqueries over the value rows
   (number_value for numeric types), NULLS LAST, with the issue id as final
   tie-breaker; no sort keys means newest first
3. one page query over issues, restricted to the intersected ids
4. total is the intersected set size when filtered, a count query otherwise
5. hydration: two queries load the page's single and multi rows, then values
   are grouped per issue in page order

Design notes:
- lookups join issues, so soft-deleted issues and other workspaces never
  reach the id sets and the set size is a correct total
- the SQL is built with SQLAlchemy Core and fully parameterized
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Sequence

from sqlalchemy import ColumnElement, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from issue_tracker.core.config import Settings, get_settings
from issue_tracker.models.issue import Issue
from issue_tracker.models.property_value import PropertyMultiValue, PropertySingleValue
from issue_tracker.properties.filters import ValueColumn, ValuePredicate, ValueStorage
from issue_tracker.properties.registry import PropertyRegistry, get_default_registry
from issue_tracker.schemas.enums import MULTI_VALUE_TYPES, NUMBER_VALUE_TYPES, FilterOperator
from issue_tracker.schemas.issue import IssueListResult, IssueRead, PropertyValue
from issue_tracker.schemas.query import FilterCondition, SortConfig
from issue_tracker.services.exceptions import (
    FormatError,
    NotFoundError,
    UnsupportedOperatorError,
)
from issue_tracker.services.property_service import PropertyDefinitionService

logger = logging.getLogger(__name__)


class IssueQueryService:
    """Read side of the issue tracker: listing and single-issue lookup."""

    def __init__(
        self,
        db: AsyncSession,
        registry: PropertyRegistry | None = None,
        settings: Settings | None = None,
    ):
        self.db = db
        self.registry = registry or get_default_registry()
        self.settings = settings or get_settings()
        self.properties = PropertyDefinitionService(db)

    # =========================================================================
    # Public API
    # =========================================================================

    async def list_issues(
        self,
        filters: Sequence[FilterCondition] = (),
        sort: Sequence[SortConfig] = (),
        page: int = 1,
        page_size: int | None = None,
        workspace_id: str | None = None,
    ) -> IssueListResult:
        """
        One page of issues matching every filter.

        Raises:
            FormatError: bad pagination or an invalid filter value
            UnsupportedOperatorError: a filter uses an operator its type does not support
            NotFoundError: a sort key references an unknown property
        """
        if page_size is None:
            page_size = self.settings.default_page_size
        if page < 1:
            raise FormatError("page must be at least 1", field="page")
        if not 1 <= page_size <= self.settings.max_page_size:
            raise FormatError(
                f"page_size must be between 1 and {self.settings.max_page_size}", field="page_size"
            )

        matching_ids: set[str] | None = None
        if filters:
            matching_ids = await self._filter_issue_ids(filters, workspace_id)
            if not matching_ids:
                return IssueListResult(issues=[], total=0, page=page, page_size=page_size)

        order_by = await self._build_order_by(sort)

        stmt = select(Issue.id).where(*self._issue_scope(workspace_id))
        if matching_ids is not None:
            stmt = stmt.where(Issue.id.in_(matching_ids))
        stmt = stmt.order_by(*order_by).offset((page - 1) * page_size).limit(page_size)
        result = await self.db.execute(stmt)
        page_ids = list(result.scalars().all())

        if matching_ids is not None:
            total = len(matching_ids)
        else:
            count_stmt = select(func.count()).select_from(Issue).where(*self._issue_scope(workspace_id))
            total = (await self.db.execute(count_stmt)).scalar() or 0

        issues = await self._hydrate(page_ids)
        return IssueListResult(issues=issues, total=total, page=page, page_size=page_size)

    async def get_issue_by_id(self, issue_id: str, workspace_id: str | None = None) -> IssueRead:
        """
        One issue with all of its property values.

        Raises:
            NotFoundError: the issue does not exist (or is deleted)
        """
        stmt = select(Issue.id).where(Issue.id == issue_id, *self._issue_scope(workspace_id))
        result = await self.db.execute(stmt)
        if result.scalar_one_or_none() is None:
            raise NotFoundError("Issue", issue_id)
        issues = await self._hydrate([issue_id])
        return issues[0]

    # =========================================================================
    # Filtering
    # =========================================================================

    @staticmethod
    def _issue_scope(workspace_id: str | None) -> list[ColumnElement[bool]]:
        conditions: list[ColumnElement[bool]] = [Issue.deleted_at.is_(None)]
        if workspace_id is not None:
            conditions.append(Issue.workspace_id == workspace_id)
        return conditions

    async def _filter_issue_ids(
        self,
        filters: Sequence[FilterCondition],
        workspace_id: str | None,
    ) -> set[str]:
        """Intersect the matching id sets of every filter, stopping at the first empty one."""
        predicates: list[ValuePredicate] = []
        for condition in filters:
            transformer = self.registry.filter_transformer(condition.property_type)
            try:
                predicates.append(transformer.build(condition))
            except UnsupportedOperatorError as e:
                logger.warning(f"Rejected filter on property {condition.property_id}: {e.message}")
                raise

        matching: set[str] | None = None
        for predicate in predicates:
            if predicate.match_nothing:
                return set()
            ids = await self._match_predicate(predicate, workspace_id)
            matching = ids if matching is None else matching & ids
            if not matching:
                return set()
        return matching or set()

    async def _match_predicate(self, predicate: ValuePredicate, workspace_id: str | None) -> set[str]:
        model = PropertyMultiValue if predicate.storage is ValueStorage.MULTI else PropertySingleValue
        column = model.number_value if predicate.column is ValueColumn.NUMBER_VALUE else model.value

        stmt = (
            select(model.issue_id)
            .distinct()
            .join(Issue, Issue.id == model.issue_id)
            .where(
                model.property_id == predicate.property_id,
                model.deleted_at.is_(None),
                self._compare(column, predicate.operator, predicate.operand),
                *self._issue_scope(workspace_id),
            )
        )
        if predicate.property_type is not None:
            stmt = stmt.where(model.property_type == str(predicate.property_type))

        result = await self.db.execute(stmt)
        return set(result.scalars().all())

    @staticmethod
    def _compare(column, operator: FilterOperator, operand) -> ColumnElement[bool]:
        if operator is FilterOperator.IN:
            return column.in_(operand)
        if operator is FilterOperator.CONTAINS:
            return column.contains(operand, autoescape=True)
        if operator is FilterOperator.STARTS_WITH:
            return column.startswith(operand, autoescape=True)
        if operator is FilterOperator.ENDS_WITH:
            return column.endswith(operand, autoescape=True)
        if operand is None:
            return column.is_(None)
        return column == operand

    # =========================================================================
    # Sorting
    # =========================================================================

    async def _build_order_by(self, sort: Sequence[SortConfig]) -> list:
        if not sort:
            return [Issue.created_at.desc(), Issue.id]

        definitions = await self.properties.get_definitions(key.id for key in sort)
        order_by = []
        for key in sort:
            definition = definitions.get(key.id)
            if definition is None:
                raise NotFoundError("Property", key.id)

            if definition.type in MULTI_VALUE_TYPES:
                # First element of the list
                model = PropertyMultiValue
                ordering = [PropertyMultiValue.position]
            else:
                model = PropertySingleValue
                ordering = []
            column = model.number_value if definition.type in NUMBER_VALUE_TYPES else model.value

            sort_value = (
                select(column)
                .where(
                    model.issue_id == Issue.id,
                    model.property_id == definition.id,
                    model.deleted_at.is_(None),
                )
                .order_by(*ordering)
                .limit(1)
                .correlate(Issue)
                .scalar_subquery()
            )
            direction = sort_value.desc() if key.desc else sort_value.asc()
            order_by.append(direction.nulls_last())

        order_by.append(Issue.id)
        return order_by

    # =========================================================================
    # Hydration
    # =========================================================================

    async def _hydrate(self, issue_ids: Sequence[str]) -> list[IssueRead]:
        """Load every active value row of the given issues, keeping the given order."""
        if not issue_ids:
            return []

        single_result = await self.db.execute(
            select(PropertySingleValue.issue_id, PropertySingleValue.property_id, PropertySingleValue.value)
            .where(
                PropertySingleValue.issue_id.in_(issue_ids),
                PropertySingleValue.deleted_at.is_(None),
            )
            .order_by(PropertySingleValue.property_id)
        )
        multi_result = await self.db.execute(
            select(PropertyMultiValue.issue_id, PropertyMultiValue.property_id, PropertyMultiValue.value)
            .where(
                PropertyMultiValue.issue_id.in_(issue_ids),
                PropertyMultiValue.deleted_at.is_(None),
            )
            .order_by(PropertyMultiValue.property_id, PropertyMultiValue.position)
        )

        values: dict[str, dict[str, str | list[str] | None]] = defaultdict(dict)
        for row in single_result.all():
            values[row.issue_id][row.property_id] = row.value
        for row in multi_result.all():
            items = values[row.issue_id].setdefault(row.property_id, [])
            if row.value is not None:
                items.append(row.value)

        return [
            IssueRead(
                issue_id=issue_id,
                property_values=[
                    PropertyValue(property_id=property_id, value=value)
                    for property_id, value in sorted(values[issue_id].items())
                ],
            )
            for issue_id in issue_ids
        ]
