"""
PropertyDefinition service - loading, seeding and creating definitions.

Definitions are returned as PropertyDefinitionRead with config already
decoded, which is the form every processor expects.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from issue_tracker.models.property_definition import PropertyDefinition
from issue_tracker.schemas.enums import SYSTEM_PROPERTY_ORDER, PropertyType, SystemPropertyId
from issue_tracker.schemas.property_definition import PropertyDefinitionCreate, PropertyDefinitionRead
from issue_tracker.services.base import BaseService
from issue_tracker.services.exceptions import ConflictError, NotFoundError

logger = logging.getLogger(__name__)


def _options(*pairs: tuple[str, str, str]) -> dict[str, Any]:
    return {"options": [{"id": option_id, "name": name, "color": color} for option_id, name, color in pairs]}


# Built-in catalogue, seeded by ensure_system_properties()
SYSTEM_PROPERTIES: list[dict[str, Any]] = [
    {
        "id": SystemPropertyId.ID,
        "name": "ID",
        "type": PropertyType.ID,
        "readonly": True,
        "nullable": False,
    },
    {
        "id": SystemPropertyId.TITLE,
        "name": "Title",
        "type": PropertyType.TEXT,
        "nullable": False,
        "config": {"maxLength": 255},
    },
    {
        "id": SystemPropertyId.STATUS,
        "name": "Status",
        "type": PropertyType.SELECT,
        "config": _options(
            ("open", "Open", "gray"),
            ("in_progress", "In Progress", "blue"),
            ("resolved", "Resolved", "green"),
            ("closed", "Closed", "default"),
        ),
    },
    {
        "id": SystemPropertyId.CREATED_AT,
        "name": "Created At",
        "type": PropertyType.DATETIME,
        "readonly": True,
    },
    {
        "id": SystemPropertyId.UPDATED_AT,
        "name": "Updated At",
        "type": PropertyType.DATETIME,
        "readonly": True,
    },
    {
        "id": SystemPropertyId.DESCRIPTION,
        "name": "Description",
        "type": PropertyType.RICH_TEXT,
    },
    {
        "id": SystemPropertyId.PRIORITY,
        "name": "Priority",
        "type": PropertyType.SELECT,
        "config": _options(
            ("p0", "P0", "red"),
            ("p1", "P1", "orange"),
            ("p2", "P2", "yellow"),
            ("p3", "P3", "gray"),
        ),
    },
    {
        "id": SystemPropertyId.CATEGORY,
        "name": "Category",
        "type": PropertyType.SELECT,
        "config": {"options": []},
    },
    {
        "id": SystemPropertyId.DIAGNOSIS,
        "name": "Diagnosis",
        "type": PropertyType.SELECT,
        "config": {"options": []},
    },
    {
        "id": SystemPropertyId.LABEL,
        "name": "Labels",
        "type": PropertyType.MULTI_SELECT,
        "config": {"options": []},
    },
    {
        "id": SystemPropertyId.MINERS,
        "name": "Miners",
        "type": PropertyType.MINERS,
    },
    {
        "id": SystemPropertyId.ASSIGNEE,
        "name": "Assignee",
        "type": PropertyType.USER,
    },
    {
        "id": SystemPropertyId.REPORTER,
        "name": "Reporter",
        "type": PropertyType.USER,
    },
]


def _priority_key(definition: PropertyDefinitionRead) -> tuple[int, int, str]:
    try:
        rank = SYSTEM_PROPERTY_ORDER.index(SystemPropertyId(definition.id))
    except ValueError:
        rank = len(SYSTEM_PROPERTY_ORDER)
    return rank, definition.display_order, definition.name


class PropertyDefinitionService(BaseService[PropertyDefinition, PropertyDefinitionCreate]):
    """Service for property definitions."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, PropertyDefinition)

    async def list_definitions(self) -> list[PropertyDefinitionRead]:
        """All active definitions in display priority order."""
        stmt = select(PropertyDefinition).where(PropertyDefinition.deleted_at.is_(None))
        result = await self.db.execute(stmt)
        definitions = [PropertyDefinitionRead.from_model(row) for row in result.scalars().all()]
        return sorted(definitions, key=_priority_key)

    async def get_definitions(self, property_ids: Iterable[str]) -> dict[str, PropertyDefinitionRead]:
        """Active definitions for the given ids, keyed by id. Missing ids are absent."""
        ids = set(property_ids)
        if not ids:
            return {}
        stmt = select(PropertyDefinition).where(
            PropertyDefinition.id.in_(ids),
            PropertyDefinition.deleted_at.is_(None),
        )
        result = await self.db.execute(stmt)
        return {row.id: PropertyDefinitionRead.from_model(row) for row in result.scalars().all()}

    async def get_definition(self, property_id: str) -> PropertyDefinitionRead:
        """One active definition, or NotFoundError."""
        definition = await self.get_by_id(property_id)
        if definition is None:
            raise NotFoundError("Property", property_id)
        return PropertyDefinitionRead.from_model(definition)

    async def create_definition(self, data: PropertyDefinitionCreate) -> PropertyDefinitionRead:
        """Create a definition. Ids are never reused, even after soft delete."""
        existing = await self.db.get(PropertyDefinition, data.id)
        if existing is not None:
            raise ConflictError("Property", "id", data.id)
        definition = await self.create(data)
        logger.info(f"Created property definition {definition.id} ({definition.type})")
        return PropertyDefinitionRead.from_model(definition)

    async def ensure_system_properties(self) -> list[str]:
        """Insert missing system properties. Idempotent; returns the ids created."""
        result = await self.db.execute(select(PropertyDefinition.id))
        existing = set(result.scalars().all())

        created: list[str] = []
        for display_order, seed in enumerate(SYSTEM_PROPERTIES):
            property_id = str(seed["id"])
            if property_id in existing:
                continue
            data = PropertyDefinitionCreate(**{**seed, "id": property_id, "display_order": display_order})
            self.db.add(PropertyDefinition(**data.model_dump()))
            created.append(property_id)

        if created:
            await self.db.commit()
            logger.info(f"Seeded {len(created)} system properties")
        return created


def get_property_service(db: AsyncSession) -> PropertyDefinitionService:
    """Factory function for PropertyDefinitionService."""
    return PropertyDefinitionService(db)
