"""
Tests for PropertyDefinitionService.
"""

from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from issue_tracker.models.property_definition import PropertyDefinition
from issue_tracker.schemas.enums import PropertyType, SystemPropertyId
from issue_tracker.schemas.property_config import SelectConfig, TextConfig
from issue_tracker.schemas.property_definition import PropertyDefinitionCreate
from issue_tracker.services.exceptions import ConflictError, NotFoundError
from issue_tracker.services.property_service import SYSTEM_PROPERTIES, PropertyDefinitionService


@pytest.fixture
def property_service(db_session: AsyncSession) -> PropertyDefinitionService:
    return PropertyDefinitionService(db_session)


class TestSystemProperties:
    """Tests for ensure_system_properties()."""

    async def test_seeded_once(self, property_service: PropertyDefinitionService, db_session: AsyncSession):
        # conftest already seeded
        created = await property_service.ensure_system_properties()

        count = (await db_session.execute(select(func.count()).select_from(PropertyDefinition))).scalar()
        assert created == []
        assert count == len(SYSTEM_PROPERTIES)

    async def test_system_definitions(self, property_service: PropertyDefinitionService):
        id_prop = await property_service.get_definition(SystemPropertyId.ID)
        title = await property_service.get_definition(SystemPropertyId.TITLE)
        status = await property_service.get_definition(SystemPropertyId.STATUS)

        assert id_prop.readonly
        assert not title.nullable
        assert isinstance(title.config, TextConfig)
        assert title.config.max_length == 255
        assert isinstance(status.config, SelectConfig)
        assert "open" in status.config.option_ids

    async def test_list_order_puts_system_properties_first(self, property_service: PropertyDefinitionService):
        await property_service.create_definition(
            PropertyDefinitionCreate(id="aaa", name="Alpha", type=PropertyType.TEXT)
        )

        definitions = await property_service.list_definitions()
        ids = [d.id for d in definitions]

        assert ids[:4] == [
            SystemPropertyId.ID,
            SystemPropertyId.TITLE,
            SystemPropertyId.STATUS,
            SystemPropertyId.PRIORITY,
        ]
        assert ids.index(SystemPropertyId.ASSIGNEE) < ids.index(SystemPropertyId.CREATED_AT)
        assert "aaa" in ids


class TestCreateDefinition:
    """Tests for create_definition()."""

    async def test_create_and_get(self, property_service: PropertyDefinitionService):
        created = await property_service.create_definition(
            PropertyDefinitionCreate(
                id="severity",
                name="Severity",
                type=PropertyType.SELECT,
                config={"options": [{"id": "low", "name": "Low"}]},
            )
        )

        fetched = await property_service.get_definition("severity")
        assert created == fetched
        assert fetched.config.option_ids == {"low"}

    async def test_duplicate_id(self, property_service: PropertyDefinitionService):
        data = PropertyDefinitionCreate(id="dup", name="Dup", type=PropertyType.TEXT)
        await property_service.create_definition(data)

        with pytest.raises(ConflictError):
            await property_service.create_definition(data)

    async def test_system_id_is_taken(self, property_service: PropertyDefinitionService):
        with pytest.raises(ConflictError):
            await property_service.create_definition(
                PropertyDefinitionCreate(id=SystemPropertyId.TITLE.value, name="T", type=PropertyType.TEXT)
            )

    async def test_missing_definition(self, property_service: PropertyDefinitionService):
        with pytest.raises(NotFoundError):
            await property_service.get_definition("nope")

    async def test_get_definitions_skips_unknown(self, property_service: PropertyDefinitionService):
        definitions = await property_service.get_definitions([SystemPropertyId.TITLE, "nope"])

        assert set(definitions) == {SystemPropertyId.TITLE.value}

    async def test_soft_deleted_definition_is_hidden(
        self, property_service: PropertyDefinitionService, db_session: AsyncSession
    ):
        await property_service.create_definition(
            PropertyDefinitionCreate(id="old", name="Old", type=PropertyType.TEXT)
        )
        row = await db_session.get(PropertyDefinition, "old")
        row.soft_delete()
        await db_session.commit()

        assert await property_service.get_definitions(["old"]) == {}
        with pytest.raises(ConflictError):
            await property_service.create_definition(
                PropertyDefinitionCreate(id="old", name="Again", type=PropertyType.TEXT)
            )
