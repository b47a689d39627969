"""
Base service with common data access operations.

Provides async methods for:
- get_by_id()
- create()
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from issue_tracker.models.base import BaseTableModel

# Type variables for generic service
ModelType = TypeVar("ModelType", bound=BaseTableModel)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)


class BaseService(Generic[ModelType, CreateSchemaType]):
    """
    Generic base service.

    Usage:
        class PropertyDefinitionService(BaseService[PropertyDefinition, PropertyDefinitionCreate]):
            def __init__(self, db: AsyncSession):
                super().__init__(db, PropertyDefinition)
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]):
        self.db = db
        self.model = model

    async def get_by_id(self, id: Any) -> ModelType | None:
        """Get a single record by primary key (excludes soft-deleted)."""
        stmt = select(self.model).where(
            self.model.id == id,
            self.model.deleted_at.is_(None),
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, data: CreateSchemaType) -> ModelType:
        """Create a new record."""
        # Convert Pydantic model to dict, excluding unset fields
        create_data = data.model_dump(exclude_unset=True)

        # Create model instance
        db_obj = self.model(**create_data)
        self.db.add(db_obj)
        await self.db.commit()
        await self.db.refresh(db_obj)

        return db_obj

