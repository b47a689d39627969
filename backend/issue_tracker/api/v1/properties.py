"""
PropertyDefinition API endpoints.

- GET /properties - List property definitions in display order
- POST /properties - Create a custom property definition
- GET /properties/{property_id} - Get property definition
"""

from __future__ import annotations

from fastapi import APIRouter, status

from issue_tracker.api.deps import DbSession
from issue_tracker.schemas.property_definition import (
    PropertyDefinitionCreate,
    PropertyDefinitionRead,
)
from issue_tracker.services.property_service import get_property_service

router = APIRouter()


@router.get("", response_model=list[PropertyDefinitionRead])
async def list_properties(db: DbSession):
    """List all property definitions, system properties first."""
    service = get_property_service(db)
    return await service.list_definitions()


@router.post("", response_model=PropertyDefinitionRead, status_code=status.HTTP_201_CREATED)
async def create_property(
    db: DbSession,
    data: PropertyDefinitionCreate,
):
    """Create a new property definition. Ids must be unique."""
    service = get_property_service(db)
    return await service.create_definition(data)


@router.get("/{property_id}", response_model=PropertyDefinitionRead)
async def get_property(
    db: DbSession,
    property_id: str,
):
    """Get a single property definition."""
    service = get_property_service(db)
    return await service.get_definition(property_id)
