"""
API dependencies for FastAPI route handlers.

Provides:
- Database session dependency
- Pagination parameter dependency
- Workspace id dependency (authenticated upstream, passed as a header)
- Property registry dependency
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header, Query
from sqlalchemy.ext.asyncio import AsyncSession

from issue_tracker.core.config import get_settings
from issue_tracker.database import get_db
from issue_tracker.properties.registry import PropertyRegistry, get_default_registry
from issue_tracker.schemas.common import PaginationParams

__all__ = [
    "DbSession",
    "Pagination",
    "WorkspaceId",
    "Registry",
    "get_pagination",
    "get_workspace_id",
    "get_registry",
]


# Type alias for database session dependency
DbSession = Annotated[AsyncSession, Depends(get_db)]


def get_pagination(
    page: int = Query(default=1, ge=1, description="Page number (1-indexed)"),
    page_size: int = Query(
        default=get_settings().default_page_size,
        ge=1,
        le=get_settings().max_page_size,
        description="Items per page",
    ),
) -> PaginationParams:
    """Dependency for pagination parameters."""
    return PaginationParams(page=page, page_size=page_size)


# Type alias for pagination dependency
Pagination = Annotated[PaginationParams, Depends(get_pagination)]


def get_workspace_id(
    x_workspace_id: str = Header(min_length=1, max_length=255, description="Caller's workspace"),
) -> str:
    """Workspace of the (already authenticated) caller."""
    return x_workspace_id


WorkspaceId = Annotated[str, Depends(get_workspace_id)]


def get_registry() -> PropertyRegistry:
    """Processor registry; override in tests to inject custom processors."""
    return get_default_registry()


Registry = Annotated[PropertyRegistry, Depends(get_registry)]
