"""
Base SQLModel classes with common fields.

Design decisions:
- Use SQLModel for combined Pydantic + SQLAlchemy functionality
- Primary keys are declared per table: issues and property definitions use
  opaque string ids, EAV value rows and counters use integer surrogates
- Every table carries timestamps and a nullable deleted_at tombstone

Note on Column reuse: SQLAlchemy Column objects cannot be shared between
tables. When using inheritance, we must define columns without sa_column
or use sa_column_kwargs to avoid sharing Column objects.
"""

from __future__ import annotations

from datetime import UTC, datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

__all__ = [
    "SQLModel",
    "BaseTableModel",
    "utc_now",
]


def utc_now() -> datetime:
    """Get current UTC time."""
    return datetime.now(UTC)


class BaseTableModel(SQLModel):
    """
    Base class for all database table models.

    Provides:
    - created_at, updated_at: Automatic timestamps
    - deleted_at: Soft-delete support

    Usage:
        class Issue(BaseTableModel, table=True):
            __tablename__ = "issues"
            id: str = Field(primary_key=True)

    Note: Subclasses must set table=True and declare their own primary key.
    """

    # Timestamps
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_type=sa.DateTime(timezone=True),
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_type=sa.DateTime(timezone=True),
    )

    # Soft delete - null means active, set means deleted
    deleted_at: datetime | None = Field(
        default=None,
        sa_type=sa.DateTime(timezone=True),
    )

    def soft_delete(self) -> None:
        """Mark record as deleted."""
        self.deleted_at = utc_now()
