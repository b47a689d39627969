"""
Counter model - named monotonic sequences used for human-facing issue numbers.

Design notes:
- one row per entity_name ("issue"), created lazily on first allocation
- current_value is the last number handed out; the next block starts at +1
- writers never lock the row; they update with a WHERE current_value = <read>
  guard and retry on a zero rowcount (see IdAllocationService)
"""

from __future__ import annotations

from sqlalchemy import BigInteger, Column, String, Text
from sqlmodel import Field

from issue_tracker.models.base import BaseTableModel

__all__ = ["Counter"]


class Counter(BaseTableModel, table=True):
    """A named monotonically increasing sequence."""

    __tablename__ = "counters"

    id: int | None = Field(default=None, primary_key=True)

    entity_name: str = Field(
        sa_column=Column(String(100), nullable=False, unique=True),
        max_length=100,
    )
    current_value: int = Field(
        default=0,
        sa_column=Column(BigInteger, nullable=False, server_default="0"),
    )
    description: str | None = Field(
        default=None,
        sa_column=Column(Text, nullable=True),
    )
