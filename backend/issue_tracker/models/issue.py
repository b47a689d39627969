"""
Issue model - the entity side of the EAV layout.

Design notes:
- id is opaque; the human-facing number lives in the ID property row
- the row carries no attributes of its own: title, status, assignee, ... are
  all property values in property_single_values / property_multi_values
- updated_at is bumped by every property mutation
"""

from __future__ import annotations

import uuid as uuid_lib

from sqlalchemy import Column, Index, String
from sqlmodel import Field

from issue_tracker.models.base import BaseTableModel

__all__ = ["Issue", "new_issue_id"]


def new_issue_id() -> str:
    """Generate an opaque issue primary key."""
    return uuid_lib.uuid4().hex


class Issue(BaseTableModel, table=True):
    """A work item whose attributes are stored as property value rows."""

    __tablename__ = "issues"
    __table_args__ = (
        Index("idx_issues_workspace", "workspace_id", "deleted_at"),
        Index("idx_issues_created_at", "created_at"),
    )

    id: str = Field(
        default_factory=new_issue_id,
        sa_column=Column(String(36), primary_key=True),
    )

    # Tenant scope - supplied by the already-authenticated caller
    workspace_id: str = Field(
        sa_column=Column(String(255), nullable=False),
        max_length=255,
    )
