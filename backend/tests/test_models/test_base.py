"""Tests for BaseTableModel and model inheritance."""

from datetime import datetime

from sqlmodel import SQLModel

from issue_tracker.models.base import BaseTableModel, utc_now
from issue_tracker.models.issue import Issue, new_issue_id


class TestUtcNow:
    """Test the utc_now helper function."""

    def test_returns_datetime(self):
        """Test utc_now returns a datetime object."""
        result = utc_now()
        assert isinstance(result, datetime)

    def test_has_timezone(self):
        """Test utc_now returns timezone-aware datetime."""
        result = utc_now()
        assert result.tzinfo is not None


class TestBaseTableModel:
    """Test BaseTableModel base class features."""

    def test_is_sqlmodel_subclass(self):
        """Test BaseTableModel inherits from SQLModel."""
        assert issubclass(BaseTableModel, SQLModel)

    def test_has_timestamp_fields(self):
        """Test BaseTableModel has created_at and updated_at."""
        fields = BaseTableModel.model_fields
        assert "created_at" in fields
        assert "updated_at" in fields

    def test_has_soft_delete_field(self):
        """Test BaseTableModel has deleted_at for soft delete."""
        fields = BaseTableModel.model_fields
        assert "deleted_at" in fields


class TestSoftDelete:
    """Test soft delete functionality in BaseTableModel."""

    def test_active_by_default(self):
        issue = Issue(workspace_id="ws")
        assert issue.deleted_at is None

    def test_soft_delete_sets_deleted_at(self):
        issue = Issue(workspace_id="ws")
        issue.soft_delete()
        assert issue.deleted_at is not None


class TestIssueIds:
    """Test opaque issue id generation."""

    def test_id_auto_generated(self):
        issue = Issue(workspace_id="ws")
        assert isinstance(issue.id, str)
        assert len(issue.id) == 32

    def test_ids_unique(self):
        assert new_issue_id() != new_issue_id()
        assert Issue(workspace_id="ws").id != Issue(workspace_id="ws").id
