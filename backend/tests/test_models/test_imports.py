"""Tests for model imports and table definitions."""

import pytest


class TestModelImports:
    """Test that all models can be imported correctly."""

    def test_import_base_model(self):
        """Test BaseTableModel can be imported."""
        from issue_tracker.models import BaseTableModel

        assert BaseTableModel is not None

    @pytest.mark.parametrize(
        ("name", "table"),
        [
            ("Issue", "issues"),
            ("PropertyDefinition", "property_definitions"),
            ("PropertySingleValue", "property_single_values"),
            ("PropertyMultiValue", "property_multi_values"),
            ("Counter", "counters"),
        ],
    )
    def test_import_table_model(self, name, table):
        """Test each table model resolves lazily and inherits BaseTableModel."""
        import issue_tracker.models as models

        model = getattr(models, name)
        assert model.__tablename__ == table
        assert issubclass(model, models.BaseTableModel)

    def test_unknown_attribute(self):
        """Test unknown names raise AttributeError."""
        import issue_tracker.models as models

        with pytest.raises(AttributeError):
            models.User  # noqa: B018


class TestModelTableArgs:
    """Test models have proper table constraints defined."""

    def test_single_value_unique_per_issue_property(self):
        from issue_tracker.models import PropertySingleValue

        names = [c.name for c in PropertySingleValue.__table_args__ if hasattr(c, "name")]
        assert "uq_psv_issue_property" in names

    def test_multi_value_unique_position(self):
        from issue_tracker.models import PropertyMultiValue

        names = [c.name for c in PropertyMultiValue.__table_args__ if hasattr(c, "name")]
        assert "uq_pmv_issue_property_position" in names

    def test_counter_entity_name_unique(self):
        from issue_tracker.models import Counter

        assert Counter.__table__.c.entity_name.unique is True


class TestModelDefaults:
    """Test default values are set correctly."""

    def test_property_definition_defaults(self):
        from issue_tracker.models.property_definition import PropertyDefinition

        definition = PropertyDefinition(id="custom", name="Custom", type="text")
        assert definition.config == {}
        assert definition.readonly is False
        assert definition.nullable is True
        assert definition.display_order == 0

    def test_counter_defaults(self):
        from issue_tracker.models.counter import Counter

        counter = Counter(entity_name="issue")
        assert counter.current_value == 0
        assert counter.id is None

    def test_multi_value_defaults(self):
        from issue_tracker.models.property_value import PropertyMultiValue

        row = PropertyMultiValue(issue_id="i", property_id="p", property_type="miners", value="m1")
        assert row.position == 0
        assert row.number_value is None
