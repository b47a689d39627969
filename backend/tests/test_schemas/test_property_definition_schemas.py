"""Tests for PropertyDefinition schemas and typed property config."""

import pytest
from pydantic import ValidationError

from issue_tracker.models.property_definition import PropertyDefinition
from issue_tracker.schemas.enums import PropertyType
from issue_tracker.schemas.property_config import (
    EmptyConfig,
    MinersConfig,
    MultiSelectConfig,
    NumberConfig,
    SelectConfig,
    TextConfig,
    dump_property_config,
    parse_property_config,
)
from issue_tracker.schemas.property_definition import (
    PropertyDefinitionCreate,
    PropertyDefinitionRead,
)


class TestParsePropertyConfig:
    """Tests for parse_property_config()."""

    def test_model_per_type(self):
        assert isinstance(parse_property_config("text", {}), TextConfig)
        assert isinstance(parse_property_config("select", {}), SelectConfig)
        assert isinstance(parse_property_config("multi_select", {}), MultiSelectConfig)
        assert isinstance(parse_property_config("miners", {}), MinersConfig)
        assert isinstance(parse_property_config("number", {}), NumberConfig)

    def test_types_without_options(self):
        assert isinstance(parse_property_config("user", {"anything": 1}), EmptyConfig)
        assert isinstance(parse_property_config("no_such_type", None), EmptyConfig)

    def test_camel_and_snake_keys(self):
        camel = parse_property_config("text", {"maxLength": 10, "patternErrorMessage": "bad"})
        snake = parse_property_config("text", {"max_length": 10, "pattern_error_message": "bad"})
        assert camel == snake
        assert camel.max_length == 10

    def test_json_string_input(self):
        config = parse_property_config("select", '{"options": [{"id": "a", "name": "A"}]}')
        assert config.option_ids == {"a"}

    def test_invalid_config(self):
        with pytest.raises(ValidationError):
            parse_property_config("multi_select", {"maxSelect": 0})

    def test_dump_uses_camel_case_and_drops_none(self):
        config = MultiSelectConfig(options=[{"id": "a", "name": "A"}], max_select=3)
        assert dump_property_config(config) == {
            "options": [{"id": "a", "name": "A"}],
            "maxSelect": 3,
        }


class TestPropertyDefinitionCreate:
    """Tests for PropertyDefinitionCreate schema."""

    def test_config_is_normalized(self):
        data = PropertyDefinitionCreate(
            id="severity",
            name="Severity",
            type=PropertyType.TEXT,
            config={"max_length": 50, "unknown": True},
        )
        assert data.config == {"maxLength": 50}

    def test_invalid_config_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            PropertyDefinitionCreate(id="n", name="N", type=PropertyType.TEXT, config={"maxLength": -1})
        assert "Invalid config" in str(exc_info.value)

    def test_id_pattern(self):
        with pytest.raises(ValidationError):
            PropertyDefinitionCreate(id="1bad", name="Bad", type=PropertyType.TEXT)
        with pytest.raises(ValidationError):
            PropertyDefinitionCreate(id="with-dash", name="Bad", type=PropertyType.TEXT)

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            PropertyDefinitionCreate(id="x", name="X", type="spreadsheet")


class TestPropertyDefinitionRead:
    """Tests for PropertyDefinitionRead schema."""

    def test_from_model_decodes_config(self):
        row = PropertyDefinition(
            id="size",
            name="Size",
            type="number",
            config={"min": 0, "max": 10},
            display_order=3,
        )

        definition = PropertyDefinitionRead.from_model(row)

        assert definition.type is PropertyType.NUMBER
        assert definition.config == NumberConfig(min=0, max=10)
        assert definition.display_order == 3

    def test_dict_input_decoded_by_type(self):
        """Test config dicts are decoded with the type's model, not by union matching."""
        definition = PropertyDefinitionRead.model_validate(
            {"id": "tags", "name": "Tags", "type": "multi_select", "config": {"maxSelect": 2}}
        )
        assert isinstance(definition.config, MultiSelectConfig)
        assert definition.config.max_select == 2

    def test_serializes_config_camel_case(self):
        definition = PropertyDefinitionRead(
            id="title",
            name="Title",
            type=PropertyType.TEXT,
            config=TextConfig(max_length=255),
        )
        assert definition.model_dump()["config"] == {"maxLength": 255}

    def test_frozen(self):
        definition = PropertyDefinitionRead(id="t", name="T", type=PropertyType.TEXT)
        with pytest.raises(ValidationError):
            definition.name = "Other"
