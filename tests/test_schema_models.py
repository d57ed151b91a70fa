"""Unit tests for models/schema_models.py"""

import pytest
from pydantic import ValidationError

from models.schema_defaults import DEFAULT_SCHEMA
from models.schema_models import ComponentSchema, DaPlugin, ModelField


def test_unknown_field_kind_is_rejected():
    with pytest.raises(ValidationError):
        ModelField.model_validate({"component": "slider", "name": "x"})


def test_records_are_frozen():
    field = ModelField(component="text", name="title")

    with pytest.raises(ValidationError):
        field.name = "other"


def test_unsafe_html_alias_and_extra_keys():
    plugin = DaPlugin.model_validate({"unsafeHTML": "<div></div>", "whatever": 1})

    assert plugin.unsafe_html == "<div></div>"
    assert plugin.model_dump(by_alias=True, exclude_none=True) == {"unsafeHTML": "<div></div>"}


def test_malformed_document_is_rejected():
    with pytest.raises(ValidationError):
        ComponentSchema.from_documents({"groups": [{"id": "no-title"}]})


def test_lookups_by_id(schema):
    assert schema.get_definition("card").title == "Card"
    assert schema.get_definition(None) is None
    assert schema.get_model("settings").fields[0].label == "Title Label"
    assert schema.get_filter("cards").components == ("card",)
    assert schema.get_filter("missing") is None


def test_columns_and_key_value_flags(schema):
    assert schema.get_definition("columns").is_columns
    assert not schema.get_definition("columns").is_key_value
    assert schema.get_definition("settings").is_key_value
    assert not schema.get_definition("hero").is_columns


def test_default_schema_documents():
    documents = DEFAULT_SCHEMA.to_documents()

    assert set(documents) == {"component-definition", "component-models", "component-filters"}
    sections = next(g for g in documents["component-definition"]["groups"] if g["id"] == "sections")
    assert sections["components"][0]["plugins"]["da"]["unsafeHTML"] == "<div></div>"
    assert documents["component-filters"] == [
        {"id": "main", "components": ["section"]},
        {"id": "section", "components": ["text", "image"]},
    ]
    robots = documents["component-models"][0]["fields"][0]["fields"][2]
    assert robots["valueType"] == "string"
    assert "multi" not in robots


def test_plugins_without_fields_omit_them():
    sections = next(g for g in DEFAULT_SCHEMA.definition_document()["groups"] if g["id"] == "sections")

    assert sections["components"][0]["plugins"] == {"da": {"unsafeHTML": "<div></div>"}}


def test_plugin_fields_are_dumped(schema):
    hero = next(c for g in schema.definition_document()["groups"] for c in g["components"] if c["id"] == "hero")

    assert hero["plugins"]["da"]["fields"] == [{"name": "image", "selector": "picture"}]
