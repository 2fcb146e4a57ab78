from __future__ import annotations

import json

import jsonschema
import pytest
import yaml

from bulk_import.config.loader import SCHEMA_PATH

"""Bundled config schema contract."""


@pytest.fixture()
def schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def test_schema_file_is_bundled(schema):
    assert schema["type"] == "object"
    jsonschema.Draft7Validator.check_schema(schema)


def test_sample_config_is_valid(schema, sample_config_yaml: str):
    jsonschema.validate(yaml.safe_load(sample_config_yaml), schema)


def test_empty_config_is_valid(schema):
    jsonschema.validate({}, schema)


def test_profile_override_may_be_empty(schema):
    jsonschema.validate({"profiles": {"doctors": None}}, schema)


def test_timeout_must_be_positive(schema):
    with pytest.raises(jsonschema.ValidationError):
        jsonschema.validate({"api": {"timeout_seconds": 0}}, schema)
