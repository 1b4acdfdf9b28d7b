"""Schema validation for the sidecar metadata and workflow config files."""

from __future__ import annotations

import json
from functools import cache
from importlib import resources

from jsonschema import Draft202012Validator

# --- Schema loaders ---------------------------------------------------------


@cache
def _load_schema(package: str, resource_name: str) -> dict:
    with resources.files(package).joinpath(resource_name).open("r", encoding="utf-8") as f:
        return json.load(f)


def _metadata_schema() -> dict:
    return _load_schema("gitument.schema", "metadata.schema.json")


def _config_schema() -> dict:
    return _load_schema("gitument.schema", "config.schema.json")


# --- Public validators ------------------------------------------------------


def validate_metadata(data: dict) -> None:
    Draft202012Validator(_metadata_schema()).validate(data)


def validate_config(data: dict) -> None:
    Draft202012Validator(_config_schema()).validate(data)
