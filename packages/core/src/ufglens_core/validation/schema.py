"""Schema validation for project descriptors."""

from __future__ import annotations

import yaml
from jsonschema import Draft7Validator

from ufglens_core.descriptor import Descriptor

_URL_PATTERN = r"^https?://\S+$"

PROJECT_SCHEMA: dict = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["name", "desc", "site", "tags", "upforgrabs"],
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "desc": {"type": "string", "minLength": 1},
        "site": {"type": "string", "pattern": _URL_PATTERN},
        "tags": {"type": "array", "minItems": 1},
        "upforgrabs": {
            "type": "object",
            "required": ["name", "link"],
            "properties": {
                "name": {"type": "string", "minLength": 1},
                "link": {"type": "string", "pattern": _URL_PATTERN},
            },
        },
        "stats": {
            "type": "object",
            "properties": {
                "issue-count": {"type": "integer", "minimum": 0},
                "fork-count": {"type": "integer", "minimum": 0},
            },
        },
    },
}

_VALIDATOR = Draft7Validator(PROJECT_SCHEMA)


def _field_name(error) -> str:
    path = [str(p) for p in error.absolute_path]
    if error.validator == "required":
        # The missing key is not part of the path; jsonschema only puts it in the message.
        missing = error.message.split("'")[1] if "'" in error.message else "?"
        path.append(missing)
    return ".".join(path) or "<root>"


def _format_error(error) -> str:
    field = _field_name(error)
    if error.validator == "required":
        return f"Field '{field}' expects a value but was not found"
    return f"Field '{field}' is invalid: {error.message}"


def validate_data(data) -> list[str]:
    """Return every schema violation in already-parsed descriptor data."""
    if data is None:
        return ["File is empty"]
    if not isinstance(data, dict):
        return [f"Expected the file to contain a mapping of fields but found {type(data).__name__}"]
    errors = sorted(_VALIDATOR.iter_errors(data), key=lambda e: [str(p) for p in e.absolute_path])
    return [_format_error(e) for e in errors]


def validate_schema(descriptor: Descriptor) -> list[str]:
    """Return the schema violations for a descriptor; an empty list means it is valid."""
    try:
        data = descriptor.read_yaml()
    except yaml.MarkedYAMLError as e:
        mark = e.problem_mark
        line = mark.line + 1 if mark else "?"
        offset = mark.column + 1 if mark else "?"
        return [f"Unable to parse the contents of file - Line: {line}, Offset: {offset}, Problem: {e.problem}"]
    except (yaml.YAMLError, UnicodeDecodeError) as e:
        return [f"Unable to parse the contents of file - {e}"]
    return validate_data(data)
