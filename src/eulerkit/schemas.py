from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema import FormatChecker

ADDRESS_PATTERN = "^0x[0-9a-fA-F]{40}$"
HEX_PATTERN = "^0x([0-9a-fA-F]{2})*$"

BATCH_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "Euler call batch",
    "type": "object",
    "required": ["items"],
    "additionalProperties": False,
    "properties": {
        "allowError": {"type": "boolean"},
        "items": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["contract", "method"],
                "additionalProperties": False,
                "properties": {
                    "contract": {"type": "string", "minLength": 1},
                    "method": {"type": "string", "minLength": 1},
                    "args": {"type": "array"},
                    "address": {"type": "string", "pattern": ADDRESS_PATTERN},
                    "allowError": {"type": "boolean"},
                },
            },
        },
    },
}

RESULTS_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "Raw batch results",
    "type": "array",
    "items": {
        "oneOf": [
            {"type": "string", "pattern": HEX_PATTERN},
            {
                "type": "object",
                "required": ["result"],
                "properties": {
                    "result": {"type": "string", "pattern": HEX_PATTERN},
                    "success": {"type": "boolean"},
                },
            },
        ]
    },
}


class SchemaValidationError(ValueError):
    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


def validate_instance(instance: Any, schema: dict[str, Any]) -> None:
    validator_cls = jsonschema.validators.validator_for(schema)
    validator_cls.check_schema(schema)
    validator = validator_cls(schema, format_checker=FormatChecker())
    errors = sorted(validator.iter_errors(instance), key=lambda e: list(e.path))
    if errors:
        formatted = [_format_error(err) for err in errors]
        raise SchemaValidationError(
            f"Schema validation failed for {schema.get('title', 'document')}.",
            errors=formatted,
        )


def _format_error(error: jsonschema.ValidationError) -> str:
    location = "/".join(str(part) for part in error.path) or "<root>"
    return f"{location}: {error.message}"


def load_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)
