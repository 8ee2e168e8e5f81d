"""JSON schema definitions for validating packaged artifacts and plugin files."""

from __future__ import annotations

_VECTOR_SCHEMA: dict[str, object] = {
    "type": "array",
    "items": {"type": "number"},
    "minItems": 1,
}

EMBEDDING_ARTIFACT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "model": {"type": "string"},
        "version": {"type": "string"},
        "dimensions": {"type": "integer", "minimum": 1},
        "categories": {
            "type": "object",
            "additionalProperties": _VECTOR_SCHEMA,
        },
        "tokens": {
            "type": "object",
            "additionalProperties": _VECTOR_SCHEMA,
        },
    },
    "required": ["model", "version", "dimensions", "categories", "tokens"],
    "additionalProperties": True,
}

PLUGIN_CATEGORY_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "name": {"type": "string"},
        "description": {"type": "string"},
        "name_patterns": {
            "type": "array",
            "items": {"type": "string"},
        },
        "name_keywords": {
            "type": "array",
            "items": {"type": "string"},
        },
        "value_regex": {"type": "string"},
        "entrypoint": {"type": "string"},
    },
    "required": ["id", "name"],
    "anyOf": [
        {"required": ["name_patterns"]},
        {"required": ["name_keywords"]},
    ],
    "not": {"required": ["value_regex", "entrypoint"]},
    "additionalProperties": False,
}

PLUGIN_DEFINITIONS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "categories": {
            "type": "array",
            "items": PLUGIN_CATEGORY_SCHEMA,
        },
    },
    "required": ["categories"],
    "additionalProperties": False,
}
