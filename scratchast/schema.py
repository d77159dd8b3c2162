"""JSON schema for the object envelope of project.json.

Only the object shapes are described here. The tuple encodings (inputs,
fields, variables, lists) are ambiguous unions and are decoded by the ordered
shape matchers in ``decode``. Unknown keys are allowed everywhere so newer
files still load.
"""

from typing import Any, Dict

from jsonschema import Draft202012Validator

NULLABLE_STRING = {"type": ["string", "null"]}

PROJECT_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["targets", "meta"],
    "properties": {
        "targets": {"type": "array", "items": {"$ref": "#/$defs/target"}},
        "extensions": {"type": "array", "items": {"type": "string"}},
        "meta": {"$ref": "#/$defs/meta"},
    },
    "$defs": {
        "meta": {
            "type": "object",
            "required": ["semver"],
            "properties": {
                "semver": {"type": "string"},
                "vm": {"type": "string"},
                "agent": {"type": "string"},
            },
        },
        "target": {
            "type": "object",
            "required": [
                "isStage",
                "name",
                "variables",
                "lists",
                "broadcasts",
                "blocks",
                "costumes",
                "sounds",
            ],
            "properties": {
                "isStage": {"type": "boolean"},
                "name": {"type": "string"},
                "variables": {"type": "object", "additionalProperties": {"type": "array"}},
                "lists": {"type": "object", "additionalProperties": {"type": "array"}},
                "broadcasts": {"type": "object", "additionalProperties": {"type": "string"}},
                "blocks": {
                    "type": "object",
                    "additionalProperties": {
                        "oneOf": [
                            {"$ref": "#/$defs/block"},
                            {"type": "array"},
                        ]
                    },
                },
                "costumes": {"type": "array", "items": {"$ref": "#/$defs/costume"}},
                "sounds": {"type": "array", "items": {"$ref": "#/$defs/sound"}},
                "currentCostume": {"type": "integer", "minimum": 0},
                "volume": {"type": "number"},
                "layerOrder": {"type": "integer", "minimum": 0},
                "x": {"type": "number"},
                "y": {"type": "number"},
                "size": {"type": "number"},
                "direction": {"type": "number"},
                "draggable": {"type": "boolean"},
            },
        },
        "block": {
            "type": "object",
            "required": ["opcode", "topLevel"],
            "properties": {
                "opcode": {"type": "string"},
                "next": NULLABLE_STRING,
                "parent": NULLABLE_STRING,
                "inputs": {"type": "object", "additionalProperties": {"type": "array"}},
                "fields": {"type": "object", "additionalProperties": {"type": "array"}},
                "topLevel": {"type": "boolean"},
                "shadow": {"type": "boolean"},
                "mutation": {"type": "object"},
                "x": {"type": "number"},
                "y": {"type": "number"},
            },
        },
        "costume": {
            "type": "object",
            "required": ["name", "dataFormat", "assetId", "md5ext", "rotationCenterX", "rotationCenterY"],
            "properties": {
                "name": {"type": "string"},
                "dataFormat": {"type": "string"},
                "assetId": {"type": "string"},
                "md5ext": {"type": "string"},
                "rotationCenterX": {"type": "number"},
                "rotationCenterY": {"type": "number"},
                "bitmapResolution": {"type": "number"},
            },
        },
        "sound": {
            "type": "object",
            "required": ["name", "assetId", "dataFormat", "md5ext"],
            "properties": {
                "name": {"type": "string"},
                "assetId": {"type": "string"},
                "dataFormat": {"type": "string"},
                "md5ext": {"type": "string"},
                "rate": {"type": "number"},
                "sampleCount": {"type": "number"},
            },
        },
    },
}

PROJECT_VALIDATOR = Draft202012Validator(PROJECT_SCHEMA)


def format_error_path(path: Any) -> str:
    """Render a jsonschema error path like ``targets[0].blocks.abc``."""
    rendered = ""
    for part in path:
        if isinstance(part, int):
            rendered += f"[{part}]"
        else:
            rendered += f".{part}" if rendered else str(part)
    return rendered or "<root>"
