from __future__ import annotations

from typing import Any

from jsonschema import ValidationError, validate


class ConfigValidationError(ValueError):
    pass


_GRID_POS_SCHEMA: dict = {
    "type": "object",
    "additionalProperties": False,
    "required": ["x", "y", "w", "h"],
    "properties": {
        "x": {"type": "integer", "minimum": 0},
        "y": {"type": "integer", "minimum": 0},
        "w": {"type": "integer", "minimum": 1},
        "h": {"type": "integer", "minimum": 1},
    },
}

DASHBOARD_CONFIG_SCHEMA: dict = {
    "type": "object",
    "additionalProperties": False,
    "required": ["layout", "kpis", "charts", "insights", "generatedAt"],
    "properties": {
        "layout": {"type": "string", "enum": ["simple", "ml", "powerbi"]},
        "generatedAt": {"type": "string", "minLength": 1},
        "kpis": {
            "type": "array",
            "minItems": 1,
            "items": {
                "type": "object",
                "additionalProperties": False,
                "required": ["label", "value"],
                "properties": {
                    "label": {"type": "string", "minLength": 1},
                    "value": {"type": ["string", "number"]},
                    "change": {"type": "string"},
                },
            },
        },
        "charts": {
            "type": "array",
            "items": {
                "type": "object",
                "additionalProperties": False,
                "required": ["id", "type", "title", "data", "layout"],
                "properties": {
                    "id": {"type": "string", "minLength": 1},
                    "type": {"type": "string", "enum": ["bar", "line", "scatter", "heatmap", "pie", "histogram"]},
                    "title": {"type": "string"},
                    "data": {"type": "array", "items": {"type": "object"}},
                    "layout": {"type": "object"},
                    "gridPos": _GRID_POS_SCHEMA,
                },
            },
        },
        "insights": {
            "type": "array",
            "minItems": 1,
            "maxItems": 5,
            "items": {
                "type": "object",
                "additionalProperties": False,
                "required": ["type", "title", "description", "severity"],
                "properties": {
                    "type": {"type": "string", "enum": ["outlier", "trend", "correlation", "general"]},
                    "title": {"type": "string"},
                    "description": {"type": "string"},
                    "severity": {"type": "string", "enum": ["info", "warning", "positive"]},
                },
            },
        },
    },
}


def validate_config(document: dict[str, Any]) -> None:
    try:
        validate(instance=document, schema=DASHBOARD_CONFIG_SCHEMA)
    except ValidationError as exc:
        raise ConfigValidationError(exc.message) from exc
    chart_ids = [chart["id"] for chart in document["charts"]]
    if len(set(chart_ids)) != len(chart_ids):
        raise ConfigValidationError(f"Chart ids must be unique: {chart_ids}")
