"""Helpers for JSON authored as text in the editor."""

from __future__ import annotations

import json

from pydantic import JsonValue


class InvalidJsonText(ValueError):
    pass


def _reject_constant(name: str) -> JsonValue:
    # NaN and Infinity are Python extensions, not JSON.
    raise ValueError(f"{name} is not a JSON value")


def parse_json_value(text: str, field_label: str) -> JsonValue:
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as e:
        raise InvalidJsonText(f"{field_label} must be valid JSON.") from e


def parse_json_object(text: str, field_label: str) -> dict[str, JsonValue]:
    parsed = parse_json_value(text, field_label)
    if not isinstance(parsed, dict):
        raise InvalidJsonText(f"{field_label} must be a JSON object.")
    return parsed


def format_json(value: JsonValue) -> str:
    """Render a value the way the editor shows it (two-space indent)."""

    return json.dumps(value, indent=2, ensure_ascii=False)
