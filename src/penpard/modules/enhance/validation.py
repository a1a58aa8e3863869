"""Sanity bounds for generated text."""

import json
import re
from typing import Any

from penpard.errors import ValidationRejected

DESCRIPTION_BOUNDS = (50, 3000)
REMEDIATION_BOUNDS = (30, 2000)
SUMMARY_BOUNDS = (50, 2000)

_JSON_ARRAY = re.compile(r"\[[\s\S]*?\]")
_JSON_ARRAY_GREEDY = re.compile(r"\[[\s\S]*\]")


def _within(text: str | None, bounds: tuple[int, int], what: str) -> str:
    cleaned = (text or "").strip()
    low, high = bounds
    if not low < len(cleaned) < high:
        raise ValidationRejected(
            f"Generated {what} has {len(cleaned)} characters; expected {low}-{high}"
        )
    return cleaned


def validate_description(text: str | None) -> str:
    cleaned = _within(text, DESCRIPTION_BOUNDS, "description")
    if cleaned.startswith(("{", "[")):
        raise ValidationRejected("Generated description looks like structured data")
    return cleaned


def validate_remediation(text: str | None) -> str:
    return _within(text, REMEDIATION_BOUNDS, "remediation")


def validate_summary(text: str | None) -> str:
    return _within(text, SUMMARY_BOUNDS, "summary")


def extract_json_array(text: str) -> list[Any]:
    """Pull the first JSON array out of a model answer."""
    for pattern in (_JSON_ARRAY, _JSON_ARRAY_GREEDY):
        match = pattern.search(text or "")
        if not match:
            continue
        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, list):
            return parsed
    raise ValidationRejected("Answer does not contain a JSON array")
