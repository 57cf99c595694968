"""Input sanitization applied to every parsed request body."""
from __future__ import annotations

import re
from typing import Any

from .exceptions import ValidationError

MAX_NESTING_DEPTH = 32

_SCRIPT_BLOCK_RE = re.compile(r"<\s*script\b[^>]*>.*?<\s*/\s*script\s*>", re.IGNORECASE | re.DOTALL)
_ANGLE_AND_NUL_RE = re.compile(r"[<>\x00]")


def sanitize_string(value: str) -> str:
    """Drop ``<script>`` blocks, strip ``<``, ``>`` and NUL characters, trim whitespace."""
    value = _SCRIPT_BLOCK_RE.sub("", value)
    value = _ANGLE_AND_NUL_RE.sub("", value)
    return value.strip()


def sanitize_value(data: Any, _depth: int = 0) -> Any:
    """
    Recursively sanitize strings inside dicts and lists.

    Keys are sanitized like values. Numbers, booleans and None pass through.

    Raises:
        ValidationError: If the structure nests deeper than MAX_NESTING_DEPTH.
    """
    if _depth > MAX_NESTING_DEPTH:
        raise ValidationError("Estructura de datos demasiado anidada")

    if isinstance(data, str):
        return sanitize_string(data)

    if isinstance(data, list):
        return [sanitize_value(item, _depth + 1) for item in data]

    if isinstance(data, dict):
        return {
            (sanitize_string(k) if isinstance(k, str) else k): sanitize_value(v, _depth + 1)
            for k, v in data.items()
        }

    return data


__all__ = ["sanitize_string", "sanitize_value", "MAX_NESTING_DEPTH"]
