"""Request body decoding: JSON and URL-encoded forms with nested keys.

URL-encoded keys may use bracket notation::

    cliente[nombre]=Ana&cliente[telefono]=300&servicios[]=corte&servicios[]=tinte

decodes to::

    {"cliente": {"nombre": "Ana", "telefono": "300"}, "servicios": ["corte", "tinte"]}
"""
from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Union
from urllib.parse import parse_qsl

from .exceptions import ValidationError

# Bracket segments past this depth stay part of the last key
MAX_KEY_DEPTH = 5
# Guard against parameter flooding
MAX_PARAMETERS = 1000

_BRACKET_RE = re.compile(r"\[([^\[\]]*)\]")

Container = Union[Dict[str, Any], List[Any]]


def parse_json_body(raw: bytes) -> Any:
    """
    Decode a JSON body. An empty body decodes to ``{}``.

    Raises:
        ValidationError: If the body is not valid UTF-8 JSON.
    """
    if not raw.strip():
        return {}
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError, RecursionError) as e:
        raise ValidationError("JSON inválido en el cuerpo de la solicitud") from e


def split_key(key: str) -> List[str]:
    """
    Split ``a[b][]`` into ``["a", "b", ""]``.

    Keys that are not well-formed bracket notation are returned whole.
    """
    bracket = key.find("[")
    if bracket <= 0:
        return [key]

    root, rest = key[:bracket], key[bracket:]
    parts = _BRACKET_RE.findall(rest)
    if "".join(f"[{p}]" for p in parts) != rest:
        return [key]

    if len(parts) > MAX_KEY_DEPTH:
        overflow = "".join(f"[{p}]" for p in parts[MAX_KEY_DEPTH:])
        parts = parts[:MAX_KEY_DEPTH - 1] + [parts[MAX_KEY_DEPTH - 1] + overflow]
    return [root] + parts


def _new_child(next_part: str) -> Container:
    return [] if next_part == "" else {}


def _assign(container: Container, parts: List[str], value: str) -> None:
    head, tail = parts[0], parts[1:]

    if isinstance(container, list):
        if not tail:
            container.append(value)
            return
        child = _new_child(tail[0])
        container.append(child)
        _assign(child, tail, value)
        return

    if not tail:
        existing = container.get(head)
        if existing is None:
            container[head] = value
        elif isinstance(existing, list):
            existing.append(value)
        elif isinstance(existing, dict):
            existing[str(len(existing))] = value
        else:
            container[head] = [existing, value]
        return

    child = container.get(head)
    if isinstance(child, list) and tail[0] != "":
        child = {str(i): v for i, v in enumerate(child)}
        container[head] = child
    elif not isinstance(child, (dict, list)):
        child = _new_child(tail[0]) if child is None else [child]
        container[head] = child
    _assign(child, tail, value)


def parse_urlencoded_body(raw: bytes) -> Dict[str, Any]:
    """
    Decode an ``application/x-www-form-urlencoded`` body with nested keys.

    Repeated plain keys collect into a list.

    Raises:
        ValidationError: If the body is not UTF-8 or has too many parameters.
    """
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ValidationError("Formulario con codificación inválida") from e

    try:
        pairs = parse_qsl(
            text,
            keep_blank_values=True,
            max_num_fields=MAX_PARAMETERS,
        )
    except ValueError as e:
        raise ValidationError("Demasiados parámetros en el formulario") from e

    result: Dict[str, Any] = {}
    for key, value in pairs:
        if not key:
            continue
        _assign(result, split_key(key), value)
    return result


__all__ = [
    "parse_json_body",
    "parse_urlencoded_body",
    "split_key",
]
