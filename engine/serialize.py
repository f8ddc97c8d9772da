"""Deterministic JSON encoding for states, moves, and API payloads."""

from __future__ import annotations

import dataclasses
import hashlib
import json
from enum import Enum
from typing import Any, Mapping


def to_serializable(value: Any) -> Any:
    """Convert engine objects into JSON-serializable primitives.

    Objects exposing ``to_token()`` (e.g. grid coordinates) collapse to their
    compact string form, including when used as mapping keys.
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Enum):
        return value.value
    if hasattr(value, "to_token") and callable(value.to_token):
        return value.to_token()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            field.name: to_serializable(getattr(value, field.name))
            for field in dataclasses.fields(value)
        }
    if isinstance(value, Mapping):
        return {_key_token(key): to_serializable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_serializable(item) for item in value]
    if hasattr(value, "to_dict") and callable(value.to_dict):
        return to_serializable(value.to_dict())
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable.")


def _key_token(key: Any) -> str:
    if isinstance(key, Enum):
        return str(key.value)
    if hasattr(key, "to_token") and callable(key.to_token):
        return key.to_token()
    return str(key)


def json_dumps(value: Any, *, indent: int | None = None) -> str:
    """Serialize any supported value to a stable JSON string."""
    separators = (",", ":") if indent is None else None
    return json.dumps(
        to_serializable(value),
        sort_keys=True,
        ensure_ascii=False,
        separators=separators,
        indent=indent,
    )


def digest(value: Any) -> str:
    """Return a SHA256 digest of the stable JSON encoding."""
    return hashlib.sha256(json_dumps(value).encode("utf-8")).hexdigest()
