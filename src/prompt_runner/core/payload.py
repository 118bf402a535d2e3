"""
Ingestion boundary for raw backend payloads.

Backends hand us plain dicts (sometimes with non-string keys), pydantic
models from the OpenAI/Anthropic SDKs, or arbitrary attribute objects.
``to_plain`` converts all of them, once, into nested ``dict[str, Any]`` /
``list`` structures so that normalizers only deal with string keys.

Example:
    >>> from anthropic.types import Message
    >>> to_plain(message)["content"][0]["type"]
    'text'
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel

logger = logging.getLogger(__name__)

_SCALARS = (str, int, float, bool, type(None))


def to_plain(value: Any) -> Any:
    """
    Recursively convert a payload into plain dicts, lists and scalars.

    Args:
        value: Raw payload (mapping, pydantic model, sequence, object, scalar)

    Returns:
        An equivalent structure made of ``dict[str, Any]``, ``list`` and scalars
    """
    if isinstance(value, _SCALARS):
        return value
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, BaseModel):
        return to_plain(value.model_dump(mode="json", exclude_none=False))
    if isinstance(value, Mapping):
        return {_key(k): to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_plain(v) for v in value]
    if hasattr(value, "to_dict") and callable(value.to_dict):
        return to_plain(value.to_dict())
    if hasattr(value, "__dict__"):
        return {
            _key(k): to_plain(v)
            for k, v in vars(value).items()
            if not k.startswith("_")
        }
    return str(value)


def _key(key: Any) -> str:
    if isinstance(key, Enum):
        return str(key.value)
    return str(key)


def as_dict(value: Any) -> dict[str, Any]:
    """Return ``value`` if it is a dict, else an empty dict."""
    return value if isinstance(value, dict) else {}


def as_list(value: Any) -> list[Any]:
    """Return ``value`` if it is a list, else an empty list."""
    return value if isinstance(value, list) else []


def first_present(data: dict[str, Any], *keys: str) -> Any:
    """Return the first value among ``keys`` that is present and not None."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def as_int(value: Any) -> int:
    """Coerce a usage counter to a non-negative int; anything else is 0."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float):
        return max(int(value), 0)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    if value is not None:
        logger.warning(f"Ignoring non-integer usage counter: {value!r}")
    return 0


def as_float(value: Any) -> float:
    """Coerce a relevance score to float; anything non-numeric is 0.0."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    return 0.0


def parse_arguments(raw: Any) -> dict[str, Any]:
    """
    Materialize tool-call arguments as a dict.

    Accepts an already-decoded mapping or a JSON string. Anything that does
    not decode to a JSON object yields an empty dict.
    """
    if raw is None:
        return {}
    if isinstance(raw, Mapping):
        return to_plain(raw)
    if isinstance(raw, str):
        if not raw.strip():
            return {}
        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Failed to parse tool arguments: {raw[:100]}")
            return {}
        if isinstance(decoded, dict):
            return decoded
        logger.warning(f"Tool arguments are not a JSON object: {raw[:100]}")
    return {}
