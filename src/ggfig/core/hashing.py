"""
Canonical JSON serialization and hashing helpers for rendered artifacts.

Provides a single canonical JSON policy and SHA-256 helpers so that panels and layouts
produced from the same inputs hash identically across runs. This module is zero-IO
and uses only the Python standard library.

Notes:
    - Canonical JSON:
        - sort_keys=True
        - separators=(",", ":")
        - ensure_ascii=False
    - Hashing is performed over the UTF-8 encoded canonical JSON string.
    - The CLI records artifact hashes in the gallery manifest.
"""

from __future__ import annotations

import datetime as dt
import hashlib
import json
from collections.abc import Mapping
from typing import Any

__all__ = [
    "json_dumps_canonical",
    "hash_mapping",
]


def json_dumps_canonical(obj: Any) -> str:
    """
    Serialize an object to a canonical JSON string.

    Args:
        obj (Any): JSON-serializable object.

    Returns:
        str: Canonical JSON string with sort_keys=True, compact separators,
        and ensure_ascii=False.

    Notes:
        Temporal values (``date``, ``datetime``, ``time``) are written as ISO 8601
        strings and ``timedelta`` as total seconds. Any other unsupported type raises
        ``TypeError``.
    """
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=_json_default,
    )


def _json_default(value: Any) -> Any:
    if isinstance(value, (dt.date, dt.datetime, dt.time)):
        return value.isoformat()
    if isinstance(value, dt.timedelta):
        return value.total_seconds()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _sha256_hexdigest(s: str) -> str:
    """Compute SHA-256 hex digest of a UTF-8 string."""
    h = hashlib.sha256()
    h.update(s.encode("utf-8"))
    return h.hexdigest()


def hash_mapping(payload: Mapping[str, Any]) -> str:
    """
    Compute a stable hash for a mapping by hashing its canonical JSON.

    Args:
        payload (Mapping[str, Any]): Mapping to hash (e.g., ``Panel.to_dict()``).

    Returns:
        str: SHA-256 hex digest over the canonical JSON serialization.

    Examples:
        >>> hash_mapping({"a": 1, "b": 2}) == hash_mapping({"b": 2, "a": 1})
        True
    """
    return _sha256_hexdigest(json_dumps_canonical(dict(payload)))
