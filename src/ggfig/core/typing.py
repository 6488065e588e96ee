"""
Lightweight typing aliases used across the core, io and viz layers.

This module contains no runtime logic and is zero-IO.

Examples:
    >>> from ggfig.core.typing import Record
    >>> row: Record = {"x": 1, "y": 2.5, "category": "a"}
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "Scalar",
    "Record",
    "Point",
    "JsonDict",
]

# One cell of a tidy table.
Scalar = int | float | str | bool | None

# One observation: variable name -> scalar value.
Record = dict[str, Scalar]

# (x, y) vertex of a path, area outline or iso-line.
Point = tuple[Any, Any]

# Convenient JSON-like mapping alias. Kept intentionally broad for serde boundaries.
JsonDict = dict[str, Any]
