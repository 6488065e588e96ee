"""
Custom exceptions for the ggfig.io module.

Purpose
- Provide dataset-layer error types that map cleanly to responsibilities in ggfig.io.
- Keep ggfig.core.errors as the source of truth for mapping/layout errors; every io
  error still derives from ggfig.core.errors.FigureError so callers can catch one base.

Boundaries
- DatasetNotFound: a dataset name is not registered, bundled, or present in data_dir.
- DatasetSchemaError: records or columns do not form a tidy table.

Notes
- These exceptions do not perform any IO and are stdlib-only.
"""

from __future__ import annotations

from collections.abc import Iterable

from ggfig.core.errors import FigureError


class DataError(FigureError):
    """
    Base class for dataset-related errors in ggfig.io.

    Notes:
        Use this as a catch-all for dataset failures, distinct from mapping/layout errors.
    """


class DatasetNotFound(DataError, LookupError):
    """
    Raised when a dataset name cannot be resolved by the provider.

    Attributes:
        name (str): Requested dataset name.
        known (tuple[str, ...]): Names the provider could have served.
    """

    def __init__(self, name: str, known: Iterable[str] = ()) -> None:
        self.name = name
        self.known = tuple(sorted(known))
        super().__init__(f"unknown dataset {name!r} (known={list(self.known)!r})")


class DatasetSchemaError(DataError, ValueError):
    """
    Raised when input does not have tidy-data shape.

    Examples:
        - Records that do not share the same variable set
        - Columns of unequal length
        - A dataset file polars cannot parse
    """
