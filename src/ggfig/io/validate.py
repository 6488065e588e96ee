"""
Tidy-data validation utilities for ggfig.io.

Purpose
- Build Polars DataFrames from records or columns while enforcing tidy-data shape
  (one observation per record, one variable per field, every record sharing the same
  variable set).
- Infer the VariableKind of each column so the mapping resolver can check channel domains.

Kind inference
- Numeric and temporal dtypes → continuous.
- Strings, booleans, categoricals and enums → discrete.
- Null dtype (no observed values) → empty, compatible with every channel domain.

Notes
- Depends on polars and ggfig.core; raises DatasetSchemaError at the io boundary.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import polars as pl

from ggfig.core.grammar import VariableKind

from .errors import DatasetSchemaError

__all__ = [
    "infer_kind",
    "schema_of",
    "frame_from_records",
    "frame_from_columns",
]


def infer_kind(dtype: pl.DataType) -> VariableKind:
    """
    Infer the variable kind for a Polars dtype.

    Args:
        dtype (pl.DataType): Column dtype.

    Returns:
        VariableKind: CONTINUOUS, DISCRETE or EMPTY.
    """
    if dtype == pl.Null:
        return VariableKind.EMPTY
    if dtype.is_numeric() or dtype.is_temporal():
        return VariableKind.CONTINUOUS
    return VariableKind.DISCRETE


def schema_of(df: pl.DataFrame) -> dict[str, VariableKind]:
    """Return variable name → VariableKind for every column, in column order."""
    return {name: infer_kind(dtype) for name, dtype in df.schema.items()}


def _check_same_variables(records: Sequence[Mapping[str, Any]]) -> list[str]:
    first = list(records[0].keys())
    expected = set(first)
    for i, rec in enumerate(records[1:], start=1):
        keys = set(rec.keys())
        if keys != expected:
            missing = sorted(expected - keys)
            extra = sorted(keys - expected)
            raise DatasetSchemaError(
                f"record {i} does not share the dataset's variable set "
                f"(missing={missing!r}, unexpected={extra!r})"
            )
    return first


def frame_from_records(
    records: Sequence[Mapping[str, Any]],
    *,
    variables: Iterable[str] | None = None,
) -> pl.DataFrame:
    """
    Build a DataFrame from records that all share the same variable set.

    Args:
        records (Sequence[Mapping[str, Any]]): One mapping per observation.
        variables (Iterable[str] | None): Variable names to declare when ``records`` is
            empty (the resulting columns have Null dtype). Ignored otherwise, except
            that it must match the records' variables when both are given.

    Returns:
        pl.DataFrame: Frame with columns in first-record order.

    Raises:
        DatasetSchemaError: If records disagree on variables or a column mixes
            incompatible value types.
    """
    declared = list(variables) if variables is not None else None
    if not records:
        return pl.DataFrame({name: [] for name in (declared or [])})

    names = _check_same_variables(records)
    if declared is not None and set(declared) != set(names):
        raise DatasetSchemaError(
            f"declared variables {sorted(declared)!r} differ from record variables {sorted(names)!r}"
        )
    columns = {name: [rec[name] for rec in records] for name in names}
    return frame_from_columns(columns)


def frame_from_columns(columns: Mapping[str, Sequence[Any]]) -> pl.DataFrame:
    """
    Build a DataFrame from equal-length columns.

    Raises:
        DatasetSchemaError: If columns have unequal lengths or mix incompatible types.
    """
    lengths = {name: len(values) for name, values in columns.items()}
    if len(set(lengths.values())) > 1:
        raise DatasetSchemaError(f"columns have unequal lengths: {lengths!r}")
    try:
        return pl.DataFrame({name: list(values) for name, values in columns.items()}, strict=False)
    except (pl.exceptions.PolarsError, TypeError, ValueError) as exc:
        raise DatasetSchemaError(f"columns do not form a tidy table: {exc}") from exc
