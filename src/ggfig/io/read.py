"""
File-backed dataset discovery and reading.

Overview
- find_dataset_file(): locate ``<name>.csv | .parquet | .json`` under a data directory.
- read_frame(): read one file into a Polars DataFrame.
- list_dataset_files(): names of the datasets a data directory can serve.

Notes
- Lookup order for extensions is fixed (csv, parquet, json) so resolution is deterministic
  when several files share a stem.
- Parse failures surface as DatasetSchemaError.
"""

from __future__ import annotations

import os
from pathlib import Path

import polars as pl

from .errors import DatasetSchemaError

__all__ = [
    "SUPPORTED_SUFFIXES",
    "find_dataset_file",
    "list_dataset_files",
    "read_frame",
]

SUPPORTED_SUFFIXES: tuple[str, ...] = (".csv", ".parquet", ".json")


def find_dataset_file(data_dir: str | os.PathLike[str] | None, name: str) -> Path | None:
    """
    Return the first existing ``data_dir/<name><suffix>`` or None.

    Args:
        data_dir: Directory to search; None disables file lookup.
        name (str): Dataset name (file stem).
    """
    if data_dir is None:
        return None
    root = Path(data_dir)
    for suffix in SUPPORTED_SUFFIXES:
        p = root / f"{name}{suffix}"
        if p.is_file():
            return p
    return None


def list_dataset_files(data_dir: str | os.PathLike[str] | None) -> list[str]:
    """Return sorted dataset names (file stems) available under ``data_dir``."""
    if data_dir is None:
        return []
    root = Path(data_dir)
    if not root.is_dir():
        return []
    return sorted({p.stem for p in root.iterdir() if p.is_file() and p.suffix in SUPPORTED_SUFFIXES})


def read_frame(path: str | os.PathLike[str]) -> pl.DataFrame:
    """
    Read a dataset file into a DataFrame.

    Args:
        path: File with a supported suffix.

    Returns:
        pl.DataFrame: Materialized frame (possibly empty).

    Raises:
        DatasetSchemaError: If the suffix is unsupported or polars cannot parse the file.
    """
    p = Path(path)
    try:
        if p.suffix == ".csv":
            return pl.read_csv(p)
        if p.suffix == ".parquet":
            return pl.read_parquet(p)
        if p.suffix == ".json":
            return pl.read_json(p)
    except (pl.exceptions.PolarsError, OSError) as exc:
        raise DatasetSchemaError(f"failed to read dataset file {str(p)!r}: {exc}") from exc
    raise DatasetSchemaError(f"unsupported dataset file suffix {p.suffix!r} (path={str(p)!r})")
