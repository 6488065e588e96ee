"""
Dataset facade for ggfig.io.

A Dataset is a named, immutable tidy table backed by a Polars DataFrame. Rows are
observations and columns are variables; every record shares the same variable set.
Datasets are loaded once per example and may be shared read-only between renders.

Source of truth
- Variable kinds: ggfig.io.validate.infer_kind (continuous | discrete | empty)
- Record/column construction rules: ggfig.io.validate

Import DAG discipline:
- Depends only on stdlib, polars and ggfig.core.*.
- Must not import higher layers (viz, stats, examples, cli).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import polars as pl

from ggfig.core.grammar import VariableKind
from ggfig.core.typing import Record

from .validate import frame_from_columns, frame_from_records, schema_of


class Dataset:
    """
    Named immutable tidy table.

    Notes:
        - Polars DataFrames are never mutated in place by ggfig; transformations return
          new frames, so handing ``frame`` to callers does not break immutability.
        - ``schema`` is computed once at construction.

    Examples:
        >>> from ggfig.io import Dataset
        >>> ds = Dataset.from_columns("demo", {"x": [3, 1, 5], "y": [2, 4, 6]})
        >>> ds.height, ds.variables
        (3, ('x', 'y'))
    """

    __slots__ = ("_name", "_frame", "_schema")

    def __init__(self, name: str, frame: pl.DataFrame) -> None:
        """
        Bind a name to a DataFrame.

        Args:
            name (str): Dataset identifier (used in logs, titles and error messages).
            frame (pl.DataFrame): Tidy table backing the dataset.
        """
        self._name = name
        self._frame = frame
        self._schema = schema_of(frame)

    # ---------------------------------------------------------------------
    # Constructors
    # ---------------------------------------------------------------------
    @classmethod
    def from_columns(cls, name: str, columns: Mapping[str, Sequence[Any]]) -> Dataset:
        """
        Build a dataset from equal-length columns.

        Raises:
            ggfig.io.errors.DatasetSchemaError: Columns of unequal length.
        """
        return cls(name, frame_from_columns(columns))

    @classmethod
    def from_records(
        cls,
        name: str,
        records: Sequence[Mapping[str, Any]],
        *,
        variables: Iterable[str] | None = None,
    ) -> Dataset:
        """
        Build a dataset from records sharing one variable set.

        Args:
            name (str): Dataset identifier.
            records (Sequence[Mapping[str, Any]]): One mapping per observation.
            variables (Iterable[str] | None): Schema to declare for an empty dataset.

        Raises:
            ggfig.io.errors.DatasetSchemaError: Records disagree on variables.
        """
        return cls(name, frame_from_records(records, variables=variables))

    def with_frame(self, frame: pl.DataFrame, *, name: str | None = None) -> Dataset:
        """Return a new dataset over a transformed frame (same name unless overridden)."""
        return Dataset(name or self._name, frame)

    # ---------------------------------------------------------------------
    # Accessors
    # ---------------------------------------------------------------------
    @property
    def name(self) -> str:
        return self._name

    @property
    def frame(self) -> pl.DataFrame:
        return self._frame

    @property
    def height(self) -> int:
        return self._frame.height

    @property
    def variables(self) -> tuple[str, ...]:
        return tuple(self._frame.columns)

    @property
    def schema(self) -> dict[str, VariableKind]:
        return dict(self._schema)

    def has(self, variable: str) -> bool:
        return variable in self._schema

    def kind(self, variable: str) -> VariableKind:
        """Return the inferred kind of ``variable`` (KeyError if absent)."""
        return self._schema[variable]

    def column(self, variable: str) -> list[Any]:
        return self._frame.get_column(variable).to_list()

    def records(self) -> list[Record]:
        """Return the observations as a list of dicts in record order."""
        return self._frame.to_dicts()

    def schema_equals(self, other: Dataset) -> bool:
        """True when both datasets expose the same variables with the same dtypes."""
        return self._frame.schema == other._frame.schema

    def __len__(self) -> int:
        return self._frame.height

    def __repr__(self) -> str:
        return f"Dataset(name={self._name!r}, rows={self.height}, variables={list(self.variables)!r})"
