"""
Dataset Provider: resolve dataset names to immutable Dataset objects.

Lookup order
1) Datasets registered on the provider instance (``register``).
2) Bundled datasets (ggfig.io.builtin).
3) Files ``<name>.csv | .parquet | .json`` under ``Settings.data_dir``.

Caching
- A provider memoizes loaded datasets for its own lifetime, which is one rendering
  pass. Create a new provider (or call ``clear``) to start a fresh pass.

Errors
- DatasetNotFound when no source knows the name; the error lists every known name.
"""

from __future__ import annotations

import logging

from .builtin import BUILTIN_DATASETS
from .config import Settings
from .dataset import Dataset
from .errors import DatasetNotFound
from .read import find_dataset_file, list_dataset_files, read_frame

__all__ = [
    "DatasetProvider",
    "load",
    "list_datasets",
]

logger = logging.getLogger(__name__)


class DatasetProvider:
    """
    Deterministic name → Dataset resolver with per-pass memoization.

    Examples:
        >>> provider = DatasetProvider()
        >>> provider.load("scatter3").height
        3
        >>> provider.load("scatter3") is provider.load("scatter3")
        True
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()
        self._registered: dict[str, Dataset] = {}
        self._cache: dict[str, Dataset] = {}

    def register(self, name: str, dataset: Dataset) -> None:
        """Make ``dataset`` loadable under ``name`` (shadows bundled and file datasets)."""
        self._registered[name] = dataset
        self._cache.pop(name, None)

    def load(self, name: str) -> Dataset:
        """
        Load a dataset by name.

        Args:
            name (str): Dataset identifier.

        Returns:
            Dataset: Immutable dataset; repeated calls within this provider return the
            same object.

        Raises:
            DatasetNotFound: If no source knows ``name``.
            ggfig.io.errors.DatasetSchemaError: If a matching file cannot be parsed.
        """
        if name in self._cache:
            return self._cache[name]
        dataset = self._resolve(name)
        self._cache[name] = dataset
        logger.debug("loaded dataset %r (%d rows)", name, dataset.height)
        return dataset

    def _resolve(self, name: str) -> Dataset:
        if name in self._registered:
            return self._registered[name]
        if name in BUILTIN_DATASETS:
            return Dataset.from_columns(name, BUILTIN_DATASETS[name]())
        path = find_dataset_file(self.settings.data_dir, name)
        if path is not None:
            return Dataset(name, read_frame(path))
        raise DatasetNotFound(name, self.list_datasets())

    def list_datasets(self) -> list[str]:
        """Return sorted names from every source this provider can serve."""
        names = set(self._registered) | set(BUILTIN_DATASETS)
        names.update(list_dataset_files(self.settings.data_dir))
        return sorted(names)

    def clear(self) -> None:
        """Forget memoized datasets (registered datasets are kept)."""
        self._cache.clear()


def load(name: str, settings: Settings | None = None) -> Dataset:
    """Load ``name`` with a fresh provider (no memoization across calls)."""
    return DatasetProvider(settings).load(name)


def list_datasets(settings: Settings | None = None) -> list[str]:
    """Return every dataset name a fresh provider can serve."""
    return DatasetProvider(settings).list_datasets()
