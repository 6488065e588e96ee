"""
ggfig.io — Dataset Provider layer.

## Responsibilities
- Supply small structured tidy datasets (rows = observations, columns = variables) to the
  example pipeline, deterministically and by name.
- Validate tidy-data shape and infer variable kinds for channel-domain checks.
- Carry runtime configuration (Settings) for the whole stack.

## Public API
- Settings — configuration with env > TOML > defaults precedence.
- Dataset — named immutable table over a Polars DataFrame.
- DatasetProvider — name → Dataset resolver with per-pass memoization.
- load / list_datasets — one-shot helpers over a fresh provider.

## Import DAG discipline
- Depends only on stdlib, polars and ggfig.core.*.
- MUST NOT import higher layers: viz, stats, examples or cli.

## Examples
```python
from ggfig.io import DatasetProvider
provider = DatasetProvider()
mpg = provider.load("mpg")
mpg.schema["class"]  # VariableKind.DISCRETE
```
"""

from __future__ import annotations

from .config import Settings
from .dataset import Dataset
from .errors import DatasetNotFound, DatasetSchemaError
from .provider import DatasetProvider, list_datasets, load

__all__ = [
    "Settings",
    "Dataset",
    "DatasetProvider",
    "DatasetNotFound",
    "DatasetSchemaError",
    "load",
    "list_datasets",
]
