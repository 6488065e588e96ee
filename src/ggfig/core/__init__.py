"""
Core package aggregator for ggfig contracts (grammar, geometry specs, errors, hashing).

## Contracts (single source of truth)
- Grammar — channels, geometry kinds, stats, positions, variable kinds, normalization helpers.
- Geoms — frozen GeomSpec per GeomKind (required/optional channels, domains, defaults).
- Errors — the exception taxonomy shared by every layer.
- Hashing — canonical JSON utilities for deterministic artifact fingerprints.
- Constants/Typing — rendering defaults and small aliases.

## Notes
- Zero-IO policy: stdlib only; no file/network IO.
- Naming policy: enum `.value` and variable/channel names are lower_snake.

## Downstream usage
- ggfig.io — infers VariableKind for dataset columns and raises io errors derived from FigureError.
- ggfig.viz — resolves mappings against GeomSpec, dispatches renderers on GeomKind.
- ggfig.cli — parses YAML tokens with the grammar helpers.

## Examples
```python
from ggfig.core.geoms import get_geom
from ggfig.core.grammar import Channel
spec = get_geom("point")
spec.is_required(Channel.Y)  # True
```
"""
