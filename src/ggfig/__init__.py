"""
ggfig — deterministic example-figure pipeline: data → aesthetic mapping → panels → layout.

## Layers (import DAG, lower never imports higher)
- ggfig.core — grammar enums, geometry specs, errors, hashing (zero-IO).
- ggfig.io — settings, datasets and the Dataset Provider.
- ggfig.stats — density and iso-line statistics.
- ggfig.viz — mapping resolver, renderer, composer, builder and Vega-Lite export.
- ggfig.examples, ggfig.figspec, ggfig.cli — gallery, YAML specs and the command line.

## Examples
```python
import ggfig as gg
p = gg.ggplot("mpg", gg.aes(x="displ", y="hwy", colour="class")) + gg.geom_point()
panel = p.build()
gg.save(gg.panel_to_chart(panel), out_html="mpg.html")
```
"""

from __future__ import annotations

from .core.errors import (
    FigureError,
    GrammarError,
    InvalidLayoutTemplate,
    LayoutCellConflict,
    LayoutError,
    LayoutPanelCountMismatch,
    MissingRequiredChannel,
    StatisticError,
    TypeMismatch,
    UnknownVariable,
)
from .io import Dataset, DatasetNotFound, DatasetProvider, Settings, list_datasets, load
from .viz import (
    Aes,
    Constant,
    GridSize,
    Layout,
    LayoutSpec,
    Panel,
    aes,
    compose,
    geom_area,
    geom_bar,
    geom_col,
    geom_contour,
    geom_density_2d,
    geom_label,
    geom_line,
    geom_path,
    geom_point,
    geom_ribbon,
    geom_step,
    geom_text,
    ggplot,
    labs,
    layout_to_chart,
    panel_to_chart,
    render,
    resolve,
    save,
    wrap_plots,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # errors
    "FigureError",
    "GrammarError",
    "MissingRequiredChannel",
    "UnknownVariable",
    "TypeMismatch",
    "LayoutError",
    "LayoutCellConflict",
    "LayoutPanelCountMismatch",
    "InvalidLayoutTemplate",
    "StatisticError",
    "DatasetNotFound",
    # data
    "Settings",
    "Dataset",
    "DatasetProvider",
    "load",
    "list_datasets",
    # pipeline
    "Aes",
    "Constant",
    "aes",
    "resolve",
    "render",
    "Panel",
    "GridSize",
    "LayoutSpec",
    "Layout",
    "compose",
    # builder
    "ggplot",
    "labs",
    "geom_point",
    "geom_text",
    "geom_label",
    "geom_line",
    "geom_path",
    "geom_step",
    "geom_bar",
    "geom_col",
    "geom_area",
    "geom_ribbon",
    "geom_density_2d",
    "geom_contour",
    "wrap_plots",
    # export
    "panel_to_chart",
    "layout_to_chart",
    "save",
]
