"""
ggfig.viz — mapping, rendering, composition and export of example figures.

## Pipeline
data (ggfig.io.Dataset)
  → resolve (mapping.py): channel bindings validated against a GeomSpec
  → render (render.py, positions.py): marks, scale domains and legends in a Panel
  → compose (compose.py): panels arranged into a Layout
  → export (charts.py, save.py): Vega-Lite charts written for the slide renderer

## Builder
plot.py wraps the pipeline in an immutable "compose by addition" API:
``ggplot(data, aes(...)) + geom_point() + labs(...)`` and ``wrap_plots(...)``.

## Import DAG discipline
- Depends on ggfig.core, ggfig.io and ggfig.stats; never on ggfig.examples or ggfig.cli.
- No pandas: tables are Polars DataFrames, charts receive inline values.

## Examples
```python
from ggfig.viz import aes, geom_bar, ggplot
panel = (ggplot("categories3", aes(x="category")) + geom_bar()).build()
[m.height for m in panel.marks]  # [2.0, 1.0]
```
"""

from __future__ import annotations

from .charts import layout_to_chart, panel_to_chart
from .compose import Cell, GridSize, Layout, LayoutSpec, compose
from .mapping import Aes, Constant, ResolvedMapping, aes, resolve
from .marks import (
    AreaMark,
    ContourMark,
    LegendEntry,
    Panel,
    PanelLayer,
    PathMark,
    PointMark,
    RectMark,
    ScaleDomain,
    TextMark,
    overlay,
)
from .plot import (
    Labels,
    Layer,
    Plot,
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
    wrap_plots,
)
from .render import render
from .save import save

__all__ = [
    # mapping
    "Aes",
    "Constant",
    "ResolvedMapping",
    "aes",
    "resolve",
    # rendering
    "render",
    "Panel",
    "PanelLayer",
    "PointMark",
    "TextMark",
    "PathMark",
    "RectMark",
    "AreaMark",
    "ContourMark",
    "ScaleDomain",
    "LegendEntry",
    "overlay",
    # composition
    "GridSize",
    "LayoutSpec",
    "Cell",
    "Layout",
    "compose",
    # builder
    "Plot",
    "Layer",
    "Labels",
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
