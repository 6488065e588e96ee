"""
YAML figure specs for the ``ggfig render`` command.

A spec describes either one plot or several plots plus a layout:

```yaml
plot:
  dataset: mpg
  mapping: {x: displ, y: hwy}
  layers:
    - geom: point
      mapping: {colour: class}
    - geom: text
      mapping: {label: model}
      constants: {size: 9}
  labels: {title: Mileage, colour: vehicle class}
```

```yaml
plots:
  - {dataset: mpg, mapping: {x: class}, layers: [{geom: bar}]}
  - {dataset: economics, mapping: {x: year, y: unemploy}, layers: [{geom: line}], cell: B}
layout: {design: "AB", tags: sequential}
```

Validation uses pydantic models; tokens (geoms, stats, positions, channels) are
normalized with the grammar helpers. Any read, YAML or validation failure surfaces as
FigureSpecError.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from ggfig.core.errors import FigureSpecError
from ggfig.core.grammar import (
    channel_from_value,
    geom_kind_from_value,
    guide_collection_from_value,
    position_kind_from_value,
    stat_kind_from_value,
    tag_mode_from_value,
)
from ggfig.io.provider import DatasetProvider
from ggfig.viz.compose import GridSize, Layout, LayoutSpec, PanelItem, compose
from ggfig.viz.mapping import Aes, Constant
from ggfig.viz.marks import Panel
from ggfig.viz.plot import Labels, Layer, Plot

__all__ = [
    "LayerSpec",
    "LabelsSpec",
    "PlotSpec",
    "LayoutBlock",
    "FigureSpec",
    "load_figure_spec",
]


def _channel_keys(v: Any) -> Any:
    if not isinstance(v, dict):
        return v
    return {channel_from_value(k).value: val for k, val in v.items()}


class LayerSpec(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    geom: str
    mapping: dict[str, str] = Field(default_factory=dict)
    constants: dict[str, Any] = Field(default_factory=dict)
    stat: str | None = None
    position: str | None = None
    dataset: str | None = None
    inherit_aes: bool = True

    @field_validator("geom", mode="before")
    @classmethod
    def _normalize_geom(cls, v: Any) -> str:
        return geom_kind_from_value(str(v)).value

    @field_validator("stat", mode="before")
    @classmethod
    def _normalize_stat(cls, v: Any) -> str | None:
        return None if v is None else stat_kind_from_value(str(v)).value

    @field_validator("position", mode="before")
    @classmethod
    def _normalize_position(cls, v: Any) -> str | None:
        return None if v is None else position_kind_from_value(str(v)).value

    @field_validator("mapping", "constants", mode="before")
    @classmethod
    def _normalize_channels(cls, v: Any) -> Any:
        return _channel_keys(v)

    def to_layer(self) -> Layer:
        bindings: dict[Any, Any] = {channel_from_value(k): v for k, v in self.mapping.items()}
        for k, v in self.constants.items():
            bindings[channel_from_value(k)] = Constant(v)
        return Layer(
            geom=geom_kind_from_value(self.geom),
            mapping=Aes(bindings),
            stat=stat_kind_from_value(self.stat) if self.stat else None,
            position=position_kind_from_value(self.position) if self.position else None,
            data=self.dataset,
            inherit_aes=self.inherit_aes,
        )


class LabelsSpec(BaseModel):
    """Titles; keys other than title/x/y name legend channels."""

    model_config = ConfigDict(extra="allow", frozen=True)

    title: str | None = None
    x: str | None = None
    y: str | None = None

    def to_labels(self) -> Labels:
        legends = {channel_from_value(k).value: str(v) for k, v in (self.model_extra or {}).items()}
        return Labels(title=self.title, x=self.x, y=self.y, legends=legends)


class PlotSpec(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    dataset: str | None = None
    mapping: dict[str, str] = Field(default_factory=dict)
    layers: list[LayerSpec] = Field(min_length=1)
    labels: LabelsSpec = Field(default_factory=LabelsSpec)
    cell: str | None = None

    @field_validator("mapping", mode="before")
    @classmethod
    def _normalize_channels(cls, v: Any) -> Any:
        return _channel_keys(v)

    def to_plot(self) -> Plot:
        plot = Plot(
            data=self.dataset,
            mapping=Aes({channel_from_value(k): v for k, v in self.mapping.items()}),
            labels=self.labels.to_labels(),
        )
        for layer in self.layers:
            plot = plot + layer.to_layer()
        return plot


class LayoutBlock(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    nrow: int | None = Field(default=None, ge=1)
    ncol: int | None = Field(default=None, ge=1)
    design: str | None = None
    guides: str = "merge"
    tags: str = "none"
    tag_style: Literal["A", "a", "1", "I", "i"] = "A"
    tag_prefix: str = ""
    tag_suffix: str = ""
    allow_empty_cells: bool = True
    title: str | None = None

    @field_validator("guides", mode="before")
    @classmethod
    def _normalize_guides(cls, v: Any) -> str:
        return guide_collection_from_value(str(v)).value

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, v: Any) -> str:
        return tag_mode_from_value(str(v)).value

    def to_layout_spec(self) -> LayoutSpec:
        return LayoutSpec(
            grid=None if self.design is not None else GridSize(nrow=self.nrow, ncol=self.ncol),
            design=self.design,
            guides=self.guides,
            tags=self.tags,
            tag_style=self.tag_style,
            tag_prefix=self.tag_prefix,
            tag_suffix=self.tag_suffix,
            allow_empty_cells=self.allow_empty_cells,
            title=self.title,
        )


class FigureSpec(BaseModel):
    """One plot (``plot``) or several plots arranged by ``layout`` (``plots``)."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str | None = None
    plot: PlotSpec | None = None
    plots: list[PlotSpec] = Field(default_factory=list)
    layout: LayoutBlock | None = None

    @model_validator(mode="after")
    def _plot_or_plots(self) -> FigureSpec:
        if (self.plot is None) == (not self.plots):
            raise ValueError("give exactly one of 'plot' or 'plots'")
        if self.plot is not None and self.layout is not None:
            raise ValueError("'layout' applies to 'plots' only")
        return self

    def build(self, provider: DatasetProvider | None = None) -> Panel | Layout:
        """Render the figure with one provider (one rendering pass)."""
        provider = provider or DatasetProvider()
        if self.plot is not None:
            return self.plot.to_plot().build(provider)
        items: list[PanelItem] = []
        for spec in self.plots:
            panel = spec.to_plot().build(provider)
            items.append((spec.cell, panel) if spec.cell else panel)
        layout = (self.layout or LayoutBlock()).to_layout_spec()
        return compose(items, layout)


def load_figure_spec(path: str | Path) -> FigureSpec:
    """
    Read and validate a YAML figure spec.

    Raises:
        FigureSpecError: The file cannot be read, is not YAML, or fails validation.
    """
    p = Path(path)
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except OSError as exc:
        raise FigureSpecError(f"cannot read figure spec {p}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise FigureSpecError(f"figure spec {p} is not valid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise FigureSpecError(f"figure spec {p} must be a mapping at the top level")
    try:
        return FigureSpec.model_validate(data)
    except ValidationError as exc:
        raise FigureSpecError(f"invalid figure spec {p}:\n{exc}") from exc
