"""
Immutable plot builder: compose a figure by addition.

Examples:
    >>> from ggfig.viz.plot import ggplot, geom_point, labs
    >>> from ggfig.viz.mapping import aes
    >>> p = ggplot("mpg", aes(x="displ", y="hwy")) + geom_point() + labs(title="Mileage")
    >>> panel = p.build()
    >>> len(panel.marks), panel.title
    (22, 'Mileage')

Notes:
    - Every ``+`` returns a new Plot; the left operand is never modified.
    - A layer inherits the plot mapping unless ``inherit_aes=False``; its own mapping
      wins on shared channels.
    - Keyword arguments on geom factories that name channels become constants
      (``geom_point(color="red")``).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from ggfig.core.errors import GrammarError
from ggfig.core.geoms import get_geom
from ggfig.core.grammar import (
    GeomKind,
    PositionKind,
    StatKind,
    channel_from_value,
    position_kind_from_value,
    stat_kind_from_value,
)
from ggfig.io.config import Settings
from ggfig.io.dataset import Dataset
from ggfig.io.provider import DatasetProvider
from ggfig.stats.contour import ContourEstimator

from .compose import GridSize, Layout, LayoutSpec, PanelItem, compose
from .mapping import Aes, Constant, resolve
from .marks import LegendEntry, Panel, overlay
from .render import render

__all__ = [
    "Layer",
    "Labels",
    "Plot",
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
]

DataRef = Dataset | str


@dataclass(frozen=True)
class Layer:
    """One geometry with its own mapping, statistic, position and optional dataset."""

    geom: GeomKind
    mapping: Aes = field(default_factory=Aes)
    stat: StatKind | None = None
    position: PositionKind | None = None
    data: DataRef | None = None
    inherit_aes: bool = True


@dataclass(frozen=True)
class Labels:
    """Titles for the panel, its axes and its legends (keyed by channel token)."""

    title: str | None = None
    x: str | None = None
    y: str | None = None
    legends: Mapping[str, str] = field(default_factory=dict)

    def __add__(self, other: Labels) -> Labels:
        return Labels(
            title=other.title if other.title is not None else self.title,
            x=other.x if other.x is not None else self.x,
            y=other.y if other.y is not None else self.y,
            legends={**self.legends, **other.legends},
        )


def labs(
    title: str | None = None, x: str | None = None, y: str | None = None, **legends: str
) -> Labels:
    """Build Labels; extra keywords title legends, e.g. ``labs(colour="Class")``."""
    return Labels(
        title=title,
        x=x,
        y=y,
        legends={channel_from_value(k).value: v for k, v in legends.items()},
    )


def _layer(
    kind: GeomKind,
    mapping: Aes | None,
    data: DataRef | None,
    stat: StatKind | str | None,
    position: PositionKind | str | None,
    inherit_aes: bool,
    constants: Mapping[str, Any],
) -> Layer:
    bindings = dict((mapping or Aes()).bindings)
    for key, value in constants.items():
        bindings[channel_from_value(key)] = value if isinstance(value, Constant) else Constant(value)
    return Layer(
        geom=kind,
        mapping=Aes(bindings),
        stat=stat_kind_from_value(stat) if stat is not None else None,
        position=position_kind_from_value(position) if position is not None else None,
        data=data,
        inherit_aes=inherit_aes,
    )


def _factory(kind: GeomKind, doc: str) -> Any:
    def geom(
        mapping: Aes | None = None,
        *,
        data: DataRef | None = None,
        stat: StatKind | str | None = None,
        position: PositionKind | str | None = None,
        inherit_aes: bool = True,
        **constants: Any,
    ) -> Layer:
        return _layer(kind, mapping, data, stat, position, inherit_aes, constants)

    geom.__name__ = geom.__qualname__ = f"geom_{kind.value}"
    geom.__doc__ = doc
    return geom


geom_point = _factory(GeomKind.POINT, "One point per record at (x, y).")
geom_text = _factory(GeomKind.TEXT, "One text label per record at (x, y).")
geom_label = _factory(GeomKind.LABEL, "One boxed text label per record at (x, y).")
geom_line = _factory(GeomKind.LINE, "Connect records in x order, one line per group.")
geom_path = _factory(GeomKind.PATH, "Connect records in record order, one path per group.")
geom_step = _factory(GeomKind.STEP, "Stairstep line in x order (horizontal, then vertical).")
geom_bar = _factory(
    GeomKind.BAR, "Bars of counts per category (``stat='identity'`` to use y values instead)."
)
geom_col = _factory(GeomKind.COL, "Bars whose heights are the y values.")
geom_area = _factory(GeomKind.AREA, "Region between 0 and y, in x order.")
geom_ribbon = _factory(GeomKind.RIBBON, "Band between ymin and ymax, in x order.")
geom_density_2d = _factory(GeomKind.DENSITY_2D, "Iso-lines of a 2D kernel density over x and y.")
geom_contour = _factory(GeomKind.CONTOUR, "Iso-lines of a gridded surface mapped to x, y and z.")


@dataclass(frozen=True)
class Plot:
    """
    A figure under construction: default data and mapping, layers and labels.

    Attributes:
        data (Dataset | str | None): Default dataset, or its name for the provider.
        mapping (Aes): Default mapping inherited by layers.
        layers (tuple[Layer, ...]): Layers, bottom to top.
        labels (Labels): Titles.
    """

    data: DataRef | None = None
    mapping: Aes = field(default_factory=Aes)
    layers: tuple[Layer, ...] = ()
    labels: Labels = field(default_factory=Labels)

    def __add__(self, other: object) -> Plot:
        if isinstance(other, Layer):
            return replace(self, layers=self.layers + (other,))
        if isinstance(other, Aes):
            return replace(self, mapping=self.mapping + other)
        if isinstance(other, Labels):
            return replace(self, labels=self.labels + other)
        return NotImplemented

    def _dataset(self, ref: DataRef | None, provider: DatasetProvider) -> Dataset:
        ref = ref if ref is not None else self.data
        if ref is None:
            raise GrammarError("plot has no data: pass data to ggplot() or to the layer")
        if isinstance(ref, Dataset):
            return ref
        return provider.load(ref)

    def build(
        self,
        provider: DatasetProvider | None = None,
        *,
        settings: Settings | None = None,
        estimator: ContourEstimator | None = None,
    ) -> Panel:
        """
        Resolve and render every layer, then overlay them into one Panel.

        Args:
            provider (DatasetProvider | None): Source for datasets given by name; a fresh
                provider (one rendering pass) when omitted.
            settings (Settings | None): Rendering knobs passed to the renderer.
            estimator (ContourEstimator | None): Statistics collaborator override.

        Raises:
            FigureError: Any resolver, renderer or dataset error, unchanged.
        """
        settings = settings or (provider.settings if provider is not None else Settings())
        provider = provider or DatasetProvider(settings)

        panels: list[Panel] = []
        for layer in self.layers:
            dataset = self._dataset(layer.data, provider)
            mapping = self.mapping + layer.mapping if layer.inherit_aes else layer.mapping
            resolved = resolve(get_geom(layer.geom), mapping, dataset)
            panels.append(
                render(
                    resolved,
                    dataset,
                    stat=layer.stat,
                    position=layer.position,
                    settings=settings,
                    estimator=estimator,
                )
            )

        labels = self.labels
        panel = overlay(panels, title=labels.title, x_label=labels.x, y_label=labels.y)
        if labels.legends:
            panel = replace(panel, legends=tuple(_retitle(e, labels.legends) for e in panel.legends))
        return panel


def _retitle(entry: LegendEntry, titles: Mapping[str, str]) -> LegendEntry:
    title = titles.get(entry.channel.value)
    return replace(entry, title=title) if title is not None else entry


def ggplot(data: DataRef | None = None, mapping: Aes | None = None) -> Plot:
    """Start a plot over ``data`` (a Dataset or a dataset name) with a default mapping."""
    return Plot(data=data, mapping=mapping or Aes())


def wrap_plots(
    *plots: Plot | Panel | tuple[str, Plot | Panel],
    nrow: int | None = None,
    ncol: int | None = None,
    design: str | None = None,
    guides: str = "merge",
    tags: str = "none",
    tag_style: str = "A",
    tag_prefix: str = "",
    tag_suffix: str = "",
    allow_empty_cells: bool = True,
    title: str | None = None,
    provider: DatasetProvider | None = None,
    settings: Settings | None = None,
) -> Layout:
    """
    Build plots (sharing one provider, i.e. one rendering pass) and compose them.

    Items may be Plots, already rendered Panels, or ``(cell_name, plot_or_panel)`` pairs.
    """
    provider = provider or DatasetProvider(settings)
    items: list[PanelItem] = []
    for item in plots:
        if isinstance(item, tuple):
            name, target = item
            items.append((name, _as_panel(target, provider, settings)))
        else:
            items.append(_as_panel(item, provider, settings))

    spec = LayoutSpec(
        grid=None if design is not None else GridSize(nrow=nrow, ncol=ncol),
        design=design,
        guides=guides,
        tags=tags,
        tag_style=tag_style,
        tag_prefix=tag_prefix,
        tag_suffix=tag_suffix,
        allow_empty_cells=allow_empty_cells,
        title=title,
    )
    return compose(items, spec)


def _as_panel(item: Plot | Panel, provider: DatasetProvider, settings: Settings | None) -> Panel:
    if isinstance(item, Panel):
        return item
    return item.build(provider, settings=settings)
