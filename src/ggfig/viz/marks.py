"""
Rendered artifacts: marks, scale domains, legend entries, panel layers and panels.

Notes:
    - Every type here is a frozen dataclass; renderers build them once and nothing
      mutates them afterwards (the composer stores panels by identity).
    - Marks form a closed tagged variant: each class carries a ``kind`` tag used by the
      Vega-Lite export and by ``to_dict`` serialization.
    - ``aesthetics`` on a mark holds only variable-mapped channel values; constant
      channels live once on the owning PanelLayer.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar

from ggfig.core.grammar import Channel, GeomKind, VariableKind
from ggfig.core.typing import JsonDict, Point

__all__ = [
    "PointMark",
    "TextMark",
    "PathMark",
    "RectMark",
    "AreaMark",
    "ContourMark",
    "Mark",
    "ScaleDomain",
    "LegendEntry",
    "PanelLayer",
    "Panel",
    "empty_panel",
    "overlay",
    "merge_legends",
    "level_sort_key",
]


# ============================================================================
# Marks
# ============================================================================


@dataclass(frozen=True, slots=True)
class PointMark:
    kind: ClassVar[str] = "point"

    x: Any
    y: Any
    aesthetics: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> JsonDict:
        return {"kind": self.kind, "x": self.x, "y": self.y, "aesthetics": dict(self.aesthetics)}


@dataclass(frozen=True, slots=True)
class TextMark:
    kind: ClassVar[str] = "text"

    x: Any
    y: Any
    label: Any
    aesthetics: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> JsonDict:
        return {
            "kind": self.kind,
            "x": self.x,
            "y": self.y,
            "label": self.label,
            "aesthetics": dict(self.aesthetics),
        }


@dataclass(frozen=True, slots=True)
class PathMark:
    """Connected vertices of one group, drawn in the stored order."""

    kind: ClassVar[str] = "path"

    points: tuple[Point, ...]
    group: tuple[Any, ...] = ()
    aesthetics: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> JsonDict:
        return {
            "kind": self.kind,
            "points": [list(p) for p in self.points],
            "group": list(self.group),
            "aesthetics": dict(self.aesthetics),
        }


@dataclass(frozen=True, slots=True)
class RectMark:
    """
    One bar.

    Attributes:
        x: Category value (discrete x) or the x value itself (continuous x).
        xmin, xmax: Horizontal extent in position units (discrete categories sit at 1..n).
        ymin, ymax: Vertical extent after the position adjustment.
        group: Group key (values of the grouping variables, possibly empty).
    """

    kind: ClassVar[str] = "rect"

    x: Any
    xmin: float
    xmax: float
    ymin: float
    ymax: float
    group: tuple[Any, ...] = ()
    aesthetics: Mapping[str, Any] = field(default_factory=dict)

    @property
    def height(self) -> float:
        return self.ymax - self.ymin

    def to_dict(self) -> JsonDict:
        return {
            "kind": self.kind,
            "x": self.x,
            "xmin": self.xmin,
            "xmax": self.xmax,
            "ymin": self.ymin,
            "ymax": self.ymax,
            "group": list(self.group),
            "aesthetics": dict(self.aesthetics),
        }


@dataclass(frozen=True, slots=True)
class AreaMark:
    """Filled region between ``lower`` and ``upper`` along ``xs``."""

    kind: ClassVar[str] = "area"

    xs: tuple[Any, ...]
    lower: tuple[float, ...]
    upper: tuple[float, ...]
    group: tuple[Any, ...] = ()
    aesthetics: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> JsonDict:
        return {
            "kind": self.kind,
            "xs": list(self.xs),
            "lower": list(self.lower),
            "upper": list(self.upper),
            "group": list(self.group),
            "aesthetics": dict(self.aesthetics),
        }


@dataclass(frozen=True, slots=True)
class ContourMark:
    """One connected piece of an iso-line at ``level``."""

    kind: ClassVar[str] = "contour"

    level: float
    piece: int
    points: tuple[Point, ...]
    group: tuple[Any, ...] = ()
    aesthetics: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> JsonDict:
        return {
            "kind": self.kind,
            "level": self.level,
            "piece": self.piece,
            "points": [list(p) for p in self.points],
            "group": list(self.group),
            "aesthetics": dict(self.aesthetics),
        }


Mark = PointMark | TextMark | PathMark | RectMark | AreaMark | ContourMark


# ============================================================================
# Scales and guides
# ============================================================================


def level_sort_key(value: Any) -> tuple[int, str, Any]:
    # None last; otherwise group by type so mixed columns still sort deterministically.
    if value is None:
        return (2, "", 0)
    if isinstance(value, bool):
        return (0, "bool", int(value))
    if isinstance(value, (int, float)):
        return (0, "num", value)
    return (1, type(value).__name__, str(value))


@dataclass(frozen=True, slots=True)
class ScaleDomain:
    """
    Domain of one scale.

    Attributes:
        kind (VariableKind): CONTINUOUS (values = (min, max)) or DISCRETE (values = ordered levels).
        values (tuple): Range bounds or levels.
    """

    kind: VariableKind
    values: tuple[Any, ...]

    @classmethod
    def continuous(cls, values: Iterable[Any]) -> ScaleDomain | None:
        observed = [v for v in values if v is not None]
        if not observed:
            return None
        return cls(VariableKind.CONTINUOUS, (min(observed), max(observed)))

    @classmethod
    def discrete(cls, values: Iterable[Any]) -> ScaleDomain | None:
        levels = sorted({v for v in values if v is not None}, key=level_sort_key)
        if not levels:
            return None
        return cls(VariableKind.DISCRETE, tuple(levels))

    @classmethod
    def of(cls, kind: VariableKind | None, values: Iterable[Any]) -> ScaleDomain | None:
        if kind is VariableKind.DISCRETE:
            return cls.discrete(values)
        return cls.continuous(values)

    def union(self, other: ScaleDomain | None) -> ScaleDomain:
        if other is None:
            return self
        if self.kind is VariableKind.CONTINUOUS and other.kind is VariableKind.CONTINUOUS:
            return ScaleDomain(
                VariableKind.CONTINUOUS,
                (min(self.values[0], other.values[0]), max(self.values[1], other.values[1])),
            )
        merged = ScaleDomain.discrete(self.values + other.values)
        assert merged is not None
        return merged

    def to_dict(self) -> JsonDict:
        return {"kind": self.kind.value, "values": list(self.values)}


def _union(a: ScaleDomain | None, b: ScaleDomain | None) -> ScaleDomain | None:
    if a is None:
        return b
    return a.union(b)


@dataclass(frozen=True, slots=True)
class LegendEntry:
    """A guide for one mapped non-position channel; ``(channel, title)`` identifies it."""

    channel: Channel
    title: str
    domain: ScaleDomain

    @property
    def key(self) -> tuple[Channel, str]:
        return (self.channel, self.title)

    def to_dict(self) -> JsonDict:
        return {"channel": self.channel.value, "title": self.title, "domain": self.domain.to_dict()}


def merge_legends(groups: Iterable[Iterable[LegendEntry]]) -> tuple[LegendEntry, ...]:
    """Collect legend entries once per ``(channel, title)``, unioning domains, first-seen order."""
    merged: dict[tuple[Channel, str], LegendEntry] = {}
    for entries in groups:
        for entry in entries:
            prev = merged.get(entry.key)
            if prev is None:
                merged[entry.key] = entry
            else:
                merged[entry.key] = LegendEntry(
                    entry.channel, entry.title, prev.domain.union(entry.domain)
                )
    return tuple(merged.values())


# ============================================================================
# Panels
# ============================================================================


@dataclass(frozen=True)
class PanelLayer:
    """Marks produced by one geometry, plus the constant channel values they share."""

    geom: GeomKind
    marks: tuple[Mark, ...]
    constants: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> JsonDict:
        return {
            "geom": self.geom.value,
            "marks": [m.to_dict() for m in self.marks],
            "constants": dict(self.constants),
        }


@dataclass(frozen=True)
class Panel:
    """
    One rendered sub-figure.

    Attributes:
        layers (tuple[PanelLayer, ...]): Rendered layers, bottom to top.
        x (ScaleDomain | None): Horizontal domain (None for an empty panel).
        y (ScaleDomain | None): Vertical domain (None for an empty panel).
        legends (tuple[LegendEntry, ...]): Guides for mapped non-position channels.
        title (str | None): Panel title.
        x_label (str | None): Horizontal axis title.
        y_label (str | None): Vertical axis title.
    """

    layers: tuple[PanelLayer, ...] = ()
    x: ScaleDomain | None = None
    y: ScaleDomain | None = None
    legends: tuple[LegendEntry, ...] = ()
    title: str | None = None
    x_label: str | None = None
    y_label: str | None = None

    @property
    def marks(self) -> tuple[Mark, ...]:
        return tuple(m for layer in self.layers for m in layer.marks)

    @property
    def geoms(self) -> tuple[GeomKind, ...]:
        return tuple(layer.geom for layer in self.layers)

    @property
    def is_empty(self) -> bool:
        return not any(layer.marks for layer in self.layers)

    def to_dict(self) -> JsonDict:
        return {
            "layers": [layer.to_dict() for layer in self.layers],
            "x": self.x.to_dict() if self.x else None,
            "y": self.y.to_dict() if self.y else None,
            "legends": [e.to_dict() for e in self.legends],
            "title": self.title,
            "x_label": self.x_label,
            "y_label": self.y_label,
        }


def empty_panel(geom: GeomKind | None = None, **labels: str | None) -> Panel:
    """Return a panel with no marks (one empty layer when ``geom`` is given)."""
    layers = (PanelLayer(geom, ()),) if geom is not None else ()
    return Panel(layers=layers, **labels)


def overlay(
    panels: Iterable[Panel],
    *,
    title: str | None = None,
    x_label: str | None = None,
    y_label: str | None = None,
) -> Panel:
    """
    Stack the layers of several panels into one panel sharing axes.

    Domains are unioned, legends merged by ``(channel, title)``. Axis labels default to
    the first non-empty label among the inputs.
    """
    items = list(panels)
    layers: list[PanelLayer] = []
    x: ScaleDomain | None = None
    y: ScaleDomain | None = None
    for p in items:
        layers.extend(p.layers)
        x = _union(x, p.x)
        y = _union(y, p.y)
    return Panel(
        layers=tuple(layers),
        x=x,
        y=y,
        legends=merge_legends(p.legends for p in items),
        title=title if title is not None else next((p.title for p in items if p.title), None),
        x_label=x_label if x_label is not None else next((p.x_label for p in items if p.x_label), None),
        y_label=y_label if y_label is not None else next((p.y_label for p in items if p.y_label), None),
    )
