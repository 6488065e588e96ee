"""
Vega-Lite export: convert Panels and Layouts into Altair charts.

Overview
- panel_to_chart(panel) — one layered chart; each PanelLayer becomes one Altair layer.
- layout_to_chart(layout) — rows become a ``vconcat`` of ``hconcat`` charts; merged
  guides share legend scales, per-panel guides keep them independent.

Notes
- Data is embedded inline (``alt.Data(values=...)``); marks are already in position
  units, so no Vega-Lite aggregation or stacking is requested.
- Bars on a discrete axis sit at 1..n; the axis maps those ticks back to the levels.
- Constant channels become mark properties; variable channels become encodings with
  the legend title from the panel.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import altair as alt

from ggfig.core.constants import CHART_HEIGHT, CHART_WIDTH
from ggfig.core.grammar import Channel, GeomKind, GuideCollection, VariableKind

from .compose import Layout
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
)
from .theme import EMPTY_CELL_STROKE, apply_chart_defaults

__all__ = [
    "panel_to_chart",
    "layout_to_chart",
]

_ENCODERS: dict[str, Callable[..., Any]] = {
    Channel.COLOR.value: alt.Color,
    Channel.FILL.value: alt.Fill,
    Channel.SHAPE.value: alt.Shape,
    Channel.SIZE.value: alt.Size,
    Channel.ALPHA.value: alt.Opacity,
    Channel.LINETYPE.value: alt.StrokeDash,
}

_MARK_PROPERTIES = {
    Channel.COLOR.value: "color",
    Channel.FILL.value: "fill",
    Channel.SHAPE.value: "shape",
    Channel.SIZE.value: "size",
    Channel.ALPHA.value: "opacity",
}

_LEGEND_RESOLVE = ("color", "fill", "shape", "size", "opacity", "strokeDash")

_TEXT_GEOMS = (GeomKind.TEXT, GeomKind.LABEL)


# ----------------------------
# Encodings
# ----------------------------


def _vl_type(domain: ScaleDomain | None) -> str:
    if domain is not None and domain.kind is VariableKind.DISCRETE:
        return "nominal"
    return "quantitative"


def _scale(domain: ScaleDomain | None) -> alt.Scale | Any:
    if domain is None:
        return alt.Undefined
    return alt.Scale(domain=list(domain.values))


def _discrete_bar_axis(levels: tuple[Any, ...], title: str | None) -> alt.Axis:
    ticks = list(range(1, len(levels) + 1))
    labels = json.dumps([str(v) for v in levels])
    return alt.Axis(values=ticks, labelExpr=f"{labels}[datum.value - 1]", title=title, grid=False)


def _x_encoding(panel: Panel, field: str, *, bars: bool = False) -> alt.X:
    title = panel.x_label or alt.Undefined
    if bars and panel.x is not None and panel.x.kind is VariableKind.DISCRETE:
        n = len(panel.x.values)
        return alt.X(
            f"{field}:Q",
            scale=alt.Scale(domain=[0.5, n + 0.5]),
            axis=_discrete_bar_axis(panel.x.values, panel.x_label),
        )
    return alt.X(field, type=_vl_type(panel.x), scale=_scale(panel.x), title=title)


def _y_encoding(panel: Panel, field: str) -> alt.Y:
    return alt.Y(field, type=_vl_type(panel.y), scale=_scale(panel.y), title=panel.y_label or alt.Undefined)


def _legend_lookup(panel: Panel) -> dict[str, LegendEntry]:
    return {e.channel.value: e for e in panel.legends}


def _aesthetic_encodings(layer: PanelLayer, panel: Panel) -> dict[str, Any]:
    if not layer.marks:
        return {}
    legends = _legend_lookup(panel)
    out: dict[str, Any] = {}
    for channel in layer.marks[0].aesthetics:
        encoder = _ENCODERS.get(channel)
        entry = legends.get(channel)
        if encoder is None or entry is None:
            continue
        key = "strokeDash" if channel == Channel.LINETYPE.value else _MARK_PROPERTIES[channel]
        out[key] = encoder(channel, type=_vl_type(entry.domain), title=entry.title)
    return out


def _mark_properties(layer: PanelLayer, *, line: bool = False) -> dict[str, Any]:
    props: dict[str, Any] = {}
    for channel, value in layer.constants.items():
        if channel == Channel.SIZE.value and line:
            props["strokeWidth"] = value
        elif channel == Channel.COLOR.value and line:
            props["stroke"] = value
        elif channel in _MARK_PROPERTIES:
            props[_MARK_PROPERTIES[channel]] = value
    return props


# ----------------------------
# Layers
# ----------------------------


def _points_chart(layer: PanelLayer, panel: Panel) -> alt.Chart:
    rows: list[dict[str, Any]] = []
    for m in layer.marks:
        assert isinstance(m, (PointMark, TextMark))
        row = {"x": m.x, "y": m.y, **m.aesthetics}
        if isinstance(m, TextMark):
            row["label"] = m.label
        rows.append(row)
    base = alt.Chart(alt.Data(values=rows))
    props = _mark_properties(layer)
    if layer.geom in _TEXT_GEOMS:
        chart = base.mark_text(**props).encode(text="label:N")
    else:
        chart = base.mark_point(filled=True, **props)
    return chart.encode(
        x=_x_encoding(panel, "x"),
        y=_y_encoding(panel, "y"),
        **_aesthetic_encodings(layer, panel),
    )


def _paths_chart(layer: PanelLayer, panel: Panel) -> alt.Chart:
    rows: list[dict[str, Any]] = []
    for i, m in enumerate(layer.marks):
        assert isinstance(m, (PathMark, ContourMark))
        extra: dict[str, Any] = dict(m.aesthetics)
        if isinstance(m, ContourMark):
            extra["level"] = m.level
        for order, (x, y) in enumerate(m.points):
            rows.append({"x": x, "y": y, "path": i, "order": order, **extra})
    encodings = _aesthetic_encodings(layer, panel)
    if layer.geom in (GeomKind.CONTOUR, GeomKind.DENSITY_2D) and "color" not in encodings:
        if Channel.COLOR.value not in layer.constants:
            encodings["color"] = alt.Color("level:Q", title="level")
    return (
        alt.Chart(alt.Data(values=rows))
        .mark_line(**_mark_properties(layer, line=True))
        .encode(
            x=_x_encoding(panel, "x"),
            y=_y_encoding(panel, "y"),
            detail="path:N",
            order="order:Q",
            **encodings,
        )
    )


def _rects_chart(layer: PanelLayer, panel: Panel) -> alt.Chart:
    rows: list[dict[str, Any]] = []
    for m in layer.marks:
        assert isinstance(m, RectMark)
        rows.append(
            {
                "category": m.x,
                "xmin": m.xmin,
                "xmax": m.xmax,
                "ymin": m.ymin,
                "ymax": m.ymax,
                **m.aesthetics,
            }
        )
    return (
        alt.Chart(alt.Data(values=rows))
        .mark_rect(**_mark_properties(layer))
        .encode(
            x=_x_encoding(panel, "xmin", bars=True),
            x2="xmax:Q",
            y=alt.Y("ymin:Q", scale=_scale(panel.y), title=panel.y_label or alt.Undefined),
            y2="ymax:Q",
            tooltip=["category:N", "ymin:Q", "ymax:Q"],
            **_aesthetic_encodings(layer, panel),
        )
    )


def _areas_chart(layer: PanelLayer, panel: Panel) -> alt.Chart:
    rows: list[dict[str, Any]] = []
    for i, m in enumerate(layer.marks):
        assert isinstance(m, AreaMark)
        for x, lo, hi in zip(m.xs, m.lower, m.upper):
            rows.append({"x": x, "lower": lo, "upper": hi, "area": i, **m.aesthetics})
    props = {"opacity": 0.6, **_mark_properties(layer)}
    return (
        alt.Chart(alt.Data(values=rows))
        .mark_area(**props)
        .encode(
            x=_x_encoding(panel, "x"),
            y=alt.Y("lower:Q", scale=_scale(panel.y), title=panel.y_label or alt.Undefined),
            y2="upper:Q",
            detail="area:N",
            **_aesthetic_encodings(layer, panel),
        )
    )


_LAYER_CHARTS: dict[GeomKind, Callable[[PanelLayer, Panel], alt.Chart]] = {
    GeomKind.POINT: _points_chart,
    GeomKind.TEXT: _points_chart,
    GeomKind.LABEL: _points_chart,
    GeomKind.LINE: _paths_chart,
    GeomKind.PATH: _paths_chart,
    GeomKind.STEP: _paths_chart,
    GeomKind.BAR: _rects_chart,
    GeomKind.COL: _rects_chart,
    GeomKind.AREA: _areas_chart,
    GeomKind.RIBBON: _areas_chart,
    GeomKind.DENSITY_2D: _paths_chart,
    GeomKind.CONTOUR: _paths_chart,
}


# ----------------------------
# Panels and layouts
# ----------------------------


def _empty_chart(width: int, height: int, title: str | None = None) -> alt.Chart:
    return (
        alt.Chart(alt.Data(values=[]))
        .mark_point()
        .properties(width=width, height=height, title=title or "")
    )


def _panel_chart(
    panel: Panel, *, width: int, height: int, title: str | None = None
) -> alt.LayerChart | alt.Chart:
    heading = title if title is not None else panel.title
    layers = [_LAYER_CHARTS[layer.geom](layer, panel) for layer in panel.layers if layer.marks]
    if not layers:
        return _empty_chart(width, height, heading)
    return alt.layer(*layers).properties(width=width, height=height, title=heading or "")


def panel_to_chart(
    panel: Panel,
    *,
    width: int = CHART_WIDTH,
    height: int = CHART_HEIGHT,
    defaults: bool = True,
) -> alt.TopLevelMixin:
    """
    Convert one Panel into an Altair chart.

    Args:
        panel (Panel): Rendered panel.
        width (int): View width in pixels.
        height (int): View height in pixels.
        defaults (bool): Apply the shared axis/legend/title configuration.

    Returns:
        alt.TopLevelMixin: Layered chart (or an empty placeholder for an empty panel).
    """
    chart = _panel_chart(panel, width=width, height=height)
    return apply_chart_defaults(chart) if defaults else chart


def _cell_title(tag: str | None, title: str | None) -> str | None:
    if tag and title:
        return f"{tag} {title}"
    return tag or title


def _blank(width: int, height: int, *, stroke: str | None = EMPTY_CELL_STROKE) -> alt.Chart:
    return _empty_chart(width, height).properties(view=alt.ViewBackground(stroke=stroke))


def layout_to_chart(
    layout: Layout,
    *,
    width: int = CHART_WIDTH,
    height: int = CHART_HEIGHT,
    defaults: bool = True,
) -> alt.TopLevelMixin:
    """
    Convert a Layout into a concatenated Altair chart.

    Each grid row becomes an hconcat, walked column by column. Cells spanning several
    grid units are widened/heightened accordingly; positions under a cell spanning from
    a row above get an unstroked spacer. Empty cells (unplaced cells and ``#``
    positions) become outlined placeholders so rows keep their alignment.
    """
    starts = {(c.row, c.col): c for c in layout.cells}
    rows: list[alt.HConcatChart] = []
    for r in range(layout.nrow):
        charts = []
        col = 0
        while col < layout.ncol:
            cell = starts.get((r, col))
            if cell is None:
                above = next((c for c in layout.cells if c.covers(r, col)), None)
                if above is not None:
                    charts.append(_blank(width * above.col_span, height, stroke=None))
                    col += above.col_span
                else:
                    charts.append(_blank(width, height))
                    col += 1
                continue
            w = width * cell.col_span
            h = height * cell.row_span
            if cell.panel is None:
                charts.append(_blank(w, h))
            else:
                charts.append(
                    _panel_chart(
                        cell.panel,
                        width=w,
                        height=h,
                        title=_cell_title(cell.tag, cell.panel.title),
                    )
                )
            col += cell.col_span
        rows.append(alt.hconcat(*charts))

    chart: alt.TopLevelMixin = alt.vconcat(*rows)
    mode = "shared" if layout.guide_mode is GuideCollection.MERGE else "independent"
    chart = chart.resolve_scale(**{c: mode for c in _LEGEND_RESOLVE}).resolve_legend(
        **{c: mode for c in _LEGEND_RESOLVE}
    )
    if layout.title:
        chart = chart.properties(title=layout.title)
    return apply_chart_defaults(chart) if defaults else chart
