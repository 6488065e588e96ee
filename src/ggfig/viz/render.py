"""
Geometry Renderer: turn a resolved mapping over a dataset into a Panel.

Dispatch
- One renderer per GeomKind in ``_RENDERERS``; the table is checked complete at import.

Rules
- point, text, label: one mark per record.
- line: one path per group, vertices sorted by x. path: record order. step: sorted by x
  and drawn as a stairstep (horizontal, then vertical).
- bar, col: one rectangle per (category, group). Stat ``count`` counts records (or sums
  ``weight``); stat ``identity`` sums ``y``. Positions: stack (default), dodge,
  identity, fill. Discrete categories sit at 1..n in sorted level order.
- area: region between 0 and y. ribbon: region between ymin and ymax. Both sorted by x.
- contour: iso-lines of a gridded (x, y, z) surface. density_2d: iso-lines of a
  Gaussian kernel density over (x, y). Both delegate to a ContourEstimator.
- Records with a missing value on a required channel are dropped (logged at WARNING).
- An empty dataset yields an empty panel.

Groups
- The ``group`` channel when mapped; otherwise every discrete variable bound to color,
  fill, linetype or shape.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

import polars as pl

from ggfig.core.errors import GrammarError, MissingRequiredChannel
from ggfig.core.grammar import (
    LEGEND_CHANNELS,
    POSITION_CHANNELS,
    Channel,
    GeomKind,
    PositionKind,
    StatKind,
    VariableKind,
    position_kind_from_value,
    stat_kind_from_value,
)
from ggfig.io.config import Settings
from ggfig.io.dataset import Dataset
from ggfig.stats.contour import ContourEstimator, ContourLine, KdeContourEstimator

from .mapping import ResolvedMapping
from .marks import (
    AreaMark,
    ContourMark,
    LegendEntry,
    Mark,
    Panel,
    PanelLayer,
    PathMark,
    PointMark,
    ScaleDomain,
    TextMark,
    level_sort_key,
)
from .positions import BarValue, adjust

__all__ = [
    "render",
]

logger = logging.getLogger(__name__)

_GROUPING_CHANNELS = (Channel.COLOR, Channel.FILL, Channel.LINETYPE, Channel.SHAPE)
_BARS = (GeomKind.BAR, GeomKind.COL)


@dataclass(frozen=True)
class _Context:
    resolved: ResolvedMapping
    frame: pl.DataFrame  # channel-named columns, missing rows already dropped
    stat: StatKind
    position: PositionKind
    settings: Settings
    estimator: ContourEstimator

    @property
    def kind(self) -> GeomKind:
        return self.resolved.geom.kind

    def values(self, channel: Channel, frame: pl.DataFrame | None = None) -> list[Any]:
        return (self.frame if frame is None else frame).get_column(channel.value).to_list()

    def has(self, channel: Channel) -> bool:
        return channel.value in self.frame.columns

    def variable_kind(self, channel: Channel) -> VariableKind:
        binding = self.resolved.binding(channel)
        if binding is None:
            return VariableKind.CONTINUOUS
        if binding.kind is not None:
            return binding.kind
        # Constants: strings are categories, everything else a number.
        if binding.constant is not None and isinstance(binding.constant.value, str):
            return VariableKind.DISCRETE
        return VariableKind.CONTINUOUS

    @property
    def aesthetic_channels(self) -> tuple[Channel, ...]:
        return tuple(
            c for c in LEGEND_CHANNELS if c.value in self.frame.columns
        )

    @property
    def group_channels(self) -> tuple[Channel, ...]:
        if self.has(Channel.GROUP):
            return (Channel.GROUP,)
        return tuple(
            c
            for c in _GROUPING_CHANNELS
            if self.has(c) and self.resolved.kind(c) is VariableKind.DISCRETE
        )


@dataclass(frozen=True)
class _Rendered:
    marks: tuple[Mark, ...]
    x: ScaleDomain | None
    y: ScaleDomain | None
    y_label: str | None = None


# ============================================================================
# Frame preparation
# ============================================================================


def _channel_frame(resolved: ResolvedMapping, dataset: Dataset) -> pl.DataFrame:
    """Project ``dataset`` onto channel-named columns (variables and position constants)."""
    n = dataset.height
    columns: list[pl.Series] = []
    for channel, binding in resolved.bindings.items():
        if binding.variable is not None:
            columns.append(dataset.frame.get_column(binding.variable).alias(channel.value))
        elif binding.constant is not None and (
            channel in POSITION_CHANNELS or channel is Channel.LABEL
        ):
            columns.append(pl.repeat(binding.constant.value, n, eager=True).alias(channel.value))
    return pl.DataFrame(columns)


def _drop_missing(frame: pl.DataFrame, channels: Sequence[Channel], geom: GeomKind) -> pl.DataFrame:
    subset = [c.value for c in channels if c.value in frame.columns]
    if not subset:
        return frame
    kept = frame.drop_nulls(subset=subset)
    dropped = frame.height - kept.height
    if dropped:
        logger.warning(
            "geom %s: removed %d rows containing missing values (%s)",
            geom.value,
            dropped,
            ", ".join(subset),
        )
    return kept


def _partition(ctx: _Context, frame: pl.DataFrame) -> list[tuple[tuple[Any, ...], pl.DataFrame]]:
    keys = [c.value for c in ctx.group_channels]
    if not keys or frame.height == 0:
        return [((), frame)]
    parts = frame.partition_by(keys, maintain_order=True)
    return [(tuple(part.select(keys).row(0)), part) for part in parts]


def _aesthetics(ctx: _Context, frame: pl.DataFrame, row: int = 0) -> dict[str, Any]:
    return {c.value: frame.get_column(c.value)[row] for c in ctx.aesthetic_channels}


def _row_aesthetics(ctx: _Context, frame: pl.DataFrame) -> list[dict[str, Any]]:
    channels = [c.value for c in ctx.aesthetic_channels]
    if not channels:
        return [{} for _ in range(frame.height)]
    return frame.select(channels).to_dicts()


def _domain(ctx: _Context, channel: Channel, values: Sequence[Any]) -> ScaleDomain | None:
    return ScaleDomain.of(ctx.variable_kind(channel), values)


# ============================================================================
# Renderers
# ============================================================================


def _render_points(ctx: _Context) -> _Rendered:
    xs = ctx.values(Channel.X)
    ys = ctx.values(Channel.Y)
    aesthetics = _row_aesthetics(ctx, ctx.frame)
    marks: list[Mark]
    if ctx.kind is GeomKind.POINT:
        marks = [PointMark(x, y, a) for x, y, a in zip(xs, ys, aesthetics)]
    else:
        labels = ctx.values(Channel.LABEL)
        marks = [TextMark(x, y, lab, a) for x, y, lab, a in zip(xs, ys, labels, aesthetics)]
    return _Rendered(tuple(marks), _domain(ctx, Channel.X, xs), _domain(ctx, Channel.Y, ys))


def _stairstep(points: list[tuple[Any, Any]]) -> list[tuple[Any, Any]]:
    if len(points) < 2:
        return points
    out = [points[0]]
    for (_, y0), (x1, y1) in zip(points, points[1:]):
        out.append((x1, y0))
        out.append((x1, y1))
    return out


def _render_paths(ctx: _Context) -> _Rendered:
    marks: list[Mark] = []
    for key, part in _partition(ctx, ctx.frame):
        if ctx.kind is not GeomKind.PATH:
            part = part.sort(Channel.X.value, maintain_order=True)
        points = list(zip(ctx.values(Channel.X, part), ctx.values(Channel.Y, part)))
        if ctx.kind is GeomKind.STEP:
            points = _stairstep(points)
        marks.append(PathMark(tuple(points), key, _aesthetics(ctx, part)))
    return _Rendered(
        tuple(marks),
        _domain(ctx, Channel.X, ctx.values(Channel.X)),
        _domain(ctx, Channel.Y, ctx.values(Channel.Y)),
    )


def _resolution(values: Sequence[float]) -> float:
    levels = sorted(set(values))
    gaps = [b - a for a, b in zip(levels, levels[1:]) if b > a]
    return min(gaps) if gaps else 1.0


def _render_bars(ctx: _Context) -> _Rendered:
    frame = ctx.frame
    if ctx.stat is StatKind.COUNT:
        value = pl.col(Channel.WEIGHT.value).sum() if ctx.has(Channel.WEIGHT) else pl.len()
    else:
        if not ctx.has(Channel.Y):
            raise MissingRequiredChannel([Channel.Y.value], geom=ctx.kind.value)
        value = pl.col(Channel.Y.value).sum()

    groups = [c.value for c in ctx.group_channels]
    keys = [Channel.X.value, *groups]
    extra = [
        pl.col(c.value).first()
        for c in ctx.aesthetic_channels
        if c.value not in keys
    ]
    agg = frame.group_by(keys, maintain_order=True).agg(value.cast(pl.Float64).alias("__value__"), *extra)

    discrete_x = ctx.variable_kind(Channel.X) is VariableKind.DISCRETE
    x_column = agg.get_column(Channel.X.value)
    xs = x_column.to_list()
    if discrete_x:
        x_domain = ScaleDomain.discrete(xs)
        levels = x_domain.values if x_domain is not None else ()
        centers = {level: float(i + 1) for i, level in enumerate(levels)}
        width = ctx.settings.bar_width
    else:
        # temporal x is placed by its physical value (days or time units since epoch)
        physical = [float(p) for p in x_column.to_physical().to_list()]
        centers = dict(zip(xs, physical))
        width = ctx.settings.bar_width * _resolution(physical)

    bars = [
        BarValue(
            x=row[Channel.X.value],
            center=centers[row[Channel.X.value]],
            value=row["__value__"],
            group=tuple(row[g] for g in groups),
            aesthetics={c.value: row[c.value] for c in ctx.aesthetic_channels},
        )
        for row in agg.to_dicts()
    ]
    bars.sort(key=lambda b: (b.center, tuple(level_sort_key(v) for v in b.group)))
    rects = adjust(ctx.position, bars, width)

    if discrete_x:
        x_out = x_domain
    else:
        x_out = ScaleDomain.continuous([r.xmin for r in rects] + [r.xmax for r in rects])
    y_out = ScaleDomain.continuous([r.ymin for r in rects] + [r.ymax for r in rects])
    y_label = "count" if ctx.stat is StatKind.COUNT else None
    return _Rendered(tuple(rects), x_out, y_out, y_label=y_label)


def _render_areas(ctx: _Context) -> _Rendered:
    marks: list[Mark] = []
    lows: list[float] = []
    highs: list[float] = []
    for key, part in _partition(ctx, ctx.frame):
        part = part.sort(Channel.X.value, maintain_order=True)
        xs = ctx.values(Channel.X, part)
        if ctx.kind is GeomKind.AREA:
            upper = [float(v) for v in ctx.values(Channel.Y, part)]
            lower = [0.0] * len(upper)
        else:
            lower = [float(v) for v in ctx.values(Channel.YMIN, part)]
            upper = [float(v) for v in ctx.values(Channel.YMAX, part)]
        lows.extend(lower)
        highs.extend(upper)
        marks.append(AreaMark(tuple(xs), tuple(lower), tuple(upper), key, _aesthetics(ctx, part)))
    return _Rendered(
        tuple(marks),
        _domain(ctx, Channel.X, ctx.values(Channel.X)),
        ScaleDomain.continuous(lows + highs),
    )


def _render_contours(ctx: _Context) -> _Rendered:
    marks: list[Mark] = []
    bins = ctx.settings.contour_bins
    for key, part in _partition(ctx, ctx.frame):
        xs = ctx.values(Channel.X, part)
        ys = ctx.values(Channel.Y, part)
        lines: list[ContourLine]
        if ctx.stat is StatKind.CONTOUR:
            lines = ctx.estimator.grid_contours(xs, ys, ctx.values(Channel.Z, part), bins=bins)
        else:
            lines = ctx.estimator.density_contours(
                xs, ys, bins=bins, grid_size=ctx.settings.kde_grid_size
            )
        aesthetics = _aesthetics(ctx, part)
        marks.extend(
            ContourMark(line.level, line.piece, line.points, key, aesthetics) for line in lines
        )
    return _Rendered(
        tuple(marks),
        ScaleDomain.continuous(ctx.values(Channel.X)),
        ScaleDomain.continuous(ctx.values(Channel.Y)),
    )


_RENDERERS: dict[GeomKind, Callable[[_Context], _Rendered]] = {
    GeomKind.POINT: _render_points,
    GeomKind.TEXT: _render_points,
    GeomKind.LABEL: _render_points,
    GeomKind.LINE: _render_paths,
    GeomKind.PATH: _render_paths,
    GeomKind.STEP: _render_paths,
    GeomKind.BAR: _render_bars,
    GeomKind.COL: _render_bars,
    GeomKind.AREA: _render_areas,
    GeomKind.RIBBON: _render_areas,
    GeomKind.DENSITY_2D: _render_contours,
    GeomKind.CONTOUR: _render_contours,
}


def _assert_renderers_complete() -> None:
    missing = [k.value for k in GeomKind if k not in _RENDERERS]
    if missing:
        raise ValueError(f"renderer table out of sync with GeomKind: missing {missing}")


_assert_renderers_complete()


# ============================================================================
# Entry point
# ============================================================================


def _pick_stat(resolved: ResolvedMapping, stat: StatKind | str | None) -> StatKind:
    spec = resolved.geom
    if stat is None:
        return spec.default_stat
    kind = stat_kind_from_value(stat)
    if kind not in spec.stats:
        raise GrammarError(
            f"geom {spec.kind.value} does not support stat {kind.value!r} "
            f"(allowed={[s.value for s in spec.stats]})"
        )
    return kind


def _pick_position(
    resolved: ResolvedMapping, position: PositionKind | str | None, settings: Settings
) -> PositionKind:
    spec = resolved.geom
    if spec.kind in _BARS:
        if position is None:
            return position_kind_from_value(settings.default_position)
        return position_kind_from_value(position)
    if position is None:
        return spec.default_position
    kind = position_kind_from_value(position)
    if kind is not PositionKind.IDENTITY:
        raise GrammarError(f"geom {spec.kind.value} supports only position 'identity'")
    return kind


def _legends(ctx: _Context) -> tuple[LegendEntry, ...]:
    entries: list[LegendEntry] = []
    for channel in LEGEND_CHANNELS:
        binding = ctx.resolved.binding(channel)
        if binding is None or binding.variable is None:
            continue
        domain = ScaleDomain.of(binding.kind, ctx.values(channel))
        if domain is not None:
            entries.append(LegendEntry(channel, binding.variable, domain))
    return tuple(entries)


def render(
    resolved: ResolvedMapping,
    dataset: Dataset,
    *,
    stat: StatKind | str | None = None,
    position: PositionKind | str | None = None,
    settings: Settings | None = None,
    estimator: ContourEstimator | None = None,
) -> Panel:
    """
    Render one geometry layer into a Panel.

    Args:
        resolved (ResolvedMapping): Output of ``ggfig.viz.mapping.resolve``.
        dataset (Dataset): The dataset the mapping was resolved against.
        stat (StatKind | str | None): Statistic override; defaults to the geometry's.
        position (PositionKind | str | None): Position override for bar/col; other
            geometries accept only identity.
        settings (Settings | None): Rendering knobs (bar width, contour bins, ...).
        estimator (ContourEstimator | None): Statistics collaborator for contour and
            density_2d; defaults to KdeContourEstimator.

    Returns:
        Panel: A single-layer panel with scale domains and legend entries. An empty
        dataset yields a panel with zero marks.

    Raises:
        GrammarError: Unsupported stat or position for this geometry.
        MissingRequiredChannel: bar with stat identity and no y.
        ggfig.core.errors.StatisticError: The contour/density estimate failed.
    """
    settings = settings or Settings()
    spec = resolved.geom
    stat_kind = _pick_stat(resolved, stat)
    position_kind = _pick_position(resolved, position, settings)

    x_label = resolved.variable(Channel.X)
    y_label = resolved.variable(Channel.Y)
    constants = resolved.constants()

    if (
        stat_kind is StatKind.IDENTITY
        and spec.kind is GeomKind.BAR
        and not resolved.has(Channel.Y)
    ):
        raise MissingRequiredChannel([Channel.Y.value], geom=spec.kind.value)

    if dataset.height == 0:
        logger.debug("geom %s: dataset %r is empty", spec.kind.value, dataset.name)
        return Panel(
            layers=(PanelLayer(spec.kind, (), constants),),
            x_label=x_label,
            y_label=y_label,
        )

    required = list(spec.required)
    if stat_kind is StatKind.IDENTITY and spec.kind is GeomKind.BAR:
        required.append(Channel.Y)
    frame = _drop_missing(_channel_frame(resolved, dataset), required, spec.kind)

    ctx = _Context(
        resolved=resolved,
        frame=frame,
        stat=stat_kind,
        position=position_kind,
        settings=settings,
        estimator=estimator or KdeContourEstimator(),
    )
    out = _RENDERERS[spec.kind](ctx)
    logger.debug(
        "geom %s: rendered %d marks from %d rows", spec.kind.value, len(out.marks), frame.height
    )
    return Panel(
        layers=(PanelLayer(spec.kind, out.marks, constants),),
        x=out.x,
        y=out.y,
        legends=_legends(ctx),
        x_label=x_label,
        y_label=out.y_label or y_label,
    )
