"""
Frozen geometry specs for every GeomKind.

Notes:
    - A GeomSpec declares which channels a geometry understands, which of them are
      required, the variable kind each channel expects, and the default statistic and
      position adjustment.
    - The registry is closed over GeomKind and checked for completeness at import time.
    - Core is zero-IO (stdlib only); the resolver (ggfig.viz.mapping) enforces specs
      against datasets.

Examples:
    >>> from ggfig.core.geoms import get_geom
    >>> spec = get_geom("bar")
    >>> [c.value for c in spec.required], spec.default_stat.value
    (['x'], 'count')
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .grammar import (
    Channel,
    ChannelDomain,
    GeomKind,
    PositionKind,
    StatKind,
    geom_kind_from_value,
)

__all__ = [
    "GeomSpec",
    "get_geom",
    "list_geoms",
]

# Domains that hold for every geometry unless a spec overrides them.
_BASE_DOMAINS: dict[Channel, ChannelDomain] = {
    Channel.SHAPE: ChannelDomain.DISCRETE,
    Channel.LINETYPE: ChannelDomain.DISCRETE,
    Channel.GROUP: ChannelDomain.DISCRETE,
    Channel.SIZE: ChannelDomain.CONTINUOUS,
    Channel.ALPHA: ChannelDomain.CONTINUOUS,
    Channel.WEIGHT: ChannelDomain.CONTINUOUS,
}


@dataclass(frozen=True)
class GeomSpec:
    """
    Frozen descriptor for one geometry kind.

    Attributes:
        kind (GeomKind): Geometry identifier.
        required (tuple[Channel, ...]): Channels that must be mapped, in declared order.
        optional (tuple[Channel, ...]): Channels the geometry understands but can default.
        domains (dict[Channel, ChannelDomain]): Per-channel overrides of the expected
            variable kind; channels absent here fall back to the shared base domains,
            then to ChannelDomain.ANY.
        default_stat (StatKind): Statistic applied when none is requested.
        stats (tuple[StatKind, ...]): Statistics this geometry accepts.
        default_position (PositionKind): Position adjustment applied when none is requested.

    Notes:
        - required and optional are disjoint.
        - default_stat is always a member of stats.
    """

    kind: GeomKind
    required: tuple[Channel, ...]
    optional: tuple[Channel, ...]
    domains: dict[Channel, ChannelDomain] = field(default_factory=dict)
    default_stat: StatKind = StatKind.IDENTITY
    stats: tuple[StatKind, ...] = (StatKind.IDENTITY,)
    default_position: PositionKind = PositionKind.IDENTITY

    @property
    def channels(self) -> tuple[Channel, ...]:
        return self.required + self.optional

    def understands(self, channel: Channel) -> bool:
        return channel in self.required or channel in self.optional

    def is_required(self, channel: Channel) -> bool:
        return channel in self.required

    def domain(self, channel: Channel) -> ChannelDomain:
        if channel in self.domains:
            return self.domains[channel]
        return _BASE_DOMAINS.get(channel, ChannelDomain.ANY)


_C = Channel
_CONT = ChannelDomain.CONTINUOUS

_POINT_OPTIONAL = (_C.COLOR, _C.FILL, _C.SHAPE, _C.SIZE, _C.ALPHA, _C.GROUP)
_LINE_OPTIONAL = (_C.COLOR, _C.LINETYPE, _C.SIZE, _C.ALPHA, _C.GROUP)
_FILLED_OPTIONAL = (_C.FILL, _C.COLOR, _C.ALPHA, _C.GROUP)

_SPECS: tuple[GeomSpec, ...] = (
    GeomSpec(GeomKind.POINT, required=(_C.X, _C.Y), optional=_POINT_OPTIONAL),
    GeomSpec(
        GeomKind.TEXT,
        required=(_C.X, _C.Y, _C.LABEL),
        optional=(_C.COLOR, _C.SIZE, _C.ALPHA, _C.GROUP),
    ),
    GeomSpec(
        GeomKind.LABEL,
        required=(_C.X, _C.Y, _C.LABEL),
        optional=(_C.COLOR, _C.FILL, _C.SIZE, _C.ALPHA, _C.GROUP),
    ),
    GeomSpec(GeomKind.LINE, required=(_C.X, _C.Y), optional=_LINE_OPTIONAL, domains={_C.Y: _CONT}),
    GeomSpec(GeomKind.PATH, required=(_C.X, _C.Y), optional=_LINE_OPTIONAL, domains={_C.Y: _CONT}),
    GeomSpec(GeomKind.STEP, required=(_C.X, _C.Y), optional=_LINE_OPTIONAL, domains={_C.Y: _CONT}),
    GeomSpec(
        GeomKind.BAR,
        required=(_C.X,),
        optional=(_C.Y, _C.WEIGHT) + _FILLED_OPTIONAL,
        domains={_C.Y: _CONT},
        default_stat=StatKind.COUNT,
        stats=(StatKind.COUNT, StatKind.IDENTITY),
        default_position=PositionKind.STACK,
    ),
    GeomSpec(
        GeomKind.COL,
        required=(_C.X, _C.Y),
        optional=_FILLED_OPTIONAL,
        domains={_C.Y: _CONT},
        default_position=PositionKind.STACK,
    ),
    GeomSpec(
        GeomKind.AREA,
        required=(_C.X, _C.Y),
        optional=_FILLED_OPTIONAL,
        domains={_C.X: _CONT, _C.Y: _CONT},
    ),
    GeomSpec(
        GeomKind.RIBBON,
        required=(_C.X, _C.YMIN, _C.YMAX),
        optional=_FILLED_OPTIONAL,
        domains={_C.X: _CONT, _C.YMIN: _CONT, _C.YMAX: _CONT},
    ),
    GeomSpec(
        GeomKind.DENSITY_2D,
        required=(_C.X, _C.Y),
        optional=(_C.COLOR, _C.ALPHA, _C.GROUP),
        domains={_C.X: _CONT, _C.Y: _CONT},
        default_stat=StatKind.DENSITY_2D,
        stats=(StatKind.DENSITY_2D,),
    ),
    GeomSpec(
        GeomKind.CONTOUR,
        required=(_C.X, _C.Y, _C.Z),
        optional=(_C.COLOR, _C.ALPHA, _C.GROUP),
        domains={_C.X: _CONT, _C.Y: _CONT, _C.Z: _CONT},
        default_stat=StatKind.CONTOUR,
        stats=(StatKind.CONTOUR,),
    ),
)

# Registry
_GEOMS: dict[GeomKind, GeomSpec] = {spec.kind: spec for spec in _SPECS}


def get_geom(kind: GeomKind | str) -> GeomSpec:
    """
    Look up a geometry spec by kind.

    Args:
        kind (GeomKind | str): Geometry kind (enum or token such as "point").

    Returns:
        GeomSpec: Spec for the requested geometry.

    Raises:
        GrammarError: If the token is not a known geometry.
    """
    return _GEOMS[geom_kind_from_value(kind)]


def list_geoms() -> list[GeomSpec]:
    """Return all registered geometry specs in GeomKind order."""
    return [_GEOMS[k] for k in GeomKind]


def _assert_registry_complete() -> None:
    missing = [k.value for k in GeomKind if k not in _GEOMS]
    if missing:
        raise ValueError(f"GeomSpec registry out of sync with GeomKind: missing {missing}")


_assert_registry_complete()
