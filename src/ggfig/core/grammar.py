"""
Canonical ggfig grammar and helpers.

Defines the vocabulary of the figure pipeline: visual channels, geometry kinds,
statistics, position adjustments, variable kinds, channel domains, guide collection
and tag modes. Includes zero-IO normalization helpers used by the resolver, the
renderers, the composer and the figure-spec loader.

Responsibilities
- Define enums whose serialized values are lower_snake.
- Provide parsing helpers that turn user tokens ("colour", "Point", "dodge") into enums.
- Raise GrammarError for anything outside the closed vocabulary.

Design principles
-----------------
1) One naming standard:
   - Enum classes: PascalCase
   - Enum member names: UPPER_SNAKE (Python constants)
   - Enum serialized values (YAML specs, exported records): lower_snake

2) Closed sets:
   - GeomKind is a closed tagged variant; every member has exactly one GeomSpec
     (ggfig.core.geoms) and one rendering rule (ggfig.viz.render). Both registries are
     checked for completeness at import time.

Examples
--------
>>> from ggfig.core.grammar import Channel, channel_from_value, geom_kind_from_value
>>> channel_from_value("colour") is Channel.COLOR
True
>>> geom_kind_from_value("Point").value
'point'
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from enum import Enum
from typing import Final

from .errors import GrammarError

__all__ = [
    "Channel",
    "GeomKind",
    "StatKind",
    "PositionKind",
    "VariableKind",
    "ChannelDomain",
    "GuideCollection",
    "TagMode",
    "POSITION_CHANNELS",
    "LEGEND_CHANNELS",
    # helpers/validators
    "is_lower_snake",
    "assert_lower_snake",
    "channel_from_value",
    "geom_kind_from_value",
    "stat_kind_from_value",
    "position_kind_from_value",
    "guide_collection_from_value",
    "tag_mode_from_value",
    "ensure_all_enum_values_lower_snake",
]


# ============================================================================
# CHANNELS
# ============================================================================


class Channel(Enum):
    """
    Visual attributes that data can be mapped onto.

    Notes:
      Position channels (x, y, ymin, ymax, z) place marks; label/group/weight feed
      the geometry without producing a legend; the remaining channels are scaled and
      produce legend entries when mapped to a variable.
    """

    X = "x"
    Y = "y"
    YMIN = "ymin"
    YMAX = "ymax"
    Z = "z"
    COLOR = "color"
    FILL = "fill"
    SHAPE = "shape"
    SIZE = "size"
    ALPHA = "alpha"
    LINETYPE = "linetype"
    LABEL = "label"
    GROUP = "group"
    WEIGHT = "weight"


POSITION_CHANNELS: Final[frozenset[Channel]] = frozenset(
    {Channel.X, Channel.Y, Channel.YMIN, Channel.YMAX, Channel.Z}
)

# Channels that produce guides (legends) when bound to a variable, in legend order.
LEGEND_CHANNELS: Final[tuple[Channel, ...]] = (
    Channel.COLOR,
    Channel.FILL,
    Channel.SHAPE,
    Channel.SIZE,
    Channel.ALPHA,
    Channel.LINETYPE,
)

# Spellings accepted on input in addition to the canonical values.
_CHANNEL_ALIASES: Final[dict[str, Channel]] = {
    "colour": Channel.COLOR,
    "col": Channel.COLOR,
    "line_type": Channel.LINETYPE,
}


# ============================================================================
# GEOMETRIES, STATISTICS, POSITIONS
# ============================================================================


class GeomKind(Enum):
    """
    Supported mark kinds.

    Notes:
      Rendering rules (ggfig.viz.render):
        * point, text, label      one mark per record at (x, y)
        * line, path, step        connected marks (x-sorted, record order, stairstep)
        * bar, col                one rectangle per category and group
        * area, ribbon            filled region between a baseline and y / ymax
        * density_2d, contour     iso-lines from the statistics collaborator
    """

    POINT = "point"
    TEXT = "text"
    LABEL = "label"
    LINE = "line"
    PATH = "path"
    STEP = "step"
    BAR = "bar"
    COL = "col"
    AREA = "area"
    RIBBON = "ribbon"
    DENSITY_2D = "density_2d"
    CONTOUR = "contour"


class StatKind(Enum):
    """Statistical transformation applied before drawing."""

    IDENTITY = "identity"
    COUNT = "count"
    DENSITY_2D = "density_2d"
    CONTOUR = "contour"


class PositionKind(Enum):
    """How bars that share a category are arranged."""

    IDENTITY = "identity"
    STACK = "stack"
    DODGE = "dodge"
    FILL = "fill"


# ============================================================================
# VARIABLES, DOMAINS, LAYOUT
# ============================================================================


class VariableKind(Enum):
    """
    Inferred kind of a dataset variable.

    Notes:
      EMPTY marks a column with no observed values (all null or zero rows); it is
      compatible with every channel domain.
    """

    CONTINUOUS = "continuous"
    DISCRETE = "discrete"
    EMPTY = "empty"


class ChannelDomain(Enum):
    """Variable kind a channel accepts for a given geometry."""

    ANY = "any"
    CONTINUOUS = "continuous"
    DISCRETE = "discrete"

    def accepts(self, kind: VariableKind) -> bool:
        if self is ChannelDomain.ANY or kind is VariableKind.EMPTY:
            return True
        return self.value == kind.value


class GuideCollection(Enum):
    """Whether legends are merged across composed panels or kept per panel."""

    MERGE = "merge"
    PER_PANEL = "per_panel"


class TagMode(Enum):
    """Panel tagging policy for composed layouts."""

    NONE = "none"
    SEQUENTIAL = "sequential"


# ============================================================================
# Helpers & Validators (zero I/O)
# ============================================================================

_LOWER_SNAKE_RE: Final[re.Pattern[str]] = re.compile(r"^[a-z0-9]+(?:_[a-z0-9]+)*$")


def is_lower_snake(value: str) -> bool:
    """
    Check whether a string is lower_snake.

    Args:
      value (str): Candidate string to validate.

    Returns:
      bool: True if value matches lower_snake (e.g., "density_2d"), False otherwise.

    Examples:
      >>> is_lower_snake("density_2d")
      True
      >>> is_lower_snake("Density2D")
      False
    """
    return bool(_LOWER_SNAKE_RE.match(value or ""))


def assert_lower_snake(value: str, what: str = "value") -> None:
    """
    Validate that a string is lower_snake.

    Raises:
      GrammarError: If value is not lower_snake.
    """
    if not is_lower_snake(value):
        raise GrammarError(f"{what} must be lower_snake (got: {value!r})")


def _normalize_token(value: str) -> str:
    return (value or "").strip().lower().replace("-", "_")


def _parse_enum(enum_cls: type[Enum], value: object, what: str) -> Enum:
    if isinstance(value, enum_cls):
        return value
    token = _normalize_token(str(value))
    assert_lower_snake(token, what)
    try:
        return enum_cls(token)
    except ValueError as exc:
        allowed = sorted(m.value for m in enum_cls)
        raise GrammarError(f"{what} must be one of {allowed} (got {value!r})") from exc


def channel_from_value(value: str | Channel) -> Channel:
    """
    Parse a channel token into a Channel, accepting common aliases.

    Args:
      value (str | Channel): Channel token, e.g. "x", "colour", "Fill".

    Returns:
      Channel: Parsed channel.

    Raises:
      GrammarError: If the token is not a known channel.
    """
    if isinstance(value, Channel):
        return value
    token = _normalize_token(str(value))
    if token in _CHANNEL_ALIASES:
        return _CHANNEL_ALIASES[token]
    return _parse_enum(Channel, token, "channel")  # type: ignore[return-value]


def geom_kind_from_value(value: str | GeomKind) -> GeomKind:
    """Parse a geometry token (e.g., "point", "density-2d") into a GeomKind."""
    token = value if isinstance(value, GeomKind) else str(value).removeprefix("geom_")
    return _parse_enum(GeomKind, token, "geom")  # type: ignore[return-value]


def stat_kind_from_value(value: str | StatKind) -> StatKind:
    """Parse a statistic token (e.g., "count") into a StatKind."""
    return _parse_enum(StatKind, value, "stat")  # type: ignore[return-value]


def position_kind_from_value(value: str | PositionKind) -> PositionKind:
    """Parse a position token (e.g., "dodge") into a PositionKind."""
    return _parse_enum(PositionKind, value, "position")  # type: ignore[return-value]


def guide_collection_from_value(value: str | GuideCollection) -> GuideCollection:
    """Parse a guide collection token (e.g., "merge", "per-panel") into a GuideCollection."""
    return _parse_enum(GuideCollection, value, "guides")  # type: ignore[return-value]


def tag_mode_from_value(value: str | TagMode) -> TagMode:
    """Parse a tag mode token (e.g., "sequential") into a TagMode."""
    return _parse_enum(TagMode, value, "tags")  # type: ignore[return-value]


def ensure_all_enum_values_lower_snake(enums: Iterable[type[Enum]]) -> None:
    """
    Assert that every enum member's value is lower_snake.

    Args:
      enums (Iterable[type[Enum]]): Iterable of Enum classes to inspect.

    Raises:
      AssertionError: If any enum member has a non-lower_snake value.
    """
    for E in enums:
        for m in E:
            if not is_lower_snake(m.value):
                raise AssertionError(
                    f"{E.__name__}.{m.name} has non-lower_snake value: {m.value!r}"
                )
