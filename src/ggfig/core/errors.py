"""
Core exception types raised by grammar parsing, mapping resolution, rendering and layout.

Provides typed exceptions for core-domain failures:
- FigureError as the common base for every ggfig failure (io errors derive from it too).
- GrammarError for unknown or non lower_snake enum tokens.
- MissingRequiredChannel, UnknownVariable and TypeMismatch for mapping resolution.
- LayoutError and its subclasses for panel composition.
- StatisticError for density/contour estimation failures.
- FigureSpecError for unreadable or invalid YAML figure specs.

Notes:
    - This module uses only the Python standard library and has no side effects.
    - All failures are deterministic configuration errors; callers fix the input rather
      than retry.

Examples:
    >>> from ggfig.core.errors import MissingRequiredChannel
    >>> try:
    ...     raise MissingRequiredChannel(["y"], geom="point")
    ... except MissingRequiredChannel as e:
    ...     missing = e.channels
    >>> missing
    ('y',)
"""

from __future__ import annotations

from collections.abc import Iterable

__all__ = [
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
    "FigureSpecError",
]


class FigureError(Exception):
    """Base class for all ggfig failures."""


class GrammarError(FigureError, ValueError):
    """Unknown geometry/channel/position/stat token or a value that is not lower_snake."""


class MissingRequiredChannel(FigureError, ValueError):
    """
    A geometry's required channels are absent from the requested mapping.

    Attributes:
        channels (tuple[str, ...]): Missing channel names in the geometry's declared order.
        geom (str | None): Geometry kind that required them.
    """

    def __init__(self, channels: Iterable[str], geom: str | None = None) -> None:
        self.channels = tuple(channels)
        self.geom = geom
        where = f" for geom {geom!r}" if geom else ""
        super().__init__(f"missing required channels{where}: {list(self.channels)!r}")


class UnknownVariable(FigureError, ValueError):
    """A channel is mapped to a variable the dataset does not have."""

    def __init__(self, channel: str, variable: str, available: Iterable[str] = ()) -> None:
        self.channel = channel
        self.variable = variable
        self.available = tuple(available)
        super().__init__(
            f"channel {channel!r} maps unknown variable {variable!r} "
            f"(available={sorted(self.available)!r})"
        )


class TypeMismatch(FigureError, TypeError):
    """
    A required channel is mapped to a variable of an incompatible kind.

    Attributes:
        channel (str): Channel name (e.g., "y").
        variable (str): Variable name bound to the channel.
        expected (str): Expected channel domain ("continuous" or "discrete").
        actual (str): Inferred variable kind.
    """

    def __init__(self, channel: str, variable: str, expected: str, actual: str) -> None:
        self.channel = channel
        self.variable = variable
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"channel {channel!r} expects a {expected} variable; {variable!r} is {actual}"
        )


class LayoutError(FigureError, ValueError):
    """Base class for panel composition failures."""


class LayoutCellConflict(LayoutError):
    """Two panels claim the same layout cell."""

    def __init__(self, cell: str) -> None:
        self.cell = cell
        super().__init__(f"more than one panel claims cell {cell!r}")


class LayoutPanelCountMismatch(LayoutError):
    """The number of panels does not fit the available cells."""

    def __init__(self, panels: int, cells: int) -> None:
        self.panels = panels
        self.cells = cells
        super().__init__(f"{panels} panels cannot be placed into {cells} cells")


class InvalidLayoutTemplate(LayoutError):
    """A named-cell template is ragged, uses invalid characters, or has non-rectangular areas."""


class StatisticError(FigureError, RuntimeError):
    """A density or contour statistic could not be computed for the given data."""


class FigureSpecError(FigureError, ValueError):
    """A figure spec file is unreadable, not YAML, or fails validation."""
