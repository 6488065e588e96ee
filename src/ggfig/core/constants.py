"""
ggfig core rendering defaults.

Defines the layout and statistics defaults consumed by the io settings layer and the
renderers. This module is zero-IO and uses only the Python standard library.

Notes:
    - ggfig.io.config.Settings sources its defaults from here; override them through
      environment variables or TOML rather than editing call sites.
    - Bar positions are expressed in data units: discrete categories sit at 1..n and a
      bar spans ``BAR_WIDTH`` around its category.
"""

from __future__ import annotations

__all__ = [
    "BAR_WIDTH",
    "DEFAULT_POSITION",
    "CONTOUR_BINS",
    "KDE_GRID_SIZE",
    "CHART_WIDTH",
    "CHART_HEIGHT",
    "LOG_LEVEL",
]

# Fraction of a category slot covered by a bar (or by a dodged group of bars).
BAR_WIDTH: float = 0.9

# Position adjustment applied to multi-series bars when none is requested.
DEFAULT_POSITION: str = "stack"

# Number of iso-levels extracted by contour and 2D density layers.
CONTOUR_BINS: int = 10

# Grid resolution (per axis) for kernel density estimates.
KDE_GRID_SIZE: int = 64

# Default Vega-Lite view size for exported panels (pixels).
CHART_WIDTH: int = 320
CHART_HEIGHT: int = 240

# Default level for the ggfig logger namespace.
LOG_LEVEL: str = "WARNING"
