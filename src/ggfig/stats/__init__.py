"""
ggfig.stats — statistics collaborators for the Geometry Renderer.

## Public API
- ContourEstimator — protocol the renderer calls for contour and 2D-density layers.
- KdeContourEstimator — default implementation (scipy KDE + scikit-image iso-lines).
- ContourLine — one traced iso-line piece.

## Import DAG discipline
- Depends on numpy, scipy, scikit-image and ggfig.core only.
"""

from __future__ import annotations

from .contour import ContourEstimator, ContourLine, KdeContourEstimator

__all__ = [
    "ContourEstimator",
    "ContourLine",
    "KdeContourEstimator",
]
