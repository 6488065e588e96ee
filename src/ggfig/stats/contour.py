"""
Iso-line statistics for contour and 2D-density layers.

Responsibilities
- Turn a gridded surface (x, y, z triples) into iso-lines at evenly spaced levels.
- Estimate a Gaussian kernel density over scattered (x, y) points, then contour it.

Notes
- Levels are ``bins`` values strictly between the surface minimum and maximum, so a
  flat surface has no iso-lines (an empty result, not an error).
- Grid coordinates returned by ``skimage.measure.find_contours`` are (row, col) floats
  and are mapped back to data units by linear interpolation over the grid axes.
- Failures of the estimate (too few points, singular covariance, an incomplete grid)
  raise StatisticError.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

import numpy as np
from numpy.typing import NDArray
from scipy.stats import gaussian_kde
from skimage.measure import find_contours

from ggfig.core.constants import CONTOUR_BINS, KDE_GRID_SIZE
from ggfig.core.errors import StatisticError

__all__ = [
    "ContourLine",
    "ContourEstimator",
    "KdeContourEstimator",
    "grid_from_points",
    "contour_levels",
]


@dataclass(frozen=True, slots=True)
class ContourLine:
    """One connected piece of the iso-line at ``level``; ``piece`` numbers pieces per level."""

    level: float
    piece: int
    points: tuple[tuple[float, float], ...]


class ContourEstimator(Protocol):
    """What the renderer needs from a statistics collaborator."""

    def grid_contours(
        self,
        x: Sequence[float],
        y: Sequence[float],
        z: Sequence[float],
        *,
        bins: int = CONTOUR_BINS,
    ) -> list[ContourLine]: ...

    def density_contours(
        self,
        x: Sequence[float],
        y: Sequence[float],
        *,
        bins: int = CONTOUR_BINS,
        grid_size: int = KDE_GRID_SIZE,
    ) -> list[ContourLine]: ...


def grid_from_points(
    x: Sequence[float], y: Sequence[float], z: Sequence[float]
) -> tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
    """
    Arrange (x, y, z) triples on a rectangular grid.

    Returns:
        tuple: ``(xs, ys, zz)`` where ``xs``/``ys`` are the sorted unique axis values and
        ``zz[j, i]`` is the surface value at ``(xs[i], ys[j])``.

    Raises:
        StatisticError: Lengths differ, an axis has fewer than two values, a grid node
            appears more than once, or some grid node has no value.
    """
    xa = np.asarray(x, dtype=float)
    ya = np.asarray(y, dtype=float)
    za = np.asarray(z, dtype=float)
    if not (xa.shape == ya.shape == za.shape):
        raise StatisticError("x, y and z must have the same length")

    xs = np.unique(xa)
    ys = np.unique(ya)
    if xs.size < 2 or ys.size < 2:
        raise StatisticError(
            f"contour needs at least a 2x2 grid (got {xs.size}x{ys.size})"
        )

    nodes = np.unique(np.column_stack((xa, ya)), axis=0)
    if nodes.shape[0] != xa.size:
        raise StatisticError(
            f"contour needs one z per grid node: {xa.size - nodes.shape[0]} duplicate (x, y) pairs"
        )

    zz = np.full((ys.size, xs.size), np.nan)
    zz[np.searchsorted(ys, ya), np.searchsorted(xs, xa)] = za
    if np.isnan(zz).any():
        raise StatisticError(
            f"contour needs a complete grid: {int(np.isnan(zz).sum())} of {zz.size} nodes missing"
        )
    return xs, ys, zz


def contour_levels(zz: NDArray[np.float64], bins: int) -> NDArray[np.float64]:
    """Return ``bins`` evenly spaced levels strictly inside the range of ``zz``."""
    zmin = float(np.min(zz))
    zmax = float(np.max(zz))
    if bins < 1 or zmin == zmax:
        return np.empty(0)
    return np.linspace(zmin, zmax, bins + 2)[1:-1]


def _trace(
    xs: NDArray[np.float64],
    ys: NDArray[np.float64],
    zz: NDArray[np.float64],
    bins: int,
) -> list[ContourLine]:
    cols = np.arange(xs.size, dtype=float)
    rows = np.arange(ys.size, dtype=float)
    lines: list[ContourLine] = []
    for level in contour_levels(zz, bins):
        for piece, coords in enumerate(find_contours(zz, level)):
            px = np.interp(coords[:, 1], cols, xs)
            py = np.interp(coords[:, 0], rows, ys)
            points = tuple((float(a), float(b)) for a, b in zip(px, py))
            lines.append(ContourLine(level=float(level), piece=piece, points=points))
    return lines


class KdeContourEstimator:
    """
    Default estimator: scikit-image marching squares, scipy Gaussian KDE.

    Examples:
        >>> est = KdeContourEstimator()
        >>> est.grid_contours([0, 1, 0, 1], [0, 0, 1, 1], [0.0, 1.0, 1.0, 2.0], bins=1)[0].level
        1.0
    """

    def grid_contours(
        self,
        x: Sequence[float],
        y: Sequence[float],
        z: Sequence[float],
        *,
        bins: int = CONTOUR_BINS,
    ) -> list[ContourLine]:
        xs, ys, zz = grid_from_points(x, y, z)
        return _trace(xs, ys, zz, bins)

    def density_contours(
        self,
        x: Sequence[float],
        y: Sequence[float],
        *,
        bins: int = CONTOUR_BINS,
        grid_size: int = KDE_GRID_SIZE,
    ) -> list[ContourLine]:
        xs, ys, zz = self.density_grid(x, y, grid_size=grid_size)
        return _trace(xs, ys, zz, bins)

    def density_grid(
        self,
        x: Sequence[float],
        y: Sequence[float],
        *,
        grid_size: int = KDE_GRID_SIZE,
    ) -> tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
        """
        Evaluate a Gaussian KDE of the points on a ``grid_size`` x ``grid_size`` grid
        spanning the data range.

        Raises:
            StatisticError: Fewer than 3 points, zero spread on an axis, or a singular
                covariance matrix.
        """
        xa = np.asarray(x, dtype=float)
        ya = np.asarray(y, dtype=float)
        if xa.size < 3:
            raise StatisticError(f"2D density needs at least 3 points (got {xa.size})")
        if np.ptp(xa) == 0 or np.ptp(ya) == 0:
            raise StatisticError("2D density needs spread along both x and y")
        try:
            kde = gaussian_kde(np.vstack([xa, ya]))
        except (np.linalg.LinAlgError, ValueError) as exc:
            raise StatisticError(f"2D density estimate failed: {exc}") from exc

        xs = np.linspace(xa.min(), xa.max(), grid_size)
        ys = np.linspace(ya.min(), ya.max(), grid_size)
        gx, gy = np.meshgrid(xs, ys)
        zz = kde(np.vstack([gx.ravel(), gy.ravel()])).reshape(gy.shape)
        return xs, ys, zz
