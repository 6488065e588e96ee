from __future__ import annotations

import numpy as np
import pytest

from ggfig.core.errors import StatisticError
from ggfig.stats.contour import KdeContourEstimator, contour_levels, grid_from_points


def _plane(n: int = 5) -> tuple[list[float], list[float], list[float]]:
    xs, ys, zs = [], [], []
    for j in range(n):
        for i in range(n):
            xs.append(float(i))
            ys.append(float(j * 10))
            zs.append(float(i + j))
    return xs, ys, zs


def test_grid_from_points_orders_axes() -> None:
    xs, ys, zz = grid_from_points([1, 0, 1, 0], [0, 0, 5, 5], [2.0, 1.0, 4.0, 3.0])
    assert xs.tolist() == [0.0, 1.0]
    assert ys.tolist() == [0.0, 5.0]
    assert zz.tolist() == [[1.0, 2.0], [3.0, 4.0]]


def test_incomplete_grid_raises() -> None:
    with pytest.raises(StatisticError):
        grid_from_points([0, 1, 0], [0, 0, 1], [1.0, 2.0, 3.0])


def test_degenerate_grid_raises() -> None:
    with pytest.raises(StatisticError):
        grid_from_points([0, 0], [0, 1], [1.0, 2.0])


def test_levels_strictly_inside_range() -> None:
    levels = contour_levels(np.array([[0.0, 1.0], [2.0, 4.0]]), 3)
    assert levels.tolist() == pytest.approx([1.0, 2.0, 3.0])
    assert contour_levels(np.zeros((2, 2)), 5).size == 0


def test_grid_contours_map_back_to_data_units() -> None:
    lines = KdeContourEstimator().grid_contours(*_plane(), bins=3)

    assert sorted({line.level for line in lines}) == pytest.approx([2.0, 4.0, 6.0])
    for line in lines:
        for x, y in line.points:
            assert 0.0 <= x <= 4.0
            assert 0.0 <= y <= 40.0
            # on a plane z = x + y/10 every vertex sits on its level
            assert x + y / 10 == pytest.approx(line.level, abs=1e-6)


def test_flat_surface_has_no_lines() -> None:
    xs, ys, _ = _plane(3)
    assert KdeContourEstimator().grid_contours(xs, ys, [1.0] * len(xs)) == []


def test_density_contours_over_a_cluster() -> None:
    rng = np.random.default_rng(0)
    pts = rng.normal(size=(200, 2))
    est = KdeContourEstimator()

    lines = est.density_contours(pts[:, 0].tolist(), pts[:, 1].tolist(), bins=4, grid_size=32)

    assert lines
    assert len({line.level for line in lines}) <= 4
    xs, ys, zz = est.density_grid(pts[:, 0].tolist(), pts[:, 1].tolist(), grid_size=16)
    assert zz.shape == (16, 16)
    assert (zz >= 0).all()


def test_density_needs_enough_spread_and_points() -> None:
    est = KdeContourEstimator()
    with pytest.raises(StatisticError):
        est.density_contours([0.0, 1.0], [0.0, 1.0])
    with pytest.raises(StatisticError):
        est.density_contours([1.0, 1.0, 1.0], [0.0, 1.0, 2.0])


def test_duplicate_grid_nodes_raise() -> None:
    with pytest.raises(StatisticError, match="duplicate"):
        grid_from_points([0, 1, 0, 1, 1], [0, 0, 1, 1, 1], [0.0, 1.0, 1.0, 2.0, 99.0])
