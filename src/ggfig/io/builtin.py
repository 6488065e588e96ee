"""
Bundled example datasets.

Small deterministic tables standing in for the datasets the lecture examples plot:
- mpg: fuel economy of popular car models (subset).
- economics: US unemployment and population, yearly snapshots.
- faithful: Old Faithful eruption durations and waiting times (subset).
- faithfuld: a gridded two-component density surface over (waiting, eruptions).
- diamonds_small: diamond cut, color, carat and price (subset).
- scatter3, categories3: minimal tables used by tests and docs.

Notes:
    - Builders return fresh columns on every call; the provider wraps them in Dataset
      and memoizes per rendering pass.
    - Values are literal or computed with stdlib math only, so every load is identical.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from typing import Any

__all__ = [
    "BUILTIN_DATASETS",
    "builtin_names",
]

Columns = dict[str, list[Any]]

_MPG_ROWS: tuple[tuple[Any, ...], ...] = (
    # manufacturer, model, displ, year, cyl, drv, cty, hwy, class
    ("audi", "a4", 1.8, 1999, 4, "f", 18, 29, "compact"),
    ("audi", "a4", 2.0, 2008, 4, "f", 21, 30, "compact"),
    ("audi", "a4", 2.8, 1999, 6, "f", 16, 26, "compact"),
    ("audi", "a4 quattro", 1.8, 1999, 4, "4", 18, 26, "compact"),
    ("chevrolet", "c1500 suburban 2wd", 5.3, 2008, 8, "r", 14, 20, "suv"),
    ("chevrolet", "corvette", 5.7, 1999, 8, "r", 16, 26, "2seater"),
    ("chevrolet", "corvette", 6.2, 2008, 8, "r", 16, 26, "2seater"),
    ("chevrolet", "malibu", 2.4, 2008, 4, "f", 22, 30, "midsize"),
    ("dodge", "caravan 2wd", 3.3, 2008, 6, "f", 17, 24, "minivan"),
    ("dodge", "dakota pickup 4wd", 4.7, 2008, 8, "4", 14, 19, "pickup"),
    ("dodge", "ram 1500 pickup 4wd", 5.2, 1999, 8, "4", 11, 15, "pickup"),
    ("ford", "expedition 2wd", 4.6, 1999, 8, "r", 11, 17, "suv"),
    ("ford", "mustang", 4.6, 2008, 8, "r", 15, 22, "subcompact"),
    ("honda", "civic", 1.8, 2008, 4, "f", 26, 35, "subcompact"),
    ("hyundai", "sonata", 2.4, 2008, 4, "f", 21, 30, "midsize"),
    ("jeep", "grand cherokee 4wd", 4.7, 2008, 8, "4", 14, 19, "suv"),
    ("toyota", "camry", 2.2, 1999, 4, "f", 21, 29, "midsize"),
    ("toyota", "corolla", 1.8, 2008, 4, "f", 28, 37, "compact"),
    ("toyota", "4runner 4wd", 4.0, 2008, 6, "4", 16, 20, "suv"),
    ("volkswagen", "jetta", 2.0, 1999, 4, "f", 21, 29, "compact"),
    ("volkswagen", "new beetle", 1.9, 1999, 4, "f", 35, 44, "subcompact"),
    ("volkswagen", "passat", 2.8, 1999, 6, "f", 16, 26, "midsize"),
)

_MPG_COLUMNS = ("manufacturer", "model", "displ", "year", "cyl", "drv", "cty", "hwy", "class")


def _mpg() -> Columns:
    return {name: [row[i] for row in _MPG_ROWS] for i, name in enumerate(_MPG_COLUMNS)}


def _economics() -> Columns:
    # year, unemploy (thousands), pop (thousands), uempmed (weeks)
    rows = (
        (1968, 2797, 200706, 4.5),
        (1971, 5016, 207661, 6.2),
        (1974, 4731, 213342, 5.0),
        (1977, 6856, 219760, 7.5),
        (1980, 7358, 227225, 5.3),
        (1983, 11534, 233792, 10.1),
        (1986, 8423, 240651, 7.0),
        (1989, 6682, 246819, 4.8),
        (1992, 9283, 256514, 8.5),
        (1995, 7375, 266557, 8.3),
        (1998, 6368, 275854, 6.7),
        (2001, 6023, 284736, 5.8),
        (2004, 8370, 292892, 10.4),
        (2007, 6865, 301231, 8.5),
        (2010, 15046, 308833, 22.3),
        (2013, 12497, 316161, 16.2),
    )
    return {
        "year": [r[0] for r in rows],
        "unemploy": [r[1] for r in rows],
        "pop": [r[2] for r in rows],
        "uempmed": [r[3] for r in rows],
    }


def _faithful() -> Columns:
    pairs = (
        (3.600, 79), (1.800, 54), (3.333, 74), (2.283, 62), (4.533, 85),
        (2.883, 55), (4.700, 88), (3.600, 85), (1.950, 51), (4.350, 85),
        (1.833, 54), (3.917, 84), (4.200, 78), (1.750, 47), (4.700, 83),
        (2.167, 52), (1.750, 62), (4.800, 84), (1.600, 52), (4.250, 79),
        (1.800, 51), (1.750, 47), (3.450, 78), (3.067, 69), (4.533, 74),
    )  # fmt: skip
    return {"eruptions": [p[0] for p in pairs], "waiting": [p[1] for p in pairs]}


def _faithfuld(n: int = 16) -> Columns:
    # Two Gaussian bumps at the short/long eruption clusters, evaluated on an n x n grid.
    bumps = ((2.0, 54.0, 0.35, 6.0, 0.36), (4.3, 80.0, 0.40, 6.0, 0.64))
    waiting: list[float] = []
    eruptions: list[float] = []
    density: list[float] = []
    for i in range(n):
        e = 1.5 + 4.0 * i / (n - 1)
        for j in range(n):
            w = 43.0 + 53.0 * j / (n - 1)
            d = 0.0
            for me, mw, se, sw, weight in bumps:
                z = ((e - me) / se) ** 2 + ((w - mw) / sw) ** 2
                d += weight * math.exp(-0.5 * z) / (2.0 * math.pi * se * sw)
            eruptions.append(round(e, 6))
            waiting.append(round(w, 6))
            density.append(round(d, 10))
    return {"eruptions": eruptions, "waiting": waiting, "density": density}


def _diamonds_small() -> Columns:
    rows = (
        ("Ideal", "E", 0.23, 326),
        ("Premium", "E", 0.21, 326),
        ("Good", "E", 0.23, 327),
        ("Premium", "I", 0.29, 334),
        ("Good", "J", 0.31, 335),
        ("Very Good", "J", 0.24, 336),
        ("Very Good", "I", 0.24, 336),
        ("Very Good", "H", 0.26, 337),
        ("Fair", "E", 0.22, 337),
        ("Very Good", "H", 0.23, 338),
        ("Good", "J", 0.30, 339),
        ("Ideal", "J", 0.23, 340),
        ("Premium", "F", 0.22, 342),
        ("Ideal", "J", 0.31, 344),
        ("Premium", "E", 0.20, 345),
        ("Premium", "E", 0.32, 345),
        ("Ideal", "I", 0.30, 348),
        ("Good", "J", 0.30, 351),
        ("Fair", "F", 0.96, 2759),
        ("Ideal", "D", 0.70, 2762),
    )
    return {
        "cut": [r[0] for r in rows],
        "color": [r[1] for r in rows],
        "carat": [r[2] for r in rows],
        "price": [r[3] for r in rows],
    }


def _scatter3() -> Columns:
    return {"x": [3, 1, 5], "y": [2, 4, 6]}


def _categories3() -> Columns:
    return {"category": ["a", "a", "b"]}


BUILTIN_DATASETS: dict[str, Callable[[], Columns]] = {
    "mpg": _mpg,
    "economics": _economics,
    "faithful": _faithful,
    "faithfuld": _faithfuld,
    "diamonds_small": _diamonds_small,
    "scatter3": _scatter3,
    "categories3": _categories3,
}


def builtin_names() -> list[str]:
    """Return the sorted names of bundled datasets."""
    return sorted(BUILTIN_DATASETS)
