"""
Position adjustments for bars sharing a category slot.

Each adjustment turns aggregated bar values into rectangles:
- identity: every bar spans the full slot from 0 to its value (bars may overlap).
- stack: bars at the same slot pile up; positive values upward from 0, negative
  values downward.
- fill: stack, then rescale each slot so its bars cover [0, 1].
- dodge: bars at the same slot sit side by side, splitting the slot width evenly.

Within a slot, bars keep the order they are given in (the renderer sorts them by group).
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import Any

from ggfig.core.grammar import PositionKind

from .marks import RectMark

__all__ = [
    "BarValue",
    "adjust",
    "POSITIONS",
]


@dataclass(frozen=True, slots=True)
class BarValue:
    """An aggregated bar before adjustment: slot centre, value and group key."""

    x: Any
    center: float
    value: float
    group: tuple[Any, ...] = ()
    aesthetics: Mapping[str, Any] = field(default_factory=dict)


def _by_slot(bars: Iterable[BarValue]) -> dict[float, list[BarValue]]:
    slots: dict[float, list[BarValue]] = {}
    for bar in bars:
        slots.setdefault(bar.center, []).append(bar)
    return slots


def _rect(bar: BarValue, xmin: float, xmax: float, ymin: float, ymax: float) -> RectMark:
    return RectMark(
        x=bar.x,
        xmin=xmin,
        xmax=xmax,
        ymin=ymin,
        ymax=ymax,
        group=bar.group,
        aesthetics=bar.aesthetics,
    )


def identity(bars: Sequence[BarValue], width: float) -> list[RectMark]:
    half = width / 2.0
    return [
        _rect(b, b.center - half, b.center + half, min(0.0, b.value), max(0.0, b.value))
        for b in bars
    ]


def stack(bars: Sequence[BarValue], width: float) -> list[RectMark]:
    half = width / 2.0
    out: list[RectMark] = []
    for center, members in _by_slot(bars).items():
        up = 0.0
        down = 0.0
        for b in members:
            if b.value >= 0:
                out.append(_rect(b, center - half, center + half, up, up + b.value))
                up += b.value
            else:
                out.append(_rect(b, center - half, center + half, down + b.value, down))
                down += b.value
    return out


def fill(bars: Sequence[BarValue], width: float) -> list[RectMark]:
    out: list[RectMark] = []
    for members in _by_slot(bars).values():
        total = sum(abs(b.value) for b in members)
        scale = 1.0 / total if total else 1.0
        out.extend(stack([replace(b, value=b.value * scale) for b in members], width))
    return out


def dodge(bars: Sequence[BarValue], width: float) -> list[RectMark]:
    out: list[RectMark] = []
    for center, members in _by_slot(bars).items():
        step = width / len(members)
        left = center - width / 2.0
        for i, b in enumerate(members):
            xmin = left + i * step
            out.append(_rect(b, xmin, xmin + step, min(0.0, b.value), max(0.0, b.value)))
    return out


POSITIONS: dict[PositionKind, Callable[[Sequence[BarValue], float], list[RectMark]]] = {
    PositionKind.IDENTITY: identity,
    PositionKind.STACK: stack,
    PositionKind.FILL: fill,
    PositionKind.DODGE: dodge,
}


def adjust(kind: PositionKind, bars: Sequence[BarValue], width: float) -> list[RectMark]:
    """Apply the ``kind`` adjustment to ``bars`` occupying slots of ``width`` position units."""
    return POSITIONS[kind](bars, width)


def _assert_positions_complete() -> None:
    missing = [k.value for k in PositionKind if k not in POSITIONS]
    if missing:
        raise ValueError(f"position table out of sync with PositionKind: missing {missing}")


_assert_positions_complete()
