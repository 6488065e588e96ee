from __future__ import annotations

import pytest

from ggfig.core.grammar import PositionKind
from ggfig.viz.positions import POSITIONS, BarValue, adjust


def _bars() -> list[BarValue]:
    return [
        BarValue(x="a", center=1.0, value=2.0, group=("u",)),
        BarValue(x="a", center=1.0, value=-1.0, group=("v",)),
        BarValue(x="a", center=1.0, value=3.0, group=("w",)),
        BarValue(x="b", center=2.0, value=4.0, group=("u",)),
    ]


def test_every_position_has_an_adjustment() -> None:
    assert set(POSITIONS) == set(PositionKind)


def test_identity_spans_zero_to_value() -> None:
    rects = adjust(PositionKind.IDENTITY, _bars(), 0.8)
    assert [(r.ymin, r.ymax) for r in rects] == [(0.0, 2.0), (-1.0, 0.0), (0.0, 3.0), (0.0, 4.0)]
    assert (rects[0].xmin, rects[0].xmax) == pytest.approx((0.6, 1.4))


def test_stack_piles_positives_up_and_negatives_down() -> None:
    rects = adjust(PositionKind.STACK, _bars(), 0.8)
    assert [(r.group, r.ymin, r.ymax) for r in rects] == [
        (("u",), 0.0, 2.0),
        (("v",), -1.0, 0.0),
        (("w",), 2.0, 5.0),
        (("u",), 0.0, 4.0),
    ]


def test_fill_normalizes_each_slot() -> None:
    rects = adjust(PositionKind.FILL, _bars(), 0.8)
    slot_a = [r for r in rects if r.x == "a"]
    assert sum(r.height for r in slot_a) == pytest.approx(1.0)
    (slot_b,) = [r for r in rects if r.x == "b"]
    assert (slot_b.ymin, slot_b.ymax) == (0.0, 1.0)


def test_dodge_splits_the_slot() -> None:
    rects = adjust(PositionKind.DODGE, _bars(), 0.9)
    slot_a = [r for r in rects if r.x == "a"]
    assert [r.xmin for r in slot_a] == pytest.approx([0.55, 0.85, 1.15])
    assert all(r.xmax - r.xmin == pytest.approx(0.3) for r in slot_a)
    (slot_b,) = [r for r in rects if r.x == "b"]
    assert (slot_b.xmin, slot_b.xmax) == pytest.approx((1.55, 2.45))
