from __future__ import annotations

import logging
from datetime import date

import pytest

from ggfig.core.errors import GrammarError, MissingRequiredChannel, StatisticError
from ggfig.core.geoms import get_geom
from ggfig.core.grammar import GeomKind, VariableKind
from ggfig.core.hashing import hash_mapping
from ggfig.io.config import Settings
from ggfig.io.dataset import Dataset
from ggfig.viz.mapping import Constant, aes, resolve
from ggfig.viz.marks import AreaMark, ContourMark, PathMark, PointMark, RectMark, TextMark
from ggfig.viz.render import render


def _render(geom: str, mapping, ds: Dataset, **kwargs):
    return render(resolve(get_geom(geom), mapping, ds), ds, **kwargs)


def test_scatter_one_point_per_record() -> None:
    ds = Dataset.from_records(
        "s", [{"x": 3, "y": 2}, {"x": 1, "y": 4}, {"x": 5, "y": 6}]
    )
    panel = _render("point", aes(x="x", y="y"), ds)

    marks = panel.marks
    assert len(marks) == 3
    assert all(isinstance(m, PointMark) for m in marks)
    assert [(m.x, m.y) for m in marks] == [(3, 2), (1, 4), (5, 6)]
    assert panel.x is not None and panel.x.values == (1, 5)
    assert panel.y is not None and panel.y.values == (2, 6)
    assert (panel.x_label, panel.y_label) == ("x", "y")


def test_bar_counts_per_category() -> None:
    ds = Dataset.from_columns("c", {"category": ["a", "a", "b"]})
    panel = _render("bar", aes(x="category"), ds)

    rects = panel.marks
    assert all(isinstance(m, RectMark) for m in rects)
    assert [m.x for m in rects] == ["a", "b"]
    assert [m.height for m in rects] == [2.0, 1.0]
    assert [m.ymin for m in rects] == [0.0, 0.0]
    assert panel.x is not None and panel.x.kind is VariableKind.DISCRETE
    assert panel.y_label == "count"


def test_bar_categories_sit_at_one_to_n_with_bar_width() -> None:
    ds = Dataset.from_columns("c", {"category": ["b", "a", "c"]})
    panel = _render("bar", aes(x="category"), ds, settings=Settings(bar_width=0.5))

    rects = panel.marks
    assert [m.x for m in rects] == ["a", "b", "c"]
    assert [(m.xmin, m.xmax) for m in rects] == [(0.75, 1.25), (1.75, 2.25), (2.75, 3.25)]


def test_bar_weight_sums_instead_of_counting() -> None:
    ds = Dataset.from_columns("c", {"category": ["a", "a", "b"], "n": [2.0, 3.0, 4.0]})
    panel = _render("bar", aes(x="category", weight="n"), ds)
    assert [m.height for m in panel.marks] == [5.0, 4.0]


def test_bar_identity_stat_requires_y() -> None:
    ds = Dataset.from_columns("c", {"category": ["a", "b"]})
    with pytest.raises(MissingRequiredChannel):
        _render("bar", aes(x="category"), ds, stat="identity")


def test_bar_identity_stat_requires_y_on_empty_dataset() -> None:
    ds = Dataset.from_records("empty", [], variables=["category"])
    with pytest.raises(MissingRequiredChannel):
        _render("bar", aes(x="category"), ds, stat="identity")


def test_bar_over_dates_places_slots_by_day() -> None:
    ds = Dataset.from_columns(
        "t", {"day": [date(2020, 1, 1), date(2020, 1, 2), date(2020, 1, 2)]}
    )
    panel = _render("bar", aes(x="day"), ds, settings=Settings(bar_width=0.5))

    rects = panel.marks
    assert [m.x for m in rects] == [date(2020, 1, 1), date(2020, 1, 2)]
    assert [m.height for m in rects] == [1.0, 2.0]
    # 2020-01-01 is day 18262 since the epoch
    assert [(m.xmin, m.xmax) for m in rects] == [(18261.75, 18262.25), (18262.75, 18263.25)]
    assert panel.x is not None and panel.x.kind is VariableKind.CONTINUOUS


def test_panel_with_dates_hashes() -> None:
    ds = Dataset.from_columns(
        "t", {"day": [date(2020, 1, 1), date(2020, 1, 2)], "n": [1.0, 3.0]}
    )
    panel = _render("line", aes(x="day", y="n"), ds)
    assert len(hash_mapping(panel.to_dict())) == 64


def test_col_stacks_groups_by_fill() -> None:
    ds = Dataset.from_columns(
        "c",
        {
            "cut": ["fair", "fair", "good"],
            "color": ["E", "D", "D"],
            "price": [10.0, 5.0, 7.0],
        },
    )
    panel = _render("col", aes(x="cut", y="price", fill="color"), ds)

    by_key = {(m.x, m.group): m for m in panel.marks}
    assert (by_key[("fair", ("D",))].ymin, by_key[("fair", ("D",))].ymax) == (0.0, 5.0)
    assert (by_key[("fair", ("E",))].ymin, by_key[("fair", ("E",))].ymax) == (5.0, 15.0)
    assert by_key[("good", ("D",))].ymax == 7.0
    assert by_key[("fair", ("E",))].aesthetics == {"fill": "E"}
    assert [e.channel.value for e in panel.legends] == ["fill"]
    assert panel.legends[0].domain.values == ("D", "E")


def test_col_dodge_and_fill_positions() -> None:
    ds = Dataset.from_columns(
        "c",
        {"g": ["a", "a"], "k": ["u", "v"], "v": [1.0, 3.0]},
    )
    dodged = _render("col", aes(x="g", y="v", fill="k"), ds, position="dodge")
    widths = [round(m.xmax - m.xmin, 6) for m in dodged.marks]
    assert widths == [0.45, 0.45]
    assert dodged.marks[0].xmax == pytest.approx(dodged.marks[1].xmin)

    filled = _render("col", aes(x="g", y="v", fill="k"), ds, position="fill")
    assert [m.ymax for m in filled.marks] == pytest.approx([0.25, 1.0])


def test_non_bar_geom_rejects_position_other_than_identity() -> None:
    ds = Dataset.from_records("s", [{"x": 1, "y": 2}])
    with pytest.raises(GrammarError):
        _render("point", aes(x="x", y="y"), ds, position="stack")


def test_unsupported_stat_raises() -> None:
    ds = Dataset.from_records("s", [{"x": 1, "y": 2}])
    with pytest.raises(GrammarError):
        _render("point", aes(x="x", y="y"), ds, stat="count")


def test_empty_dataset_renders_empty_panel() -> None:
    ds = Dataset.from_records("empty", [], variables=["x", "y"])
    panel = _render("point", aes(x="x", y="y"), ds)

    assert panel.is_empty
    assert panel.marks == ()
    assert panel.geoms == (GeomKind.POINT,)
    assert panel.x is None and panel.y is None


def test_missing_values_are_dropped_and_logged(caplog) -> None:
    ds = Dataset.from_columns("m", {"x": [1, 2, 3], "y": [1.0, None, 3.0]})
    with caplog.at_level(logging.WARNING, logger="ggfig"):
        panel = _render("point", aes(x="x", y="y"), ds)
    assert len(panel.marks) == 2
    assert "removed 1 rows" in caplog.text


def test_text_marks_carry_labels_and_constants() -> None:
    ds = Dataset.from_columns("t", {"x": [1, 2], "y": [3, 4], "name": ["p", "q"]})
    panel = _render("text", aes(x="x", y="y", label="name", size=Constant(10)), ds)

    assert [m.label for m in panel.marks if isinstance(m, TextMark)] == ["p", "q"]
    assert panel.layers[0].constants == {"size": 10}
    assert panel.legends == ()


def test_line_sorts_by_x_and_path_keeps_record_order() -> None:
    ds = Dataset.from_columns("l", {"x": [3, 1, 2], "y": [30.0, 10.0, 20.0]})

    line = _render("line", aes(x="x", y="y"), ds)
    path = _render("path", aes(x="x", y="y"), ds)

    assert isinstance(line.marks[0], PathMark)
    assert line.marks[0].points == ((1, 10.0), (2, 20.0), (3, 30.0))
    assert path.marks[0].points == ((3, 30.0), (1, 10.0), (2, 20.0))


def test_line_one_path_per_discrete_color() -> None:
    ds = Dataset.from_columns(
        "l", {"x": [1, 2, 1, 2], "y": [1.0, 2.0, 3.0, 4.0], "g": ["a", "a", "b", "b"]}
    )
    panel = _render("line", aes(x="x", y="y", color="g"), ds)
    assert [m.group for m in panel.marks] == [("a",), ("b",)]
    assert [m.aesthetics for m in panel.marks] == [{"color": "a"}, {"color": "b"}]


def test_step_draws_horizontal_then_vertical() -> None:
    ds = Dataset.from_columns("s", {"x": [1, 2, 3], "y": [1.0, 3.0, 2.0]})
    panel = _render("step", aes(x="x", y="y"), ds)
    assert panel.marks[0].points == ((1, 1.0), (2, 1.0), (2, 3.0), (3, 3.0), (3, 2.0))


def test_area_and_ribbon_bounds() -> None:
    ds = Dataset.from_columns(
        "a", {"x": [2, 1], "y": [4.0, 2.0], "lo": [3.0, 1.0], "hi": [5.0, 3.0]}
    )
    area = _render("area", aes(x="x", y="y"), ds)
    ribbon = _render("ribbon", aes(x="x", ymin="lo", ymax="hi"), ds)

    a = area.marks[0]
    assert isinstance(a, AreaMark)
    assert a.xs == (1, 2)
    assert a.lower == (0.0, 0.0)
    assert a.upper == (2.0, 4.0)
    assert area.y is not None and area.y.values == (0.0, 4.0)

    r = ribbon.marks[0]
    assert r.lower == (1.0, 3.0)
    assert r.upper == (3.0, 5.0)


class _FixedEstimator:
    def grid_contours(self, x, y, z, *, bins=10):
        from ggfig.stats.contour import ContourLine

        return [ContourLine(level=0.5, piece=0, points=((0.0, 0.0), (1.0, 1.0)))]

    def density_contours(self, x, y, *, bins=10, grid_size=64):
        raise StatisticError("not enough data")


def test_contour_uses_the_injected_estimator() -> None:
    ds = Dataset.from_columns("g", {"x": [0, 1, 0, 1], "y": [0, 0, 1, 1], "z": [0.0, 1.0, 1.0, 2.0]})
    panel = _render("contour", aes(x="x", y="y", z="z"), ds, estimator=_FixedEstimator())

    assert len(panel.marks) == 1
    mark = panel.marks[0]
    assert isinstance(mark, ContourMark)
    assert mark.level == 0.5


def test_density_2d_propagates_statistic_error() -> None:
    ds = Dataset.from_columns("g", {"x": [0.0, 1.0], "y": [0.0, 1.0]})
    with pytest.raises(StatisticError):
        _render("density_2d", aes(x="x", y="y"), ds, estimator=_FixedEstimator())
