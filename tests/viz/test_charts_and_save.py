from __future__ import annotations

import importlib
from pathlib import Path
from typing import Any

import altair as alt
import pytest

from ggfig.io.dataset import Dataset
from ggfig.viz.charts import layout_to_chart, panel_to_chart
from ggfig.viz.compose import LayoutSpec, compose
from ggfig.viz.mapping import aes
from ggfig.viz.marks import Panel
from ggfig.viz.plot import geom_bar, geom_line, geom_point, ggplot, labs
from ggfig.viz.save import save


def find_in_spec(obj: Any, predicate) -> bool:
    """Recursively scan a chart spec dict for a predicate match."""
    if isinstance(obj, dict):
        if predicate(obj):
            return True
        return any(find_in_spec(v, predicate) for v in obj.values())
    if isinstance(obj, list):
        return any(find_in_spec(v, predicate) for v in obj)
    return False


def _cars() -> Dataset:
    return Dataset.from_columns(
        "cars",
        {
            "displ": [1.8, 2.0, 5.7],
            "hwy": [29, 30, 26],
            "class": ["compact", "compact", "2seater"],
        },
    )


def _scatter() -> Panel:
    return (
        ggplot(_cars(), aes(x="displ", y="hwy", colour="class"))
        + geom_point()
        + labs(title="Mileage")
    ).build()


def test_point_panel_spec_has_marks_and_color_encoding() -> None:
    spec = panel_to_chart(_scatter()).to_dict()

    assert find_in_spec(spec, lambda d: isinstance(d.get("mark"), dict) and d["mark"].get("type") == "point")
    assert find_in_spec(spec, lambda d: d.get("field") == "color" and d.get("title") == "class")
    assert find_in_spec(spec, lambda d: d.get("text") == "Mileage" or d.get("title") == "Mileage")


def test_bar_panel_uses_rect_marks_with_category_axis() -> None:
    panel = (ggplot(_cars(), aes(x="class")) + geom_bar()).build()
    spec = panel_to_chart(panel).to_dict()

    assert find_in_spec(spec, lambda d: isinstance(d.get("mark"), dict) and d["mark"].get("type") == "rect")
    assert find_in_spec(spec, lambda d: "labelExpr" in d and "compact" in d["labelExpr"])


def test_line_panel_orders_vertices() -> None:
    panel = (ggplot(_cars(), aes(x="displ", y="hwy")) + geom_line()).build()
    spec = panel_to_chart(panel).to_dict()
    assert find_in_spec(spec, lambda d: d.get("field") == "order")


def test_layout_chart_concatenates_rows_and_blanks_empty_cells() -> None:
    layout = compose(
        [_scatter(), _scatter(), _scatter()],
        LayoutSpec(design="AB\nC#", tags="sequential", title="Grid"),
    )
    chart = layout_to_chart(layout)
    spec = chart.to_dict()

    assert isinstance(chart, alt.VConcatChart)
    assert len(spec["vconcat"]) == 2
    assert len(spec["vconcat"][1]["hconcat"]) == 2
    assert find_in_spec(spec, lambda d: isinstance(d.get("title"), str) and d["title"].startswith("A "))
    assert spec["resolve"]["legend"]["color"] == "shared"


def test_per_panel_guides_resolve_independently() -> None:
    layout = compose([_scatter()], LayoutSpec(guides="per_panel"))
    spec = layout_to_chart(layout).to_dict()
    assert spec["resolve"]["legend"]["color"] == "independent"


def test_save_html_and_json(tmp_path: Path) -> None:
    chart = panel_to_chart(_scatter())
    written = save(chart, out_html=tmp_path / "a.html", out_json=tmp_path / "sub" / "a.json")

    assert written == [tmp_path / "a.html", tmp_path / "sub" / "a.json"]
    assert "vega" in (tmp_path / "a.html").read_text(encoding="utf-8").lower()
    assert (tmp_path / "sub" / "a.json").read_text(encoding="utf-8").lstrip().startswith("{")


def test_save_png_without_vl_convert_raises_runtime_error(tmp_path: Path, monkeypatch) -> None:
    real_import = importlib.import_module

    def fake_import(name: str, *args, **kwargs):
        if name == "vl_convert":
            raise ImportError("No module named 'vl_convert'")
        return real_import(name, *args, **kwargs)

    monkeypatch.setattr(importlib, "import_module", fake_import)

    with pytest.raises(RuntimeError) as ei:
        save(panel_to_chart(_scatter()), out_png=tmp_path / "a.png")
    assert "vl-convert-python" in str(ei.value)
