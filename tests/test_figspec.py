from __future__ import annotations

from pathlib import Path

import pytest

from ggfig.core.errors import FigureSpecError
from ggfig.core.grammar import GeomKind
from ggfig.figspec import FigureSpec, load_figure_spec
from ggfig.viz.compose import Layout
from ggfig.viz.marks import Panel

SINGLE = """
name: mileage
plot:
  dataset: mpg
  mapping: {x: displ, y: hwy}
  layers:
    - geom: point
      mapping: {colour: class}
    - geom: geom_text
      mapping: {label: model}
      constants: {size: 9}
  labels: {title: Mileage, colour: vehicle class}
"""

MULTI = """
plots:
  - {dataset: mpg, mapping: {x: class}, layers: [{geom: bar, position: dodge}]}
  - {dataset: economics, mapping: {x: year, y: unemploy}, layers: [{geom: line}], cell: A}
layout: {design: "AB", tags: sequential, guides: per-panel}
"""


def _write(tmp_path: Path, text: str) -> Path:
    p = tmp_path / "figure.yaml"
    p.write_text(text, encoding="utf-8")
    return p


def test_single_plot_spec_builds_a_panel(tmp_path: Path) -> None:
    spec = load_figure_spec(_write(tmp_path, SINGLE))
    panel = spec.build()

    assert isinstance(panel, Panel)
    assert panel.geoms == (GeomKind.POINT, GeomKind.TEXT)
    assert panel.title == "Mileage"
    assert [e.title for e in panel.legends] == ["vehicle class"]
    assert spec.plot is not None
    assert spec.plot.layers[0].mapping == {"color": "class"}


def test_multi_plot_spec_builds_a_layout(tmp_path: Path) -> None:
    layout = load_figure_spec(_write(tmp_path, MULTI)).build()

    assert isinstance(layout, Layout)
    assert layout.panel("A").geoms == (GeomKind.LINE,)
    assert layout.panel("B").geoms == (GeomKind.BAR,)
    assert layout.tags == ("A", "B")
    assert layout.guides == ()


def test_plot_and_plots_are_exclusive() -> None:
    with pytest.raises(ValueError):
        FigureSpec.model_validate({})


@pytest.mark.parametrize(
    "text",
    [
        "plot: {dataset: mpg, layers: [{geom: violin}]}",
        "plot: {dataset: mpg, layers: []}",
        "plot: {dataset: mpg, layers: [{geom: point}], colour: red}",
        "- just\n- a list\n",
        "plot: [unclosed",
    ],
)
def test_invalid_specs_raise_figure_spec_error(tmp_path: Path, text: str) -> None:
    with pytest.raises(FigureSpecError):
        load_figure_spec(_write(tmp_path, text))


def test_missing_file_raises_figure_spec_error(tmp_path: Path) -> None:
    with pytest.raises(FigureSpecError):
        load_figure_spec(tmp_path / "absent.yaml")
