from __future__ import annotations

import pytest
from pydantic import ValidationError

from ggfig.core.errors import (
    InvalidLayoutTemplate,
    LayoutCellConflict,
    LayoutError,
    LayoutPanelCountMismatch,
)
from ggfig.core.grammar import Channel, GuideCollection, VariableKind
from ggfig.viz.compose import GridSize, LayoutSpec, compose, format_tag, parse_design
from ggfig.viz.marks import LegendEntry, Panel, ScaleDomain


def _panels(n: int) -> list[Panel]:
    return [Panel(title=f"p{i}") for i in range(n)]


def _legend(title: str, *levels: str) -> LegendEntry:
    return LegendEntry(Channel.COLOR, title, ScaleDomain(VariableKind.DISCRETE, levels))


def test_template_with_empty_cell_places_panels_by_identity() -> None:
    panels = _panels(3)
    layout = compose(panels, LayoutSpec(design="AB\nC#"))

    assert (layout.nrow, layout.ncol) == (2, 2)
    assert layout.panel("A") is panels[0]
    assert layout.panel("B") is panels[1]
    assert layout.panel("C") is panels[2]
    assert layout.panel_at(1, 1) is None


def test_too_many_panels_for_template() -> None:
    with pytest.raises(LayoutPanelCountMismatch) as ei:
        compose(_panels(4), LayoutSpec(design="ABC"))
    assert (ei.value.panels, ei.value.cells) == (4, 3)


def test_fewer_panels_than_cells_is_allowed_by_default() -> None:
    layout = compose(_panels(2), LayoutSpec.wrap(nrow=2, ncol=2))
    assert len(layout.panels) == 2
    assert [c.panel is None for c in layout.cells] == [False, False, True, True]


def test_fewer_panels_rejected_when_empty_cells_disallowed() -> None:
    with pytest.raises(LayoutPanelCountMismatch):
        compose(_panels(2), LayoutSpec.wrap(nrow=2, ncol=2, allow_empty_cells=False))


def test_auto_grid_grows_to_fit() -> None:
    layout = compose(_panels(5))
    assert (layout.nrow, layout.ncol) == (2, 3)

    one_col = compose(_panels(3), LayoutSpec.wrap(ncol=1))
    assert (one_col.nrow, one_col.ncol) == (3, 1)
    assert GridSize(nrow=2).resolve(5) == (2, 3)


def test_grid_is_row_major() -> None:
    panels = _panels(4)
    layout = compose(panels, LayoutSpec.wrap(nrow=2, ncol=2))
    assert layout.panel_at(0, 1) is panels[1]
    assert layout.panel_at(1, 0) is panels[2]
    with pytest.raises(IndexError):
        layout.panel_at(2, 0)


def test_spanning_cells() -> None:
    panels = _panels(3)
    layout = compose(panels, LayoutSpec(design="AB\nCC"))
    c = layout.cell("C")
    assert (c.row, c.col, c.row_span, c.col_span) == (1, 0, 1, 2)
    assert layout.panel_at(1, 1) is panels[2]


def test_explicit_cells_then_positional_fill() -> None:
    first, second, third = _panels(3)
    layout = compose([("C", first), second, third], LayoutSpec(design="AB\nCC"))
    assert layout.panel("C") is first
    assert layout.panel("A") is second
    assert layout.panel("B") is third


def test_two_panels_claiming_one_cell_conflict() -> None:
    a, b = _panels(2)
    with pytest.raises(LayoutCellConflict) as ei:
        compose([("A", a), ("A", b)], LayoutSpec(design="AB"))
    assert ei.value.cell == "A"


def test_unknown_cell_name() -> None:
    with pytest.raises(LayoutError):
        compose([("Z", Panel())], LayoutSpec(design="AB"))


@pytest.mark.parametrize("design", ["AB\nC", "AB\nBA", "A-B", "\n\n"])
def test_invalid_templates(design: str) -> None:
    with pytest.raises(InvalidLayoutTemplate):
        parse_design(design)


def test_parse_design_sorts_cells_by_name() -> None:
    nrow, ncol, cells = parse_design("BA\n..")
    assert (nrow, ncol) == (2, 2)
    assert [c.name for c in cells] == ["A", "B"]
    assert (cells[0].row, cells[0].col) == (0, 1)


def test_sequential_tags_only_on_placed_panels() -> None:
    layout = compose(
        _panels(3),
        LayoutSpec(design="AB\nC#", tags="sequential", tag_prefix="(", tag_suffix=")"),
    )
    assert layout.tags == ("(A)", "(B)", "(C)")


def test_tag_styles() -> None:
    assert [format_tag(i, "A") for i in (1, 26, 27)] == ["A", "Z", "AA"]
    assert format_tag(3, "1") == "3"
    assert format_tag(9, "i") == "ix"
    assert format_tag(14, "I") == "XIV"


def test_merge_collects_shared_legends_once() -> None:
    left = Panel(legends=(_legend("class", "a", "b"),))
    right = Panel(legends=(_legend("class", "b", "c"), _legend("drv", "f")))
    layout = compose([left, right], LayoutSpec(guides="merge"))

    assert [g.title for g in layout.guides] == ["class", "drv"]
    assert layout.guides[0].domain.values == ("a", "b", "c")
    # panels keep their own legends untouched
    assert left.legends[0].domain.values == ("a", "b")


def test_per_panel_guides_are_not_collected() -> None:
    left = Panel(legends=(_legend("class", "a"),))
    layout = compose([left], LayoutSpec(guides="per_panel"))
    assert layout.guide_mode is GuideCollection.PER_PANEL
    assert layout.guides == ()


def test_layout_spec_validation() -> None:
    with pytest.raises(ValidationError):
        LayoutSpec(grid=GridSize(ncol=2), design="AB")
    with pytest.raises(ValidationError):
        GridSize(nrow=0)
    with pytest.raises(ValidationError):
        LayoutSpec(tag_style="x")
    with pytest.raises(ValidationError):
        LayoutSpec(unknown=True)


def test_layout_to_dict_is_serializable() -> None:
    layout = compose(_panels(2), LayoutSpec.wrap(ncol=2, title="Both"))
    d = layout.to_dict()
    assert d["title"] == "Both"
    assert [c["name"] for c in d["cells"]] == ["1", "2"]
    assert d["cells"][0]["panel"]["title"] == "p0"
