from __future__ import annotations

import pytest

from ggfig.core.grammar import GeomKind
from ggfig.core.hashing import hash_mapping
from ggfig.examples import EXAMPLES, ExampleNotFound, build_example, list_examples
from ggfig.io.provider import DatasetProvider
from ggfig.viz.compose import Layout
from ggfig.viz.marks import Panel


@pytest.mark.parametrize("name", list_examples())
def test_every_example_builds(name: str) -> None:
    figure = build_example(name)
    assert isinstance(figure, (Panel, Layout))
    if isinstance(figure, Panel):
        assert not figure.is_empty
    else:
        assert all(not p.is_empty for p in figure.panels)


def test_gallery_names_are_unique_and_ordered() -> None:
    names = list_examples()
    assert len(names) == len(set(names)) == len(EXAMPLES)
    assert names[0] == "mpg_scatter"


def test_examples_are_deterministic() -> None:
    a = build_example("patchwork", DatasetProvider())
    b = build_example("patchwork", DatasetProvider())
    assert hash_mapping(a.to_dict()) == hash_mapping(b.to_dict())


def test_patchwork_tags_and_merged_guides() -> None:
    layout = build_example("patchwork")
    assert isinstance(layout, Layout)
    assert layout.tags == ("A)", "B)", "C)")
    assert layout.cell("C").col_span == 2
    assert {g.channel.value for g in layout.guides} == {"color", "fill"}


def test_scatter_has_one_mark_per_row() -> None:
    provider = DatasetProvider()
    panel = build_example("mpg_scatter", provider)
    assert len(panel.marks) == provider.load("mpg").height
    assert panel.geoms == (GeomKind.POINT,)


def test_unknown_example() -> None:
    with pytest.raises(ExampleNotFound):
        build_example("nope")
