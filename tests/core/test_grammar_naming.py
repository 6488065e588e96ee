from __future__ import annotations

import pytest

from ggfig.core.errors import GrammarError
from ggfig.core.grammar import (
    Channel,
    ChannelDomain,
    GeomKind,
    GuideCollection,
    PositionKind,
    StatKind,
    TagMode,
    VariableKind,
    assert_lower_snake,
    channel_from_value,
    ensure_all_enum_values_lower_snake,
    geom_kind_from_value,
    guide_collection_from_value,
    is_lower_snake,
    position_kind_from_value,
    stat_kind_from_value,
    tag_mode_from_value,
)


def test_enum_values_are_lower_snake() -> None:
    ensure_all_enum_values_lower_snake(
        [
            Channel,
            GeomKind,
            StatKind,
            PositionKind,
            VariableKind,
            ChannelDomain,
            GuideCollection,
            TagMode,
        ]
    )


def test_is_lower_snake_and_assert() -> None:
    assert is_lower_snake("density_2d")
    assert is_lower_snake("x")
    assert not is_lower_snake("Density2D")
    assert not is_lower_snake("density__2d")
    assert not is_lower_snake("")
    with pytest.raises(GrammarError):
        assert_lower_snake("BadName", "geom")


def test_channel_aliases_normalize() -> None:
    assert channel_from_value("colour") is Channel.COLOR
    assert channel_from_value("col") is Channel.COLOR
    assert channel_from_value("Fill") is Channel.FILL
    assert channel_from_value("line-type") is Channel.LINETYPE
    assert channel_from_value(Channel.Y) is Channel.Y


def test_geom_tokens_accept_prefix_and_dashes() -> None:
    assert geom_kind_from_value("Point") is GeomKind.POINT
    assert geom_kind_from_value("geom_bar") is GeomKind.BAR
    assert geom_kind_from_value("density-2d") is GeomKind.DENSITY_2D


def test_other_parsers_round_the_vocabulary() -> None:
    assert stat_kind_from_value("count") is StatKind.COUNT
    assert position_kind_from_value("DODGE") is PositionKind.DODGE
    assert guide_collection_from_value("per-panel") is GuideCollection.PER_PANEL
    assert tag_mode_from_value("sequential") is TagMode.SEQUENTIAL


@pytest.mark.parametrize(
    "parser, token",
    [
        (channel_from_value, "hue"),
        (geom_kind_from_value, "violin"),
        (stat_kind_from_value, "bin"),
        (position_kind_from_value, "jitter"),
        (guide_collection_from_value, "collect"),
        (tag_mode_from_value, "numbered"),
    ],
)
def test_unknown_tokens_raise_grammar_error(parser, token: str) -> None:
    with pytest.raises(GrammarError):
        parser(token)


def test_grammar_error_lists_allowed_values() -> None:
    with pytest.raises(GrammarError) as ei:
        position_kind_from_value("jitter")
    assert "dodge" in str(ei.value)


def test_channel_domain_accepts() -> None:
    assert ChannelDomain.ANY.accepts(VariableKind.DISCRETE)
    assert ChannelDomain.CONTINUOUS.accepts(VariableKind.CONTINUOUS)
    assert not ChannelDomain.CONTINUOUS.accepts(VariableKind.DISCRETE)
    assert not ChannelDomain.DISCRETE.accepts(VariableKind.CONTINUOUS)
    # empty columns fit every domain
    assert ChannelDomain.CONTINUOUS.accepts(VariableKind.EMPTY)
    assert ChannelDomain.DISCRETE.accepts(VariableKind.EMPTY)
