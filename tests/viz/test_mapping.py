from __future__ import annotations

import logging

import pytest

from ggfig.core.errors import GrammarError, MissingRequiredChannel, TypeMismatch, UnknownVariable
from ggfig.core.geoms import get_geom
from ggfig.core.grammar import Channel, VariableKind
from ggfig.io.dataset import Dataset
from ggfig.viz.mapping import Aes, Constant, aes, resolve


def _mpg_like() -> Dataset:
    return Dataset.from_columns(
        "cars",
        {
            "displ": [1.8, 2.0, 5.7],
            "hwy": [29, 30, 26],
            "class": ["compact", "compact", "2seater"],
        },
    )


def test_aes_addition_is_right_biased_and_immutable() -> None:
    base = aes(x="displ", y="hwy")
    merged = base + aes(y="cty", colour="class")

    assert merged.get(Channel.Y) == "cty"
    assert merged.get(Channel.COLOR) == "class"
    assert base.get(Channel.Y) == "hwy"
    assert Channel.COLOR not in base


def test_aes_rejects_unknown_channel() -> None:
    with pytest.raises(GrammarError):
        aes(hue="class")


def test_resolve_binds_variables_with_kinds() -> None:
    resolved = resolve(get_geom("point"), aes(x="displ", y="hwy", color="class"), _mpg_like())

    assert resolved.variable(Channel.X) == "displ"
    assert resolved.kind(Channel.Y) is VariableKind.CONTINUOUS
    assert resolved.kind(Channel.COLOR) is VariableKind.DISCRETE
    assert resolved.defaulted == ()
    assert resolved.ignored == ()


def test_missing_required_channel_names_it() -> None:
    ds = Dataset.from_records("d", [{"x": 1}])
    with pytest.raises(MissingRequiredChannel) as ei:
        resolve(get_geom("point"), aes(x="x"), ds)
    assert ei.value.channels == ("y",)
    assert ei.value.geom == "point"


def test_missing_channels_listed_in_declared_order() -> None:
    with pytest.raises(MissingRequiredChannel) as ei:
        resolve(get_geom("text"), aes(x="displ"), _mpg_like())
    assert ei.value.channels == ("y", "label")


def test_unknown_variable() -> None:
    with pytest.raises(UnknownVariable) as ei:
        resolve(get_geom("point"), aes(x="displ", y="nope"), _mpg_like())
    assert ei.value.variable == "nope"
    assert ei.value.channel == "y"


def test_required_channel_type_mismatch() -> None:
    with pytest.raises(TypeMismatch) as ei:
        resolve(get_geom("line"), aes(x="displ", y="class"), _mpg_like())
    assert ei.value.expected == "continuous"
    assert ei.value.actual == "discrete"


def test_optional_channel_mismatch_falls_back_to_default(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="ggfig"):
        resolved = resolve(get_geom("point"), aes(x="displ", y="hwy", shape="hwy"), _mpg_like())

    assert not resolved.has(Channel.SHAPE)
    assert resolved.defaulted == (Channel.SHAPE,)
    assert "using the default" in caplog.text


def test_ignored_aesthetics_are_logged(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="ggfig"):
        resolved = resolve(get_geom("point"), aes(x="displ", y="hwy", label="class"), _mpg_like())

    assert resolved.ignored == (Channel.LABEL,)
    assert not resolved.has(Channel.LABEL)
    assert "ignoring unknown aesthetics" in caplog.text


def test_constants_skip_domain_checks() -> None:
    resolved = resolve(
        get_geom("point"),
        aes(x="displ", y="hwy", color=Constant("steelblue"), size=Constant("large")),
        _mpg_like(),
    )
    assert resolved.constants() == {"color": "steelblue", "size": "large"}
    binding = resolved.binding(Channel.COLOR)
    assert binding is not None and binding.is_constant


def test_resolve_accepts_plain_mapping() -> None:
    resolved = resolve(get_geom("point"), {"x": "displ", "colour": "class", "y": "hwy"}, _mpg_like())
    assert resolved.variable(Channel.COLOR) == "class"


def test_empty_column_fits_any_domain() -> None:
    ds = Dataset.from_columns("d", {"x": [None, None], "y": [None, None]})
    resolved = resolve(get_geom("area"), Aes({Channel.X: "x", Channel.Y: "y"}), ds)
    assert resolved.kind(Channel.X) is VariableKind.EMPTY
