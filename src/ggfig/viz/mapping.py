"""
Mapping Resolver: bind dataset variables (or constants) to visual channels.

Overview
- Aes — immutable channel → variable-name / Constant mapping; ``Aes + Aes`` merges
  right-biased, mirroring "compose by addition".
- resolve() — validate a requested mapping against a GeomSpec and a Dataset and return a
  ResolvedMapping the renderers consume.

Resolution rules
1) Channels the geometry does not understand are ignored (logged at WARNING).
2) Every required channel must be mapped, else MissingRequiredChannel listing all of them.
3) Every mapped variable must exist in the dataset, else UnknownVariable.
4) Each variable's kind must fit the channel domain. A mismatch on a required channel
   raises TypeMismatch; on an optional channel the binding is dropped so the channel
   falls back to its default, and the drop is logged.
5) Constants are never domain-checked.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from ggfig.core.errors import MissingRequiredChannel, TypeMismatch, UnknownVariable
from ggfig.core.geoms import GeomSpec
from ggfig.core.grammar import Channel, VariableKind, channel_from_value
from ggfig.io.dataset import Dataset

__all__ = [
    "Constant",
    "Aes",
    "aes",
    "Binding",
    "ResolvedMapping",
    "resolve",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Constant:
    """A literal channel value (e.g., ``Constant("steelblue")`` for color)."""

    value: Any


MappingValue = str | Constant


@dataclass(frozen=True)
class Aes:
    """
    Immutable channel → variable name or Constant mapping.

    Examples:
        >>> m = aes(x="displ", y="hwy") + aes(colour="class")
        >>> sorted(c.value for c in m.channels)
        ['color', 'x', 'y']
    """

    bindings: Mapping[Channel, MappingValue] = field(default_factory=dict)

    def __add__(self, other: object) -> Aes:
        if not isinstance(other, Aes):
            return NotImplemented
        merged = dict(self.bindings)
        merged.update(other.bindings)
        return Aes(merged)

    @property
    def channels(self) -> tuple[Channel, ...]:
        return tuple(self.bindings)

    def get(self, channel: Channel) -> MappingValue | None:
        return self.bindings.get(channel)

    def without(self, *channels: Channel) -> Aes:
        return Aes({c: v for c, v in self.bindings.items() if c not in channels})

    def __contains__(self, channel: object) -> bool:
        return channel in self.bindings

    def __iter__(self) -> Iterator[Channel]:
        return iter(self.bindings)

    def __len__(self) -> int:
        return len(self.bindings)


def aes(**mapping: MappingValue) -> Aes:
    """
    Build an Aes from keyword arguments.

    Args:
        **mapping: channel token → variable name (str) or Constant. Channel tokens accept
            aliases such as ``colour``.

    Raises:
        GrammarError: If a channel token is unknown.
    """
    return Aes({channel_from_value(k): v for k, v in mapping.items()})


def _as_aes(requested: Aes | Mapping[Any, MappingValue]) -> Aes:
    if isinstance(requested, Aes):
        return requested
    return Aes({channel_from_value(k): v for k, v in requested.items()})


@dataclass(frozen=True, slots=True)
class Binding:
    """
    One resolved channel.

    Attributes:
        channel (Channel): Bound channel.
        variable (str | None): Dataset variable, or None for a constant.
        constant (Constant | None): Literal value, or None for a variable.
        kind (VariableKind | None): Inferred kind of ``variable`` (None for constants).
    """

    channel: Channel
    variable: str | None = None
    constant: Constant | None = None
    kind: VariableKind | None = None

    @property
    def is_constant(self) -> bool:
        return self.constant is not None


@dataclass(frozen=True)
class ResolvedMapping:
    """
    Validated mapping for one geometry over one dataset.

    Attributes:
        geom (GeomSpec): Geometry the mapping was resolved for.
        bindings (dict[Channel, Binding]): Surviving channel bindings.
        defaulted (tuple[Channel, ...]): Optional channels dropped for a domain mismatch.
        ignored (tuple[Channel, ...]): Requested channels the geometry does not understand.
    """

    geom: GeomSpec
    bindings: dict[Channel, Binding]
    defaulted: tuple[Channel, ...] = ()
    ignored: tuple[Channel, ...] = ()

    def has(self, channel: Channel) -> bool:
        return channel in self.bindings

    def binding(self, channel: Channel) -> Binding | None:
        return self.bindings.get(channel)

    def variable(self, channel: Channel) -> str | None:
        b = self.bindings.get(channel)
        return b.variable if b is not None else None

    def kind(self, channel: Channel) -> VariableKind | None:
        b = self.bindings.get(channel)
        return b.kind if b is not None else None

    def constants(self) -> dict[str, Any]:
        """Constant-valued channels as ``{channel.value: value}``."""
        return {
            c.value: b.constant.value
            for c, b in self.bindings.items()
            if b.constant is not None
        }


def resolve(
    geom_spec: GeomSpec,
    requested_mapping: Aes | Mapping[Any, MappingValue],
    dataset: Dataset,
) -> ResolvedMapping:
    """
    Validate ``requested_mapping`` for ``geom_spec`` against ``dataset``.

    Args:
        geom_spec (GeomSpec): Geometry whose channel contract applies.
        requested_mapping (Aes | Mapping): Channel → variable name or Constant.
        dataset (Dataset): Dataset whose schema the variables must exist in.

    Returns:
        ResolvedMapping: Bindings for every understood channel that survived checks.

    Raises:
        MissingRequiredChannel: One or more required channels are not mapped.
        UnknownVariable: A mapped variable is not in the dataset schema.
        TypeMismatch: A required channel is bound to a variable of the wrong kind.
    """
    mapping = _as_aes(requested_mapping)

    ignored = tuple(c for c in mapping if not geom_spec.understands(c))
    if ignored:
        logger.warning(
            "geom %s: ignoring unknown aesthetics %s",
            geom_spec.kind.value,
            [c.value for c in ignored],
        )

    missing = [c.value for c in geom_spec.required if c not in mapping]
    if missing:
        raise MissingRequiredChannel(missing, geom=geom_spec.kind.value)

    bindings: dict[Channel, Binding] = {}
    defaulted: list[Channel] = []
    for channel in geom_spec.channels:
        value = mapping.get(channel)
        if value is None:
            continue
        if isinstance(value, Constant):
            bindings[channel] = Binding(channel, constant=value)
            continue
        variable = str(value)
        if not dataset.has(variable):
            raise UnknownVariable(channel.value, variable, dataset.variables)
        kind = dataset.kind(variable)
        domain = geom_spec.domain(channel)
        if not domain.accepts(kind):
            if geom_spec.is_required(channel):
                raise TypeMismatch(channel.value, variable, domain.value, kind.value)
            logger.warning(
                "geom %s: %s expects a %s variable; %r is %s, using the default",
                geom_spec.kind.value,
                channel.value,
                domain.value,
                variable,
                kind.value,
            )
            defaulted.append(channel)
            continue
        bindings[channel] = Binding(channel, variable=variable, kind=kind)

    return ResolvedMapping(
        geom=geom_spec,
        bindings=bindings,
        defaulted=tuple(defaulted),
        ignored=ignored,
    )
