"""
Example gallery: the figures shown in the lecture slides.

Each example is a pure function of a DatasetProvider (one rendering pass) returning a
Panel or a Layout. The CLI renders the whole gallery; tests build examples one by one.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import polars as pl

from ggfig.core.errors import FigureError
from ggfig.io.config import Settings
from ggfig.io.provider import DatasetProvider
from ggfig.viz.compose import Layout
from ggfig.viz.mapping import aes
from ggfig.viz.marks import Panel
from ggfig.viz.plot import (
    Plot,
    geom_area,
    geom_bar,
    geom_col,
    geom_contour,
    geom_density_2d,
    geom_line,
    geom_point,
    geom_ribbon,
    geom_step,
    geom_text,
    ggplot,
    labs,
    wrap_plots,
)

__all__ = [
    "Example",
    "ExampleNotFound",
    "EXAMPLES",
    "list_examples",
    "build_example",
]

Figure = Panel | Layout


class ExampleNotFound(FigureError, LookupError):
    """Raised when an example name is not in the gallery."""

    def __init__(self, name: str) -> None:
        super().__init__(f"unknown example {name!r} (known={list_examples()})")
        self.name = name


@dataclass(frozen=True)
class Example:
    name: str
    description: str
    build: Callable[[DatasetProvider], Figure]


# ----------------------------
# Single panels
# ----------------------------


def _mpg_scatter() -> Plot:
    return ggplot("mpg", aes(x="displ", y="hwy")) + geom_point() + labs(
        title="Engine size vs. highway mileage", x="displacement (l)", y="highway mpg"
    )


def _mpg_scatter_class() -> Plot:
    return _mpg_scatter() + aes(colour="class") + labs(colour="vehicle class")


def _mpg_class_counts(position: str = "stack") -> Plot:
    return (
        ggplot("mpg", aes(x="class", fill="drv"))
        + geom_bar(position=position)
        + labs(title=f"Cars per class ({position})", fill="drive")
    )


def _mpg_efficient_models(provider: DatasetProvider) -> Panel:
    mpg = provider.load("mpg")
    efficient = mpg.with_frame(mpg.frame.filter(pl.col("hwy") >= 30), name="mpg_efficient")
    plot = (
        ggplot(efficient, aes(x="displ", y="hwy"))
        + geom_point(color="steelblue")
        + geom_text(aes(label="model"), size=10)
        + labs(title="Models with at least 30 highway mpg")
    )
    return plot.build(provider)


def _economics_line() -> Plot:
    return ggplot("economics", aes(x="year", y="unemploy")) + geom_line() + labs(
        title="Unemployment", y="unemployed (thousands)"
    )


def _economics_step() -> Plot:
    return ggplot("economics", aes(x="year", y="unemploy")) + geom_step() + labs(
        title="Unemployment (step)", y="unemployed (thousands)"
    )


def _economics_area() -> Plot:
    return ggplot("economics", aes(x="year", y="uempmed")) + geom_area(fill="steelblue") + labs(
        title="Median weeks unemployed"
    )


def _economics_ribbon(provider: DatasetProvider) -> Panel:
    econ = provider.load("economics")
    banded = econ.with_frame(
        econ.frame.with_columns(
            lower=pl.col("uempmed") * 0.8,
            upper=pl.col("uempmed") * 1.2,
        ),
        name="economics_band",
    )
    plot = (
        ggplot(banded, aes(x="year"))
        + geom_ribbon(aes(ymin="lower", ymax="upper"), alpha=0.3)
        + geom_line(aes(y="uempmed"))
        + labs(title="Median weeks unemployed, +/- 20%", y="weeks")
    )
    return plot.build(provider)


def _faithful_density() -> Plot:
    return (
        ggplot("faithful", aes(x="eruptions", y="waiting"))
        + geom_point()
        + geom_density_2d()
        + labs(title="Old Faithful: 2D density")
    )


def _faithfuld_contour() -> Plot:
    return ggplot("faithfuld", aes(x="waiting", y="eruptions", z="density")) + geom_contour() + labs(
        title="Old Faithful: density contours"
    )


def _diamonds_price() -> Plot:
    return (
        ggplot("diamonds_small", aes(x="cut", y="price", fill="color"))
        + geom_col()
        + labs(title="Total price by cut")
    )


# ----------------------------
# Layouts
# ----------------------------


def _patchwork(provider: DatasetProvider) -> Layout:
    return wrap_plots(
        _mpg_scatter_class(),
        _mpg_class_counts(),
        _economics_line(),
        design="AB\nCC",
        tags="sequential",
        tag_suffix=")",
        guides="merge",
        title="Composing plots",
        provider=provider,
    )


def _small_multiples(provider: DatasetProvider) -> Layout:
    return wrap_plots(
        _mpg_class_counts("stack"),
        _mpg_class_counts("dodge"),
        _mpg_class_counts("fill"),
        ncol=3,
        tags="sequential",
        tag_style="a",
        guides="merge",
        provider=provider,
    )


def _built(factory: Callable[[], Plot]) -> Callable[[DatasetProvider], Panel]:
    def build(provider: DatasetProvider) -> Panel:
        return factory().build(provider)

    return build


_GALLERY: tuple[Example, ...] = (
    Example("mpg_scatter", "Scatter of displacement vs. highway mileage", _built(_mpg_scatter)),
    Example("mpg_scatter_class", "Scatter coloured by vehicle class", _built(_mpg_scatter_class)),
    Example("mpg_class_counts", "Stacked bar counts per class and drive", _built(_mpg_class_counts)),
    Example("mpg_efficient_models", "Points with text labels", _mpg_efficient_models),
    Example("economics_line", "Unemployment over time", _built(_economics_line)),
    Example("economics_step", "Unemployment as a stairstep", _built(_economics_step)),
    Example("economics_area", "Area under median unemployment duration", _built(_economics_area)),
    Example("economics_ribbon", "Ribbon band around a line", _economics_ribbon),
    Example("faithful_density", "Points with 2D density iso-lines", _built(_faithful_density)),
    Example("faithfuld_contour", "Contours of a gridded density", _built(_faithfuld_contour)),
    Example("diamonds_price", "Stacked columns of price by cut", _built(_diamonds_price)),
    Example("patchwork", "Three plots in a template with merged guides", _patchwork),
    Example("bar_positions", "Stack, dodge and fill side by side", _small_multiples),
)

EXAMPLES: dict[str, Example] = {e.name: e for e in _GALLERY}


def list_examples() -> list[str]:
    """Return example names in gallery order."""
    return [e.name for e in _GALLERY]


def build_example(
    name: str,
    provider: DatasetProvider | None = None,
    settings: Settings | None = None,
) -> Figure:
    """
    Build one gallery figure.

    Raises:
        ExampleNotFound: If ``name`` is not in the gallery.
    """
    example = EXAMPLES.get(name)
    if example is None:
        raise ExampleNotFound(name)
    return example.build(provider or DatasetProvider(settings))
