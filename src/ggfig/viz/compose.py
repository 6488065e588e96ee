"""
Panel Composer: arrange panels into a grid or a named-cell template.

Overview
- LayoutSpec (pydantic, frozen) describes the arrangement: a GridSize (either dimension
  may be None and then grows to fit) or a design template, plus guide collection and
  panel tagging.
- compose(panels, spec) places panels and returns a Layout, the terminal artifact handed
  to the external slide renderer.

Placement
- Positional panels fill cells in order: row-major across a grid; with a template, the
  i-th panel fills the i-th cell name in sorted name order.
- ``(cell_name, panel)`` pairs claim a named cell explicitly; positional panels then
  fill the remaining cells.
- Panels are stored by identity, never copied.

Templates
- One row per line; letters or digits name cells; ``#`` (or ``.``) marks an empty cell.
- Every name must cover a filled rectangle and every row must have the same width.

Errors
- LayoutCellConflict: two panels claim the same cell.
- LayoutPanelCountMismatch: more panels than cells, or fewer when empty cells are not
  allowed. Auto-sized grids never mismatch.
- InvalidLayoutTemplate: ragged rows or non-rectangular named areas.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ggfig.core.errors import (
    InvalidLayoutTemplate,
    LayoutCellConflict,
    LayoutError,
    LayoutPanelCountMismatch,
)
from ggfig.core.grammar import (
    GuideCollection,
    TagMode,
    guide_collection_from_value,
    tag_mode_from_value,
)
from ggfig.core.typing import JsonDict

from .marks import LegendEntry, Panel, merge_legends

__all__ = [
    "GridSize",
    "LayoutSpec",
    "Cell",
    "Layout",
    "compose",
    "parse_design",
    "format_tag",
]

logger = logging.getLogger(__name__)

TagStyle = Literal["A", "a", "1", "I", "i"]
_EMPTY_MARKERS = frozenset("#.")


# ============================================================================
# Layout specification
# ============================================================================


class GridSize(BaseModel):
    """Grid dimensions; a None dimension is sized automatically to fit the panels."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    nrow: int | None = Field(default=None, ge=1)
    ncol: int | None = Field(default=None, ge=1)

    @property
    def is_fixed(self) -> bool:
        return self.nrow is not None and self.ncol is not None

    def resolve(self, n_panels: int) -> tuple[int, int]:
        """Return concrete ``(nrow, ncol)`` for ``n_panels`` panels."""
        n = max(n_panels, 1)
        if self.nrow is not None and self.ncol is not None:
            return self.nrow, self.ncol
        if self.ncol is not None:
            return math.ceil(n / self.ncol), self.ncol
        if self.nrow is not None:
            return self.nrow, math.ceil(n / self.nrow)
        ncol = math.ceil(math.sqrt(n))
        return math.ceil(n / ncol), ncol


class LayoutSpec(BaseModel):
    """
    How to arrange panels.

    Attributes:
        grid (GridSize | None): Grid dimensions; ignored when ``design`` is set.
        design (str | None): Named-cell template, e.g. ``"AAB\\nCCB"``.
        guides (GuideCollection): ``merge`` collects shared legends once; ``per_panel``
            leaves them on each panel.
        tags (TagMode): ``sequential`` labels each placed panel.
        tag_style (Literal["A","a","1","I","i"]): Sequence used for tags.
        tag_prefix (str): Text before each tag.
        tag_suffix (str): Text after each tag.
        allow_empty_cells (bool): Whether fewer panels than cells is accepted.
        title (str | None): Title of the whole layout.

    Examples:
        >>> LayoutSpec(grid=GridSize(ncol=2), tags="sequential").tags
        <TagMode.SEQUENTIAL: 'sequential'>
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    grid: GridSize | None = None
    design: str | None = None
    guides: GuideCollection = GuideCollection.MERGE
    tags: TagMode = TagMode.NONE
    tag_style: TagStyle = "A"
    tag_prefix: str = ""
    tag_suffix: str = ""
    allow_empty_cells: bool = True
    title: str | None = None

    @field_validator("guides", mode="before")
    @classmethod
    def _normalize_guides(cls, v: Any) -> GuideCollection:
        return guide_collection_from_value(v)

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, v: Any) -> TagMode:
        return tag_mode_from_value(v)

    @model_validator(mode="after")
    def _grid_or_design(self) -> LayoutSpec:
        if self.grid is not None and self.design is not None:
            raise ValueError("give either grid or design, not both")
        return self

    @classmethod
    def wrap(cls, nrow: int | None = None, ncol: int | None = None, **kwargs: Any) -> LayoutSpec:
        """Shorthand for a grid layout."""
        return cls(grid=GridSize(nrow=nrow, ncol=ncol), **kwargs)


# ============================================================================
# Layout artifact
# ============================================================================


@dataclass(frozen=True)
class Cell:
    """
    One cell of a layout.

    Attributes:
        name (str): Template letter, or "1".."n" (row-major) for grids.
        row, col (int): Zero-based top-left position.
        row_span, col_span (int): Extent in grid units.
        panel (Panel | None): The placed panel (the exact object passed to compose).
        tag (str | None): Sequential tag, when tagging is on.
    """

    name: str
    row: int
    col: int
    row_span: int = 1
    col_span: int = 1
    panel: Panel | None = None
    tag: str | None = None

    def covers(self, row: int, col: int) -> bool:
        return (
            self.row <= row < self.row + self.row_span
            and self.col <= col < self.col + self.col_span
        )

    def to_dict(self) -> JsonDict:
        return {
            "name": self.name,
            "row": self.row,
            "col": self.col,
            "row_span": self.row_span,
            "col_span": self.col_span,
            "panel": self.panel.to_dict() if self.panel is not None else None,
            "tag": self.tag,
        }


@dataclass(frozen=True)
class Layout:
    """
    Arrangement of panels in a grid.

    Attributes:
        nrow, ncol (int): Grid dimensions.
        cells (tuple[Cell, ...]): Cells in placement order.
        guide_mode (GuideCollection): How legends were collected.
        guides (tuple[LegendEntry, ...]): Collected legends (``merge`` only).
        title (str | None): Layout title.
    """

    nrow: int
    ncol: int
    cells: tuple[Cell, ...]
    guide_mode: GuideCollection = GuideCollection.MERGE
    guides: tuple[LegendEntry, ...] = ()
    title: str | None = None

    def cell(self, name: str) -> Cell:
        for c in self.cells:
            if c.name == name:
                return c
        raise KeyError(f"unknown cell {name!r} (known={[c.name for c in self.cells]})")

    def panel(self, name: str) -> Panel | None:
        """Return the panel placed in cell ``name`` (None if the cell is empty)."""
        return self.cell(name).panel

    def panel_at(self, row: int, col: int) -> Panel | None:
        """Return the panel covering grid position ``(row, col)``, if any."""
        if not (0 <= row < self.nrow and 0 <= col < self.ncol):
            raise IndexError(f"({row}, {col}) is outside a {self.nrow}x{self.ncol} layout")
        for c in self.cells:
            if c.covers(row, col):
                return c.panel
        return None

    @property
    def panels(self) -> tuple[Panel, ...]:
        return tuple(c.panel for c in self.cells if c.panel is not None)

    @property
    def tags(self) -> tuple[str, ...]:
        return tuple(c.tag for c in self.cells if c.tag is not None)

    def to_dict(self) -> JsonDict:
        return {
            "nrow": self.nrow,
            "ncol": self.ncol,
            "cells": [c.to_dict() for c in self.cells],
            "guide_mode": self.guide_mode.value,
            "guides": [g.to_dict() for g in self.guides],
            "title": self.title,
        }


# ============================================================================
# Templates and tags
# ============================================================================


def parse_design(design: str) -> tuple[int, int, list[Cell]]:
    """
    Parse a named-cell template.

    Returns:
        tuple: ``(nrow, ncol, cells)`` with cells sorted by name.

    Raises:
        InvalidLayoutTemplate: Empty template, ragged rows, an invalid cell name, or a
            name that does not cover a filled rectangle.
    """
    rows = [line.strip() for line in design.splitlines() if line.strip()]
    if not rows:
        raise InvalidLayoutTemplate("layout template is empty")
    width = len(rows[0])
    if any(len(r) != width for r in rows):
        raise InvalidLayoutTemplate(
            f"layout template rows must have equal width (got {[len(r) for r in rows]})"
        )

    spots: dict[str, list[tuple[int, int]]] = {}
    for r, line in enumerate(rows):
        for c, ch in enumerate(line):
            if ch in _EMPTY_MARKERS:
                continue
            if not ch.isalnum():
                raise InvalidLayoutTemplate(f"invalid cell name {ch!r} in layout template")
            spots.setdefault(ch, []).append((r, c))

    cells: list[Cell] = []
    for name in sorted(spots):
        positions = spots[name]
        r0 = min(p[0] for p in positions)
        r1 = max(p[0] for p in positions)
        c0 = min(p[1] for p in positions)
        c1 = max(p[1] for p in positions)
        if len(positions) != (r1 - r0 + 1) * (c1 - c0 + 1):
            raise InvalidLayoutTemplate(f"cell {name!r} does not form a rectangle")
        cells.append(Cell(name, r0, c0, r1 - r0 + 1, c1 - c0 + 1))
    return len(rows), width, cells


_ROMAN = (
    (1000, "M"), (900, "CM"), (500, "D"), (400, "CD"), (100, "C"), (90, "XC"),
    (50, "L"), (40, "XL"), (10, "X"), (9, "IX"), (5, "V"), (4, "IV"), (1, "I"),
)  # fmt: skip


def _roman(n: int) -> str:
    out = []
    for value, numeral in _ROMAN:
        count, n = divmod(n, value)
        out.append(numeral * count)
    return "".join(out)


def _letters(n: int) -> str:
    # 1 -> A, 26 -> Z, 27 -> AA
    out = ""
    while n > 0:
        n, rem = divmod(n - 1, 26)
        out = chr(ord("A") + rem) + out
    return out


def format_tag(index: int, style: TagStyle = "A", prefix: str = "", suffix: str = "") -> str:
    """
    Format the 1-based ``index``-th tag.

    Examples:
        >>> [format_tag(i, "a", suffix=")") for i in (1, 2, 27)]
        ['a)', 'b)', 'aa)']
        >>> format_tag(4, "I")
        'IV'
    """
    if style == "1":
        body = str(index)
    elif style in ("I", "i"):
        body = _roman(index)
    else:
        body = _letters(index)
    if style in ("a", "i"):
        body = body.lower()
    return f"{prefix}{body}{suffix}"


# ============================================================================
# compose
# ============================================================================

PanelItem = Panel | tuple[str, Panel]


def _split(panels: Iterable[PanelItem]) -> tuple[list[Panel], list[tuple[str, Panel]]]:
    positional: list[Panel] = []
    explicit: list[tuple[str, Panel]] = []
    for item in panels:
        if isinstance(item, tuple):
            name, panel = item
            explicit.append((str(name), panel))
        else:
            positional.append(item)
    return positional, explicit


def _grid_cells(nrow: int, ncol: int) -> list[Cell]:
    return [Cell(str(r * ncol + c + 1), r, c) for r in range(nrow) for c in range(ncol)]


def compose(panels: Sequence[PanelItem], layout_spec: LayoutSpec | None = None) -> Layout:
    """
    Arrange panels into a Layout.

    Args:
        panels (Sequence[Panel | tuple[str, Panel]]): Panels in placement order, or
            ``(cell_name, panel)`` pairs claiming named cells.
        layout_spec (LayoutSpec | None): Arrangement; defaults to an auto-sized grid.

    Returns:
        Layout: Cells holding the given panel objects, with collected guides and tags.

    Raises:
        LayoutCellConflict: Two panels claim the same cell.
        LayoutPanelCountMismatch: Panel count does not fit the fixed cell count.
        InvalidLayoutTemplate: The design template is malformed.
        LayoutError: A pair names a cell the layout does not have.
    """
    spec = layout_spec or LayoutSpec()
    positional, explicit = _split(panels)
    n_panels = len(positional) + len(explicit)

    if spec.design is not None:
        nrow, ncol, cells = parse_design(spec.design)
        fixed = True
    else:
        grid = spec.grid or GridSize()
        nrow, ncol = grid.resolve(n_panels)
        cells = _grid_cells(nrow, ncol)
        fixed = grid.is_fixed

    if n_panels > len(cells):
        raise LayoutPanelCountMismatch(n_panels, len(cells))
    if fixed and not spec.allow_empty_cells and n_panels < len(cells):
        raise LayoutPanelCountMismatch(n_panels, len(cells))

    placed: dict[str, Panel] = {}
    names = [c.name for c in cells]
    for name, panel in explicit:
        if name not in names:
            raise LayoutError(f"unknown cell {name!r} (known={names})")
        if name in placed:
            raise LayoutCellConflict(name)
        placed[name] = panel

    free = [n for n in names if n not in placed]
    for name, panel in zip(free, positional):
        placed[name] = panel

    out: list[Cell] = []
    index = 0
    for c in cells:
        panel = placed.get(c.name)
        tag = None
        if panel is not None and spec.tags is TagMode.SEQUENTIAL:
            index += 1
            tag = format_tag(index, spec.tag_style, spec.tag_prefix, spec.tag_suffix)
        out.append(Cell(c.name, c.row, c.col, c.row_span, c.col_span, panel, tag))

    guides: tuple[LegendEntry, ...] = ()
    if spec.guides is GuideCollection.MERGE:
        guides = merge_legends(c.panel.legends for c in out if c.panel is not None)

    logger.debug(
        "composed %d panels into %dx%d layout (%d cells, guides=%s)",
        n_panels,
        nrow,
        ncol,
        len(out),
        spec.guides.value,
    )
    return Layout(
        nrow=nrow,
        ncol=ncol,
        cells=tuple(out),
        guide_mode=spec.guides,
        guides=guides,
        title=spec.title,
    )
