"""
Configuration for ggfig.

Defines Settings, a frozen dataclass carrying runtime configuration for dataset lookup,
rendering defaults and export sizes. Defaults are sourced from ggfig.core.constants
(the single source of truth).

Source of truth
- ggfig.core.constants.BAR_WIDTH, DEFAULT_POSITION, CONTOUR_BINS, KDE_GRID_SIZE,
  CHART_WIDTH, CHART_HEIGHT, LOG_LEVEL

Import DAG discipline
- Depends only on stdlib and ggfig.core.
- Does not import higher layers (viz, stats, examples, cli).

Notes
- Precedence when loading: environment > TOML > defaults.
- The library never loads configuration implicitly; renderers use ``Settings()`` unless
  the caller (typically the CLI) passes ``Settings.load()``.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Literal

from ggfig.core.constants import BAR_WIDTH as CORE_BAR_WIDTH
from ggfig.core.constants import CHART_HEIGHT as CORE_CHART_HEIGHT
from ggfig.core.constants import CHART_WIDTH as CORE_CHART_WIDTH
from ggfig.core.constants import CONTOUR_BINS as CORE_CONTOUR_BINS
from ggfig.core.constants import DEFAULT_POSITION as CORE_DEFAULT_POSITION
from ggfig.core.constants import KDE_GRID_SIZE as CORE_KDE_GRID_SIZE
from ggfig.core.constants import LOG_LEVEL as CORE_LOG_LEVEL

Position = Literal["identity", "stack", "dodge", "fill"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_POSITIONS = ("identity", "stack", "dodge", "fill")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    """
    Runtime settings for ggfig.

    Attributes:
        data_dir (str | None): Directory searched for ``<name>.csv|.parquet|.json`` datasets
            after registered and bundled datasets.
        bar_width (float): Fraction of a category slot covered by bars (0 < w <= 1).
        default_position (Literal["identity","stack","dodge","fill"]): Position used for
            bar/col layers that do not request one.
        contour_bins (int): Number of iso-levels for contour and 2D density layers.
        kde_grid_size (int): Grid resolution per axis for kernel density estimates.
        chart_width (int): Exported view width in pixels.
        chart_height (int): Exported view height in pixels.
        log_level (str): Level applied to the ``ggfig`` logger by the CLI.

    Examples:
        >>> from ggfig.io import Settings
        >>> Settings(bar_width=0.5)  # doctest: +ELLIPSIS
        Settings(...)
    """

    data_dir: str | None = None
    bar_width: float = CORE_BAR_WIDTH
    default_position: Position = CORE_DEFAULT_POSITION  # type: ignore[assignment]
    contour_bins: int = CORE_CONTOUR_BINS
    kde_grid_size: int = CORE_KDE_GRID_SIZE
    chart_width: int = CORE_CHART_WIDTH
    chart_height: int = CORE_CHART_HEIGHT
    log_level: LogLevel = CORE_LOG_LEVEL  # type: ignore[assignment]

    # Configuration loaders (env/TOML) with precedence: env > TOML > defaults.

    @classmethod
    def _apply_mapping(cls, base: Settings, cfg: dict[str, Any] | None) -> Settings:
        """Apply a loose config mapping onto Settings, returning a new instance."""
        if not isinstance(cfg, dict):
            return base

        s = base

        def _positive_int(v: Any) -> int | None:
            try:
                n = int(v)
            except (TypeError, ValueError):
                return None
            return n if n >= 1 else None

        # data_dir
        if "data_dir" in cfg and isinstance(cfg["data_dir"], str):
            s = replace(s, data_dir=cfg["data_dir"] or None)

        # bar_width must stay within (0, 1]
        if "bar_width" in cfg:
            try:
                width = float(cfg["bar_width"])
            except (TypeError, ValueError):
                width = None
            if width is not None and 0.0 < width <= 1.0:
                s = replace(s, bar_width=width)

        # default_position
        if "default_position" in cfg and isinstance(cfg["default_position"], str):
            pos = cfg["default_position"].strip().lower()
            if pos in _POSITIONS:
                s = replace(s, default_position=pos)  # type: ignore[arg-type]

        # integer knobs
        for key in ("contour_bins", "kde_grid_size", "chart_width", "chart_height"):
            if key in cfg:
                n = _positive_int(cfg[key])
                if n is not None:
                    s = replace(s, **{key: n})

        # log_level
        if "log_level" in cfg and isinstance(cfg["log_level"], str):
            level = cfg["log_level"].strip().upper()
            if level in _LOG_LEVELS:
                s = replace(s, log_level=level)  # type: ignore[arg-type]

        return s

    @classmethod
    def from_env(cls, base: Settings | None = None, prefix: str = "GGFIG_") -> Settings:
        """
        Build Settings from environment variables. Precedence is env > base (if provided) > defaults.

        Recognized variables:
            - GGFIG_DATA_DIR
            - GGFIG_BAR_WIDTH
            - GGFIG_DEFAULT_POSITION ("identity" | "stack" | "dodge" | "fill")
            - GGFIG_CONTOUR_BINS
            - GGFIG_KDE_GRID_SIZE
            - GGFIG_CHART_WIDTH
            - GGFIG_CHART_HEIGHT
            - GGFIG_LOG_LEVEL
        """
        s = base or cls()

        mapping: dict[str, Any] = {}
        for key in (
            "data_dir",
            "bar_width",
            "default_position",
            "contour_bins",
            "kde_grid_size",
            "chart_width",
            "chart_height",
            "log_level",
        ):
            v = os.getenv(prefix + key.upper())
            if v:
                mapping[key] = v

        return cls._apply_mapping(s, mapping)

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str] | None = None) -> Settings:
        """
        Build Settings from a TOML file.

        Search order when `path` is None:
            1) ./ggfig.toml (with either a [figure] table or direct keys)
            2) ./pyproject.toml under [tool.ggfig]

        Returns defaults if no file is present or none of them parses.
        """
        s = cls()

        def _load_toml(p: Path) -> dict[str, Any] | None:
            try:
                with p.open("rb") as fh:
                    return tomllib.load(fh)
            except (OSError, tomllib.TOMLDecodeError):
                return None

        cfg: dict[str, Any] | None = None

        cand: list[Path] = []
        if path is not None:
            cand.append(Path(path))
        else:
            cand.append(Path.cwd() / "ggfig.toml")
            cand.append(Path.cwd() / "pyproject.toml")

        for p in cand:
            if not p.exists():
                continue
            data = _load_toml(p)
            if not isinstance(data, dict):
                continue
            if p.name == "pyproject.toml":
                tool = data.get("tool", {})
                cfg = tool.get("ggfig", {}) if isinstance(tool, dict) else None
            elif "figure" in data and isinstance(data["figure"], dict):
                cfg = data["figure"]
            else:
                cfg = data
            if cfg:
                break

        return cls._apply_mapping(s, cfg)

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> Settings:
        """
        Load Settings applying precedence: environment > TOML > defaults.

        Args:
            path: Optional explicit TOML path. If None, search defaults (ggfig.toml, pyproject.toml).

        Returns:
            Settings
        """
        s = cls.from_toml(path)
        s = cls.from_env(base=s)
        return s
