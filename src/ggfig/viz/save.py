"""
Write charts to disk for the slide renderer.

Notes:
    - HTML and Vega-Lite JSON are written directly from the chart spec; no converter
      is needed.
    - PNG and SVG go through ``vl_convert`` (package ``vl-convert-python``), imported
      lazily; a RuntimeError naming the package is raised when it is missing.
"""

from __future__ import annotations

import importlib
import logging
from pathlib import Path
from types import ModuleType

import altair as alt

__all__ = [
    "save",
]

logger = logging.getLogger(__name__)


def _converter() -> ModuleType:
    try:
        return importlib.import_module("vl_convert")
    except ImportError as exc:
        raise RuntimeError(
            "PNG/SVG export requires the 'vl-convert-python' package "
            "(pip install 'ggfig[export]')"
        ) from exc


def _prepare(path: str | Path) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    return p


def save(
    chart: alt.TopLevelMixin,
    *,
    out_html: str | Path | None = None,
    out_json: str | Path | None = None,
    out_png: str | Path | None = None,
    out_svg: str | Path | None = None,
    scale_factor: float = 2.0,
) -> list[Path]:
    """
    Save ``chart`` to every requested output.

    Args:
        chart (alt.TopLevelMixin): Chart to write.
        out_html (str | Path | None): Standalone HTML page.
        out_json (str | Path | None): Vega-Lite JSON spec.
        out_png (str | Path | None): PNG image (requires vl-convert-python).
        out_svg (str | Path | None): SVG image (requires vl-convert-python).
        scale_factor (float): PNG pixel density multiplier.

    Returns:
        list[Path]: Files written, in argument order.

    Raises:
        RuntimeError: An image output was requested and vl-convert-python is missing.
    """
    written: list[Path] = []
    if out_html is not None:
        p = _prepare(out_html)
        p.write_text(chart.to_html(), encoding="utf-8")
        written.append(p)
    if out_json is not None:
        p = _prepare(out_json)
        p.write_text(chart.to_json(indent=2), encoding="utf-8")
        written.append(p)
    if out_png is not None or out_svg is not None:
        vlc = _converter()
        spec = chart.to_json()
        if out_png is not None:
            p = _prepare(out_png)
            p.write_bytes(vlc.vegalite_to_png(spec, scale=scale_factor))
            written.append(p)
        if out_svg is not None:
            p = _prepare(out_svg)
            p.write_text(vlc.vegalite_to_svg(spec), encoding="utf-8")
            written.append(p)
    for p in written:
        logger.debug("wrote %s", p)
    return written
