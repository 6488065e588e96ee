from __future__ import annotations

import altair as alt

__all__ = [
    "apply_chart_defaults",
    "EMPTY_CELL_STROKE",
]

EMPTY_CELL_STROKE = "#dddddd"


# Uniform chart defaults for slide figures
def apply_chart_defaults(ch: alt.TopLevelMixin) -> alt.TopLevelMixin:
    """Apply axis, legend, title and view defaults to a top-level chart."""
    return (
        ch.configure_axis(labelFontSize=12, titleFontSize=12, grid=True)
        .configure_legend(labelFontSize=12, titleFontSize=12)
        .configure_title(fontSize=14, anchor="start")
        .configure_view(strokeOpacity=0)
    )
