from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

import matplotlib as mpl
import seaborn as sns


@dataclass
class PlotStyle:
    """
    Lightweight configuration for figure styling.

    Unlike ``matplotlib.rcParams`` edits, a PlotStyle is only applied inside
    :meth:`context`, so composing one figure never changes the look of the
    next one.
    """

    dpi: int = 300
    theme: str = "ticks"
    font_family: str = "sans-serif"
    font_size: float = 8.0
    title_size: float = 9.0
    label_size: float = 8.0
    tick_size: float = 7.0
    legend_size: float = 7.0
    line_width: float = 0.8
    marker_size: float = 3.0
    palette: str = "okabe_ito"
    panel_label_size: float = 10.0
    panel_label_weight: str = "bold"
    extra_rc: Dict[str, Any] = field(default_factory=dict)

    def rc(self) -> Dict[str, Any]:
        """Return the rc dictionary this style stands for."""
        params: Dict[str, Any] = dict(sns.axes_style(self.theme))
        params.update({
            "figure.dpi": self.dpi,
            "savefig.dpi": self.dpi,
            "font.family": self.font_family,
            "font.size": self.font_size,
            "axes.titlesize": self.title_size,
            "axes.labelsize": self.label_size,
            "xtick.labelsize": self.tick_size,
            "ytick.labelsize": self.tick_size,
            "legend.fontsize": self.legend_size,
            "lines.linewidth": self.line_width,
            "lines.markersize": self.marker_size,
            "axes.linewidth": self.line_width,
            # keep text as text in vector output
            "pdf.fonttype": 42,
            "svg.fonttype": "none",
            # deterministic SVG ids
            "svg.hashsalt": "pubfig",
        })
        params.update(self.extra_rc)
        return params

    def context(self):
        return mpl.rc_context(self.rc())

    def label_font(self, size: Optional[float] = None) -> Dict[str, Any]:
        """Text kwargs for a panel label; ``size`` overrides the style default."""
        return {"fontsize": size or self.panel_label_size, "fontweight": self.panel_label_weight}


def style_from_args(args, base: Optional[PlotStyle] = None) -> PlotStyle:
    """
    Apply command-line typography overrides on top of ``base``.

    Reads ``dpi``, ``font_size``, ``line_width`` and ``marker_size`` from
    ``args`` when present and not None; every other field comes from ``base``
    (or the defaults).
    """
    style = base or PlotStyle()
    overrides = {}
    for name, cast in (("dpi", int), ("font_size", float), ("line_width", float), ("marker_size", float)):
        value = getattr(args, name, None)
        if value is not None:
            overrides[name] = cast(value)
    return replace(style, **overrides) if overrides else style
