"""Pairwise group comparisons and the bracket annotations that show them."""
from __future__ import annotations

import itertools
import logging
from typing import Any, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from matplotlib.axes import Axes
from scipy import stats

from .core.registry import register_layer
from .panels.panel import Layer
from .styles import PlotStyle

logger = logging.getLogger(__name__)

METHODS = ("wilcoxon", "t-test")

# (upper bound, label), checked in order
SIGNIF_CUTPOINTS = (
    (1e-4, "****"),
    (1e-3, "***"),
    (1e-2, "**"),
    (5e-2, "*"),
)


def p_to_label(p: float) -> str:
    if p is None or not np.isfinite(p):
        return "NA"
    for bound, label in SIGNIF_CUTPOINTS:
        if p <= bound:
            return label
    return "ns"


def _test(a: np.ndarray, b: np.ndarray, method: str) -> float:
    if method == "wilcoxon":
        # rank-sum for independent samples, as in R's wilcox.test(paired = FALSE)
        return float(stats.mannwhitneyu(a, b, alternative="two-sided").pvalue)
    if method == "t-test":
        return float(stats.ttest_ind(a, b, equal_var=False).pvalue)
    raise ValueError(f"Unknown method {method!r}; expected one of {METHODS}")


def compare_groups(data: pd.DataFrame, x: str, y: str,
                   comparisons: Optional[Sequence[Tuple[Any, Any]]] = None,
                   method: str = "wilcoxon") -> pd.DataFrame:
    """
    Test each pair of ``x`` categories for a difference in ``y``.

    Without ``comparisons`` every pair of levels is tested, in order of
    appearance. Returns columns group1, group2, n1, n2, p, p_label, method.
    """
    levels = list(pd.unique(data[x].dropna()))
    if comparisons is None:
        comparisons = list(itertools.combinations(levels, 2))
    rows = []
    for g1, g2 in comparisons:
        if g1 not in levels or g2 not in levels:
            raise KeyError(f"Comparison ({g1!r}, {g2!r}) names a level missing from column {x!r}")
        a = data.loc[data[x] == g1, y].dropna().to_numpy(dtype=float)
        b = data.loc[data[x] == g2, y].dropna().to_numpy(dtype=float)
        p = _test(a, b, method)
        rows.append({
            "group1": g1,
            "group2": g2,
            "n1": len(a),
            "n2": len(b),
            "p": p,
            "p_label": p_to_label(p),
            "method": method,
        })
        logger.debug("%s vs %s (%s): p=%.3g", g1, g2, method, p)
    return pd.DataFrame(rows, columns=["group1", "group2", "n1", "n2", "p", "p_label", "method"])


def _draw_significance(ax: Axes, style: PlotStyle, data, x, y, comparisons=None, method="wilcoxon",
                       label="stars", order=None, step=0.08, tip=0.02):
    result = compare_groups(data, x, y, comparisons=comparisons, method=method)
    levels = list(order) if order is not None else list(pd.unique(data[x].dropna()))
    positions = {level: i for i, level in enumerate(levels)}
    ymin, ymax = float(data[y].min()), float(data[y].max())
    span = (ymax - ymin) or 1.0
    for i, row in enumerate(result.itertuples(index=False)):
        x1, x2 = sorted((positions[row.group1], positions[row.group2]))
        level = ymax + span * step * (i + 1)
        ax.plot([x1, x1, x2, x2], [level - span * tip, level, level, level - span * tip],
                color="black", linewidth=style.line_width)
        text = row.p_label if label == "stars" else f"p = {row.p:.2g}"
        ax.text((x1 + x2) / 2.0, level, text, ha="center", va="bottom", fontsize=style.tick_size)
    top = ymax + span * step * (len(result) + 1)
    lo, hi = ax.get_ylim()
    if top > hi:
        ax.set_ylim(lo, top)


@register_layer("significance")
def significance(data: pd.DataFrame, x: str, y: str, comparisons: Optional[Sequence[Tuple[Any, Any]]] = None,
                 method: str = "wilcoxon", label: str = "stars", order: Optional[Sequence[Any]] = None) -> Layer:
    """Brackets with significance labels above a boxplot / strip plot."""
    if method not in METHODS:
        raise ValueError(f"Unknown method {method!r}; expected one of {METHODS}")
    if comparisons is not None:
        comparisons = [tuple(c) for c in comparisons]
    return Layer("significance", _draw_significance,
                 dict(data=data, x=x, y=y, comparisons=comparisons, method=method, label=label, order=order))
