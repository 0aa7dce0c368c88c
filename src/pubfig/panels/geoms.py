"""Layer factories for the common statistical plots.

Each factory returns a :class:`Layer`; nothing is drawn until the panel is
composed. Seaborn handles categorical plots, matplotlib the rest.
"""
from __future__ import annotations

from typing import Any, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
import seaborn as sns
from matplotlib.axes import Axes
from scipy import stats

from ..core.registry import register_layer
from ..palettes import get_palette
from ..styles import PlotStyle
from .panel import Layer


def _levels(data: pd.DataFrame, column: str, order: Optional[Sequence[Any]] = None) -> list:
    if order is not None:
        return list(order)
    return list(pd.unique(data[column].dropna()))


def _colors(style: PlotStyle, palette: Optional[str], n: int) -> list:
    return get_palette(palette or style.palette, n)


def _draw_scatter(ax: Axes, style: PlotStyle, data, x, y, hue=None, palette=None, alpha=0.8, size=None):
    s = (size or style.marker_size) ** 2
    if hue is None:
        ax.scatter(data[x], data[y], s=s, alpha=alpha, color=_colors(style, palette, 1)[0],
                   linewidths=0)
    else:
        levels = _levels(data, hue)
        for level, color in zip(levels, _colors(style, palette, len(levels))):
            sub = data[data[hue] == level]
            ax.scatter(sub[x], sub[y], s=s, alpha=alpha, color=color, label=str(level), linewidths=0)
    ax.set_xlabel(x)
    ax.set_ylabel(y)


@register_layer("scatter")
def scatter(data: pd.DataFrame, x: str, y: str, hue: Optional[str] = None, palette: Optional[str] = None,
            alpha: float = 0.8, size: Optional[float] = None) -> Layer:
    """Point geometry; ``hue`` colours points by a categorical column."""
    return Layer("scatter", _draw_scatter,
                 dict(data=data, x=x, y=y, hue=hue, palette=palette, alpha=alpha, size=size))


def _draw_boxplot(ax: Axes, style: PlotStyle, data, x, y, order=None, palette=None, show_points=True,
                  width=0.6):
    levels = _levels(data, x, order)
    colors = _colors(style, palette, len(levels))
    sns.boxplot(data=data, x=x, y=y, order=levels, hue=x, hue_order=levels, palette=colors, legend=False,
                width=width, linewidth=style.line_width, showfliers=not show_points, ax=ax)
    if show_points:
        sns.stripplot(data=data, x=x, y=y, order=levels, color="black", size=style.marker_size * 0.8,
                      jitter=0.15, alpha=0.6, ax=ax)


@register_layer("boxplot")
def boxplot(data: pd.DataFrame, x: str, y: str, order: Optional[Sequence[Any]] = None,
            palette: Optional[str] = None, show_points: bool = True, width: float = 0.6) -> Layer:
    """Box-and-whisker per category of ``x``; raw points are overlaid by default."""
    return Layer("boxplot", _draw_boxplot,
                 dict(data=data, x=x, y=y, order=order, palette=palette, show_points=show_points, width=width))


def _draw_strip(ax: Axes, style: PlotStyle, data, x, y, order=None, palette=None, jitter=0.2):
    levels = _levels(data, x, order)
    sns.stripplot(data=data, x=x, y=y, order=levels, hue=x, hue_order=levels,
                  palette=_colors(style, palette, len(levels)), legend=False, jitter=jitter,
                  size=style.marker_size, ax=ax)


@register_layer("strip")
def strip(data: pd.DataFrame, x: str, y: str, order: Optional[Sequence[Any]] = None,
          palette: Optional[str] = None, jitter: float = 0.2) -> Layer:
    return Layer("strip", _draw_strip, dict(data=data, x=x, y=y, order=order, palette=palette, jitter=jitter))


def _draw_regression(ax: Axes, style: PlotStyle, data, x, y, color="black", annotate=False):
    sub = data[[x, y]].dropna()
    fit = stats.linregress(sub[x], sub[y])
    xs = np.linspace(sub[x].min(), sub[x].max(), 50)
    ax.plot(xs, fit.intercept + fit.slope * xs, color=color, linewidth=style.line_width * 1.5)
    if annotate:
        ax.text(0.03, 0.97, f"R = {fit.rvalue:.2f}, p = {fit.pvalue:.2g}", transform=ax.transAxes,
                ha="left", va="top", fontsize=style.tick_size)


@register_layer("regression_line")
def regression_line(data: pd.DataFrame, x: str, y: str, color: str = "black", annotate: bool = False) -> Layer:
    """Least-squares line; ``annotate`` prints Pearson R and its p-value."""
    return Layer("regression_line", _draw_regression, dict(data=data, x=x, y=y, color=color, annotate=annotate))


def _draw_labels(ax: Axes, style: PlotStyle, title=None, x=None, y=None):
    if title is not None:
        ax.set_title(title)
    if x is not None:
        ax.set_xlabel(x)
    if y is not None:
        ax.set_ylabel(y)


@register_layer("labels")
def labels(title: Optional[str] = None, x: Optional[str] = None, y: Optional[str] = None) -> Layer:
    return Layer("labels", _draw_labels, dict(title=title, x=x, y=y))


def _draw_limits(ax: Axes, style: PlotStyle, x=None, y=None):
    if x is not None:
        ax.set_xlim(*x)
    if y is not None:
        ax.set_ylim(*y)


@register_layer("limits")
def limits(x: Optional[Tuple[float, float]] = None, y: Optional[Tuple[float, float]] = None) -> Layer:
    return Layer("limits", _draw_limits, dict(x=x, y=y))


def _draw_legend(ax: Axes, style: PlotStyle, loc="best", title=None, frameon=False, show=True):
    if not show:
        legend = ax.get_legend()
        if legend is not None:
            legend.remove()
        return
    ax.legend(loc=loc, title=title, frameon=frameon)


@register_layer("legend")
def legend(loc: str = "best", title: Optional[str] = None, frameon: bool = False, show: bool = True) -> Layer:
    return Layer("legend", _draw_legend, dict(loc=loc, title=title, frameon=frameon, show=show))


def _draw_despine(ax: Axes, style: PlotStyle, top=True, right=True):
    ax.spines["top"].set_visible(not top)
    ax.spines["right"].set_visible(not right)


@register_layer("despine")
def despine(top: bool = True, right: bool = True) -> Layer:
    return Layer("despine", _draw_despine, dict(top=top, right=right))
