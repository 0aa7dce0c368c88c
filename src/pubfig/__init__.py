"""pubfig: publication-ready multi-panel figures on top of matplotlib/seaborn."""

from .errors import CompositionError, LayoutMismatchError, InfeasibleLayoutError, RenderDependencyError
from .core.config import ExportTarget
from .styles import PlotStyle
from .panels import Panel, Layer, custom, scatter, boxplot, strip, regression_line, labels, limits, legend, despine
from .panels import image_panel
from .stats import compare_groups, p_to_label, significance
from .palettes import get_palette, check_palette, is_colorblind_safe
from .layout import GridSpecification, PanelGroup, group, CompositeCanvas, compose, export, compose_to_file
from .utils.config import load_figure

__all__ = [
    "CompositionError",
    "LayoutMismatchError",
    "InfeasibleLayoutError",
    "RenderDependencyError",
    "ExportTarget",
    "PlotStyle",
    "Panel",
    "Layer",
    "custom",
    "scatter",
    "boxplot",
    "strip",
    "regression_line",
    "labels",
    "limits",
    "legend",
    "despine",
    "image_panel",
    "compare_groups",
    "p_to_label",
    "significance",
    "get_palette",
    "check_palette",
    "is_colorblind_safe",
    "GridSpecification",
    "PanelGroup",
    "group",
    "CompositeCanvas",
    "compose",
    "export",
    "compose_to_file",
    "load_figure",
]
