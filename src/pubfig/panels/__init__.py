"""Panel values and the layers they are built from."""
from .panel import Layer, Panel, custom
from .geoms import boxplot, despine, labels, legend, limits, regression_line, scatter, strip
from .images import image, image_panel, load_image

__all__ = [
    "Layer",
    "Panel",
    "custom",
    "scatter",
    "boxplot",
    "strip",
    "regression_line",
    "labels",
    "limits",
    "legend",
    "despine",
    "image",
    "image_panel",
    "load_image",
]
