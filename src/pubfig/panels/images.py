"""Panels that embed an existing bitmap (micrographs, gels, schematics)."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

import numpy as np
from matplotlib.axes import Axes
from PIL import Image, UnidentifiedImageError

from ..core.registry import register_layer
from ..errors import RenderDependencyError
from ..styles import PlotStyle
from .panel import Layer, Panel

logger = logging.getLogger(__name__)

ImageSource = Union[str, Path, np.ndarray, Image.Image]


def load_image(source: ImageSource) -> np.ndarray:
    """Return an RGB(A) uint8 array for ``source``.

    Missing or unreadable files raise RenderDependencyError.
    """
    if isinstance(source, np.ndarray):
        arr = source
    elif isinstance(source, Image.Image):
        arr = np.asarray(source if source.mode in ("RGB", "RGBA", "L") else source.convert("RGBA"))
    else:
        path = Path(source)
        if not path.exists():
            raise RenderDependencyError(f"Image panel source not found: {path}")
        try:
            with Image.open(path) as img:
                img.load()
                if img.mode not in ("RGB", "RGBA", "L"):
                    img = img.convert("RGBA")
                arr = np.asarray(img)
        except (UnidentifiedImageError, OSError) as e:
            raise RenderDependencyError(f"Could not read image {path}: {e}") from e
        logger.debug("Loaded image %s with shape %s", path, arr.shape)
    if arr.ndim not in (2, 3) or arr.shape[0] == 0 or arr.shape[1] == 0:
        raise RenderDependencyError(f"Image array has unusable shape {arr.shape}")
    return arr


def _draw_image(ax: Axes, style: PlotStyle, pixels: np.ndarray, cmap: Optional[str] = None):
    if pixels.ndim == 2 and cmap is None:
        cmap = "gray"
    ax.imshow(pixels, cmap=cmap, aspect="auto", interpolation="nearest")


@register_layer("image")
def image(source: ImageSource, cmap: Optional[str] = None) -> Layer:
    return Layer("image", _draw_image, dict(pixels=load_image(source), cmap=cmap))


def image_panel(source: ImageSource, label: Optional[str] = None, keep_aspect: bool = True,
                cmap: Optional[str] = None, **label_kw) -> Panel:
    """Build a frameless panel showing ``source``.

    With ``keep_aspect`` the plot area keeps the image's width/height ratio
    and is centred in its cell.
    """
    layer = image(source, cmap=cmap)
    pixels = layer.kwargs["pixels"]
    aspect = pixels.shape[1] / pixels.shape[0] if keep_aspect else None
    panel = Panel(layers=(layer,), aspect=aspect, axis_off=True,
                  name=str(source) if isinstance(source, (str, Path)) else None)
    if label is not None:
        panel = panel.with_label(label, **label_kw)
    return panel
