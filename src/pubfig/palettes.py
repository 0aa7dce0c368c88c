"""Colour palettes suitable for print and colour-vision deficiency.

Qualitative palettes are cycled when more colours are requested than they
hold; sequential ones are sampled evenly from their matplotlib colormap.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Sequence

import numpy as np
import seaborn as sns
from matplotlib import colormaps
from matplotlib.colors import to_hex, to_rgb

logger = logging.getLogger(__name__)

QUALITATIVE: Dict[str, List[str]] = {
    "okabe_ito": [
        "#E69F00", "#56B4E9", "#009E73", "#F0E442",
        "#0072B2", "#D55E00", "#CC79A7", "#000000",
    ],
    "tol_bright": [
        "#4477AA", "#EE6677", "#228833", "#CCBB44",
        "#66CCEE", "#AA3377", "#BBBBBB",
    ],
    "colorblind": [to_hex(c) for c in sns.color_palette("colorblind")],
    # the tutorial's cautionary example: red/green pairs that collapse for deuteranopes
    "rainbow": ["#FF0000", "#00FF00", "#0000FF", "#FFFF00", "#FF00FF", "#00FFFF"],
}

SEQUENTIAL = ("viridis", "cividis", "magma", "Greys")

COLORBLIND_SAFE = {"okabe_ito", "tol_bright", "colorblind", "viridis", "cividis", "magma", "Greys", "grey"}


def list_palettes() -> List[str]:
    return sorted(set(QUALITATIVE) | set(SEQUENTIAL) | {"grey"})


def get_palette(name: str, n: int) -> List[str]:
    """Return ``n`` hex colours from the palette called ``name``."""
    if n < 1:
        raise ValueError("n must be >= 1")
    if name in QUALITATIVE:
        colors = QUALITATIVE[name]
        if n > len(colors):
            logger.debug("Palette %s has %d colours; cycling for n=%d", name, len(colors), n)
        return [colors[i % len(colors)] for i in range(n)]
    if name == "grey":
        name = "Greys"
    if name in SEQUENTIAL:
        cmap = colormaps[name]
        # stay off the extremes so the lightest colour is still visible on white
        stops = np.linspace(0.15, 0.9, n) if n > 1 else [0.5]
        return [to_hex(cmap(float(s))) for s in stops]
    raise KeyError(f"Unknown palette {name!r}; available: {list_palettes()}")


def is_colorblind_safe(name: str) -> bool:
    return name in COLORBLIND_SAFE


def palette_lightness(colors: Sequence[str]) -> List[float]:
    """CIE L* (0-100) for each colour, i.e. how it prints in greyscale."""
    out = []
    for c in colors:
        rgb = np.asarray(to_rgb(c))
        lin = np.where(rgb <= 0.04045, rgb / 12.92, ((rgb + 0.055) / 1.055) ** 2.4)
        y = float(np.dot([0.2126, 0.7152, 0.0722], lin))
        lstar = 116.0 * y ** (1.0 / 3.0) - 16.0 if y > 216.0 / 24389.0 else y * 24389.0 / 27.0
        out.append(lstar)
    return out


def check_palette(colors: Sequence[str], min_delta: float = 10.0) -> List[str]:
    """Return warnings for colours that are hard to tell apart in greyscale.

    Each pair of colours whose lightness differs by less than ``min_delta``
    produces one message; they are also logged.
    """
    problems = []
    lightness = palette_lightness(colors)
    for i in range(len(colors)):
        for j in range(i + 1, len(colors)):
            if abs(lightness[i] - lightness[j]) < min_delta:
                msg = (f"{colors[i]} and {colors[j]} differ by {abs(lightness[i] - lightness[j]):.1f} L*; "
                       "indistinguishable in greyscale")
                problems.append(msg)
    for msg in problems:
        logger.warning(msg)
    return problems
