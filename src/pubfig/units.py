"""Physical length helpers and the pixel rounding policy.

All layout arithmetic is done in inches; raster output snaps cell boundaries
to whole pixels. Boundaries are rounded from their cumulative position (not
per-extent) so the extents always add up to the canvas and every boundary is
within half a pixel of the exact split. Exact halves round up.
"""
from __future__ import annotations

import math
from typing import List, Sequence

MM_PER_INCH = 25.4
POINTS_PER_INCH = 72.0

_PER_INCH = {
    "in": 1.0,
    "mm": MM_PER_INCH,
    "cm": MM_PER_INCH / 10.0,
    "pt": POINTS_PER_INCH,
}


def _factor(units: str) -> float:
    try:
        return _PER_INCH[units]
    except KeyError:
        raise ValueError(f"Unknown length unit {units!r}; expected one of {sorted(_PER_INCH)}") from None


def to_inches(value: float, units: str = "mm") -> float:
    return float(value) / _factor(units)


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def to_pixels(inches: float, dpi: float) -> int:
    """Whole pixel count for a physical length at ``dpi``."""
    return round_half_up(inches * dpi)


def split_extent(total: float, weights: Sequence[float], snap: bool = False) -> List[float]:
    """Split ``total`` into consecutive extents proportional to ``weights``.

    With ``snap`` the boundaries are whole numbers (``total`` must be one too).
    """
    wsum = float(sum(weights))
    edges = [0.0]
    acc = 0.0
    for w in weights:
        acc += float(w)
        edge = total * acc / wsum
        edges.append(float(round_half_up(edge)) if snap else edge)
    # the last boundary is the canvas edge exactly, whatever the float error
    edges[-1] = float(total)
    return [b - a for a, b in zip(edges[:-1], edges[1:])]
