"""
Arrange independently described panels into one figure of an exact size.

Every panel gets its own Axes on a fresh Figure (pyplot is never involved).
Decorations (tick labels, axis titles, panel labels) are measured with the
Agg renderer and the plot areas are inset by them, so aligned panels share
plot-area edges instead of image edges.

Coordinates in :class:`PanelPlacement` are pixels at the target resolution,
origin top-left, y growing downwards.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple, Optional, Tuple

import numpy as np
from matplotlib.axes import Axes
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from matplotlib.font_manager import FontProperties

from ..core.config import ExportTarget
from ..errors import InfeasibleLayoutError
from ..panels.panel import Panel
from ..styles import PlotStyle
from ..units import POINTS_PER_INCH, split_extent
from .grid import GridSpecification

logger = logging.getLogger(__name__)

LINE_SPACING = 1.2
MEASURE_PASSES = 2


class Box(NamedTuple):
    x: float
    y: float
    width: float
    height: float

    @property
    def left(self) -> float:
        return self.x

    @property
    def top(self) -> float:
        return self.y

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def inset(self, left: float, top: float, right: float, bottom: float) -> "Box":
        return Box(self.x + left, self.y + top, self.width - left - right, self.height - top - bottom)


class Margins(NamedTuple):
    left: float = 0.0
    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0


@dataclass
class PanelPlacement:
    group: int
    index: int
    label: Optional[str]
    cell: Box
    plot_area: Box
    margins: Margins
    label_xy: Optional[Tuple[float, float]] = None
    axes: Optional[Axes] = field(default=None, repr=False)


@dataclass
class CompositeCanvas:
    """The composed figure plus where every panel ended up."""

    figure: Figure
    target: ExportTarget
    style: PlotStyle
    width_px: float
    height_px: float
    placements: List[PanelPlacement]

    @property
    def size_inches(self) -> Tuple[float, float]:
        w, h = self.figure.get_size_inches()
        return float(w), float(h)

    def to_array(self) -> np.ndarray:
        """Render with Agg and return an (height, width, 4) uint8 array."""
        canvas = self.figure.canvas
        with self.style.context():
            canvas.draw()
        return np.array(canvas.buffer_rgba(), copy=True)

    def save(self, path, metadata: Optional[dict] = None):
        from .export import export
        return export(self, path, metadata=metadata)

    def close(self) -> None:
        self.figure.clear()


def _exact_inches(px: int, dpi: float) -> float:
    # Agg truncates figure.bbox size to int; make sure px/dpi*dpi does not land just under px
    inches = px / dpi
    while int(inches * dpi) < px:
        inches = float(np.nextafter(inches, np.inf))
    return inches


def _cells(grid: GridSpecification, width: float, height: float, snap: bool) -> Dict[Tuple[int, int], Box]:
    cells: Dict[Tuple[int, int], Box] = {}
    row_heights = split_extent(height, [g.height for g in grid.groups], snap=snap)
    y = 0.0
    for gi, (g, gh) in enumerate(zip(grid.groups, row_heights)):
        span = gh if g.vertical else width
        extents = split_extent(span, g.resolved_weights, snap=snap)
        offset = 0.0
        for pi, ext in enumerate(extents):
            if g.vertical:
                cells[(gi, pi)] = Box(0.0, y + offset, width, ext)
            else:
                cells[(gi, pi)] = Box(offset, y, ext, gh)
            offset += ext
        logger.debug("Group %d: %s extents %s (of %.1f)", gi, "height" if g.vertical else "width", extents, span)
        y += gh
    return cells


def _label_metrics(panel: Panel, style: PlotStyle, renderer, dpi: float) -> Tuple[float, float]:
    """(line height, ascent) of the panel label in pixels."""
    font = style.label_font(panel.label_size)
    size = font["fontsize"]
    prop = FontProperties(size=size, weight=font["fontweight"])
    _, h, descent = renderer.get_text_width_height_descent(panel.label, prop, ismath=False)
    line = size * LINE_SPACING * dpi / POINTS_PER_INCH
    return line, h - descent


def _measure(ax: Axes, renderer) -> Margins:
    win = ax.get_window_extent(renderer)
    tight = ax.get_tightbbox(renderer)
    if tight is None:
        return Margins()
    # display coordinates are y-up
    return Margins(
        left=max(0.0, win.x0 - tight.x0),
        top=max(0.0, tight.y1 - win.y1),
        right=max(0.0, tight.x1 - win.x1),
        bottom=max(0.0, win.y0 - tight.y0),
    )


def _equalise(margins: Dict[Tuple[int, int], Margins], keys: List[Tuple[int, int]], align: Optional[str]) -> None:
    if not align or len(keys) < 2:
        return
    ms = [margins[k] for k in keys]
    top, bottom = max(m.top for m in ms), max(m.bottom for m in ms)
    left, right = max(m.left for m in ms), max(m.right for m in ms)
    for k in keys:
        m = margins[k]
        if "h" in align:
            m = m._replace(top=top, bottom=bottom)
        if "v" in align:
            m = m._replace(left=left, right=right)
        margins[k] = m


def _fit_aspect(area: Box, aspect: float) -> Box:
    if area.width / area.height > aspect:
        w = area.height * aspect
        return Box(area.x + (area.width - w) / 2.0, area.y, w, area.height)
    h = area.width / aspect
    return Box(area.x, area.y + (area.height - h) / 2.0, area.width, h)


def compose(grid: GridSpecification, target: ExportTarget, style: Optional[PlotStyle] = None) -> CompositeCanvas:
    """
    Lay out ``grid`` on a canvas of exactly ``target``'s physical size.

    Raises LayoutMismatchError for a malformed grid, InfeasibleLayoutError
    when a plot area would have no room, and RenderDependencyError when a
    panel fails to draw.
    """
    grid.validate()
    style = style or PlotStyle(dpi=target.dpi)
    dpi = float(target.dpi)
    w_in, h_in = target.size_inches
    snap = target.is_raster
    if snap:
        width, height = target.size_pixels
        figsize = (_exact_inches(width, dpi), _exact_inches(height, dpi))
    else:
        width, height = w_in * dpi, h_in * dpi
        figsize = (w_in, h_in)
    pad = grid.padding * dpi

    with style.context():
        fig = Figure(figsize=figsize, dpi=dpi, facecolor="white")
        canvas = FigureCanvasAgg(fig)
        cells = _cells(grid, float(width), float(height), snap)
        fig_w, fig_h = fig.bbox.width, fig.bbox.height

        def place(ax: Axes, box: Box) -> None:
            ax.set_position([box.x / fig_w, 1.0 - box.bottom / fig_h, box.width / fig_w, box.height / fig_h])

        axes: Dict[Tuple[int, int], Axes] = {}
        for gi, pi, panel in grid.iter_panels():
            if panel is None:
                continue
            inner = cells[(gi, pi)].inset(pad, pad, pad, pad)
            if inner.width <= 0 or inner.height <= 0:
                raise InfeasibleLayoutError(
                    f"group {gi} panel {pi}: cell {cells[(gi, pi)]} leaves no room after {pad:.1f}px padding")
            ax = fig.add_axes([0, 0, 1, 1], label=f"group{gi}-panel{pi}")
            place(ax, inner)
            panel.draw(ax, style)
            axes[(gi, pi)] = ax

        areas: Dict[Tuple[int, int], Box] = {}
        margins: Dict[Tuple[int, int], Margins] = {}
        for _ in range(MEASURE_PASSES):
            renderer = canvas.get_renderer()
            for key, ax in axes.items():
                m = _measure(ax, renderer)
                panel = grid.groups[key[0]].panels[key[1]]
                if panel.label:
                    line, ascent = _label_metrics(panel, style, renderer, dpi)
                    reserve = panel.vjust * line + ascent
                    inner = cells[key].inset(pad, pad, pad, pad)
                    # only reserve what fits; larger nudges may leave the cell
                    if 0 < reserve <= inner.height / 2.0:
                        m = m._replace(top=max(m.top, reserve))
                margins[key] = m
            for gi, g in enumerate(grid.groups):
                _equalise(margins, [k for k in axes if k[0] == gi], g.align)
            _equalise(margins, list(axes), grid.align)

            for key, ax in axes.items():
                gi, pi = key
                panel = grid.groups[gi].panels[pi]
                inner = cells[key].inset(pad, pad, pad, pad)
                area = inner.inset(*margins[key])
                if area.width <= 0 or area.height <= 0:
                    raise InfeasibleLayoutError(
                        f"group {gi} panel {pi} ({panel.title}): decorations {margins[key]} exceed "
                        f"cell {inner.width:.1f}x{inner.height:.1f}px")
                if panel.aspect is not None:
                    area = _fit_aspect(area, panel.aspect)
                    if area.width < 1.0 or area.height < 1.0:
                        raise InfeasibleLayoutError(
                            f"group {gi} panel {pi} ({panel.title}): aspect {panel.aspect:.3g} fits to "
                            f"{area.width:.2f}x{area.height:.2f}px")
                place(ax, area)
                areas[key] = area

        placements: List[PanelPlacement] = []
        for gi, pi, panel in grid.iter_panels():
            key = (gi, pi)
            if panel is None:
                placements.append(PanelPlacement(gi, pi, None, cells[key], cells[key], Margins()))
                continue
            area = areas[key]
            label_xy = None
            if panel.label:
                line, _ = _label_metrics(panel, style, renderer, dpi)
                lx = area.left - panel.hjust * line
                ly = area.top - panel.vjust * line
                fig.text(lx / fig_w, 1.0 - ly / fig_h, panel.label, ha="left", va="baseline",
                         **style.label_font(panel.label_size))
                label_xy = (lx, ly)
            placements.append(PanelPlacement(gi, pi, panel.label, cells[key], area, margins[key], label_xy, axes[key]))
            logger.debug("Placed group %d panel %d at %s (margins %s)", gi, pi, area, margins[key])

    return CompositeCanvas(fig, target, style, float(width), float(height), placements)
