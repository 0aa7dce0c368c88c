from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Optional, Tuple

from matplotlib.axes import Axes

from ..errors import RenderDependencyError
from ..styles import PlotStyle

logger = logging.getLogger(__name__)

DEFAULT_HJUST = 0.0
DEFAULT_VJUST = 0.4


@dataclass(frozen=True)
class Layer:
    """One render instruction: ``func(ax, style, **kwargs)``."""

    kind: str
    func: Callable[..., Any]
    kwargs: Dict[str, Any] = field(default_factory=dict)

    def __call__(self, ax: Axes, style: PlotStyle) -> None:
        self.func(ax, style, **self.kwargs)


@dataclass(frozen=True)
class Panel:
    """
    An immutable description of one figure panel.

    Layers are drawn in order onto a single Axes when the panel is composed.
    ``label`` is the panel tag ("A", "B", ...) and ``hjust`` / ``vjust`` nudge
    it from the top-left corner of the plot area, in text lines: positive
    ``vjust`` moves it up, negative ``hjust`` moves it right.

    ``aspect`` (width / height) locks the plot area's shape, as for images.
    """

    layers: Tuple[Layer, ...] = ()
    label: Optional[str] = None
    hjust: float = DEFAULT_HJUST
    vjust: float = DEFAULT_VJUST
    label_size: Optional[float] = None
    aspect: Optional[float] = None
    axis_off: bool = False
    name: Optional[str] = None

    def add(self, *layers: Layer) -> "Panel":
        for layer in layers:
            if not isinstance(layer, Layer):
                raise TypeError(f"Expected a Layer, got {type(layer).__name__}")
        return replace(self, layers=self.layers + tuple(layers))

    def __add__(self, layer: Layer) -> "Panel":
        return self.add(layer)

    def with_label(self, label: Optional[str], hjust: Optional[float] = None, vjust: Optional[float] = None,
                   size: Optional[float] = None) -> "Panel":
        return replace(
            self,
            label=label,
            hjust=self.hjust if hjust is None else float(hjust),
            vjust=self.vjust if vjust is None else float(vjust),
            label_size=self.label_size if size is None else float(size),
        )

    @property
    def title(self) -> str:
        return self.name or self.label or f"panel with {len(self.layers)} layer(s)"

    def draw(self, ax: Axes, style: PlotStyle) -> None:
        """Run every layer against ``ax``; upstream failures become RenderDependencyError."""
        for layer in self.layers:
            try:
                layer(ax, style)
            except RenderDependencyError:
                raise
            except Exception as e:
                raise RenderDependencyError(
                    f"Layer {layer.kind!r} of {self.title} failed to render: {e}"
                ) from e
        if self.axis_off:
            ax.set_axis_off()
        logger.debug("Drew %s (%d layers)", self.title, len(self.layers))


def custom(func: Callable[..., Any], **kwargs: Any) -> Layer:
    """Wrap an arbitrary ``func(ax, **kwargs)`` drawing routine as a layer."""
    def _draw(ax: Axes, style: PlotStyle, **kw: Any) -> None:
        func(ax, **kw)
    return Layer(getattr(func, "__name__", "custom"), _draw, dict(kwargs))
