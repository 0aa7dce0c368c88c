from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..errors import LayoutMismatchError
from ..panels.panel import Panel

ALIGN_FLAGS = (None, "h", "v", "hv")


def _check_align(align: Optional[str], where: str) -> None:
    if align not in ALIGN_FLAGS:
        raise LayoutMismatchError(f"{where}: align must be one of {ALIGN_FLAGS}, got {align!r}")


@dataclass(frozen=True)
class PanelGroup:
    """
    A run of panels laid out along one direction.

    With ``nrow`` set the panels stack top-to-bottom and ``weights`` are
    relative heights; otherwise they run left-to-right and ``weights`` are
    relative widths. ``None`` entries are empty cells.

    ``align``: "h" shares plot-area top/bottom edges across the group,
    "v" shares left/right edges, "hv" both.
    """

    panels: Tuple[Optional[Panel], ...]
    weights: Optional[Tuple[float, ...]] = None
    ncol: Optional[int] = None
    nrow: Optional[int] = None
    align: Optional[str] = None
    height: float = 1.0

    def __post_init__(self):
        object.__setattr__(self, "panels", tuple(self.panels))
        if self.weights is not None:
            object.__setattr__(self, "weights", tuple(float(w) for w in self.weights))

    @property
    def vertical(self) -> bool:
        return self.nrow is not None

    @property
    def resolved_weights(self) -> Tuple[float, ...]:
        return self.weights if self.weights is not None else (1.0,) * len(self.panels)

    def validate(self, index: int = 0) -> None:
        where = f"group {index}"
        n = len(self.panels)
        if n == 0:
            raise LayoutMismatchError(f"{where}: no panels")
        for p in self.panels:
            if p is not None and not isinstance(p, Panel):
                raise LayoutMismatchError(f"{where}: expected Panel or None, got {type(p).__name__}")
        if self.ncol is not None and self.nrow is not None:
            raise LayoutMismatchError(f"{where}: give ncol or nrow, not both")
        count = self.nrow if self.vertical else self.ncol
        if count is not None and count != n:
            axis = "nrow" if self.vertical else "ncol"
            raise LayoutMismatchError(f"{where}: {axis}={count} but {n} panel(s)")
        weights = self.resolved_weights
        if len(weights) != n:
            raise LayoutMismatchError(f"{where}: {len(weights)} weight(s) for {n} panel(s)")
        if any(not w > 0 for w in weights):
            raise LayoutMismatchError(f"{where}: weights must be positive, got {list(weights)}")
        if not self.height > 0:
            raise LayoutMismatchError(f"{where}: height must be positive, got {self.height}")
        _check_align(self.align, where)


def group(panels: Sequence[Optional[Panel]], weights: Optional[Sequence[float]] = None, ncol: Optional[int] = None,
          nrow: Optional[int] = None, align: Optional[str] = None, height: float = 1.0) -> PanelGroup:
    return PanelGroup(tuple(panels), None if weights is None else tuple(weights), ncol, nrow, align, height)


@dataclass(frozen=True)
class GridSpecification:
    """Groups stacked top-to-bottom; ``padding`` is whitespace (inches) around each cell."""

    groups: Tuple[PanelGroup, ...]
    align: Optional[str] = None
    padding: float = 0.02

    def __post_init__(self):
        object.__setattr__(self, "groups", tuple(self.groups))

    def validate(self) -> None:
        if not self.groups:
            raise LayoutMismatchError("grid has no groups")
        for i, g in enumerate(self.groups):
            if not isinstance(g, PanelGroup):
                raise LayoutMismatchError(f"group {i}: expected PanelGroup, got {type(g).__name__}")
            g.validate(i)
        _check_align(self.align, "grid")
        if self.padding < 0:
            raise LayoutMismatchError(f"grid padding must be >= 0, got {self.padding}")

    def iter_panels(self) -> List[Tuple[int, int, Optional[Panel]]]:
        return [(gi, pi, p) for gi, g in enumerate(self.groups) for pi, p in enumerate(g.panels)]
