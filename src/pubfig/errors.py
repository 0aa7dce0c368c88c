"""Exceptions raised while building a composite figure."""
from __future__ import annotations


class CompositionError(Exception):
    """Base class for every failure surfaced by the compositor."""


class LayoutMismatchError(CompositionError, ValueError):
    """The grid specification is malformed (e.g. weights vs. panel count)."""


class InfeasibleLayoutError(CompositionError, ValueError):
    """The requested sizes leave a panel with a non-positive extent."""


class RenderDependencyError(CompositionError, RuntimeError):
    """A panel could not be materialised by its upstream renderer."""
