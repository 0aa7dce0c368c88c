"""Grid specification, composition and export."""
from .grid import GridSpecification, PanelGroup, group
from .compositor import Box, CompositeCanvas, Margins, PanelPlacement, compose
from .export import compose_to_file, export, save_figure_and_metadata

__all__ = [
    "GridSpecification",
    "PanelGroup",
    "group",
    "Box",
    "Margins",
    "PanelPlacement",
    "CompositeCanvas",
    "compose",
    "export",
    "compose_to_file",
    "save_figure_and_metadata",
]
