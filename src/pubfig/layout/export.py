"""Writing a composite canvas to disk.

Raster files come straight from the Agg buffer through Pillow so the pixel
size is exactly the target's; vector files go through matplotlib with the
timestamps stripped so repeated exports are byte-identical.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from PIL import Image

from ..core.config import FORMAT_ALIASES, ExportTarget
from ..errors import CompositionError
from ..styles import PlotStyle
from ..utils.files import ensure_parent, get_git_short_hash, human_readable_bytes
from .compositor import CompositeCanvas, compose
from .grid import GridSpecification

logger = logging.getLogger(__name__)

PIL_FORMATS = {"png": "PNG", "tiff": "TIFF", "jpeg": "JPEG"}
PIL_OPTIONS: Dict[str, Dict[str, Any]] = {
    "png": {"optimize": False},
    "tiff": {"compression": "tiff_lzw"},
    "jpeg": {"quality": 95, "subsampling": 0},
}
VECTOR_METADATA = {
    "pdf": {"Creator": "pubfig", "CreationDate": None, "ModDate": None},
    "svg": {"Creator": "pubfig", "Date": None},
}


def _resolve_format(path: Path, target: ExportTarget) -> str:
    suffix = path.suffix.lower().lstrip(".")
    suffix = FORMAT_ALIASES.get(suffix, suffix)
    if suffix and suffix != target.format:
        logger.warning("File suffix .%s differs from target format %s; writing %s",
                       suffix, target.format, target.format)
    return target.format


def export(canvas: CompositeCanvas, path: Union[str, Path], metadata: Optional[dict] = None) -> Path:
    """Write ``canvas`` in its target's format and return the path."""
    path = ensure_parent(path)
    target = canvas.target
    fmt = _resolve_format(path, target)
    if target.is_raster:
        pixels = canvas.to_array()
        expected = (int(canvas.height_px), int(canvas.width_px))
        if pixels.shape[:2] != expected:
            raise CompositionError(f"Rendered {pixels.shape[1]}x{pixels.shape[0]}px, expected "
                                   f"{expected[1]}x{expected[0]}px")
        img = Image.fromarray(pixels).convert("RGB")
        img.save(path, format=PIL_FORMATS[fmt], dpi=(target.dpi, target.dpi), **PIL_OPTIONS[fmt])
    else:
        meta = dict(VECTOR_METADATA[fmt])
        if metadata and metadata.get("title"):
            meta["Title"] = str(metadata["title"])
        with canvas.style.context():
            canvas.figure.savefig(path, format=fmt, dpi=target.dpi, metadata=meta, facecolor="white")
    logger.info("Wrote %s (%s, %s)", path, fmt, human_readable_bytes(path.stat().st_size))
    return path


def placement_records(canvas: CompositeCanvas) -> list:
    records = []
    for p in canvas.placements:
        records.append({
            "group": p.group,
            "index": p.index,
            "label": p.label,
            "cell_px": list(p.cell),
            "plot_area_px": list(p.plot_area),
            "label_xy_px": list(p.label_xy) if p.label_xy else None,
        })
    return records


def save_figure_and_metadata(canvas: CompositeCanvas, out_file: Union[str, Path], metadata: Optional[dict] = None) -> Path:
    """Export a composite and a JSON metadata sidecar next to it.
    """
    out_file = export(canvas, out_file, metadata=metadata)
    target = canvas.target
    sidecar = {
        "target": target.model_dump(),
        "size_px": [int(round(canvas.width_px)), int(round(canvas.height_px))] if target.is_raster else None,
        "panels": placement_records(canvas),
        "git": get_git_short_hash(),
    }
    sidecar.update(metadata or {})
    meta_file = out_file.with_suffix(out_file.suffix + '.metadata.json')
    with open(meta_file, 'w', encoding='utf-8') as fh:
        json.dump(sidecar, fh, indent=2, default=str)
    return out_file


def compose_to_file(grid: GridSpecification, target: ExportTarget, path: Union[str, Path],
                    style: Optional[PlotStyle] = None, metadata: Optional[dict] = None,
                    sidecar: bool = False) -> Path:
    """Compose, write and release the figure in one call."""
    canvas = compose(grid, target, style=style)
    try:
        if sidecar:
            return save_figure_and_metadata(canvas, path, metadata=metadata)
        return export(canvas, path, metadata=metadata)
    finally:
        canvas.close()
