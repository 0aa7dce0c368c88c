from __future__ import annotations

from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

from ..palettes import list_palettes
from ..units import to_inches, to_pixels

VECTOR_FORMATS = ("pdf", "svg")
RASTER_FORMATS = ("png", "tiff", "jpeg")
FORMAT_ALIASES = {"tif": "tiff", "jpg": "jpeg"}


class ExportTarget(BaseModel):
    """Physical size, resolution and file format of the composite."""

    width: float = Field(gt=0)
    height: float = Field(gt=0)
    units: Literal["mm", "cm", "in", "pt"] = "mm"
    dpi: Optional[int] = Field(default=None, gt=0)
    format: str = "pdf"

    @model_validator(mode="after")
    def _normalise(self) -> "ExportTarget":
        fmt = FORMAT_ALIASES.get(self.format.lower(), self.format.lower())
        if fmt not in VECTOR_FORMATS + RASTER_FORMATS:
            raise ValueError(f"Unsupported format {self.format!r}; expected one of {VECTOR_FORMATS + RASTER_FORMATS}")
        self.format = fmt
        if self.dpi is None:
            self.dpi = 300
        return self

    @property
    def is_raster(self) -> bool:
        return self.format in RASTER_FORMATS

    @property
    def size_inches(self) -> Tuple[float, float]:
        return to_inches(self.width, self.units), to_inches(self.height, self.units)

    @property
    def size_pixels(self) -> Tuple[int, int]:
        """Pixel size for raster output (nominal for vector formats)."""
        w, h = self.size_inches
        return to_pixels(w, self.dpi), to_pixels(h, self.dpi)


class StyleConfig(BaseModel):
    theme: str = "ticks"
    font_family: str = "sans-serif"
    font_size: float = Field(default=8.0, gt=0)
    title_size: float = Field(default=9.0, gt=0)
    label_size: float = Field(default=8.0, gt=0)
    tick_size: float = Field(default=7.0, gt=0)
    legend_size: float = Field(default=7.0, gt=0)
    line_width: float = Field(default=0.8, gt=0)
    marker_size: float = Field(default=3.0, gt=0)
    palette: str = "okabe_ito"
    panel_label_size: float = Field(default=10.0, gt=0)
    panel_label_weight: str = "bold"

    @field_validator("palette")
    @classmethod
    def _known_palette(cls, v: str) -> str:
        if v not in list_palettes():
            raise ValueError(f"Unknown palette {v!r}; available: {list_palettes()}")
        return v


class LayerConfig(BaseModel, extra="allow"):
    kind: str


class PanelConfig(BaseModel):
    label: Optional[str] = None
    hjust: Optional[float] = None
    vjust: Optional[float] = None
    image: Optional[str] = None
    keep_aspect: bool = True
    layers: List[LayerConfig] = Field(default_factory=list)


class GroupConfig(BaseModel):
    # a null entry is an empty cell
    panels: List[Optional[PanelConfig]]
    weights: Optional[List[float]] = None
    ncol: Optional[int] = None
    nrow: Optional[int] = None
    align: Optional[str] = None
    height: float = 1.0


class FigureConfig(BaseModel):
    target: ExportTarget
    style: StyleConfig = Field(default_factory=StyleConfig)
    align: Optional[str] = None
    padding_mm: float = Field(default=0.5, ge=0)
    groups: List[GroupConfig]
    output: Optional[str] = None
