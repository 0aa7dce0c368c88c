"""Loading YAML figure descriptions.

`load_config()` returns the raw dictionary (with `PUBFIG_*` environment
overrides applied); `load_figure()` validates it and turns it into the grid,
export target and style that :func:`pubfig.compose` takes.

Relative `data:` and `image:` paths are resolved against the directory of
the YAML file, so a figure description can travel with its inputs.
"""
from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple

import pandas as pd
import yaml
from pydantic import ValidationError

from ..core.config import ExportTarget, FigureConfig, GroupConfig, PanelConfig
from ..core.registry import get_layer
from ..errors import LayoutMismatchError
from ..layout.grid import GridSpecification, PanelGroup
from ..panels.images import image_panel
from ..panels.panel import Panel
from ..styles import PlotStyle
from ..units import to_inches

logger = logging.getLogger(__name__)

ENV_PREFIX = "PUBFIG_"


def load_config(path: str | Path, apply_env: bool = True, prefix: str = ENV_PREFIX) -> Dict[str, Any]:
    """Load YAML config from the provided file path and return a dict.

    Unlike a missing optional config, a figure description is required, so
    a missing file raises FileNotFoundError.
    """
    p = Path(path)
    with p.open("r", encoding="utf-8") as fh:
        cfg = yaml.safe_load(fh) or {}
    if not isinstance(cfg, dict):
        raise LayoutMismatchError(f"{p}: expected a mapping at the top level, got {type(cfg).__name__}")
    if apply_env:
        cfg = override_config_from_env(cfg, prefix=prefix)
    return cfg


def _parse_env_value(v: str):
    if v is None:
        return None
    if not isinstance(v, str):
        return v
    s = v.strip()
    if (s.startswith("[") and s.endswith("]")) or (s.startswith("{") and s.endswith("}")):
        try:
            return json.loads(s)
        except json.JSONDecodeError:
            pass
    low = s.lower()
    if low in {"true", "yes", "y"}:
        return True
    if low in {"false", "no", "n"}:
        return False
    try:
        if "." in s:
            return float(s)
        return int(s)
    except ValueError:
        pass
    return s


def override_config_from_env(cfg: dict, prefix: str = ENV_PREFIX, environ: Optional[Dict[str, str]] = None,
                             known_keys: Optional[Iterable[str]] = None) -> dict:
    """Apply ``PREFIX_SECTION_KEY=value`` variables onto ``cfg``.

    ``PUBFIG_TARGET_DPI=600`` sets ``cfg["target"]["dpi"] = 600``. The longest
    matching top-level key wins, so ``PUBFIG_PADDING_MM`` sets ``padding_mm``.
    Top-level keys are those already in ``cfg`` plus ``known_keys`` (the
    :class:`FigureConfig` fields by default), so optional sections missing
    from the YAML can still be overridden.
    """
    if not isinstance(cfg, dict):
        return cfg
    environ = os.environ if environ is None else environ
    if known_keys is None:
        known_keys = FigureConfig.model_fields
    names = [k for k in cfg.keys() if isinstance(k, str)] + [k for k in known_keys if k not in cfg]
    cfg_top_keys = {"".join(ch if ch.isalnum() else "_" for ch in k).upper(): k for k in names}
    pat = re.compile(rf"^{re.escape(prefix)}(?P<rest>.+)$")
    for k, v in sorted(environ.items()):
        m = pat.match(k)
        if not m:
            continue
        rest_upper = m.group("rest").upper()
        matched = None
        for top in sorted(cfg_top_keys.keys(), key=lambda x: -len(x)):
            if rest_upper == top or rest_upper.startswith(top + "_"):
                matched = top
                break
        if matched is None:
            parts = [p.lower() for p in rest_upper.split("_") if p]
            if not parts:
                continue
            top_key, nested = parts[0], parts[1:]
        else:
            top_key = cfg_top_keys[matched]
            tail = rest_upper[len(matched):].lstrip("_")
            nested = [tail.lower()] if tail else []
        logger.debug("Config override from %s", k)
        if not nested:
            cfg[top_key] = _parse_env_value(v)
            continue
        if top_key not in cfg or not isinstance(cfg[top_key], dict):
            cfg[top_key] = {}
        cfg[top_key][nested[0]] = _parse_env_value(v)
    return cfg


@dataclass
class FigureSpec:
    grid: GridSpecification
    target: ExportTarget
    style: PlotStyle
    output: Optional[Path] = None


class _DataCache:
    def __init__(self, base_dir: Path):
        self.base_dir = base_dir
        self._frames: Dict[Path, pd.DataFrame] = {}

    def resolve(self, value: str) -> Path:
        p = Path(value)
        return p if p.is_absolute() else self.base_dir / p

    def frame(self, value: str) -> pd.DataFrame:
        path = self.resolve(value)
        if path not in self._frames:
            self._frames[path] = pd.read_csv(path)
            logger.debug("Read %s (%d rows)", path, len(self._frames[path]))
        return self._frames[path]


def _build_panel(cfg: PanelConfig, cache: _DataCache) -> Panel:
    label_kw = {k: getattr(cfg, k) for k in ("hjust", "vjust") if getattr(cfg, k) is not None}
    if cfg.image is not None:
        panel = image_panel(cache.resolve(cfg.image), keep_aspect=cfg.keep_aspect)
    else:
        panel = Panel()
    for layer_cfg in cfg.layers:
        params = dict(layer_cfg.model_extra or {})
        if isinstance(params.get("data"), str):
            params["data"] = cache.frame(params["data"])
        if isinstance(params.get("source"), str):
            params["source"] = cache.resolve(params["source"])
        try:
            factory = get_layer(layer_cfg.kind)
        except KeyError as e:
            raise ValueError(e.args[0]) from e
        try:
            layer = factory(**params)
        except TypeError as e:
            raise ValueError(f"Layer {layer_cfg.kind!r}: {e}") from e
        panel = panel.add(layer)
    if cfg.label is not None or label_kw:
        panel = panel.with_label(cfg.label, **label_kw)
    return panel


def _build_group(cfg: GroupConfig, cache: _DataCache) -> PanelGroup:
    panels = tuple(None if p is None else _build_panel(p, cache) for p in cfg.panels)
    weights = None if cfg.weights is None else tuple(cfg.weights)
    return PanelGroup(panels, weights, cfg.ncol, cfg.nrow, cfg.align, cfg.height)


def figure_from_config(cfg: Dict[str, Any], base_dir: str | Path = ".") -> FigureSpec:
    """Validate a raw figure dictionary and build grid, target and style."""
    try:
        fig_cfg = FigureConfig.model_validate(cfg)
    except ValidationError as e:
        # a malformed groups section is a malformed grid
        if any(err["loc"] and err["loc"][0] == "groups" for err in e.errors()):
            raise LayoutMismatchError(f"Invalid groups section: {e}") from e
        raise
    cache = _DataCache(Path(base_dir))
    grid = GridSpecification(
        groups=tuple(_build_group(g, cache) for g in fig_cfg.groups),
        align=fig_cfg.align,
        padding=to_inches(fig_cfg.padding_mm, "mm"),
    )
    grid.validate()
    style = PlotStyle(dpi=fig_cfg.target.dpi, **fig_cfg.style.model_dump())
    output = cache.resolve(fig_cfg.output) if fig_cfg.output else None
    return FigureSpec(grid, fig_cfg.target, style, output)


def load_figure(path: str | Path, apply_env: bool = True) -> FigureSpec:
    p = Path(path)
    cfg = load_config(p, apply_env=apply_env)
    return figure_from_config(cfg, base_dir=p.parent)


def target_summary(target: ExportTarget) -> Tuple[str, str]:
    w, h = target.size_inches
    size = f"{target.width:g}x{target.height:g}{target.units} ({w:.2f}x{h:.2f}in)"
    res = f"{target.size_pixels[0]}x{target.size_pixels[1]}px @ {target.dpi}dpi" if target.is_raster else "vector"
    return size, res
