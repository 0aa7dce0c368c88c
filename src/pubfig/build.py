from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import yaml

from .errors import CompositionError
from .layout.export import compose_to_file
from .palettes import check_palette, get_palette, is_colorblind_safe
from .styles import style_from_args
from .utils.config import load_figure, target_summary

logger = logging.getLogger("pubfig.build")


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        description="Compose a multi-panel figure from a YAML description.",
    )
    p.add_argument("config", type=Path, help="Path to the figure YAML")
    p.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output file (default: `output:` from the YAML)",
    )
    p.add_argument(
        "--dpi",
        type=int,
        default=None,
        help="Override the target resolution (raster formats only)",
    )
    p.add_argument(
        "--format",
        default=None,
        help="Override the target format (pdf, svg, png, tiff, jpeg)",
    )
    p.add_argument("--font-size", type=float, default=None, help="Override the base font size (pt)")
    p.add_argument("--line-width", type=float, default=None, help="Override the line width (pt)")
    p.add_argument("--marker-size", type=float, default=None, help="Override the marker size (pt)")
    p.add_argument(
        "--metadata",
        action="store_true",
        help="Also write a <output>.metadata.json sidecar with panel placements",
    )
    p.add_argument(
        "--check-palette",
        action="store_true",
        help="Warn about palette colours that collide in greyscale",
    )
    p.add_argument(
        "--no-env",
        action="store_true",
        help="Ignore PUBFIG_* environment overrides",
    )
    p.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    return p.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, str(args.log_level).upper(), logging.INFO),
                        format="%(levelname)s %(name)s: %(message)s")
    try:
        spec = load_figure(args.config, apply_env=not args.no_env)
        target = spec.target
        if args.dpi is not None or args.format is not None:
            update = {}
            if args.dpi is not None:
                update["dpi"] = args.dpi
            if args.format is not None:
                update["format"] = args.format
            target = type(target).model_validate({**target.model_dump(), **update})
        style = style_from_args(args, base=spec.style)
        output = args.output or spec.output
        if output is None:
            output = args.config.with_suffix("." + target.format)
        palette = style.palette
        if not is_colorblind_safe(palette):
            logger.warning("Palette %r is not colour-blind safe", palette)
        if args.check_palette:
            check_palette(get_palette(palette, 4))
        size, res = target_summary(target)
        logger.info("Composing %s -> %s [%s, %s]", args.config, output, size, res)
        compose_to_file(spec.grid, target, output, style=style, sidecar=args.metadata,
                        metadata={"source": str(args.config)} if args.metadata else None)
    except (CompositionError, FileNotFoundError, ValueError, yaml.YAMLError) as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
