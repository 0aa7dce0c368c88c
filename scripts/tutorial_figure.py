#!/usr/bin/env python3
"""
Walk-through figure: scatterplot, boxplot with significance brackets and an
embedded image, composed into one 180 mm x 120 mm figure.

Usage:
    python scripts/tutorial_figure.py --outdir generated_figures --format tiff --dpi 600
"""
from __future__ import annotations

import argparse
import logging
from pathlib import Path

import numpy as np
import pandas as pd

import pubfig
from pubfig.layout import group

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("tutorial_figure")


def make_data(seed: int = 0) -> pd.DataFrame:
    """Three treatment groups with a dose-dependent response."""
    rng = np.random.default_rng(seed)
    frames = []
    for shift, name in zip((0.0, 0.6, 1.4), ("control", "low", "high")):
        dose = rng.uniform(0, 10, 30)
        frames.append(pd.DataFrame({
            "treatment": name,
            "dose": dose,
            "response": 2.0 + 0.3 * dose + shift + rng.normal(0, 0.8, dose.size),
        }))
    return pd.concat(frames, ignore_index=True)


def make_image(seed: int = 0) -> np.ndarray:
    """Stand-in for a micrograph: smoothed noise, 4:3."""
    rng = np.random.default_rng(seed)
    img = rng.random((90, 120))
    kernel = np.ones(5) / 5.0
    img = np.apply_along_axis(lambda r: np.convolve(r, kernel, mode="same"), 1, img)
    img = np.apply_along_axis(lambda c: np.convolve(c, kernel, mode="same"), 0, img)
    return (255 * (img - img.min()) / (np.ptp(img) or 1.0)).astype(np.uint8)


def build_grid(df: pd.DataFrame) -> pubfig.GridSpecification:
    scatter = (
        pubfig.Panel()
        + pubfig.scatter(df, "dose", "response", hue="treatment")
        + pubfig.regression_line(df, "dose", "response", annotate=True)
        + pubfig.labels(x="Dose (mg/kg)", y="Response (a.u.)")
        + pubfig.legend(loc="lower right")
        + pubfig.despine()
    ).with_label("A")
    box = (
        pubfig.Panel()
        + pubfig.boxplot(df, "treatment", "response")
        + pubfig.significance(df, "treatment", "response",
                              comparisons=[("control", "low"), ("control", "high")])
        + pubfig.labels(x="", y="Response (a.u.)")
        + pubfig.despine()
    ).with_label("B")
    image = pubfig.image_panel(make_image(), label="C")
    strip = (
        pubfig.Panel()
        + pubfig.strip(df, "treatment", "dose")
        + pubfig.labels(x="", y="Dose (mg/kg)")
        + pubfig.despine()
    ).with_label("D")
    return pubfig.GridSpecification(
        groups=(
            group([scatter, box], weights=[2, 1], align="h"),
            group([image, strip], weights=[1, 2], align="h"),
        ),
    )


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Generate the tutorial composite figure.")
    p.add_argument("--outdir", type=Path, default=Path("generated_figures"))
    p.add_argument("--format", default="pdf", help="pdf, svg, png, tiff or jpeg (default: pdf)")
    p.add_argument("--dpi", type=int, default=300)
    p.add_argument("--palette", default="okabe_ito")
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    target = pubfig.ExportTarget(width=180, height=120, units="mm", dpi=args.dpi, format=args.format)
    style = pubfig.PlotStyle(dpi=args.dpi, palette=args.palette)
    out = args.outdir / f"tutorial_figure.{target.format}"
    pubfig.compose_to_file(build_grid(make_data()), target, out, style=style, sidecar=True)
    logger.info("Done: %s", out)


if __name__ == "__main__":
    main()
