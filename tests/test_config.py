import textwrap

import numpy as np
import pandas as pd
import pytest
from PIL import Image

from pubfig import LayoutMismatchError
from pubfig.build import main
from pubfig.utils.config import figure_from_config, load_figure, override_config_from_env

FIGURE_YAML = """
target: {width: 180, height: 90, units: mm, dpi: 150, format: png}
style: {font_size: 7, palette: tol_bright}
padding_mm: 1
output: out/figure.png
groups:
  - weights: [1, 2]
    align: h
    panels:
      - label: A
        layers:
          - {kind: scatter, data: data.csv, x: x, y: y, hue: g}
          - {kind: labels, x: Dose, y: Response}
      - label: B
        vjust: 1.0
        layers:
          - {kind: boxplot, data: data.csv, x: g, y: y}
          - {kind: significance, data: data.csv, x: g, y: y, comparisons: [[a, b]]}
  - panels:
      - image: cells.png
        label: C
      - null
"""


@pytest.fixture
def figure_dir(tmp_path):
    rng = np.random.default_rng(2)
    pd.DataFrame({
        "g": ["a"] * 10 + ["b"] * 10,
        "x": rng.uniform(0, 1, 20),
        "y": rng.normal(0, 1, 20),
    }).to_csv(tmp_path / "data.csv", index=False)
    Image.fromarray(np.zeros((30, 40, 3), dtype=np.uint8)).save(tmp_path / "cells.png")
    (tmp_path / "figure.yaml").write_text(textwrap.dedent(FIGURE_YAML), encoding="utf-8")
    return tmp_path


def test_load_figure_builds_grid(figure_dir):
    spec = load_figure(figure_dir / "figure.yaml", apply_env=False)
    assert spec.target.format == "png" and spec.target.dpi == 150
    assert spec.style.palette == "tol_bright"
    assert spec.output == figure_dir / "out" / "figure.png"
    first, second = spec.grid.groups
    assert first.resolved_weights == (1.0, 2.0)
    assert first.align == "h"
    a, b = first.panels
    assert [layer.kind for layer in a.layers] == ["scatter", "labels"]
    assert b.vjust == 1.0
    assert second.panels[1] is None
    assert second.panels[0].aspect == pytest.approx(40 / 30)
    assert spec.grid.padding == pytest.approx(1 / 25.4)


def test_weight_mismatch_in_yaml_raises(figure_dir):
    cfg = {
        "target": {"width": 50, "height": 50},
        "groups": [{"weights": [1, 2, 3], "panels": [{"layers": []}, {"layers": []}]}],
    }
    with pytest.raises(LayoutMismatchError):
        figure_from_config(cfg, base_dir=figure_dir)
    with pytest.raises(LayoutMismatchError):
        figure_from_config({"target": {"width": 50, "height": 50}, "groups": "oops"})


def test_env_overrides_nested_and_top_level_keys():
    cfg = {"target": {"dpi": 300, "format": "png"}, "padding_mm": 0.5}
    env = {"PUBFIG_TARGET_DPI": "600", "PUBFIG_PADDING_MM": "2.0", "OTHER_TARGET_DPI": "1"}
    out = override_config_from_env(cfg, environ=env)
    assert out["target"] == {"dpi": 600, "format": "png"}
    assert out["padding_mm"] == 2.0


def test_env_overrides_keys_missing_from_yaml():
    cfg = {"target": {"width": 50, "height": 50}, "groups": [{"panels": [{"layers": []}]}]}
    env = {"PUBFIG_PADDING_MM": "2.0", "PUBFIG_STYLE_FONT_SIZE": "11"}
    out = override_config_from_env(cfg, environ=env)
    assert out["padding_mm"] == 2.0
    assert out["style"] == {"font_size": 11}
    spec = figure_from_config(out)
    assert spec.grid.padding * 25.4 == pytest.approx(2.0)
    assert spec.style.font_size == 11.0


def test_cli_writes_figure(figure_dir):
    out = figure_dir / "cli.png"
    assert main([str(figure_dir / "figure.yaml"), "-o", str(out), "--metadata", "--no-env"]) == 0
    with Image.open(out) as img:
        assert img.size == (1063, 531)
    assert (figure_dir / "cli.png.metadata.json").exists()


def test_cli_format_override_and_failure(figure_dir, tmp_path):
    out = figure_dir / "cli.pdf"
    assert main([str(figure_dir / "figure.yaml"), "-o", str(out), "--format", "pdf", "--no-env"]) == 0
    assert out.read_bytes().startswith(b"%PDF")
    bad = tmp_path / "bad.yaml"
    bad.write_text("target: {width: 10, height: 10}\ngroups:\n  - weights: [1]\n    panels: [null, null]\n",
                   encoding="utf-8")
    assert main([str(bad), "--no-env"]) == 1


def test_cli_style_flags_override_yaml(figure_dir, monkeypatch):
    seen = {}

    def fake_compose_to_file(grid, target, path, style=None, **kwargs):
        seen["style"] = style
        return path

    monkeypatch.setattr("pubfig.build.compose_to_file", fake_compose_to_file)
    argv = [str(figure_dir / "figure.yaml"), "--no-env", "--font-size", "11", "--line-width", "1.5", "--dpi", "600"]
    assert main(argv) == 0
    style = seen["style"]
    assert (style.font_size, style.line_width, style.dpi) == (11.0, 1.5, 600)
    # untouched fields still come from the YAML
    assert style.palette == "tol_bright"
    assert style.marker_size == 3.0


@pytest.mark.parametrize("text", [
    "target: {width: 10, height: [\n",
    "target: {width: 50, height: 50}\ngroups:\n  - panels:\n      - layers: [{kind: no_such_layer}]\n",
    "target: {width: 50, height: 50}\nstyle: {palette: no_such_palette}\ngroups:\n  - panels: [{layers: []}]\n",
])
def test_cli_reports_bad_config(tmp_path, text):
    bad = tmp_path / "bad.yaml"
    bad.write_text(text, encoding="utf-8")
    assert main([str(bad), "--no-env"]) == 1
