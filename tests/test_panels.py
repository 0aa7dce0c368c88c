import dataclasses

import numpy as np
import pytest
from PIL import Image

from pubfig import Layer, Panel, RenderDependencyError, image_panel, labels, scatter
from pubfig.core.registry import get_layer, list_layers
from pubfig.panels import load_image


def test_adding_layers_returns_new_panel(df):
    base = Panel()
    extended = base + scatter(df, "x", "small")
    assert base.layers == ()
    assert [layer.kind for layer in extended.layers] == ["scatter"]
    again = extended.add(labels(title="t"), labels(x="x"))
    assert [layer.kind for layer in again.layers] == ["scatter", "labels", "labels"]
    assert len(extended.layers) == 1


def test_panels_are_frozen():
    panel = Panel()
    with pytest.raises(dataclasses.FrozenInstanceError):
        panel.label = "A"


def test_with_label_keeps_or_overrides_offsets():
    panel = Panel().with_label("A", hjust=-0.5)
    assert (panel.label, panel.hjust, panel.vjust) == ("A", -0.5, 0.4)
    relabelled = panel.with_label("B", vjust=2)
    assert (relabelled.label, relabelled.hjust, relabelled.vjust) == ("B", -0.5, 2.0)


def test_add_rejects_non_layers():
    with pytest.raises(TypeError):
        Panel().add("scatter")


def test_layer_registry_has_builtin_kinds():
    kinds = set(list_layers())
    assert {"scatter", "boxplot", "strip", "regression_line", "labels", "limits", "image", "significance"} <= kinds
    assert get_layer("Scatter") is scatter
    with pytest.raises(KeyError):
        get_layer("violin3d")


def test_image_panel_from_file(tmp_path):
    path = tmp_path / "micrograph.png"
    Image.fromarray(np.full((20, 40, 3), 128, dtype=np.uint8)).save(path)
    panel = image_panel(path, label="C")
    assert panel.aspect == pytest.approx(2.0)
    assert panel.axis_off
    assert panel.label == "C"
    assert isinstance(panel.layers[0], Layer)


def test_image_panel_without_aspect_lock():
    panel = image_panel(np.zeros((10, 10), dtype=np.uint8), keep_aspect=False)
    assert panel.aspect is None


def test_missing_or_corrupt_image_raises(tmp_path):
    with pytest.raises(RenderDependencyError):
        image_panel(tmp_path / "missing.png")
    bad = tmp_path / "bad.png"
    bad.write_bytes(b"not an image")
    with pytest.raises(RenderDependencyError):
        load_image(bad)
    with pytest.raises(RenderDependencyError):
        load_image(np.zeros((0, 5)))


def test_plot_layers_draw_onto_one_axes(df, raster_target):
    from pubfig import GridSpecification, compose, despine, group, legend, limits, regression_line, strip

    scatter_panel = (Panel()
                     + scatter(df, "x", "small", hue="group")
                     + regression_line(df, "x", "small", annotate=True)
                     + limits(x=(0, 10), y=(-1, 2))
                     + legend(loc="upper left")
                     + despine())
    strip_panel = Panel() + strip(df, "group", "large") + labels(title="spread")
    canvas = compose(GridSpecification(groups=(group([scatter_panel, strip_panel]),)), raster_target)
    ax, ax_strip = (p.axes for p in canvas.placements)
    assert ax.get_xlim() == (0, 10)
    assert ax.get_ylim() == (-1, 2)
    assert [t.get_text() for t in ax.get_legend().get_texts()] == ["ctrl", "drug"]
    assert ax.texts[0].get_text().startswith("R = ")
    assert not ax.spines["top"].get_visible()
    assert ax_strip.get_title() == "spread"
