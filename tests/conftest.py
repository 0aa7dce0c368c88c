import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from pubfig import ExportTarget, Panel, custom, labels, scatter


@pytest.fixture
def df():
    rng = np.random.default_rng(0)
    n = 40
    return pd.DataFrame({
        "group": np.repeat(["ctrl", "drug"], n // 2),
        "x": rng.uniform(0, 10, n),
        "small": rng.uniform(0, 1, n),
        "large": rng.uniform(0, 90000, n),
    })


@pytest.fixture
def raster_target():
    return ExportTarget(width=180, height=90, units="mm", dpi=300, format="png")


@pytest.fixture
def make_scatter(df):
    def _make(y="small", label=None, **kw):
        panel = Panel() + scatter(df, "x", y, **kw) + labels(x="x value", y=y)
        return panel.with_label(label) if label else panel
    return _make


@pytest.fixture
def blank():
    """A panel with no visible decorations."""
    return Panel(layers=(custom(lambda ax: ax.set_axis_off()),))
