import numpy as np
import pandas as pd
import pytest

from pubfig import GridSpecification, Panel, boxplot, compare_groups, compose, group, p_to_label, significance


@pytest.mark.parametrize("p,label", [
    (0.00001, "****"),
    (0.0001, "****"),
    (0.0009, "***"),
    (0.009, "**"),
    (0.05, "*"),
    (0.051, "ns"),
    (1.0, "ns"),
    (float("nan"), "NA"),
])
def test_p_to_label_cutpoints(p, label):
    assert p_to_label(p) == label


@pytest.fixture
def shifted():
    rng = np.random.default_rng(1)
    base = rng.normal(10, 1, 30)
    # "1" repeats "0" exactly so its comparison is never significant
    return pd.DataFrame({
        "dose": ["0"] * 30 + ["1"] * 30 + ["2"] * 30,
        "len": np.concatenate([base, base, rng.normal(15, 1, 30)]),
    })


@pytest.mark.parametrize("method", ["wilcoxon", "t-test"])
def test_compare_groups_all_pairs(shifted, method):
    res = compare_groups(shifted, "dose", "len", method=method)
    assert list(zip(res["group1"], res["group2"])) == [("0", "1"), ("0", "2"), ("1", "2")]
    p = dict(zip(zip(res["group1"], res["group2"]), res["p"]))
    assert p[("0", "2")] < 1e-4
    assert (res["n1"] == 30).all()
    assert (res["method"] == method).all()


def test_compare_groups_explicit_and_missing_level(shifted):
    res = compare_groups(shifted, "dose", "len", comparisons=[("0", "2")])
    assert len(res) == 1
    assert res.loc[0, "p_label"] == "****"
    with pytest.raises(KeyError):
        compare_groups(shifted, "dose", "len", comparisons=[("0", "9")])
    with pytest.raises(ValueError):
        compare_groups(shifted, "dose", "len", method="anova")


def test_significance_layer_draws_brackets(shifted, raster_target):
    panel = (Panel()
             + boxplot(shifted, "dose", "len")
             + significance(shifted, "dose", "len", comparisons=[["0", "1"], ["0", "2"]]))
    canvas = compose(GridSpecification(groups=(group([panel]),)), raster_target)
    ax = canvas.placements[0].axes
    texts = [t.get_text() for t in ax.texts]
    assert texts == ["ns", "****"]
    assert ax.get_ylim()[1] > shifted["len"].max()


def test_significance_rejects_unknown_method(shifted):
    with pytest.raises(ValueError):
        significance(shifted, "dose", "len", method="anova")
