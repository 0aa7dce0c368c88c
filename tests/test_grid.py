import pytest

from pubfig import GridSpecification, LayoutMismatchError, Panel, PanelGroup, compose, group


def test_weight_count_mismatch_raises(raster_target):
    grid = GridSpecification(groups=(group([Panel(), Panel()], weights=[1, 2, 3]),))
    with pytest.raises(LayoutMismatchError):
        grid.validate()
    with pytest.raises(LayoutMismatchError):
        compose(grid, raster_target)


def test_too_few_weights_is_not_padded():
    grid = GridSpecification(groups=(group([Panel(), Panel(), Panel()], weights=[1, 2]),))
    with pytest.raises(LayoutMismatchError, match="2 weight"):
        grid.validate()


def test_ncol_must_match_panel_count():
    with pytest.raises(LayoutMismatchError, match="ncol=3"):
        GridSpecification(groups=(group([Panel(), Panel()], ncol=3),)).validate()
    with pytest.raises(LayoutMismatchError, match="nrow=1"):
        GridSpecification(groups=(group([Panel(), Panel()], nrow=1),)).validate()
    with pytest.raises(LayoutMismatchError):
        GridSpecification(groups=(group([Panel()], ncol=1, nrow=1),)).validate()


@pytest.mark.parametrize("weights", [[1, 0], [1, -2]])
def test_non_positive_weights_raise(weights):
    with pytest.raises(LayoutMismatchError):
        GridSpecification(groups=(group([Panel(), Panel()], weights=weights),)).validate()


def test_bad_align_flag_and_empty_grid():
    with pytest.raises(LayoutMismatchError):
        GridSpecification(groups=(group([Panel()], align="diagonal"),)).validate()
    with pytest.raises(LayoutMismatchError):
        GridSpecification(groups=(group([Panel()]),), align="x").validate()
    with pytest.raises(LayoutMismatchError):
        GridSpecification(groups=()).validate()
    with pytest.raises(LayoutMismatchError):
        GridSpecification(groups=(group([]),)).validate()


def test_non_panel_entries_rejected():
    with pytest.raises(LayoutMismatchError):
        GridSpecification(groups=(group([Panel(), "not a panel"]),)).validate()
    with pytest.raises(LayoutMismatchError):
        GridSpecification(groups=([Panel()],)).validate()


def test_valid_grid_with_spacer():
    g = group([Panel(), None, Panel()], weights=[1, 0.2, 1], ncol=3, align="h")
    grid = GridSpecification(groups=(g,))
    grid.validate()
    assert isinstance(g, PanelGroup)
    assert g.resolved_weights == (1.0, 0.2, 1.0)
    assert [p is None for _, _, p in grid.iter_panels()] == [False, True, False]
