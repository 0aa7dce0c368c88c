import pytest

from pubfig.units import round_half_up, split_extent, to_inches, to_pixels


def test_mm_to_pixels_at_300_dpi():
    assert to_pixels(to_inches(180, "mm"), 300) == 2126
    assert to_pixels(to_inches(90, "mm"), 300) == 1063


def test_unit_conversions():
    assert to_inches(25.4, "mm") == pytest.approx(1.0)
    assert to_inches(2.54, "cm") == pytest.approx(1.0)
    assert to_inches(72, "pt") == pytest.approx(1.0)
    with pytest.raises(ValueError):
        to_inches(1, "furlong")


def test_round_half_up_ties():
    assert round_half_up(0.5) == 1
    assert round_half_up(1.5) == 2
    assert round_half_up(2.4999) == 2


def test_split_extent_snapped_sums_to_total():
    extents = split_extent(2126, [1, 2], snap=True)
    assert extents == [709.0, 1417.0]
    for weights in ([1, 1, 1], [3, 7, 2, 5], [1] * 7):
        parts = split_extent(1001, weights, snap=True)
        assert sum(parts) == 1001
        assert all(p == int(p) for p in parts)


def test_split_extent_boundaries_within_half_pixel():
    total, weights = 1000, [1, 1, 1]
    parts = split_extent(total, weights, snap=True)
    edge = 0.0
    for i, p in enumerate(parts[:-1]):
        edge += p
        exact = total * (i + 1) / 3.0
        assert abs(edge - exact) <= 0.5


def test_split_extent_unsnapped_is_proportional():
    assert split_extent(3.0, [1, 2]) == pytest.approx([1.0, 2.0])
