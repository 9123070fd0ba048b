import pytest

from figpolish.config.schema import DEFAULT_SCALING_MAP
from figpolish.viz.scaling import EXTRAPOLATION_EXPONENT, ScalingTable, scale_factor


@pytest.fixture
def table():
    return ScalingTable.from_mapping(DEFAULT_SCALING_MAP, 0.65, 1.7)


def test_exact_control_points(table):
    for density, factor in DEFAULT_SCALING_MAP.items():
        assert scale_factor(density, table) == pytest.approx(factor)


def test_monotone_non_increasing(table):
    values = [scale_factor(d, table) for d in range(1, 80)]
    assert all(b <= a + 1e-12 for a, b in zip(values, values[1:]))


def test_interpolates_between_keys(table):
    # 5 lies halfway between 4 -> 1.3 and 6 -> 1.15
    assert scale_factor(5, table) == pytest.approx(1.225)
    assert 0.8 <= scale_factor(14, table) <= 0.9


def test_clamped_to_bounds(table):
    assert scale_factor(1000, table) == pytest.approx(0.65)
    tight = ScalingTable.from_mapping({1: 3.0, 2: 0.1}, 0.5, 2.0)
    assert scale_factor(1, tight) == pytest.approx(2.0)
    assert scale_factor(2, tight) == pytest.approx(0.5)


def test_extrapolates_below_first_key():
    t = ScalingTable.from_mapping({4: 1.0, 8: 0.8}, 0.5, 2.0)
    assert scale_factor(1, t) == pytest.approx(4 ** (1 / EXTRAPOLATION_EXPONENT))
    assert scale_factor(2, t) > scale_factor(3, t) > scale_factor(4, t)


def test_extrapolates_above_last_key(table):
    expected = 0.7 * (25 / 30) ** (1 / EXTRAPOLATION_EXPONENT)
    assert scale_factor(30, table) == pytest.approx(expected)


def test_non_positive_density_treated_as_one(table):
    assert scale_factor(0, table) == pytest.approx(1.6)


def test_from_config(cfg):
    t = ScalingTable.from_config(cfg)
    assert t.densities[0] == 1 and t.densities[-1] == 25
    assert t.min_factor == pytest.approx(0.65)
    assert t.max_factor == pytest.approx(1.7)
