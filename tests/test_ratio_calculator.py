"""
Tests for leg ratio computation and Fibonacci price helpers.
"""

import math

import pytest

from src.harmonic_analysis.exceptions import HarmonicAnalysisError, UndefinedRatio
from src.harmonic_analysis.fibonacci import (
    extension_price,
    nearest_fibonacci_level,
    projection_price,
    retracement_levels,
    retracement_price,
)
from src.harmonic_analysis.ratio_calculator import (
    Leg,
    LegRatios,
    compute_leg_ratios,
    leg_ratio,
    window_ratios,
    xad_ratio,
)

from conftest import BEARISH_GARTLEY_PIVOTS, GARTLEY_PIVOTS, make_swings


class TestLegRatio:
    """Single leg ratios use absolute distances."""

    def test_retracement(self):
        assert leg_ratio(100.0, 200.0, 138.2) == pytest.approx(0.618)

    def test_direction_agnostic(self):
        assert leg_ratio(200.0, 100.0, 161.8) == pytest.approx(leg_ratio(100.0, 200.0, 138.2))

    def test_extension_above_one(self):
        assert leg_ratio(100.0, 110.0, 90.0) == pytest.approx(2.0)

    def test_zero_reference_raises(self):
        with pytest.raises(UndefinedRatio) as exc_info:
            leg_ratio(100.0, 100.0, 90.0, "XAB")
        assert exc_info.value.leg == "XAB"
        assert "zero price distance" in str(exc_info.value)

    def test_undefined_ratio_is_analysis_error(self):
        with pytest.raises(HarmonicAnalysisError):
            leg_ratio(5.0, 5.0, 5.0)

    def test_zero_measured_leg_is_zero(self):
        assert leg_ratio(100.0, 200.0, 200.0) == 0.0


class TestComputeLegRatios:
    """All four ratios of an X-A-B-C-D window."""

    def test_gartley_ratios(self):
        ratios = compute_leg_ratios(*GARTLEY_PIVOTS)
        assert ratios.xab == pytest.approx(0.618)
        assert ratios.abc == pytest.approx(0.618)
        assert ratios.bcd == pytest.approx(1.43988, abs=1e-4)
        assert ratios.xad == pytest.approx(0.786)

    def test_bearish_mirror_has_same_ratios(self):
        bull = compute_leg_ratios(*GARTLEY_PIVOTS)
        bear = compute_leg_ratios(*BEARISH_GARTLEY_PIVOTS)
        for leg in Leg:
            assert bear.get(leg) == pytest.approx(bull.get(leg))

    def test_xad_measured_from_a_against_whole_xa(self):
        # D below X: XAD above 1
        assert xad_ratio(100.0, 200.0, 73.0) == pytest.approx(1.27)
        # Not chained through the intermediate legs
        ratios = compute_leg_ratios(100.0, 200.0, 150.0, 180.0, 121.4)
        assert ratios.xad == pytest.approx(0.786)
        assert ratios.xad != pytest.approx(ratios.xab * ratios.abc * ratios.bcd)

    @pytest.mark.parametrize("prices,leg", [
        ((100.0, 100.0, 90.0, 95.0, 92.0), "XAB"),
        ((100.0, 200.0, 200.0, 150.0, 180.0), "ABC"),
        ((100.0, 200.0, 150.0, 150.0, 120.0), "BCD"),
    ])
    def test_zero_reference_never_produces_nan(self, prices, leg):
        with pytest.raises(UndefinedRatio) as exc_info:
            compute_leg_ratios(*prices)
        assert exc_info.value.leg == leg

    def test_finite_for_valid_window(self):
        ratios = compute_leg_ratios(*GARTLEY_PIVOTS)
        assert all(math.isfinite(v) for v in ratios.to_dict().values())

    def test_to_dict_keys(self):
        ratios = LegRatios(xab=0.5, abc=0.6, bcd=1.2, xad=0.8)
        assert ratios.to_dict() == {"XAB": 0.5, "ABC": 0.6, "BCD": 1.2, "XAD": 0.8}


class TestWindowRatios:

    def test_from_swing_points(self):
        ratios = window_ratios(make_swings(GARTLEY_PIVOTS))
        assert ratios == compute_leg_ratios(*GARTLEY_PIVOTS)

    def test_requires_five_points(self):
        with pytest.raises(ValueError, match="5 points"):
            window_ratios(make_swings(GARTLEY_PIVOTS[:4]))


class TestFibonacciHelpers:

    def test_retracement_endpoints(self):
        assert retracement_price(100.0, 200.0, 0.0) == 200.0
        assert retracement_price(100.0, 200.0, 1.0) == 100.0

    def test_retracement_of_down_leg(self):
        assert retracement_price(200.0, 100.0, 0.5) == 150.0

    def test_projection_from_origin(self):
        assert projection_price(100.0, 200.0, 150.0, 1.272) == pytest.approx(277.2)

    def test_extension(self):
        assert extension_price(100.0, 200.0, 1.618) == pytest.approx(261.8)

    def test_retracement_levels_default(self):
        levels = retracement_levels(100.0, 200.0)
        assert levels[0.5] == 150.0
        assert levels[0.618] == pytest.approx(138.2)
        assert len(levels) == 8

    def test_nearest_level(self):
        assert nearest_fibonacci_level(0.62) == 0.618
        assert nearest_fibonacci_level(1.26) == 1.272
        assert nearest_fibonacci_level(3.1) == 3.14
