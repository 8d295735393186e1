"""
Tests for pattern and trade setup emission.
"""

import pytest

from src.harmonic_analysis.confidence_scorer import ScoredCandidate, score_candidate
from src.harmonic_analysis.constants import DEGENERATE_RR
from src.harmonic_analysis.detection_config import DetectionConfig
from src.harmonic_analysis.emitter import (
    PatternEmitter,
    build_trade_setup,
    stop_loss_price,
    take_profit_prices,
    trade_direction,
)
from src.harmonic_analysis.models import TradeDirection
from src.harmonic_analysis.ratio_calculator import Leg, window_ratios
from src.harmonic_analysis.templates import RATIO_TEMPLATES, PatternType
from src.harmonic_analysis.types import SwingLabel

from conftest import (
    BASE_TIME,
    BEARISH_GARTLEY_PIVOTS,
    BUTTERFLY_PIVOTS,
    GARTLEY_PIVOTS,
    HOUR,
    make_swings,
)

DETECTED_AT = BASE_TIME + 30 * HOUR


def emit(prices, pattern_type=PatternType.GARTLEY, config=None, first_label=SwingLabel.LOW):
    window = make_swings(prices, first_label)
    ratios = window_ratios(window)
    candidate = score_candidate(ratios, RATIO_TEMPLATES[pattern_type])
    emitter = PatternEmitter(config or DetectionConfig.default())
    return emitter.emit(candidate, window, ratios, "BTCUSDT", "1h", DETECTED_AT)


class TestThreshold:
    """Confidence at or above the threshold emits; below is discarded."""

    window = make_swings(GARTLEY_PIVOTS)

    def emit_at(self, confidence, min_confidence=70.0):
        candidate = ScoredCandidate(
            PatternType.GARTLEY,
            confidence,
            {Leg.XAB: confidence / 4, Leg.ABC: confidence / 4, Leg.BCD: confidence / 4, Leg.XAD: confidence / 4},
        )
        emitter = PatternEmitter(DetectionConfig().with_min_confidence(min_confidence))
        return emitter.emit(candidate, self.window, window_ratios(self.window), "BTCUSDT", "1h", DETECTED_AT)

    def test_exactly_at_threshold_emits(self):
        emission = self.emit_at(70.0)
        assert emission is not None
        assert emission.pattern.confidence == 70.0

    def test_just_below_threshold_discarded(self):
        assert self.emit_at(69.999) is None

    def test_custom_threshold(self):
        assert self.emit_at(85.0, min_confidence=90.0) is None
        assert self.emit_at(95.0, min_confidence=90.0) is not None

    def test_window_must_have_five_points(self):
        emitter = PatternEmitter()
        candidate = ScoredCandidate(PatternType.GARTLEY, 90.0)
        with pytest.raises(ValueError):
            emitter.emit(candidate, self.window[:4], window_ratios(self.window), "BTCUSDT", "1h", DETECTED_AT)


class TestHarmonicPattern:
    """The emitted pattern record."""

    def test_bullish_gartley(self):
        pattern = emit(GARTLEY_PIVOTS).pattern
        assert pattern.pattern_type is PatternType.GARTLEY
        assert pattern.direction is TradeDirection.LONG
        assert pattern.symbol == "BTCUSDT"
        assert pattern.timeframe == "1h"
        assert pattern.detected_at == DETECTED_AT
        assert [p.label for p in pattern.points] == ["X", "A", "B", "C", "D"]
        assert [p.price for p in pattern.points] == GARTLEY_PIVOTS
        assert not any(p.is_predicted for p in pattern.points)

    def test_bearish_gartley_is_short(self):
        pattern = emit(BEARISH_GARTLEY_PIVOTS, first_label=SwingLabel.HIGH).pattern
        assert pattern.direction is TradeDirection.SHORT

    def test_point_ratios(self):
        pattern = emit(GARTLEY_PIVOTS).pattern
        assert pattern.point("X").fibonacci_ratio is None
        assert pattern.point("A").fibonacci_ratio is None
        assert pattern.point("B").fibonacci_ratio == pytest.approx(0.618)
        assert pattern.point("C").fibonacci_ratio == pytest.approx(0.618)
        assert pattern.point("D").fibonacci_ratio == pytest.approx(pattern.ratios.bcd)
        assert pattern.ratios.xad == pytest.approx(0.786)

    def test_endpoint_accessors(self):
        pattern = emit(GARTLEY_PIVOTS).pattern
        assert pattern.x is pattern.point("X")
        assert pattern.d is pattern.point("D")
        with pytest.raises(KeyError):
            pattern.point("E")

    def test_point_confidence_sums_to_pattern_confidence(self):
        pattern = emit(GARTLEY_PIVOTS).pattern
        assert sum(p.confidence for p in pattern.points) == pytest.approx(pattern.confidence)
        assert pattern.point("X").confidence == 0.0
        assert pattern.point("D").confidence == pytest.approx(41.40, abs=0.01)

    def test_deterministic_id(self):
        pattern = emit(GARTLEY_PIVOTS).pattern
        assert pattern.id == "BTCUSDT_1h_GARTLEY_0_20"
        assert emit(GARTLEY_PIVOTS).pattern.id == pattern.id

    def test_prz_around_d(self):
        pattern = emit(GARTLEY_PIVOTS).pattern
        assert pattern.prz.lower == pytest.approx(121.4 * 0.985)
        assert pattern.prz.upper == pytest.approx(121.4 * 1.015)
        assert pattern.prz.contains(121.4)

    def test_records_are_immutable(self):
        pattern = emit(GARTLEY_PIVOTS).pattern
        with pytest.raises(AttributeError):
            pattern.confidence = 100.0


class TestTradeSetup:
    """Entry, stop-loss, targets and risk/reward."""

    def test_long_setup(self):
        setup = emit(GARTLEY_PIVOTS).setup
        assert setup.entry_price == 121.4
        assert setup.stop_loss == pytest.approx(99.0)
        assert setup.take_profits[0] == pytest.approx(121.4 + 0.382 * 54.9924)
        assert setup.take_profits[1] == pytest.approx(121.4 + 0.618 * 54.9924)
        assert setup.take_profits[2] == pytest.approx(176.3924)
        assert setup.risk_reward_ratio == pytest.approx(0.382 * 54.9924 / 22.4)
        assert setup.is_valid
        assert setup.invalid_reason is None

    def test_short_setup(self):
        setup = emit(BEARISH_GARTLEY_PIVOTS, first_label=SwingLabel.HIGH).setup
        assert setup.direction is TradeDirection.SHORT
        assert setup.stop_loss == pytest.approx(202.0)
        assert setup.take_profits[0] == pytest.approx(178.6 - 0.382 * 54.9924)
        assert setup.take_profits[2] == pytest.approx(123.6076)
        assert setup.take_profits[0] < setup.entry_price < setup.stop_loss

    def test_setup_links_to_pattern(self):
        emission = emit(GARTLEY_PIVOTS)
        assert emission.setup.pattern_id == emission.pattern.id
        assert emission.setup.pattern_type is PatternType.GARTLEY

    def test_valid_until_counts_timeframe_bars(self):
        setup = emit(GARTLEY_PIVOTS).setup
        assert setup.valid_until == DETECTED_AT + 20 * HOUR

    def test_stop_loss_buffer_from_config(self):
        setup = emit(GARTLEY_PIVOTS, config=DetectionConfig().with_stop_loss_buffer(2.0)).setup
        assert setup.stop_loss == pytest.approx(98.0)

    def test_extension_pattern_stop_beyond_d(self):
        emission = emit(BUTTERFLY_PIVOTS, PatternType.BUTTERFLY)
        assert emission.pattern.pattern_type is PatternType.BUTTERFLY
        setup = emission.setup
        assert setup.stop_loss == pytest.approx(73.0 * 0.99)
        assert setup.stop_loss < setup.entry_price

    def test_degenerate_rr(self):
        # No buffer and D == X puts the stop on the entry
        config = DetectionConfig(stop_loss_buffer_pct=0.0, min_confidence=0.0)
        window = make_swings([100.0, 200.0, 150.0, 180.0, 100.0])
        ratios = window_ratios(window)
        candidate = ScoredCandidate(PatternType.GARTLEY, 50.0)
        emission = PatternEmitter(config).emit(candidate, window, ratios, "ETHUSDT", "4h", DETECTED_AT)
        assert emission is not None
        assert emission.setup.risk_reward_ratio is None
        assert not emission.setup.is_valid
        assert emission.setup.invalid_reason == DEGENERATE_RR

    def test_build_trade_setup_directly(self):
        pattern = emit(GARTLEY_PIVOTS).pattern
        setup = build_trade_setup(pattern, DetectionConfig.default())
        assert setup == emit(GARTLEY_PIVOTS).setup


class TestSetupHelpers:

    def test_direction_from_d_label(self):
        low, high = make_swings([1.0, 2.0])
        assert trade_direction(low) is TradeDirection.LONG
        assert trade_direction(high) is TradeDirection.SHORT

    def test_stop_loss_price(self):
        assert stop_loss_price(100.0, 120.0, TradeDirection.LONG, 1.0) == pytest.approx(99.0)
        assert stop_loss_price(200.0, 180.0, TradeDirection.SHORT, 1.0) == pytest.approx(202.0)
        assert stop_loss_price(200.0, 220.0, TradeDirection.SHORT, 1.0) == pytest.approx(222.2)

    def test_take_profit_prices(self):
        assert take_profit_prices(200.0, 100.0) == pytest.approx((138.2, 161.8, 200.0))
