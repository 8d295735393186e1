"""
Pattern/Setup Emitter

Materializes the winning candidate of a window into a HarmonicPattern and the
TradeSetup derived from it. Candidates below the configured confidence
threshold are discarded; that is a normal NO_MATCH outcome, not an error.

Trade setup rules:
- entry is D
- stop-loss sits a percentage buffer beyond X, on the side away from the
  trade (below X for LONG, above X for SHORT). For extension patterns whose D
  has already run past X, the buffer is applied beyond D instead, so the stop
  is never on the profit side of the entry.
- take-profits are the 38.2% and 61.8% retracements of the CD leg measured
  from D back toward C, and C itself
- risk/reward = |TP1 - entry| / |entry - stop|
"""

import logging
from typing import Optional, Sequence

from .confidence_scorer import ScoredCandidate
from .constants import DEGENERATE_RR, PATTERN_POINT_COUNT, POINT_LABELS, TAKE_PROFIT_RETRACEMENTS
from .detection_config import DetectionConfig
from .fibonacci import retracement_price
from .models import (
    Emission,
    HarmonicPattern,
    PatternPoint,
    PotentialReversalZone,
    TradeDirection,
    TradeSetup,
)
from .ratio_calculator import Leg, LegRatios
from .timeframe import timeframe_milliseconds
from .types import SwingLabel, SwingPoint

logger = logging.getLogger(__name__)


def trade_direction(d: SwingPoint) -> TradeDirection:
    """LONG when D is a swing LOW, SHORT when D is a swing HIGH."""
    return TradeDirection.LONG if d.label is SwingLabel.LOW else TradeDirection.SHORT


def stop_loss_price(x: float, d: float, direction: TradeDirection, buffer_pct: float) -> float:
    """
    Stop-loss beyond X (or beyond D when D has already passed X).

    Example:
        >>> stop_loss_price(100.0, 121.4, TradeDirection.LONG, 1.0)
        99.0
    """
    buffer = buffer_pct / 100.0
    if direction is TradeDirection.LONG:
        anchor = min(x, d)
        return anchor - anchor * buffer
    anchor = max(x, d)
    return anchor + anchor * buffer


def take_profit_prices(c: float, d: float) -> tuple:
    """TP1..TP3 as retracements of the CD leg from D back toward C."""
    return tuple(retracement_price(c, d, ratio) for ratio in TAKE_PROFIT_RETRACEMENTS)


def build_trade_setup(
    pattern: HarmonicPattern,
    config: DetectionConfig,
) -> TradeSetup:
    """
    Derive the TradeSetup for a pattern.

    A setup whose entry equals its stop-loss is returned with
    risk_reward_ratio None, is_valid False and invalid_reason DEGENERATE_RR.
    """
    x = pattern.x.price
    c = pattern.point("C").price
    entry = pattern.d.price

    stop = stop_loss_price(x, entry, pattern.direction, config.stop_loss_buffer_pct)
    targets = take_profit_prices(c, entry)
    valid_until = pattern.detected_at + config.setup_validity_bars * timeframe_milliseconds(pattern.timeframe)

    risk = abs(entry - stop)
    if risk == 0:
        logger.debug(f"Pattern {pattern.id}: entry equals stop-loss, setup marked invalid")
        rr = None
        is_valid = False
        reason = DEGENERATE_RR
    else:
        rr = abs(targets[0] - entry) / risk
        is_valid = True
        reason = None

    return TradeSetup(
        pattern_id=pattern.id,
        symbol=pattern.symbol,
        timeframe=pattern.timeframe,
        pattern_type=pattern.pattern_type,
        direction=pattern.direction,
        entry_price=entry,
        stop_loss=stop,
        take_profits=targets,
        risk_reward_ratio=rr,
        valid_until=valid_until,
        is_valid=is_valid,
        invalid_reason=reason,
    )


class PatternEmitter:
    """
    Builds pattern records for candidates that clear the confidence threshold.

    Example:
        >>> emitter = PatternEmitter(DetectionConfig.default())
        >>> emission = emitter.emit(best, window, ratios, "BTCUSDT", "4h", detected_at)
        >>> emission is None  # below threshold
    """

    def __init__(self, config: Optional[DetectionConfig] = None):
        self.config = config or DetectionConfig.default()

    def accepts(self, confidence: float) -> bool:
        """Threshold check; a score equal to the threshold is accepted."""
        return confidence >= self.config.min_confidence

    def emit(
        self,
        candidate: ScoredCandidate,
        window: Sequence[SwingPoint],
        ratios: LegRatios,
        symbol: str,
        timeframe: str,
        detected_at: int,
    ) -> Optional[Emission]:
        """
        Build the pattern and setup for one window's winning candidate.

        Args:
            candidate: Winner chosen by the confidence scorer.
            window: The X, A, B, C, D swing points.
            ratios: The window's realized leg ratios.
            symbol: Instrument symbol.
            timeframe: Candle timeframe string.
            detected_at: Detection time (epoch millis).

        Returns:
            An Emission, or None when the candidate is below threshold.
        """
        if len(window) != PATTERN_POINT_COUNT:
            raise ValueError(
                f"A harmonic window needs {PATTERN_POINT_COUNT} points, got {len(window)}"
            )
        if not self.accepts(candidate.confidence):
            logger.debug(
                f"Discarding {candidate.pattern_type.value} at confidence "
                f"{candidate.confidence:.2f} (threshold {self.config.min_confidence})"
            )
            return None

        pattern = self.build_pattern(candidate, window, ratios, symbol, timeframe, detected_at)
        setup = build_trade_setup(pattern, self.config)
        return Emission(pattern=pattern, setup=setup)

    def build_pattern(
        self,
        candidate: ScoredCandidate,
        window: Sequence[SwingPoint],
        ratios: LegRatios,
        symbol: str,
        timeframe: str,
        detected_at: int,
    ) -> HarmonicPattern:
        x, d = window[0], window[-1]
        point_ratios = (None, None, ratios.xab, ratios.abc, ratios.bcd)
        point_scores = (
            0.0,
            0.0,
            candidate.leg(Leg.XAB),
            candidate.leg(Leg.ABC),
            candidate.leg(Leg.BCD) + candidate.leg(Leg.XAD),
        )
        points = tuple(
            PatternPoint(
                label=label,
                price=swing.price,
                timestamp=swing.timestamp,
                fibonacci_ratio=ratio,
                confidence=score,
                is_predicted=False,
                index=swing.index,
            )
            for label, swing, ratio, score in zip(POINT_LABELS, window, point_ratios, point_scores)
        )
        return HarmonicPattern(
            id=HarmonicPattern.make_pattern_id(
                symbol, timeframe, candidate.pattern_type, x.index, d.index
            ),
            pattern_type=candidate.pattern_type,
            points=points,
            confidence=candidate.confidence,
            direction=trade_direction(d),
            symbol=symbol,
            timeframe=timeframe,
            detected_at=detected_at,
            ratios=ratios,
            prz=PotentialReversalZone.around(d.price, self.config.prz_tolerance_pct / 100.0),
        )
