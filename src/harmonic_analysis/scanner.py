"""
Pattern Scanner

Runs one scan cycle for a (symbol, timeframe) candle snapshot:

    COLLECTING_CANDLES -> EXTRACTING_SWINGS -> (insufficient -> ABORTED)
        -> MATCHING_WINDOWS -> SCORING -> (nothing above threshold -> NO_MATCH)
        -> EMITTED

Every 5-point window of the swing sequence is evaluated independently, so
overlapping windows may each emit a pattern. The scanner holds no state
between scans; one PatternScanner can serve any number of pairs.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from .confidence_scorer import score_candidates, select_best
from .constants import PATTERN_POINT_COUNT
from .detection_config import DetectionConfig
from .emitter import PatternEmitter
from .exceptions import InsufficientData, UndefinedRatio
from .models import CompletionProjection, Emission, HarmonicPattern, TradeSetup
from .point_predictor import (
    EARLY_POINT_COUNT,
    FORMING_POINT_COUNT,
    predict_c_points,
    predict_completions,
)
from .ratio_calculator import window_ratios
from .swing_extractor import extract_swings
from .template_matcher import match_templates
from .timeframe import parse_timeframe
from .types import Candle, SwingPoint

logger = logging.getLogger(__name__)


class ScanStage(str, Enum):
    """Stages of one scan cycle, in the order they are entered."""
    COLLECTING_CANDLES = "COLLECTING_CANDLES"
    EXTRACTING_SWINGS = "EXTRACTING_SWINGS"
    MATCHING_WINDOWS = "MATCHING_WINDOWS"
    SCORING = "SCORING"


class ScanStatus(str, Enum):
    """Coarse per-cycle outcome."""
    ABORTED = "ABORTED"
    NO_MATCH = "NO_MATCH"
    EMITTED = "EMITTED"


@dataclass
class ScanResult:
    """
    Outcome of one scan cycle.

    Attributes:
        symbol: Instrument symbol of the snapshot.
        timeframe: Candle timeframe of the snapshot.
        status: ABORTED, NO_MATCH or EMITTED.
        emissions: Patterns and setups emitted, in window order.
        candle_count: Candles in the snapshot.
        swing_count: Swing points extracted.
        windows_evaluated: Windows whose ratios were defined.
        windows_skipped: Windows dropped for an undefined ratio.
        stages: Stages entered, in order.
        projections: Projected completions on the trailing swings.
        reason: Why the scan aborted, when it did.
    """
    symbol: str
    timeframe: str
    status: ScanStatus = ScanStatus.NO_MATCH
    emissions: List[Emission] = field(default_factory=list)
    candle_count: int = 0
    swing_count: int = 0
    windows_evaluated: int = 0
    windows_skipped: int = 0
    stages: List[ScanStage] = field(default_factory=list)
    projections: List[CompletionProjection] = field(default_factory=list)
    reason: Optional[str] = None

    @property
    def patterns(self) -> List[HarmonicPattern]:
        return [e.pattern for e in self.emissions]

    @property
    def setups(self) -> List[TradeSetup]:
        return [e.setup for e in self.emissions]


def validate_candle_order(candles: Sequence[Candle]) -> None:
    """
    Require strictly increasing open times.

    Raises:
        ValueError: On a duplicate or out-of-order candle.
    """
    for i in range(1, len(candles)):
        if candles[i].open_time <= candles[i - 1].open_time:
            raise ValueError(
                f"Candles must be strictly ordered by open time; candle {i} "
                f"({candles[i].open_time}) follows {candles[i - 1].open_time}"
            )


class PatternScanner:
    """
    Harmonic pattern detection over one candle snapshot.

    Example:
        >>> scanner = PatternScanner(DetectionConfig.default())
        >>> result = scanner.scan(candles, "BTCUSDT", "4h")
        >>> result.status
        <ScanStatus.NO_MATCH: 'NO_MATCH'>
    """

    def __init__(self, config: Optional[DetectionConfig] = None):
        self.config = config or DetectionConfig.default()
        self.emitter = PatternEmitter(self.config)

    def scan(
        self,
        candles: Sequence[Candle],
        symbol: Optional[str] = None,
        timeframe: Optional[str] = None,
        detected_at: Optional[int] = None,
    ) -> ScanResult:
        """
        Scan the most recent `max_candles` candles for harmonic patterns.

        Args:
            candles: Candles in strictly increasing open-time order.
            symbol: Instrument symbol (defaults to the candles' symbol).
            timeframe: Timeframe string (defaults to the candles' timeframe),
                normalized to its canonical form, so "4H" scans as "4h".
            detected_at: Detection time in epoch millis. Defaults to the close
                time of the snapshot's last candle, so repeated scans of the
                same snapshot are identical.

        Returns:
            ScanResult. Insufficient data yields status ABORTED, not an error.

        Raises:
            ValueError: If the candles are unordered or duplicated, or the
                timeframe is not a supported Timeframe. Both are checked
                before swing extraction, so the outcome does not depend on
                whether a pattern is found.
        """
        snapshot = tuple(candles)[-self.config.max_candles:]
        if symbol is None:
            symbol = snapshot[0].symbol if snapshot else ""
        if timeframe is None:
            timeframe = snapshot[0].timeframe if snapshot else ""
        if snapshot or timeframe:
            timeframe = parse_timeframe(timeframe).value

        result = ScanResult(symbol=symbol, timeframe=timeframe, candle_count=len(snapshot))
        result.stages.append(ScanStage.COLLECTING_CANDLES)
        validate_candle_order(snapshot)

        result.stages.append(ScanStage.EXTRACTING_SWINGS)
        try:
            swings = extract_swings(snapshot, self.config.swing_window).to_list()
        except InsufficientData as e:
            return self._abort(result, str(e))
        result.swing_count = len(swings)

        if self.config.project_completions:
            result.projections = self._project(swings)

        if len(swings) < PATTERN_POINT_COUNT:
            return self._abort(
                result,
                f"Need at least {PATTERN_POINT_COUNT} swing points, got {len(swings)}",
            )

        if detected_at is None:
            detected_at = snapshot[-1].close_time

        result.stages.append(ScanStage.MATCHING_WINDOWS)
        for start in range(len(swings) - PATTERN_POINT_COUNT + 1):
            window = swings[start:start + PATTERN_POINT_COUNT]
            emission = self._evaluate_window(window, result, symbol, timeframe, detected_at)
            if emission is not None:
                result.emissions.append(emission)

        result.status = ScanStatus.EMITTED if result.emissions else ScanStatus.NO_MATCH
        logger.info(
            f"Scan {symbol} {timeframe}: {len(snapshot)} candles, {len(swings)} swings, "
            f"{result.windows_evaluated} windows evaluated, {result.windows_skipped} skipped, "
            f"{len(result.emissions)} patterns emitted"
        )
        return result

    def _evaluate_window(
        self,
        window: List[SwingPoint],
        result: ScanResult,
        symbol: str,
        timeframe: str,
        detected_at: int,
    ) -> Optional[Emission]:
        try:
            ratios = window_ratios(window)
        except UndefinedRatio as e:
            result.windows_skipped += 1
            logger.debug(f"Skipping window at swing index {window[0].index}: {e}")
            return None
        result.windows_evaluated += 1

        matches = match_templates(ratios)
        if not matches:
            logger.debug(f"Window {window[0].index}-{window[-1].index}: no template match {ratios.to_dict()}")
            return None

        if ScanStage.SCORING not in result.stages:
            result.stages.append(ScanStage.SCORING)
        best = select_best(score_candidates(ratios, matches))
        logger.debug(
            f"Window {window[0].index}-{window[-1].index}: matched "
            f"{[m.value for m in matches]}, best {best.pattern_type.value} at {best.confidence:.2f}"
        )
        return self.emitter.emit(best, window, ratios, symbol, timeframe, detected_at)

    def _project(self, swings: List[SwingPoint]) -> List[CompletionProjection]:
        """D projections on the last four swings, then C projections on the last three."""
        projections = []
        for count, predict in (
            (FORMING_POINT_COUNT, predict_completions),
            (EARLY_POINT_COUNT, predict_c_points),
        ):
            if len(swings) < count:
                continue
            try:
                projections.extend(predict(swings[-count:]))
            except UndefinedRatio as e:
                logger.debug(f"No projection on the last {count} swings: {e}")
        return projections

    def _abort(self, result: ScanResult, reason: str) -> ScanResult:
        result.status = ScanStatus.ABORTED
        result.reason = reason
        logger.warning(f"Scan {result.symbol} {result.timeframe} aborted: {reason}")
        return result


def scan_candles(
    candles: Sequence[Candle],
    config: Optional[DetectionConfig] = None,
    symbol: Optional[str] = None,
    timeframe: Optional[str] = None,
    detected_at: Optional[int] = None,
) -> ScanResult:
    """Convenience wrapper: one scan with a throwaway scanner."""
    return PatternScanner(config).scan(candles, symbol, timeframe, detected_at)
