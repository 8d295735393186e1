"""
Pydantic models for harmonic scan output.

Response schemas for patterns, trade setups, projections and whole scan
results, plus builder functions converting the engine's dataclasses into
them. These are the shapes handed to persistence and printed by the CLI.
"""
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from .models import CompletionProjection, HarmonicPattern, PatternPoint, PotentialReversalZone, TradeSetup
from .scanner import ScanResult
from .templates import RATIO_TEMPLATES


# ============================================================================
# Pattern Models
# ============================================================================


class PatternPointResponse(BaseModel):
    """One X/A/B/C/D point."""
    label: str
    price: float
    timestamp: int
    fibonacci_ratio: Optional[float] = None
    confidence: float
    is_predicted: bool = False
    index: Optional[int] = None


class ReversalZoneResponse(BaseModel):
    lower: float
    upper: float


class HarmonicPatternResponse(BaseModel):
    """A detected pattern with its five points and realized ratios."""
    model_config = ConfigDict(frozen=True)

    id: str
    pattern_type: str
    symbol: str
    timeframe: str
    direction: str  # "LONG" or "SHORT"
    confidence: float
    detected_at: int
    points: List[PatternPointResponse]
    ratios: Dict[str, float]
    prz: ReversalZoneResponse


class TradeSetupResponse(BaseModel):
    """Entry, stop and targets derived from one pattern."""
    model_config = ConfigDict(frozen=True)

    pattern_id: str
    symbol: str
    timeframe: str
    pattern_type: str
    direction: str
    entry_price: float
    stop_loss: float
    take_profit_1: float
    take_profit_2: Optional[float] = None
    take_profit_3: Optional[float] = None
    risk_reward_ratio: Optional[float] = None
    valid_until: int
    is_valid: bool
    invalid_reason: Optional[str] = None


class CompletionProjectionResponse(BaseModel):
    pattern_type: str
    direction: str
    confidence: float
    points: List[PatternPointResponse]
    projected_point: PatternPointResponse
    prz: ReversalZoneResponse


# ============================================================================
# Scan Models
# ============================================================================


class DetectionResponse(BaseModel):
    """A pattern paired with its setup."""
    pattern: HarmonicPatternResponse
    setup: TradeSetupResponse


class ScanResultResponse(BaseModel):
    """Outcome of one scan cycle for a (symbol, timeframe)."""
    symbol: str
    timeframe: str
    status: str  # "ABORTED", "NO_MATCH" or "EMITTED"
    reason: Optional[str] = None
    candle_count: int
    swing_count: int
    windows_evaluated: int
    windows_skipped: int
    stages: List[str]
    detections: List[DetectionResponse]
    projections: List[CompletionProjectionResponse] = []


class RatioBandResponse(BaseModel):
    min: float
    ideal: float
    max: float


class TemplateResponse(BaseModel):
    """One pattern type's ratio table."""
    pattern_type: str
    legs: Dict[str, RatioBandResponse]


# ============================================================================
# Builders
# ============================================================================


def point_to_response(point: PatternPoint) -> PatternPointResponse:
    return PatternPointResponse(
        label=point.label,
        price=point.price,
        timestamp=point.timestamp,
        fibonacci_ratio=point.fibonacci_ratio,
        confidence=point.confidence,
        is_predicted=point.is_predicted,
        index=point.index,
    )


def _zone(prz: PotentialReversalZone) -> ReversalZoneResponse:
    return ReversalZoneResponse(lower=prz.lower, upper=prz.upper)


def pattern_to_response(pattern: HarmonicPattern) -> HarmonicPatternResponse:
    return HarmonicPatternResponse(
        id=pattern.id,
        pattern_type=pattern.pattern_type.value,
        symbol=pattern.symbol,
        timeframe=pattern.timeframe,
        direction=pattern.direction.value,
        confidence=pattern.confidence,
        detected_at=pattern.detected_at,
        points=[point_to_response(p) for p in pattern.points],
        ratios=pattern.ratios.to_dict(),
        prz=_zone(pattern.prz),
    )


def setup_to_response(setup: TradeSetup) -> TradeSetupResponse:
    """
    Flatten a TradeSetup; the take-profit tuple maps onto three columns,
    missing targets left as None.
    """
    targets = list(setup.take_profits) + [None] * (3 - len(setup.take_profits))
    return TradeSetupResponse(
        pattern_id=setup.pattern_id,
        symbol=setup.symbol,
        timeframe=setup.timeframe,
        pattern_type=setup.pattern_type.value,
        direction=setup.direction.value,
        entry_price=setup.entry_price,
        stop_loss=setup.stop_loss,
        take_profit_1=targets[0],
        take_profit_2=targets[1],
        take_profit_3=targets[2],
        risk_reward_ratio=setup.risk_reward_ratio,
        valid_until=setup.valid_until,
        is_valid=setup.is_valid,
        invalid_reason=setup.invalid_reason,
    )


def projection_to_response(projection: CompletionProjection) -> CompletionProjectionResponse:
    return CompletionProjectionResponse(
        pattern_type=projection.pattern_type.value,
        direction=projection.direction.value,
        confidence=projection.confidence,
        points=[point_to_response(p) for p in projection.points],
        projected_point=point_to_response(projection.projected_point),
        prz=_zone(projection.prz),
    )


def build_scan_response(result: ScanResult) -> ScanResultResponse:
    """Build the full response for one scan cycle."""
    return ScanResultResponse(
        symbol=result.symbol,
        timeframe=result.timeframe,
        status=result.status.value,
        reason=result.reason,
        candle_count=result.candle_count,
        swing_count=result.swing_count,
        windows_evaluated=result.windows_evaluated,
        windows_skipped=result.windows_skipped,
        stages=[stage.value for stage in result.stages],
        detections=[
            DetectionResponse(
                pattern=pattern_to_response(e.pattern),
                setup=setup_to_response(e.setup),
            )
            for e in result.emissions
        ],
        projections=[projection_to_response(p) for p in result.projections],
    )


def build_template_responses() -> List[TemplateResponse]:
    """The ratio table, one entry per pattern type in precedence order."""
    return [
        TemplateResponse(
            pattern_type=pattern_type.value,
            legs={
                leg.value: RatioBandResponse(min=band.minimum, ideal=band.ideal, max=band.maximum)
                for leg, band in template.bands()
            },
        )
        for pattern_type, template in RATIO_TEMPLATES.items()
    ]
