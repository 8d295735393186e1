"""
Harmonic Pattern Records

Immutable values produced by the emitter: the detected HarmonicPattern with
its five PatternPoints, and the TradeSetup derived from it. Once built, the
engine never touches these again; downstream collaborators own them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .ratio_calculator import LegRatios
from .templates import PatternType


class TradeDirection(str, Enum):
    """LONG when D is a swing low, SHORT when D is a swing high."""
    LONG = "LONG"
    SHORT = "SHORT"


@dataclass(frozen=True)
class PatternPoint:
    """
    One of the X, A, B, C, D points of a pattern.

    Attributes:
        label: "X", "A", "B", "C" or "D".
        price: Swing price of the point.
        timestamp: Open time of the source candle (epoch millis).
        fibonacci_ratio: Ratio realized at this point relative to the prior
            leg. None for X and A, which have no prior leg pair.
        confidence: This point's contribution to the pattern confidence.
        is_predicted: True for a projected completion, False for an
            observed swing.
        index: Candle index of the source swing, None for projections.
    """
    label: str
    price: float
    timestamp: int
    fibonacci_ratio: Optional[float] = None
    confidence: float = 0.0
    is_predicted: bool = False
    index: Optional[int] = None


@dataclass(frozen=True)
class PotentialReversalZone:
    """Price band around D where the reversal is expected."""
    lower: float
    upper: float

    @classmethod
    def around(cls, price: float, tolerance: float) -> "PotentialReversalZone":
        """Band of +/- `tolerance` (a fraction, 0.015 = 1.5%) around price."""
        return cls(lower=price * (1 - tolerance), upper=price * (1 + tolerance))

    def contains(self, price: float) -> bool:
        return self.lower <= price <= self.upper


@dataclass(frozen=True)
class HarmonicPattern:
    """
    A detected five-point harmonic pattern.

    `points` are ordered X, A, B, C, D.
    """
    id: str
    pattern_type: PatternType
    points: Tuple[PatternPoint, ...]
    confidence: float
    direction: TradeDirection
    symbol: str
    timeframe: str
    detected_at: int
    ratios: LegRatios
    prz: PotentialReversalZone

    @staticmethod
    def make_pattern_id(
        symbol: str, timeframe: str, pattern_type: PatternType, x_index: int, d_index: int
    ) -> str:
        """
        Deterministic pattern ID from the window that produced it.

        A (symbol, timeframe) snapshot yields at most one pattern per X/D
        candle pair, so the same scan always reproduces the same IDs.

        Returns:
            ID like "BTCUSDT_4h_GARTLEY_12_40"
        """
        return f"{symbol}_{timeframe}_{PatternType(pattern_type).value}_{x_index}_{d_index}"

    def point(self, label: str) -> PatternPoint:
        for p in self.points:
            if p.label == label:
                return p
        raise KeyError(label)

    @property
    def x(self) -> PatternPoint:
        return self.points[0]

    @property
    def d(self) -> PatternPoint:
        return self.points[-1]


@dataclass(frozen=True)
class TradeSetup:
    """
    Entry/stop/target plan derived from one HarmonicPattern.

    A setup whose entry equals its stop-loss has no defined risk/reward; it
    is kept with is_valid False and invalid_reason DEGENERATE_RR.
    """
    pattern_id: str
    symbol: str
    timeframe: str
    pattern_type: PatternType
    direction: TradeDirection
    entry_price: float
    stop_loss: float
    take_profits: Tuple[float, ...]
    risk_reward_ratio: Optional[float]
    valid_until: int
    is_valid: bool = True
    invalid_reason: Optional[str] = None


@dataclass(frozen=True)
class CompletionProjection:
    """
    Projected next point of a pattern still forming.

    `points` are the observed swings (X, A, B for a C projection, X, A, B, C
    for a D projection) and `projected_point` is the predicted C or D.
    `direction` is the trade direction the completed pattern would give.
    """
    pattern_type: PatternType
    direction: TradeDirection
    points: Tuple[PatternPoint, ...]
    projected_point: PatternPoint
    prz: PotentialReversalZone
    confidence: float


@dataclass(frozen=True)
class Emission:
    """A pattern and the setup derived from it, as emitted by one window."""
    pattern: HarmonicPattern
    setup: TradeSetup
