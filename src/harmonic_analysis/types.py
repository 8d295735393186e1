"""Core data types for harmonic analysis."""

from dataclasses import dataclass
from enum import Enum


class SwingLabel(str, Enum):
    """Which side of the candle a swing point was taken from."""
    HIGH = "HIGH"
    LOW = "LOW"

    @property
    def opposite(self) -> "SwingLabel":
        return SwingLabel.LOW if self is SwingLabel.HIGH else SwingLabel.HIGH


@dataclass(frozen=True)
class Candle:
    """Single OHLCV candle for one (symbol, timeframe) stream.

    Times are epoch milliseconds, matching exchange kline payloads.
    """
    symbol: str
    timeframe: str
    open: float
    high: float
    low: float
    close: float
    volume: float
    open_time: int
    close_time: int


@dataclass(frozen=True)
class SwingPoint:
    """
    A local price extremum in a candle sequence.

    Attributes:
        index: Position of the source candle in the scanned sequence.
        price: The candle's high for HIGH swings, its low for LOW swings.
        timestamp: Open time of the source candle (epoch millis).
        label: HIGH or LOW.
    """
    index: int
    price: float
    timestamp: int
    label: SwingLabel

    @property
    def is_high(self) -> bool:
        return self.label is SwingLabel.HIGH
