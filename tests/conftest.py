"""
Shared test fixtures and helpers for harmonic analysis tests.
"""

from typing import List, Sequence, Tuple

import pytest

from src.harmonic_analysis.types import Candle, SwingLabel, SwingPoint

BASE_TIME = 1700000000000  # epoch millis
HOUR = 60 * 60 * 1000

# Swing pivots of a clean bullish Gartley: XAB .618, ABC .618, XAD .786
GARTLEY_PIVOTS = [100.0, 200.0, 138.2, 176.3924, 121.4]
# Bearish mirror of the same shape
BEARISH_GARTLEY_PIVOTS = [200.0, 100.0, 161.8, 123.6076, 178.6]
# Bullish Butterfly whose D (73) extends below X
BUTTERFLY_PIVOTS = [100.0, 200.0, 121.4, 169.9748, 73.0]


def make_candle(
    index: int,
    high: float,
    low: float,
    open_: float = None,
    close: float = None,
    symbol: str = "BTCUSDT",
    timeframe: str = "1h",
    interval: int = HOUR,
) -> Candle:
    """Helper to create Candle objects for testing.

    Args:
        index: Position in the sequence; drives the open time.
        high: High price
        low: Low price
        open_: Opening price (defaults to the midpoint)
        close: Closing price (defaults to the midpoint)

    Returns:
        Candle opening at BASE_TIME + index * interval
    """
    mid = (high + low) / 2
    open_time = BASE_TIME + index * interval
    return Candle(
        symbol=symbol,
        timeframe=timeframe,
        open=mid if open_ is None else open_,
        high=high,
        low=low,
        close=mid if close is None else close,
        volume=1000.0,
        open_time=open_time,
        close_time=open_time + interval - 1,
    )


def candles_from_ranges(ranges: Sequence[Tuple[float, float]], **kwargs) -> List[Candle]:
    """Candles from (high, low) pairs, one per index."""
    return [make_candle(i, high, low, **kwargs) for i, (high, low) in enumerate(ranges)]


def candles_through(pivots: Sequence[float], steps: int = 4, **kwargs) -> List[Candle]:
    """
    Build a candle path whose swing points are exactly `pivots`.

    Pivots alternate, starting with a LOW when the second pivot is higher.
    Each pivot gets its own candle whose low (for a LOW) or high (for a HIGH)
    is the pivot price, with `steps` one-point-wide candles interpolated
    between pivots. One extra candle before the first pivot and after the
    last keeps both endpoints interior. Pivot candles sit at indices
    1, 1 + (steps + 1), 1 + 2 * (steps + 1), ...

    Adjacent pivots must be more than (steps + 1) / 2 apart.
    """
    first_is_low = pivots[1] > pivots[0]
    ranges = []

    def pivot_range(price: float, is_low: bool) -> Tuple[float, float]:
        return (price + 1.0, price) if is_low else (price, price - 1.0)

    def outside_range(price: float, is_low: bool) -> Tuple[float, float]:
        # Away from the pivot so the pivot stays the extreme
        return (price + 6.0, price + 5.0) if is_low else (price - 5.0, price - 6.0)

    ranges.append(outside_range(pivots[0], first_is_low))
    for k, price in enumerate(pivots):
        is_low = first_is_low == (k % 2 == 0)
        ranges.append(pivot_range(price, is_low))
        if k + 1 < len(pivots):
            nxt = pivots[k + 1]
            for step in range(1, steps + 1):
                mid = price + (nxt - price) * step / (steps + 1)
                ranges.append((mid + 0.5, mid - 0.5))
    last_is_low = first_is_low == ((len(pivots) - 1) % 2 == 0)
    ranges.append(outside_range(pivots[-1], last_is_low))

    return candles_from_ranges(ranges, **kwargs)


def pivot_index(k: int, steps: int = 4) -> int:
    """Candle index of the k-th pivot built by candles_through()."""
    return 1 + k * (steps + 1)


def make_swings(prices: Sequence[float], first_label: SwingLabel = SwingLabel.LOW) -> List[SwingPoint]:
    """Alternating swing points at indices 0, 5, 10, ... one hour apart."""
    swings = []
    label = first_label
    for k, price in enumerate(prices):
        swings.append(SwingPoint(index=k * 5, price=price, timestamp=BASE_TIME + k * 5 * HOUR, label=label))
        label = label.opposite
    return swings


@pytest.fixture
def gartley_candles() -> List[Candle]:
    return candles_through(GARTLEY_PIVOTS)


@pytest.fixture
def bearish_gartley_candles() -> List[Candle]:
    return candles_through(BEARISH_GARTLEY_PIVOTS)
