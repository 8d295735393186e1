"""
Swing Extractor

Turns an ordered candle sequence into an alternating sequence of HIGH/LOW
turning points.

A candle is a raw swing HIGH when its high is strictly above the highs of
its neighbors within the comparison window, and a raw swing LOW when its low
is strictly below theirs. Ties are not swings. Consecutive raw extrema that
share a label are collapsed to the most extreme one, so the output always
alternates.
"""

from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .exceptions import InsufficientData
from .types import Candle, SwingLabel, SwingPoint


def find_raw_extrema(
    highs: np.ndarray,
    lows: np.ndarray,
    lookback: int = 1,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Flag candles that are strict local extrema.

    Args:
        highs: Candle highs in time order.
        lows: Candle lows in time order.
        lookback: Neighbors compared on each side.

    Returns:
        Tuple of boolean masks (is_high, is_low). The first and last
        `lookback` candles are never flagged.
    """
    n = len(highs)
    is_high = np.zeros(n, dtype=bool)
    is_low = np.zeros(n, dtype=bool)
    if n < 2 * lookback + 1:
        return is_high, is_low

    inner = slice(lookback, n - lookback)
    is_high[inner] = True
    is_low[inner] = True
    center_high = highs[inner]
    center_low = lows[inner]

    for j in range(1, lookback + 1):
        before = slice(lookback - j, n - lookback - j)
        after = slice(lookback + j, n - lookback + j)
        is_high[inner] &= (center_high > highs[before]) & (center_high > highs[after])
        is_low[inner] &= (center_low < lows[before]) & (center_low < lows[after])

    return is_high, is_low


def collapse_runs(points: Iterable[SwingPoint]) -> Iterator[SwingPoint]:
    """
    Collapse runs of same-label points into their most extreme member.

    The more extreme high (or the lower low) survives; on equal prices the
    earlier point is kept.
    """
    pending: Optional[SwingPoint] = None
    for point in points:
        if pending is None:
            pending = point
            continue
        if point.label is pending.label:
            if point.is_high and point.price > pending.price:
                pending = point
            elif not point.is_high and point.price < pending.price:
                pending = point
            continue
        yield pending
        pending = point
    if pending is not None:
        yield pending


class SwingSequence:
    """
    Lazy, restartable view of the swing points of a candle snapshot.

    Extremum masks are computed once on construction; swing points are
    produced on iteration, and every call to iter() starts a fresh pass.

    Example:
        >>> swings = SwingSequence(candles)
        >>> labels = [s.label for s in swings]
    """

    def __init__(self, candles: Sequence[Candle], window: int = 3):
        if window < 3 or window % 2 == 0:
            raise ValueError(f"window must be an odd number >= 3, got {window}")
        self._candles = tuple(candles)
        self.window = window
        if len(self._candles) < window:
            raise InsufficientData(
                f"Need at least {window} candles to find a swing, got {len(self._candles)}",
                available=len(self._candles),
                required=window,
            )

        highs = np.fromiter((c.high for c in self._candles), dtype=float, count=len(self._candles))
        lows = np.fromiter((c.low for c in self._candles), dtype=float, count=len(self._candles))
        self._is_high, self._is_low = find_raw_extrema(highs, lows, (window - 1) // 2)

    @property
    def candle_count(self) -> int:
        return len(self._candles)

    def __iter__(self) -> Iterator[SwingPoint]:
        return collapse_runs(self._raw_points())

    def to_list(self) -> List[SwingPoint]:
        """Materialize the sequence into one contiguous list."""
        return list(self)

    def _raw_points(self) -> Iterator[SwingPoint]:
        last_label: Optional[SwingLabel] = None
        for i in np.flatnonzero(self._is_high | self._is_low):
            i = int(i)
            candle = self._candles[i]
            found = []
            if self._is_high[i]:
                found.append(SwingPoint(i, candle.high, candle.open_time, SwingLabel.HIGH))
            if self._is_low[i]:
                found.append(SwingPoint(i, candle.low, candle.open_time, SwingLabel.LOW))
            # Outside candle: order both points so they continue the alternation
            if len(found) == 2 and last_label is SwingLabel.HIGH:
                found.reverse()
            for point in found:
                last_label = point.label
                yield point


def extract_swings(candles: Sequence[Candle], window: int = 3) -> SwingSequence:
    """
    Extract alternating swing points from a candle sequence.

    Args:
        candles: Candles in strictly increasing open-time order.
        window: Odd comparison window; 3 compares single neighbors.

    Returns:
        A restartable SwingSequence containing at least one point.

    Raises:
        InsufficientData: Fewer than `window` candles, or no swing found.
    """
    swings = SwingSequence(candles, window)
    if next(iter(swings), None) is None:
        raise InsufficientData(
            f"No swing points found in {swings.candle_count} candles",
            available=0,
            required=1,
        )
    return swings
