"""
Fibonacci price helpers.

Free functions for turning leg ratios into prices and back. All functions
work on plain floats and are direction-agnostic: the sign of the leg
(end - start) carries the direction.
"""

from typing import Dict, List, Optional

from .constants import EXTENSION_LEVELS, RETRACEMENT_LEVELS


def retracement_price(start: float, end: float, ratio: float) -> float:
    """
    Price that retraces `ratio` of the start->end leg, measured from end.

    ratio 0 returns end, ratio 1 returns start.

    Example:
        >>> retracement_price(100.0, 200.0, 0.5)
        150.0
    """
    return end + (start - end) * ratio


def projection_price(start: float, end: float, origin: float, ratio: float) -> float:
    """
    Project `ratio` times the start->end leg from `origin`.

    Example:
        >>> projection_price(100.0, 200.0, 150.0, 1.0)
        250.0
    """
    return origin + (end - start) * ratio


def extension_price(start: float, end: float, ratio: float) -> float:
    """Price `ratio` times the leg length from start, in the leg's direction."""
    return projection_price(start, end, start, ratio)


def retracement_levels(start: float, end: float, levels: Optional[List[float]] = None) -> Dict[float, float]:
    """Map each retracement ratio to its price for the start->end leg."""
    return {ratio: retracement_price(start, end, ratio) for ratio in (levels or RETRACEMENT_LEVELS)}


def nearest_fibonacci_level(ratio: float) -> float:
    """Closest standard retracement or extension level to a realized ratio."""
    all_levels = RETRACEMENT_LEVELS + EXTENSION_LEVELS
    return min(all_levels, key=lambda level: abs(level - ratio))
