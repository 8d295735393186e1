"""
Ratio Calculator

Fibonacci ratios between adjacent legs of an X-A-B-C-D swing window.

Every ratio divides the absolute price distance of a leg by the absolute
price distance of its reference leg:

    XAB = |AB| / |XA|
    ABC = |BC| / |AB|
    BCD = |CD| / |BC|
    XAD = |AD| / |XA|

XAD is measured against the whole XA leg (how far D has retraced or extended
XA from A), not chained through the intermediate ratios. A reference leg of
zero distance raises UndefinedRatio instead of producing NaN or infinity.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Sequence

from .constants import PATTERN_POINT_COUNT
from .exceptions import UndefinedRatio
from .types import SwingPoint


class Leg(str, Enum):
    """Named leg ratios of a five-point harmonic window."""
    XAB = "XAB"
    ABC = "ABC"
    BCD = "BCD"
    XAD = "XAD"


@dataclass(frozen=True)
class LegRatios:
    """The four realized leg ratios of one X-A-B-C-D window."""
    xab: float
    abc: float
    bcd: float
    xad: float

    def get(self, leg: Leg) -> float:
        return getattr(self, Leg(leg).value.lower())

    def to_dict(self) -> Dict[str, float]:
        return {leg.value: self.get(leg) for leg in Leg}


def leg_ratio(reference_start: float, pivot: float, end: float, leg: str = "leg") -> float:
    """
    Ratio of |end - pivot| to |pivot - reference_start|.

    Args:
        reference_start: First price of the reference leg.
        pivot: Price shared by both legs.
        end: Last price of the measured leg.
        leg: Leg name used in the error message.

    Raises:
        UndefinedRatio: If the reference leg has zero distance.
    """
    reference = abs(pivot - reference_start)
    if reference == 0:
        raise UndefinedRatio(leg)
    return abs(end - pivot) / reference


def xad_ratio(x: float, a: float, d: float) -> float:
    """|AD| / |XA|: where D sits relative to the full XA leg."""
    reference = abs(a - x)
    if reference == 0:
        raise UndefinedRatio(Leg.XAD.value)
    return abs(d - a) / reference


def compute_leg_ratios(x: float, a: float, b: float, c: float, d: float) -> LegRatios:
    """
    Compute XAB, ABC, BCD and XAD for five prices.

    Raises:
        UndefinedRatio: If XA, AB or BC has zero distance.
    """
    return LegRatios(
        xab=leg_ratio(x, a, b, Leg.XAB.value),
        abc=leg_ratio(a, b, c, Leg.ABC.value),
        bcd=leg_ratio(b, c, d, Leg.BCD.value),
        xad=xad_ratio(x, a, d),
    )


def window_ratios(points: Sequence[SwingPoint]) -> LegRatios:
    """Compute leg ratios for a window of exactly five swing points."""
    if len(points) != PATTERN_POINT_COUNT:
        raise ValueError(
            f"A harmonic window needs {PATTERN_POINT_COUNT} points, got {len(points)}"
        )
    return compute_leg_ratios(*(p.price for p in points))
