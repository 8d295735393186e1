"""
Harmonic Ratio Templates

Fixed (min, ideal, max) tolerance bands for the four legs of each supported
pattern type. The table is built once at import and exposed read-only, so
concurrent scans can share it by reference.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Tuple

from .ratio_calculator import Leg


class PatternType(str, Enum):
    """Supported harmonic patterns, in tie-break precedence order."""
    GARTLEY = "GARTLEY"
    BUTTERFLY = "BUTTERFLY"
    BAT = "BAT"
    CRAB = "CRAB"
    CYPHER = "CYPHER"


# Earlier entries win equal confidence scores.
PATTERN_PRECEDENCE: Tuple[PatternType, ...] = tuple(PatternType)


@dataclass(frozen=True)
class RatioBand:
    """
    Tolerance band for one leg ratio.

    Eligibility uses [minimum, maximum] inclusive; `ideal` only weights
    confidence.
    """
    minimum: float
    ideal: float
    maximum: float

    def __post_init__(self) -> None:
        if not self.minimum <= self.ideal <= self.maximum:
            raise ValueError(
                f"Band must satisfy min <= ideal <= max, got "
                f"({self.minimum}, {self.ideal}, {self.maximum})"
            )

    @property
    def width(self) -> float:
        return self.maximum - self.minimum

    def contains(self, ratio: float) -> bool:
        return self.minimum <= ratio <= self.maximum


@dataclass(frozen=True)
class RatioTemplate:
    """The four leg bands that define one pattern type."""
    pattern_type: PatternType
    xab: RatioBand
    abc: RatioBand
    bcd: RatioBand
    xad: RatioBand

    def band(self, leg: Leg) -> RatioBand:
        return getattr(self, Leg(leg).value.lower())

    def bands(self) -> Iterator[Tuple[Leg, RatioBand]]:
        for leg in Leg:
            yield leg, self.band(leg)


def _template(pattern_type: PatternType, bands: Dict[str, Tuple[float, float, float]]) -> RatioTemplate:
    return RatioTemplate(
        pattern_type=pattern_type,
        **{leg.lower(): RatioBand(*values) for leg, values in bands.items()},
    )


RATIO_TEMPLATES: Mapping[PatternType, RatioTemplate] = MappingProxyType({
    PatternType.GARTLEY: _template(PatternType.GARTLEY, {
        "XAB": (0.586, 0.618, 0.648),
        "ABC": (0.382, 0.618, 0.886),
        "BCD": (1.13, 1.272, 1.618),
        "XAD": (0.766, 0.786, 0.806),
    }),
    PatternType.BUTTERFLY: _template(PatternType.BUTTERFLY, {
        "XAB": (0.766, 0.786, 0.806),
        "ABC": (0.382, 0.618, 0.886),
        "BCD": (1.618, 2.24, 2.618),
        "XAD": (1.17, 1.27, 1.618),
    }),
    PatternType.BAT: _template(PatternType.BAT, {
        "XAB": (0.382, 0.5, 0.618),
        "ABC": (0.382, 0.618, 0.886),
        "BCD": (1.618, 2.0, 2.618),
        "XAD": (0.866, 0.886, 0.906),
    }),
    PatternType.CRAB: _template(PatternType.CRAB, {
        "XAB": (0.382, 0.5, 0.618),
        "ABC": (0.382, 0.618, 0.886),
        "BCD": (2.618, 3.14, 3.618),
        "XAD": (1.588, 1.618, 1.648),
    }),
    PatternType.CYPHER: _template(PatternType.CYPHER, {
        "XAB": (0.468, 0.5, 0.532),
        "ABC": (1.13, 1.414, 1.618),
        "BCD": (0.75, 0.786, 0.82),
        "XAD": (0.75, 0.786, 0.82),
    }),
})


def get_template(pattern_type: PatternType) -> RatioTemplate:
    """Look up the template for a pattern type (accepts the string name)."""
    return RATIO_TEMPLATES[PatternType(pattern_type)]
