"""
Confidence Scorer

Turns per-leg ratio deviation into one 0-100 score per matched pattern type
and picks the winning type for a window.

Each leg contributes up to 25 points:

    25 * max(0, 1 - |ratio - ideal| / (max - min))

so a window sitting on every ideal scores 100. The deviation is normalized by
the full band width, which means a ratio at a band edge still earns a share
of the leg's points whenever the ideal is not at the opposite edge.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional

from .constants import LEG_SCORE_WEIGHT, MAX_CONFIDENCE
from .ratio_calculator import Leg, LegRatios
from .templates import PATTERN_PRECEDENCE, RATIO_TEMPLATES, PatternType, RatioBand, RatioTemplate


def leg_score(ratio: float, band: RatioBand) -> float:
    """
    Points (0-25) one leg contributes to confidence.

    A zero-width band scores full points only for an exact hit.
    """
    if band.width == 0:
        return LEG_SCORE_WEIGHT if ratio == band.ideal else 0.0
    closeness = 1.0 - abs(ratio - band.ideal) / band.width
    return LEG_SCORE_WEIGHT * max(0.0, closeness)


@dataclass(frozen=True)
class ScoredCandidate:
    """A matched pattern type together with its confidence breakdown."""
    pattern_type: PatternType
    confidence: float
    leg_scores: Dict[Leg, float] = field(default_factory=dict)

    def leg(self, leg: Leg) -> float:
        return self.leg_scores.get(Leg(leg), 0.0)


def score_candidate(ratios: LegRatios, template: RatioTemplate) -> ScoredCandidate:
    """Score one template against a window's ratios."""
    scores = {leg: leg_score(ratios.get(leg), band) for leg, band in template.bands()}
    total = min(MAX_CONFIDENCE, max(0.0, sum(scores.values())))
    return ScoredCandidate(pattern_type=template.pattern_type, confidence=total, leg_scores=scores)


def score_candidates(
    ratios: LegRatios,
    pattern_types: Iterable[PatternType],
    templates: Optional[Mapping[PatternType, RatioTemplate]] = None,
) -> List[ScoredCandidate]:
    """Score every matched pattern type for one window."""
    templates = RATIO_TEMPLATES if templates is None else templates
    return [score_candidate(ratios, templates[pattern_type]) for pattern_type in pattern_types]


def _precedence(pattern_type: PatternType) -> int:
    return PATTERN_PRECEDENCE.index(pattern_type)


def rank_candidates(candidates: Iterable[ScoredCandidate]) -> List[ScoredCandidate]:
    """Highest confidence first; equal scores ordered by pattern precedence."""
    return sorted(candidates, key=lambda c: (-c.confidence, _precedence(c.pattern_type)))


def select_best(candidates: Iterable[ScoredCandidate]) -> Optional[ScoredCandidate]:
    """
    Pick the single winning candidate for a window.

    Returns:
        The top-ranked candidate, or None when there are no candidates.
    """
    ranked = rank_candidates(candidates)
    return ranked[0] if ranked else None
