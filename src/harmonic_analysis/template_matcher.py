"""
Template Matcher

Decides, leg by leg, whether a window's realized ratios fall inside a
template's bands. A pattern type is a candidate only when all four legs
match; there is no partial credit. When several types match the same window
they are all returned, in precedence order, and the scorer picks the winner.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from .ratio_calculator import Leg, LegRatios
from .templates import PATTERN_PRECEDENCE, RATIO_TEMPLATES, PatternType, RatioBand, RatioTemplate


def match_leg(ratio: float, band: RatioBand) -> bool:
    """True when min <= ratio <= max."""
    return band.contains(ratio)


@dataclass(frozen=True)
class TemplateMatch:
    """Per-leg MATCH/NO-MATCH outcome of one template against one window."""
    pattern_type: PatternType
    legs: Dict[Leg, bool] = field(default_factory=dict)

    @property
    def matched(self) -> bool:
        return bool(self.legs) and all(self.legs.values())

    @property
    def failed_legs(self) -> List[Leg]:
        return [leg for leg, ok in self.legs.items() if not ok]


def match_template(ratios: LegRatios, template: RatioTemplate) -> TemplateMatch:
    """Evaluate every leg of one template; never short-circuits."""
    return TemplateMatch(
        pattern_type=template.pattern_type,
        legs={leg: match_leg(ratios.get(leg), band) for leg, band in template.bands()},
    )


def match_templates(
    ratios: LegRatios,
    templates: Optional[Mapping[PatternType, RatioTemplate]] = None,
) -> List[PatternType]:
    """
    All pattern types whose four bands contain the window's ratios.

    Args:
        ratios: Realized leg ratios of one X-A-B-C-D window.
        templates: Template table (defaults to RATIO_TEMPLATES).

    Returns:
        Matching pattern types in precedence order; empty when nothing matches.
    """
    templates = RATIO_TEMPLATES if templates is None else templates
    matches = []
    for pattern_type in PATTERN_PRECEDENCE:
        template = templates.get(pattern_type)
        if template is not None and match_template(ratios, template).matched:
            matches.append(pattern_type)
    return matches
