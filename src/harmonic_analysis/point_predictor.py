"""
Completion Projector

Projects the next point of a pattern that is still forming.

With four swings (X, A, B, C) whose XAB and ABC ratios fit a template, D is
estimated two ways and averaged:

    D1 = retracement of XA from A by the template's XAD ideal
    D2 = extension of BC from C by the template's BCD ideal

The closer the two estimates agree, the higher the projection's confidence,
with a floor of 50.

With only three swings (X, A, B) whose XAB ratio fits a template, C is placed
at the template's ABC ideal retracement of AB, measured from B, at a fixed
confidence of 70. One leg gives one estimate, so there is no agreement to
score.

Projections are advisory; they are never emitted as HarmonicPatterns.
"""

from typing import List, Mapping, Optional, Sequence

from .confidence_scorer import leg_score
from .constants import (
    C_PROJECTION_CONFIDENCE,
    MAX_CONFIDENCE,
    POINT_LABELS,
    PROJECTION_MIN_CONFIDENCE,
    PROJECTION_PRZ_TOLERANCE,
)
from .fibonacci import retracement_price
from .models import CompletionProjection, PatternPoint, PotentialReversalZone, TradeDirection
from .ratio_calculator import Leg, leg_ratio
from .templates import PATTERN_PRECEDENCE, RATIO_TEMPLATES, PatternType, RatioTemplate
from .types import SwingLabel, SwingPoint


FORMING_POINT_COUNT = 4
EARLY_POINT_COUNT = 3


def projection_confidence(d1: float, d2: float) -> float:
    """100 minus the relative spread of the two D estimates, floored at 50."""
    mid = (d1 + d2) / 2
    if mid == 0:
        return PROJECTION_MIN_CONFIDENCE
    spread = abs(d1 - d2) / abs(mid)
    return max(PROJECTION_MIN_CONFIDENCE, MAX_CONFIDENCE - spread * 100)


def _observed_points(points, ratios, scores) -> tuple:
    return tuple(
        PatternPoint(label=label, price=p.price, timestamp=p.timestamp,
                     fibonacci_ratio=ratio, confidence=score, index=p.index)
        for label, p, ratio, score in zip(POINT_LABELS, points, ratios, scores)
    )


def _direction_after(last: SwingPoint, points_left: int) -> TradeDirection:
    # D alternates with the last observed swing every remaining step;
    # a D low means LONG
    d_label = last.label if points_left % 2 == 0 else last.label.opposite
    return TradeDirection.LONG if d_label is SwingLabel.LOW else TradeDirection.SHORT


def project_c_point(
    points: Sequence[SwingPoint],
    template: RatioTemplate,
) -> Optional[CompletionProjection]:
    """
    Project C for one template over three swings (X, A, B).

    Returns:
        The projection, or None when XAB falls outside the template's band.

    Raises:
        ValueError: If `points` does not hold exactly three swings.
        UndefinedRatio: If XA has zero distance.
    """
    if len(points) != EARLY_POINT_COUNT:
        raise ValueError(f"Need {EARLY_POINT_COUNT} swings to project C, got {len(points)}")
    x, a, b = points

    xab = leg_ratio(x.price, a.price, b.price, Leg.XAB.value)
    if not template.xab.contains(xab):
        return None

    projected_price = retracement_price(a.price, b.price, template.abc.ideal)
    projected_c = PatternPoint(
        label="C",
        price=projected_price,
        timestamp=b.timestamp + (b.timestamp - a.timestamp),
        fibonacci_ratio=template.abc.ideal,
        confidence=C_PROJECTION_CONFIDENCE,
        is_predicted=True,
    )

    return CompletionProjection(
        pattern_type=template.pattern_type,
        direction=_direction_after(b, 2),
        points=_observed_points(points, (None, None, xab), (0.0, 0.0, leg_score(xab, template.xab))),
        projected_point=projected_c,
        prz=PotentialReversalZone.around(projected_price, PROJECTION_PRZ_TOLERANCE),
        confidence=C_PROJECTION_CONFIDENCE,
    )


def project_completion(
    points: Sequence[SwingPoint],
    template: RatioTemplate,
) -> Optional[CompletionProjection]:
    """
    Project D for one template over four swings (X, A, B, C).

    Returns:
        The projection, or None when XAB or ABC falls outside the
        template's bands.

    Raises:
        ValueError: If `points` does not hold exactly four swings.
        UndefinedRatio: If XA or AB has zero distance.
    """
    if len(points) != FORMING_POINT_COUNT:
        raise ValueError(f"Need {FORMING_POINT_COUNT} swings to project D, got {len(points)}")
    x, a, b, c = points

    xab = leg_ratio(x.price, a.price, b.price, Leg.XAB.value)
    abc = leg_ratio(a.price, b.price, c.price, Leg.ABC.value)
    if not (template.xab.contains(xab) and template.abc.contains(abc)):
        return None

    d1 = retracement_price(x.price, a.price, template.xad.ideal)
    d2 = retracement_price(b.price, c.price, template.bcd.ideal)
    projected_price = (d1 + d2) / 2
    # Mean of the AB and BC durations, past C
    projected_time = c.timestamp + (c.timestamp - a.timestamp) // 2
    confidence = projection_confidence(d1, d2)

    observed = _observed_points(
        points,
        (None, None, xab, abc),
        (0.0, 0.0, leg_score(xab, template.xab), leg_score(abc, template.abc)),
    )
    projected_d = PatternPoint(
        label="D",
        price=projected_price,
        timestamp=projected_time,
        fibonacci_ratio=(template.xad.ideal + template.bcd.ideal) / 2,
        confidence=confidence,
        is_predicted=True,
    )

    return CompletionProjection(
        pattern_type=template.pattern_type,
        direction=_direction_after(c, 1),
        points=observed,
        projected_point=projected_d,
        prz=PotentialReversalZone.around(projected_price, PROJECTION_PRZ_TOLERANCE),
        confidence=confidence,
    )


def _predict(points, templates, project) -> List[CompletionProjection]:
    templates = RATIO_TEMPLATES if templates is None else templates
    projections = []
    for pattern_type in PATTERN_PRECEDENCE:
        template = templates.get(pattern_type)
        if template is None:
            continue
        projection = project(points, template)
        if projection is not None:
            projections.append(projection)
    return projections


def predict_completions(
    points: Sequence[SwingPoint],
    templates: Optional[Mapping[PatternType, RatioTemplate]] = None,
) -> List[CompletionProjection]:
    """Project D for every template whose XAB and ABC bands fit, in precedence order."""
    return _predict(points, templates, project_completion)


def predict_c_points(
    points: Sequence[SwingPoint],
    templates: Optional[Mapping[PatternType, RatioTemplate]] = None,
) -> List[CompletionProjection]:
    """Project C for every template whose XAB band fits, in precedence order."""
    return _predict(points, templates, project_c_point)
