"""Scoring: ratings -> six category scores -> weighted final score."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass

from scorecard.config import DEFAULT_CATEGORY_WEIGHTS
from scorecard.metrics.derived import Metrics
from scorecard.ratings import rate_metrics

logger = logging.getLogger(__name__)

# Category -> rating keys averaged into it.
CATEGORY_MEMBERS: dict[str, tuple[str, ...]] = {
    "scale": ("revenue", "marketCap"),
    "growth": ("peg", "cagr"),
    "value": ("peIndustry", "revenueMC", "evEbit", "cmpFcf"),
    "quality": ("roic", "roe", "roce", "opm"),
    "risk": ("volatility", "beta", "seasonality", "revenueVolatility"),
    "balance": ("netDebtProfit", "quickRatio"),
}


@dataclass
class CategoryScores:
    """Mean rating per category, each in [0, 5] or None if unrated."""

    scale: float | None
    growth: float | None
    value: float | None
    quality: float | None
    risk: float | None
    balance: float | None

    def as_dict(self) -> dict[str, float | None]:
        return asdict(self)


@dataclass
class ScoreCard:
    """Ratings, category scores and final score for one ticker."""

    ratings: dict[str, int | None]
    category_scores: CategoryScores
    final_score: float | None


def mean_rating(ratings: list[int | None]) -> float | None:
    """Arithmetic mean of the non-None ratings, or None if all are None."""
    valid = [r for r in ratings if r is not None]
    if not valid:
        return None
    return sum(valid) / len(valid)


def compute_category_scores(ratings: dict[str, int | None]) -> CategoryScores:
    """Average each category's member ratings, ignoring unrated members."""
    scores = {
        category: mean_rating([ratings.get(key) for key in members])
        for category, members in CATEGORY_MEMBERS.items()
    }
    return CategoryScores(**scores)


def compute_final_score(
    category_scores: CategoryScores,
    weights: dict[str, float] | None = None,
) -> float | None:
    """Weighted mean of the available category scores.

    Categories without a score drop out of both numerator and denominator,
    so the remaining weights are renormalised.

    Args:
        category_scores: Per-category scores.
        weights: Category -> weight. Defaults to DEFAULT_CATEGORY_WEIGHTS.

    Returns:
        Final score in [0, 5], or None if no weighted category has a score.
    """
    weights = weights if weights is not None else DEFAULT_CATEGORY_WEIGHTS
    scores = category_scores.as_dict()

    weighted_sum = 0.0
    total_weight = 0.0
    for category, weight in weights.items():
        score = scores.get(category)
        if score is not None:
            weighted_sum += weight * score
            total_weight += weight

    if total_weight <= 0:
        return None
    return weighted_sum / total_weight


def score_metrics(
    metrics: Metrics,
    weights: dict[str, float] | None = None,
) -> ScoreCard:
    """Rate metrics and roll ratings up into category and final scores.

    Args:
        metrics: Derived metrics for one ticker.
        weights: Category weights for the final score.

    Returns:
        ScoreCard for the ticker.
    """
    ratings = rate_metrics(metrics)
    category_scores = compute_category_scores(ratings)
    final_score = compute_final_score(category_scores, weights)

    rated = sum(1 for r in ratings.values() if r is not None)
    logger.debug(
        "%d/%d metrics rated, final score %s",
        rated,
        len(ratings),
        f"{final_score:.2f}" if final_score is not None else "None",
    )
    return ScoreCard(
        ratings=ratings,
        category_scores=category_scores,
        final_score=final_score,
    )
