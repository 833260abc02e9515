"""Rating functions: map a raw metric value to an integer rating 0-5.

Each metric has an ordered bucket table of ``(upper_bound, rating)`` pairs.
A value takes the rating of the first bucket whose bound it is strictly
below, so a value equal to a bound falls into the next bucket. Values at or
above every bound take the table's fallthrough rating.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from scorecard.metrics.derived import Metrics

Buckets = tuple[tuple[float, int], ...]


@dataclass(frozen=True)
class BucketRule:
    """Ordered thresholds plus the rating for values beyond the last one.

    Attributes:
        buckets: ``(upper_bound, rating)`` pairs in ascending bound order.
        otherwise: Rating when the value is >= every bound.
        scale: Multiplier applied to the value before comparison.
    """

    buckets: Buckets
    otherwise: int
    scale: float = 1.0

    def __call__(self, value: float | None) -> int | None:
        if value is None:
            return None
        scaled = value * self.scale
        for bound, rating in self.buckets:
            if scaled < bound:
                return rating
        return self.otherwise


rate_revenue = BucketRule(
    ((1000, 0), (5000, 1), (20000, 2), (50000, 3), (100000, 4)), 5
)
rate_market_cap = BucketRule(
    ((1000, 0), (5000, 1), (20000, 2), (100000, 3), (500000, 4)), 5
)
rate_peg = BucketRule(((1, 5), (1.5, 4), (2, 3), (2.5, 2), (3, 1)), 0)
rate_cagr = BucketRule(((0, 0), (5, 1), (10, 2), (15, 3), (20, 4)), 5)
rate_pe_industry = BucketRule(
    ((0.6, 5), (0.8, 4), (1, 3), (1.2, 2), (1.5, 1)), 0
)
# Revenue / market cap is compared as a percentage.
rate_revenue_mc = BucketRule(
    ((5, 0), (10, 1), (15, 2), (25, 3), (40, 4)), 5, scale=100
)
rate_ev_ebit = BucketRule(((7, 5), (10, 4), (15, 3), (20, 2), (25, 1)), 0)
rate_cmp_fcf = BucketRule(((10, 5), (15, 4), (20, 3), (30, 2), (40, 1)), 0)
rate_roic = BucketRule(((5, 0), (10, 1), (15, 2), (20, 3), (30, 4)), 5)
rate_roe = BucketRule(((8, 0), (12, 1), (15, 2), (20, 3), (30, 4)), 5)
rate_roce = BucketRule(((10, 0), (15, 1), (20, 2), (25, 3), (35, 4)), 5)
rate_opm = BucketRule(((5, 0), (10, 1), (15, 2), (20, 3), (30, 4)), 5)
rate_volatility = BucketRule(((10, 5), (15, 4), (20, 3), (25, 2), (30, 1)), 0)
rate_beta = BucketRule(((0.6, 5), (0.8, 4), (1, 3), (1.2, 2), (1.5, 1)), 0)
rate_revenue_volatility = BucketRule(((10, 5), (15, 3), (20, 1)), 0)
rate_quick_ratio = BucketRule(((0.8, 0), (1, 1), (1.2, 2), (1.5, 3), (2, 4)), 5)

_net_debt_profit_buckets = BucketRule(((1, 4), (2, 3), (3, 2), (5, 1)), 0)


def rate_seasonality(value: object) -> int | None:
    """Non-seasonal sectors rate 5, seasonal ones 2; anything else None."""
    if value is False:
        return 5
    if value is True:
        return 2
    return None


def rate_net_debt_profit(value: float | None, is_net_cash: bool) -> int | None:
    """Net cash always rates 5; negative or missing ratios are unrated."""
    if is_net_cash:
        return 5
    if value is None or value < 0:
        return None
    return _net_debt_profit_buckets(value)


# Rating key -> (Metrics attribute, rating function). Net debt / profit is
# rated separately because it also needs the net-cash flag.
RATING_TABLE: dict[str, tuple[str, Callable[[Any], int | None]]] = {
    "revenue": ("revenue", rate_revenue),
    "marketCap": ("market_cap", rate_market_cap),
    "peg": ("peg", rate_peg),
    "cagr": ("cagr", rate_cagr),
    "peIndustry": ("pe_industry_ratio", rate_pe_industry),
    "revenueMC": ("revenue_mc", rate_revenue_mc),
    "evEbit": ("ev_ebit", rate_ev_ebit),
    "cmpFcf": ("cmp_fcf", rate_cmp_fcf),
    "roic": ("roic", rate_roic),
    "roe": ("roe", rate_roe),
    "roce": ("roce", rate_roce),
    "opm": ("opm", rate_opm),
    "volatility": ("volatility", rate_volatility),
    "beta": ("beta", rate_beta),
    "seasonality": ("seasonality", rate_seasonality),
    "revenueVolatility": ("revenue_volatility", rate_revenue_volatility),
    "quickRatio": ("quick_ratio", rate_quick_ratio),
}

RATING_KEYS: tuple[str, ...] = (*RATING_TABLE, "netDebtProfit")


def rate_metrics(metrics: Metrics) -> dict[str, int | None]:
    """Rate every metric.

    Args:
        metrics: Derived metrics for one ticker.

    Returns:
        Rating key -> rating in [0, 5] or None.
    """
    ratings: dict[str, int | None] = {
        key: rate(getattr(metrics, attr))
        for key, (attr, rate) in RATING_TABLE.items()
    }
    ratings["netDebtProfit"] = rate_net_debt_profit(
        metrics.net_debt_profit, metrics.is_net_cash
    )
    return ratings
