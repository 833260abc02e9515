"""Revenue volatility across the three most recent annual statements."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from scorecard.config import MIN_REVENUE_PERIODS
from scorecard.data.models import Module, number_value

logger = logging.getLogger(__name__)

# (upper bound, label); values at or above the last bound are "Very High".
_VOLATILITY_LABELS: tuple[tuple[float, str], ...] = (
    (10, "Low"),
    (15, "Medium"),
    (20, "High"),
)


@dataclass
class RevenueStability:
    """Revenue volatility outputs.

    Attributes:
        revenue_volatility: Coefficient of variation (population stdev /
            mean) of the latest three revenues, in percent.
        label: Low / Medium / High / Very High. Display only, not rated.
    """

    revenue_volatility: float | None
    label: str | None


def volatility_label(value: float) -> str:
    for bound, label in _VOLATILITY_LABELS:
        if value < bound:
            return label
    return "Very High"


def compute_revenue_stability(
    income_statements: list[Module], symbol: str = ""
) -> RevenueStability:
    """Compute revenue volatility from annual income statements.

    Requires at least three statements, and the three most recent must
    each report totalRevenue.

    Args:
        income_statements: Income statements, most recent first.
        symbol: Ticker for log messages.

    Returns:
        RevenueStability; both fields None when data is insufficient or
        mean revenue is zero.
    """
    if len(income_statements) < MIN_REVENUE_PERIODS:
        logger.debug(
            "%s: %d income statements, revenue volatility needs %d",
            symbol, len(income_statements), MIN_REVENUE_PERIODS,
        )
        return RevenueStability(revenue_volatility=None, label=None)

    revenues = [
        number_value(s, "totalRevenue")
        for s in income_statements[:MIN_REVENUE_PERIODS]
    ]
    revenues = [r for r in revenues if r is not None]
    if len(revenues) < MIN_REVENUE_PERIODS:
        logger.debug("%s: missing revenue in latest statements", symbol)
        return RevenueStability(revenue_volatility=None, label=None)

    values = np.asarray(revenues, dtype=float)
    mean = float(values.mean())
    if mean == 0:
        return RevenueStability(revenue_volatility=None, label=None)

    value = float(values.std()) / mean * 100
    return RevenueStability(revenue_volatility=value, label=volatility_label(value))
