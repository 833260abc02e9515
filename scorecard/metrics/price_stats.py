"""Price statistics: annualised CAGR and volatility from daily closes."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np
import pandas as pd

from scorecard.config import MIN_PRICE_OBSERVATIONS, TRADING_DAYS_PER_YEAR

logger = logging.getLogger(__name__)


@dataclass
class PriceStats:
    """Price-derived metric outputs.

    Attributes:
        cagr: Compound annual growth of the close, in percent. Years are
            counted as observations / 252.
        volatility: Annualised population standard deviation of daily
            simple returns, in percent.
    """

    cagr: float | None
    volatility: float | None


def valid_closes(price_history: pd.DataFrame) -> np.ndarray:
    """Closes that are finite and strictly positive, in date order."""
    if price_history.empty or "close" not in price_history.columns:
        return np.array([], dtype=float)
    closes = pd.to_numeric(price_history["close"], errors="coerce")
    values = closes.to_numpy(dtype=float)
    return values[np.isfinite(values) & (values > 0)]


def compute_price_stats(price_history: pd.DataFrame, symbol: str = "") -> PriceStats:
    """Compute CAGR and volatility for a daily close series.

    Both stay None unless at least MIN_PRICE_OBSERVATIONS valid closes
    exist, regardless of how many raw rows the series has.

    Args:
        price_history: DataFrame with a 'close' column, sorted by date.
        symbol: Ticker for log messages.

    Returns:
        PriceStats with cagr and volatility.
    """
    closes = valid_closes(price_history)
    n = len(closes)

    if n < MIN_PRICE_OBSERVATIONS:
        logger.debug(
            "%s: %d valid closes (< %d), skipping CAGR and volatility",
            symbol, n, MIN_PRICE_OBSERVATIONS,
        )
        return PriceStats(cagr=None, volatility=None)

    years = n / TRADING_DAYS_PER_YEAR
    cagr = (math.pow(closes[-1] / closes[0], 1 / years) - 1) * 100

    returns = np.diff(closes) / closes[:-1]
    volatility = float(np.std(returns)) * math.sqrt(TRADING_DAYS_PER_YEAR) * 100

    return PriceStats(cagr=cagr, volatility=volatility)
