"""Data loading orchestration."""

from __future__ import annotations

import logging
import time

from scorecard.config import ScorecardConfig
from scorecard.data.errors import (
    DataFetchError,
    FetchTimeoutError,
    MalformedResponseError,
    NotFoundError,
    ProviderError,
)
from scorecard.data.models import RawFinancialRecord
from scorecard.data.yahoo import YahooFinanceClient

logger = logging.getLogger(__name__)

__all__ = [
    "DataFetchError",
    "FetchTimeoutError",
    "MalformedResponseError",
    "NotFoundError",
    "ProviderError",
    "RawFinancialRecord",
    "YahooFinanceClient",
    "history_window",
    "load_record",
]

_SECONDS_PER_YEAR = 365 * 24 * 60 * 60


def history_window(years: int, now: float | None = None) -> tuple[int, int]:
    """Return (start, end) epoch seconds covering the last ``years`` years."""
    end = int(now if now is not None else time.time())
    return end - years * _SECONDS_PER_YEAR, end


def load_record(
    symbol: str,
    client: YahooFinanceClient,
    config: ScorecardConfig,
) -> RawFinancialRecord:
    """Load fundamentals, then attach daily price history.

    Loading sequence:
        1. Fetch quoteSummary fundamentals (errors propagate).
        2. Fetch daily closes for the configured history window.

    A failed history fetch is logged and leaves the record's price history
    empty, so price-derived metrics come out as None.

    Args:
        symbol: Normalized ticker symbol.
        client: Yahoo Finance client.
        config: Scorecard configuration (history window).

    Returns:
        Populated RawFinancialRecord.

    Raises:
        DataFetchError: The fundamentals fetch failed.
    """
    record = client.fetch_fundamentals(symbol)

    start, end = history_window(config.history_years)
    try:
        record.price_history = client.fetch_price_history(symbol, start, end)
    except DataFetchError as e:
        logger.warning("%s: price history unavailable (%s), continuing", symbol, e)
    except Exception as e:
        logger.warning("%s: price history failed (%r), continuing", symbol, e)
    else:
        logger.info("%s: %d days of price history", symbol, len(record.price_history))

    return record
