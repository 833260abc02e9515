"""Per-ticker analysis: normalize, fetch, extract, score, package."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from scorecard.config import ScorecardConfig
from scorecard.data import (
    DataFetchError,
    NotFoundError,
    ProviderError,
    YahooFinanceClient,
    load_record,
)
from scorecard.metrics.derived import Metrics, compute_metrics
from scorecard.scoring import CategoryScores, score_metrics

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """Outcome of analysing one ticker.

    When ``error`` is set every other analytical field stays at its empty
    default: metrics and category_scores None, ratings empty, final_score
    None.

    Attributes:
        ticker: Normalized ticker symbol.
        name: Company long name (falls back to short name, then ticker).
        sector: Sector label, None if unknown.
        metrics: Derived metrics.
        ratings: Rating key -> rating 0-5 or None.
        category_scores: Six category scores.
        final_score: Weighted final score in [0, 5], or None.
        error: Failure description.
    """

    ticker: str
    name: str
    sector: str | None = None
    metrics: Metrics | None = None
    ratings: dict[str, int | None] = field(default_factory=dict)
    category_scores: CategoryScores | None = None
    final_score: float | None = None
    error: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Render the result in the JSON response shape."""
        return {
            "ticker": self.ticker,
            "name": self.name,
            "sector": self.sector,
            "metrics": self.metrics.as_dict() if self.metrics else {},
            "ratings": dict(self.ratings),
            "categoryScores": (
                self.category_scores.as_dict() if self.category_scores else {}
            ),
            "finalScore": self.final_score,
            "error": self.error,
        }


def normalize_ticker(ticker: str, suffix: str = ".NS") -> str:
    """Trim and upper-case a ticker, appending ``suffix`` if it has none.

    Examples:
        "reliance" -> "RELIANCE.NS"; "AAPL.US" stays "AAPL.US".
    """
    symbol = ticker.strip().upper()
    if "." not in symbol:
        symbol += suffix
    return symbol


def analyze_ticker(
    ticker: str,
    client: YahooFinanceClient,
    config: ScorecardConfig,
) -> AnalysisResult:
    """Analyse a single ticker. Never raises.

    Fetch failures for fundamentals and any error during extraction or
    scoring are recorded on the result's ``error`` field. Price history
    failures only leave CAGR and volatility unset.

    Args:
        ticker: Raw ticker as supplied by the caller.
        client: Yahoo Finance client.
        config: Scorecard configuration.

    Returns:
        AnalysisResult for the ticker.
    """
    symbol = normalize_ticker(ticker, config.market_suffix)

    try:
        record = load_record(symbol, client, config)
    except (ProviderError, NotFoundError) as e:
        logger.error("%s: %s", symbol, e)
        return AnalysisResult(ticker=symbol, name=symbol, error=str(e))
    except DataFetchError as e:
        logger.error("%s: %s", symbol, e)
        return AnalysisResult(ticker=symbol, name=symbol, error=f"Error: {e}")
    except Exception as e:
        logger.exception("%s: unexpected error while fetching", symbol)
        return AnalysisResult(ticker=symbol, name=symbol, error=f"Error: {e}")

    try:
        metrics = compute_metrics(record)
        card = score_metrics(metrics, config.category_weights)
    except Exception as e:
        logger.exception("%s: analysis failed", symbol)
        return AnalysisResult(ticker=symbol, name=symbol, error=f"Error: {e}")

    logger.info(
        "%s: final score %s",
        symbol,
        f"{card.final_score:.2f}" if card.final_score is not None else "None",
    )
    return AnalysisResult(
        ticker=symbol,
        name=record.name,
        sector=record.sector,
        metrics=metrics,
        ratings=card.ratings,
        category_scores=card.category_scores,
        final_score=card.final_score,
    )


def analyze(
    tickers: Iterable[str],
    client: YahooFinanceClient | None = None,
    config: ScorecardConfig | None = None,
) -> list[AnalysisResult]:
    """Analyse tickers sequentially, one result per ticker in input order.

    Args:
        tickers: Raw ticker symbols.
        client: Yahoo Finance client. A client is created (and closed) here
            when omitted.
        config: Scorecard configuration. Defaults to ScorecardConfig().

    Returns:
        List of AnalysisResult.
    """
    config = config or ScorecardConfig()
    owns_client = client is None
    if client is None:
        client = YahooFinanceClient(config)

    try:
        results = [analyze_ticker(t, client, config) for t in tickers]
    finally:
        if owns_client:
            client.close()

    failed = sum(1 for r in results if r.error is not None)
    logger.info("Analysed %d tickers (%d failed)", len(results), failed)
    return results


def rank_results(results: list[AnalysisResult]) -> list[AnalysisResult]:
    """Sort by final score, best first. Unscored results count as 0."""
    return sorted(results, key=lambda r: r.final_score or 0.0, reverse=True)
