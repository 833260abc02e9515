"""Tests for scorecard.analysis."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock, patch

import pandas as pd
import pytest

from scorecard.analysis import (
    AnalysisResult,
    analyze,
    analyze_ticker,
    normalize_ticker,
    rank_results,
)
from scorecard.config import ScorecardConfig
from scorecard.data import (
    FetchTimeoutError,
    MalformedResponseError,
    NotFoundError,
    ProviderError,
    RawFinancialRecord,
)


def _raw(value: Any) -> dict[str, Any]:
    return {"raw": value, "fmt": str(value)}


def _make_record(symbol: str = "ACME.NS") -> RawFinancialRecord:
    return RawFinancialRecord(
        symbol=symbol,
        price={
            "longName": "Acme Industries",
            "sector": "Technology",
            "marketCap": _raw(4e11),
        },
        financial_data={"totalRevenue": _raw(8e10)},
    )


def _make_client(**records: Any) -> MagicMock:
    """Mock client serving fundamentals per symbol (exceptions are raised)."""
    client = MagicMock()

    def fetch(symbol: str) -> RawFinancialRecord:
        outcome = records[symbol]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    client.fetch_fundamentals.side_effect = fetch
    client.fetch_price_history.return_value = pd.DataFrame({"date": [], "close": []})
    return client


def _make_result(ticker: str, final_score: float | None) -> AnalysisResult:
    return AnalysisResult(ticker=ticker, name=ticker, final_score=final_score)


class TestNormalizeTicker:

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("reliance", "RELIANCE.NS"),
            ("  tcs ", "TCS.NS"),
            ("AAPL.US", "AAPL.US"),
            ("infy.bo", "INFY.BO"),
        ],
    )
    def test_default_suffix(self, raw: str, expected: str) -> None:
        assert normalize_ticker(raw) == expected

    def test_custom_suffix(self) -> None:
        assert normalize_ticker("tcs", ".BO") == "TCS.BO"


class TestAnalyzeTicker:

    def test_success(self) -> None:
        client = _make_client(**{"ACME.NS": _make_record()})
        result = analyze_ticker("acme", client, ScorecardConfig())

        assert result.error is None
        assert result.ticker == "ACME.NS"
        assert result.name == "Acme Industries"
        assert result.sector == "Technology"
        assert result.ratings["revenue"] == 2
        assert result.ratings["seasonality"] == 5
        assert result.metrics.seasonality_text == "No"
        assert result.final_score is not None

    def test_not_found(self) -> None:
        error = NotFoundError("No data found for NOPE.NS. Check ticker symbol.")
        client = _make_client(**{"NOPE.NS": error})
        result = analyze_ticker("nope", client, ScorecardConfig())

        assert result.error == "No data found for NOPE.NS. Check ticker symbol."
        assert result.name == "NOPE.NS"
        assert result.metrics is None
        assert result.ratings == {}
        assert result.final_score is None

        d = result.as_dict()
        assert d["metrics"] == {}
        assert d["ratings"] == {}
        assert d["categoryScores"] == {}
        assert d["finalScore"] is None

    def test_provider_error_verbatim(self) -> None:
        client = _make_client(**{"BAD.NS": ProviderError("Quote not found")})
        result = analyze_ticker("bad", client, ScorecardConfig())
        assert result.error == "Quote not found"

    @pytest.mark.parametrize(
        "error",
        [
            FetchTimeoutError("Request timeout after 30s"),
            MalformedResponseError("Invalid JSON response"),
        ],
    )
    def test_other_fetch_errors_prefixed(self, error: Exception) -> None:
        client = _make_client(**{"BAD.NS": error})
        result = analyze_ticker("bad", client, ScorecardConfig())
        assert result.error == f"Error: {error}"

    def test_unexpected_error_recorded(self) -> None:
        client = _make_client(**{"BAD.NS": RuntimeError("boom")})
        result = analyze_ticker("bad", client, ScorecardConfig())
        assert result.error == "Error: boom"

    def test_scoring_failure_recorded(self) -> None:
        client = _make_client(**{"ACME.NS": _make_record()})
        with patch(
            "scorecard.analysis.compute_metrics", side_effect=ZeroDivisionError("x")
        ):
            result = analyze_ticker("acme", client, ScorecardConfig())
        assert result.error == "Error: x"
        assert result.metrics is None

    def test_history_failure_non_fatal(self) -> None:
        client = _make_client(**{"ACME.NS": _make_record()})
        client.fetch_price_history.side_effect = FetchTimeoutError("slow")
        result = analyze_ticker("acme", client, ScorecardConfig())

        assert result.error is None
        assert result.metrics.cagr is None
        assert result.metrics.volatility is None
        assert result.ratings["cagr"] is None

    def test_custom_weights_used(self) -> None:
        client = _make_client(**{"ACME.NS": _make_record()})
        config = ScorecardConfig(category_weights={"scale": 1.0})
        result = analyze_ticker("acme", client, config)
        assert result.final_score == pytest.approx(2.5)


class TestAnalyze:

    def test_order_preserved_with_failures(self) -> None:
        client = _make_client(**{
            "ACME.NS": _make_record(),
            "NOPE.NS": NotFoundError("No data found for NOPE.NS. Check ticker symbol."),
            "AAPL.US": _make_record("AAPL.US"),
        })
        results = analyze(["acme", "nope", "AAPL.US"], client=client)

        assert [r.ticker for r in results] == ["ACME.NS", "NOPE.NS", "AAPL.US"]
        assert results[1].error is not None
        assert results[0].error is None
        assert results[2].error is None

    def test_empty_input(self) -> None:
        assert analyze([], client=_make_client()) == []

    def test_passed_client_not_closed(self) -> None:
        client = _make_client(**{"ACME.NS": _make_record()})
        analyze(["acme"], client=client)
        client.close.assert_not_called()

    def test_creates_and_closes_client(self) -> None:
        with patch("scorecard.analysis.YahooFinanceClient") as client_cls:
            client_cls.return_value = _make_client(**{"ACME.NS": _make_record()})
            results = analyze(["acme"])

        assert len(results) == 1
        client_cls.return_value.close.assert_called_once()


class TestRankResults:

    def test_descending_with_unscored_last(self) -> None:
        results = [
            _make_result("A", 2.0),
            _make_result("B", None),
            _make_result("C", 4.5),
            _make_result("D", 3.0),
        ]
        ranked = rank_results(results)
        assert [r.ticker for r in ranked] == ["C", "D", "A", "B"]

    def test_does_not_mutate_input(self) -> None:
        results = [_make_result("A", 1.0), _make_result("B", 2.0)]
        rank_results(results)
        assert [r.ticker for r in results] == ["A", "B"]
