"""Tests for scorecard.output.export."""

from __future__ import annotations

import csv
import io
import json
import math
from pathlib import Path

from scorecard.analysis import AnalysisResult
from scorecard.metrics.derived import Metrics
from scorecard.output.export import (
    COLUMNS,
    _format_value,
    export_csv,
    export_json,
    format_table,
    results_to_frame,
    to_json,
    write_csv,
)
from scorecard.scoring import score_metrics

# ---------------------------------------------------------------------------
# Test helpers
# ---------------------------------------------------------------------------


def _make_success(ticker: str = "ACME.NS") -> AnalysisResult:
    metrics = Metrics(
        revenue=8000.0,
        market_cap=40000.0,
        revenue_mc=0.2,
        seasonality=False,
        seasonality_text="No",
        is_net_cash=True,
        net_debt_profit_text="Net Cash",
    )
    card = score_metrics(metrics)
    return AnalysisResult(
        ticker=ticker,
        name="Acme Industries",
        sector="Technology",
        metrics=metrics,
        ratings=card.ratings,
        category_scores=card.category_scores,
        final_score=card.final_score,
    )


def _make_failure(ticker: str = "NOPE.NS") -> AnalysisResult:
    return AnalysisResult(
        ticker=ticker,
        name=ticker,
        error=f"No data found for {ticker}. Check ticker symbol.",
    )


# ---------------------------------------------------------------------------
# _format_value tests
# ---------------------------------------------------------------------------


class TestFormatValue:
    def test_none_returns_empty(self) -> None:
        assert _format_value(None) == ""

    def test_nan_and_inf_return_empty(self) -> None:
        assert _format_value(math.nan) == ""
        assert _format_value(math.inf) == ""

    def test_bools(self) -> None:
        assert _format_value(True) == "TRUE"
        assert _format_value(False) == "FALSE"

    def test_numbers_and_strings(self) -> None:
        assert _format_value(2.5) == "2.5"
        assert _format_value(3) == "3"
        assert _format_value("ACME") == "ACME"


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------


class TestCsv:

    def test_header_and_rows(self, tmp_path: Path) -> None:
        output = tmp_path / "out" / "scores.csv"
        export_csv([_make_success(), _make_failure()], output)

        with open(output) as f:
            reader = csv.DictReader(f)
            assert reader.fieldnames == COLUMNS
            rows = list(reader)

        assert len(rows) == 2
        ok, failed = rows
        assert ok["ticker"] == "ACME.NS"
        assert ok["rating_revenue"] == "2"
        assert ok["rating_netDebtProfit"] == "5"
        assert ok["is_net_cash"] == "TRUE"
        assert ok["seasonality"] == "FALSE"
        assert ok["scale"] == "2.5"
        assert ok["growth"] == ""
        assert ok["error"] == ""

        assert failed["final_score"] == ""
        assert failed["rating_revenue"] == ""
        assert failed["revenue"] == ""
        assert failed["error"].startswith("No data found")

    def test_write_csv_to_stream(self) -> None:
        buffer = io.StringIO()
        write_csv([_make_failure()], buffer)
        lines = buffer.getvalue().splitlines()
        assert len(lines) == 2
        assert lines[0].startswith("ticker,name,sector,final_score,scale")


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------


class TestJson:

    def test_response_shape(self) -> None:
        data = json.loads(to_json([_make_success(), _make_failure()]))

        assert list(data) == ["results"]
        ok, failed = data["results"]
        assert set(ok) == {
            "ticker", "name", "sector", "metrics", "ratings",
            "categoryScores", "finalScore", "error",
        }
        assert ok["metrics"]["marketCap"] == 40000.0
        assert ok["metrics"]["netDebtProfitText"] == "Net Cash"
        assert ok["categoryScores"]["scale"] == 2.5
        assert ok["error"] is None

        assert failed["metrics"] == {}
        assert failed["ratings"] == {}
        assert failed["categoryScores"] == {}
        assert failed["finalScore"] is None

    def test_export_json(self, tmp_path: Path) -> None:
        output = tmp_path / "scores.json"
        export_json([_make_success()], output)
        data = json.loads(output.read_text())
        assert data["results"][0]["ticker"] == "ACME.NS"


# ---------------------------------------------------------------------------
# Frame and table
# ---------------------------------------------------------------------------


class TestResultsToFrame:

    def test_columns(self) -> None:
        frame = results_to_frame([_make_success()])
        assert list(frame.columns) == COLUMNS
        assert len(frame) == 1

    def test_empty(self) -> None:
        frame = results_to_frame([])
        assert frame.empty
        assert list(frame.columns) == COLUMNS


class TestFormatTable:

    def test_no_results(self) -> None:
        assert format_table([]) == "No results."

    def test_ranks_and_errors(self) -> None:
        table = format_table([_make_success(), _make_failure()])
        lines = table.splitlines()

        assert "rank" in lines[0]
        assert "final_score" in lines[0]
        assert "ACME.NS" in lines[1]
        assert "2.50" in lines[1]
        assert "NOPE.NS" in lines[2]
        assert lines[-1] == "NOPE.NS: No data found for NOPE.NS. Check ticker symbol."
