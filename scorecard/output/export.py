"""Result export: CSV, JSON and console table."""

from __future__ import annotations

import csv
import json
import logging
import math
from pathlib import Path
from typing import Any, TextIO

import pandas as pd

from scorecard.analysis import AnalysisResult
from scorecard.config import CATEGORIES
from scorecard.ratings import RATING_KEYS

logger = logging.getLogger(__name__)

# Metric columns carried into CSV output (Metrics attribute names).
_METRIC_COLUMNS = [
    "revenue", "market_cap", "peg", "cagr", "pe_industry_ratio", "revenue_mc",
    "ev_ebit", "cmp_fcf", "roic", "roe", "roce", "opm", "volatility", "beta",
    "seasonality", "quick_ratio", "revenue_volatility", "net_debt_profit",
    "is_net_cash", "capex", "capex_revenue",
]

COLUMNS: list[str] = (
    ["ticker", "name", "sector", "final_score"]
    + list(CATEGORIES)
    + [f"rating_{key}" for key in RATING_KEYS]
    + _METRIC_COLUMNS
    + ["error"]
)


def _format_value(value: Any) -> str:
    """Format a cell: None/NaN/inf -> '', bools -> TRUE/FALSE."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and not math.isfinite(value):
        return ""
    return str(value)


def _result_row(result: AnalysisResult) -> dict[str, Any]:
    row: dict[str, Any] = {
        "ticker": result.ticker,
        "name": result.name,
        "sector": result.sector,
        "final_score": result.final_score,
        "error": result.error,
    }
    scores = result.category_scores.as_dict() if result.category_scores else {}
    for category in CATEGORIES:
        row[category] = scores.get(category)
    for key in RATING_KEYS:
        row[f"rating_{key}"] = result.ratings.get(key)
    for attr in _METRIC_COLUMNS:
        row[attr] = getattr(result.metrics, attr) if result.metrics else None
    return row


def results_to_frame(results: list[AnalysisResult]) -> pd.DataFrame:
    """One row per result with the COLUMNS layout."""
    return pd.DataFrame([_result_row(r) for r in results], columns=COLUMNS)


def write_csv(results: list[AnalysisResult], stream: TextIO) -> None:
    """Write the CSV header and one row per result to an open text stream."""
    writer = csv.writer(stream)
    writer.writerow(COLUMNS)
    for result in results:
        row = _result_row(result)
        writer.writerow([_format_value(row[c]) for c in COLUMNS])


def export_csv(results: list[AnalysisResult], path: Path) -> None:
    """Write results to a CSV file, creating parent directories.

    Args:
        results: Analysis results, in the order to write them.
        path: Output CSV path.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="") as f:
        write_csv(results, f)
    logger.info("Exported %d results to %s", len(results), path)


def export_json(results: list[AnalysisResult], path: Path) -> None:
    """Write ``{"results": [...]}`` to a JSON file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(to_json(results))
    logger.info("Exported %d results to %s", len(results), path)


def to_json(results: list[AnalysisResult]) -> str:
    return json.dumps({"results": [r.as_dict() for r in results]}, indent=2)


def format_table(results: list[AnalysisResult]) -> str:
    """Plain-text ranking table for console output."""
    if not results:
        return "No results."

    frame = results_to_frame(results)
    table = frame[["ticker", "name", "final_score", *CATEGORIES]].copy()
    table.insert(0, "rank", range(1, len(table) + 1))
    table["name"] = table["name"].str.slice(0, 30)
    for column in ["final_score", *CATEGORIES]:
        table[column] = table[column].map(
            lambda v: "-" if v is None or pd.isna(v) else f"{v:.2f}"
        )

    errors = frame.loc[frame["error"].notna(), ["ticker", "error"]]
    lines = [table.to_string(index=False)]
    for ticker, error in errors.itertuples(index=False):
        lines.append(f"{ticker}: {error}")
    return "\n".join(lines)
