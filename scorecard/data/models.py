"""Data models for the scorecard."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

Module = dict[str, Any]


def raw_value(module: Module | None, key: str) -> Any:
    """Return the ``raw`` payload of a Yahoo field, or None if absent.

    Yahoo wraps numbers as ``{"raw": 1.5, "fmt": "1.50"}``. Plain scalars
    are returned unchanged; empty wrappers (``{}``) yield None.
    """
    if not module:
        return None
    entry = module.get(key)
    if isinstance(entry, dict):
        return entry.get("raw")
    return entry


def to_number(value: Any) -> float | None:
    """Coerce a provider value to a finite float, or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(f):
        return None
    return f


def number_value(module: Module | None, key: str) -> float | None:
    """raw_value coerced through to_number."""
    return to_number(raw_value(module, key))


@dataclass
class RawFinancialRecord:
    """Provider data for one symbol, consumed by the metric extractor.

    Attributes:
        symbol: Normalized ticker symbol.
        price: ``price`` module (names, sector, market price, market cap).
        summary_detail: ``summaryDetail`` module (trailing P/E, beta).
        key_stats: ``defaultKeyStatistics`` module (forward P/E, PEG,
            enterprise value, trailing EPS, shares outstanding, beta).
        financial_data: ``financialData`` module (revenue, EBITDA, cash,
            free cash flow, ROE, margins, quick ratio).
        income_statements: Annual income statements, most recent first.
        balance_sheets: Annual balance sheets, most recent first.
        cashflow_statements: Annual cash flow statements, most recent first.
        price_history: Daily closes. Columns: date, close. Empty when the
            history fetch failed or was not attempted.
    """

    symbol: str
    price: Module = field(default_factory=dict)
    summary_detail: Module = field(default_factory=dict)
    key_stats: Module = field(default_factory=dict)
    financial_data: Module = field(default_factory=dict)
    income_statements: list[Module] = field(default_factory=list)
    balance_sheets: list[Module] = field(default_factory=list)
    cashflow_statements: list[Module] = field(default_factory=list)
    price_history: pd.DataFrame = field(
        default_factory=lambda: pd.DataFrame({"date": [], "close": []})
    )

    @property
    def income(self) -> Module:
        """Most recent income statement (empty if none)."""
        return self.income_statements[0] if self.income_statements else {}

    @property
    def balance_sheet(self) -> Module:
        """Most recent balance sheet (empty if none)."""
        return self.balance_sheets[0] if self.balance_sheets else {}

    @property
    def cashflow(self) -> Module:
        """Most recent cash flow statement (empty if none)."""
        return self.cashflow_statements[0] if self.cashflow_statements else {}

    @property
    def name(self) -> str:
        return (
            self.price.get("longName")
            or self.price.get("shortName")
            or self.symbol
        )

    @property
    def sector(self) -> str | None:
        return self.price.get("sector") or None
