"""Derived metrics: scale, valuation, quality, risk and balance-sheet ratios.

Extracts every rated metric from a RawFinancialRecord. Ratios are computed
only when the numerator is present and non-zero and the denominator is
present and strictly positive; otherwise the metric is None. Missing
inputs propagate as None rather than being replaced by zero, except for
the debt, equity and cash terms of invested capital and net debt.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from scorecard.config import CRORE, ROIC_TAX_FACTOR, SEASONAL_SECTORS
from scorecard.data.models import RawFinancialRecord, number_value
from scorecard.metrics.price_stats import compute_price_stats
from scorecard.metrics.revenue_stability import compute_revenue_stability

logger = logging.getLogger(__name__)


@dataclass
class Metrics:
    """All metrics derived for one ticker.

    Attributes:
        revenue: Total revenue in crore.
        market_cap: Market capitalisation in crore.
        peg: PEG ratio as reported.
        cagr: Annualised price CAGR over the history window, percent.
        pe: Trailing P/E.
        forward_pe: Forward P/E, used as the industry P/E proxy.
        pe_industry_ratio: Trailing P/E / forward P/E.
        revenue_mc: Revenue / market cap.
        eps: Trailing EPS (informational).
        ev_ebit: Enterprise value / EBIT (EBITDA fallback).
        cmp_fcf: Price / free cash flow per share.
        roic: Post-tax operating income / invested capital, percent.
        roe: Return on equity, percent.
        roce: Operating income / capital employed, percent.
        opm: Operating margin, percent.
        volatility: Annualised daily-return volatility, percent.
        beta: Beta as reported.
        seasonality: True for consumer/retail sectors, None if no sector.
        quick_ratio: Quick ratio as reported.
        revenue_volatility: Coefficient of variation of the latest three
            annual revenues, percent.
        net_debt_profit: Net debt / net income. None when the company
            holds net cash or net income is not positive.
        is_net_cash: Cash exceeds debt. Never None.
        capex: Absolute capital expenditure in crore (informational).
        capex_revenue: Capex / revenue, percent (informational).
        seasonality_text: Yes / No / N/A.
        revenue_volatility_text: Low / Medium / High / Very High.
        net_debt_profit_text: "Net Cash", the ratio to 2 dp, or N/A.
    """

    # Scale
    revenue: float | None = None
    market_cap: float | None = None

    # Growth
    peg: float | None = None
    cagr: float | None = None

    # Value
    pe: float | None = None
    forward_pe: float | None = None
    pe_industry_ratio: float | None = None
    revenue_mc: float | None = None
    eps: float | None = None
    ev_ebit: float | None = None
    cmp_fcf: float | None = None

    # Quality
    roic: float | None = None
    roe: float | None = None
    roce: float | None = None
    opm: float | None = None

    # Risk
    volatility: float | None = None
    beta: float | None = None
    seasonality: bool | None = None
    quick_ratio: float | None = None
    revenue_volatility: float | None = None

    # Balance sheet
    net_debt_profit: float | None = None
    is_net_cash: bool = False

    # Informational
    capex: float | None = None
    capex_revenue: float | None = None

    # Display labels
    seasonality_text: str = "N/A"
    revenue_volatility_text: str | None = None
    net_debt_profit_text: str = "N/A"

    def as_dict(self) -> dict[str, Any]:
        """Render metrics with the camelCase keys used in JSON output."""
        out = {key: getattr(self, attr) for attr, key in _DICT_KEYS.items()}
        out["industryPE"] = self.forward_pe
        return out


_DICT_KEYS: dict[str, str] = {
    "revenue": "revenue",
    "market_cap": "marketCap",
    "peg": "peg",
    "cagr": "cagr",
    "pe": "pe",
    "forward_pe": "forwardPE",
    "pe_industry_ratio": "peIndustryRatio",
    "revenue_mc": "revenueMC",
    "eps": "eps",
    "ev_ebit": "evEbit",
    "cmp_fcf": "cmpFcf",
    "roic": "roic",
    "roe": "roe",
    "roce": "roce",
    "opm": "opm",
    "volatility": "volatility",
    "beta": "beta",
    "seasonality": "seasonality",
    "seasonality_text": "seasonalityText",
    "quick_ratio": "quickRatio",
    "revenue_volatility": "revenueVolatility",
    "revenue_volatility_text": "revenueVolatilityText",
    "net_debt_profit": "netDebtProfit",
    "net_debt_profit_text": "netDebtProfitText",
    "is_net_cash": "isNetCash",
    "capex": "capex",
    "capex_revenue": "capexRevenue",
}


def _either(*values: float | None) -> float | None:
    """Return the first non-zero, non-None value.

    When every candidate is zero or None the last one is returned, so a
    reported zero survives as zero.
    """
    for value in values:
        if value:
            return value
    return values[-1]


def _safe_ratio(numerator: float | None, denominator: float | None) -> float | None:
    """numerator / denominator, or None unless numerator is non-zero and
    denominator is strictly positive."""
    if not numerator or denominator is None or denominator <= 0:
        return None
    return numerator / denominator


def _percent(value: float | None) -> float | None:
    """value * 100, with zero and None both mapping to None."""
    # A reported 0.0 ratio is treated as unreported, like the ratio guards.
    return value * 100 if value else None


def _crore(value: float | None) -> float | None:
    """value / CRORE, with zero and None both mapping to None."""
    return value / CRORE if value else None


def is_seasonal(sector: str | None) -> bool | None:
    if not sector:
        return None
    return any(label in sector for label in SEASONAL_SECTORS)


def compute_metrics(record: RawFinancialRecord) -> Metrics:
    """Derive every metric for a single ticker.

    Args:
        record: Fundamentals plus (possibly empty) daily price history.

    Returns:
        Metrics with unavailable values set to None.
    """
    symbol = record.symbol
    price = record.price
    summary = record.summary_detail
    key_stats = record.key_stats
    financial = record.financial_data
    inc = record.income
    bs = record.balance_sheet
    cf = record.cashflow

    v = number_value

    m = Metrics()

    # Scale
    revenue_raw = _either(v(inc, "totalRevenue"), v(financial, "totalRevenue"))
    m.revenue = _crore(revenue_raw)
    m.market_cap = _crore(v(price, "marketCap"))

    # Growth
    m.peg = v(key_stats, "pegRatio")

    # Value
    m.pe = v(summary, "trailingPE")
    m.forward_pe = v(key_stats, "forwardPE")
    m.pe_industry_ratio = _safe_ratio(m.pe, m.forward_pe)
    m.revenue_mc = _safe_ratio(m.revenue, m.market_cap)
    m.eps = v(key_stats, "trailingEps")

    ebit = _either(v(inc, "ebit"), v(financial, "ebitda"))
    m.ev_ebit = _safe_ratio(v(key_stats, "enterpriseValue"), ebit)

    current_price = v(price, "regularMarketPrice")
    fcf = v(financial, "freeCashflow")
    shares = v(key_stats, "sharesOutstanding")
    fcf_per_share = _safe_ratio(fcf, shares)
    m.cmp_fcf = _safe_ratio(current_price, fcf_per_share)

    # Quality
    operating_income = _either(v(inc, "operatingIncome"), ebit)
    debt = (v(bs, "longTermDebt") or 0.0) + (v(bs, "shortLongTermDebt") or 0.0)
    equity = v(bs, "totalStockholderEquity") or 0.0
    cash = _either(v(bs, "cash"), v(financial, "totalCash")) or 0.0
    invested_capital = debt + equity - cash

    if operating_income:
        m.roic = _percent(
            _safe_ratio(operating_income * ROIC_TAX_FACTOR, invested_capital)
        )

    m.roe = _percent(v(financial, "returnOnEquity"))

    total_assets = v(bs, "totalAssets")
    current_liabilities = v(bs, "totalCurrentLiabilities")
    if total_assets and current_liabilities:
        m.roce = _percent(
            _safe_ratio(operating_income, total_assets - current_liabilities)
        )

    m.opm = _percent(v(financial, "operatingMargins"))

    # Risk
    m.beta = _either(v(summary, "beta"), v(key_stats, "beta"))
    m.seasonality = is_seasonal(record.sector)
    if m.seasonality is not None:
        m.seasonality_text = "Yes" if m.seasonality else "No"
    m.quick_ratio = v(financial, "quickRatio")

    # Balance sheet
    net_debt = debt - cash
    m.is_net_cash = net_debt < 0
    net_income = _either(v(inc, "netIncome"), v(financial, "netIncomeToCommon"))
    if not m.is_net_cash and net_income is not None and net_income > 0:
        m.net_debt_profit = net_debt / net_income
    if m.is_net_cash:
        m.net_debt_profit_text = "Net Cash"
    elif m.net_debt_profit is not None:
        m.net_debt_profit_text = f"{m.net_debt_profit:.2f}"

    # Informational
    capex_raw = abs(v(cf, "capitalExpenditures") or 0.0)
    m.capex = _crore(capex_raw)
    if revenue_raw and capex_raw:
        m.capex_revenue = capex_raw / revenue_raw * 100

    # Price history
    price_stats = compute_price_stats(record.price_history, symbol)
    m.cagr = price_stats.cagr
    m.volatility = price_stats.volatility

    # Revenue stability
    stability = compute_revenue_stability(record.income_statements, symbol)
    m.revenue_volatility = stability.revenue_volatility
    m.revenue_volatility_text = stability.label

    logger.debug(
        "%s: revenue=%s market_cap=%s roic=%s net_cash=%s",
        symbol,
        f"{m.revenue:.1f}" if m.revenue is not None else "None",
        f"{m.market_cap:.1f}" if m.market_cap is not None else "None",
        f"{m.roic:.2f}" if m.roic is not None else "None",
        m.is_net_cash,
    )
    return m
