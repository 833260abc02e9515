"""Yahoo Finance client: quote summary fundamentals and daily chart history."""

from __future__ import annotations

import logging
import time
from typing import Any

import pandas as pd
import requests

from scorecard.config import ScorecardConfig
from scorecard.data.errors import (
    FetchTimeoutError,
    MalformedResponseError,
    NotFoundError,
    ProviderError,
)
from scorecard.data.models import Module, RawFinancialRecord

logger = logging.getLogger(__name__)

_RETRY_STATUS_CODES = {429, 500, 502, 503, 504}

_SUMMARY_MODULES = (
    "price",
    "summaryDetail",
    "defaultKeyStatistics",
    "financialData",
    "balanceSheetHistory",
    "incomeStatementHistory",
    "cashflowStatementHistory",
)

_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    ),
    "Accept": "application/json",
}


def _statement_list(mod: Module, container: str, key: str) -> list[Module]:
    """Pull a statement history list out of a quoteSummary module."""
    history = mod.get(container) or {}
    statements = history.get(key) or []
    return [s for s in statements if isinstance(s, dict)]


def parse_quote_summary(symbol: str, payload: Any) -> RawFinancialRecord:
    """Convert a quoteSummary response body into a RawFinancialRecord.

    Args:
        symbol: Normalized ticker symbol the request was made for.
        payload: Decoded JSON body.

    Returns:
        RawFinancialRecord with an empty price history.

    Raises:
        ProviderError: The response carries ``quoteSummary.error``.
        NotFoundError: The response carries no result object.
        MalformedResponseError: The body is not a quoteSummary document.
    """
    if not isinstance(payload, dict) or not isinstance(
        payload.get("quoteSummary"), dict
    ):
        raise MalformedResponseError(f"{symbol}: unexpected quoteSummary response")

    summary = payload["quoteSummary"]
    error = summary.get("error")
    if error:
        description = error.get("description") if isinstance(error, dict) else None
        raise ProviderError(description or "Yahoo Finance error")

    results = summary.get("result") or []
    mod = results[0] if results else None
    if not mod:
        raise NotFoundError(f"No data found for {symbol}. Check ticker symbol.")
    if not isinstance(mod, dict):
        raise MalformedResponseError(f"{symbol}: quoteSummary result is not an object")

    return RawFinancialRecord(
        symbol=symbol,
        price=mod.get("price") or {},
        summary_detail=mod.get("summaryDetail") or {},
        key_stats=mod.get("defaultKeyStatistics") or {},
        financial_data=mod.get("financialData") or {},
        income_statements=_statement_list(
            mod, "incomeStatementHistory", "incomeStatementHistory"
        ),
        balance_sheets=_statement_list(
            mod, "balanceSheetHistory", "balanceSheetStatements"
        ),
        cashflow_statements=_statement_list(
            mod, "cashflowStatementHistory", "cashflowStatements"
        ),
    )


def parse_chart(symbol: str, payload: Any) -> pd.DataFrame:
    """Convert a v8 chart response body into a (date, close) DataFrame.

    Closes the provider reports as null are kept as NaN; filtering is the
    metric layer's job.

    Raises:
        ProviderError: The response carries ``chart.error``.
        NotFoundError: The response carries no result object.
        MalformedResponseError: The body is not a chart document, or
            timestamps and closes differ in length.
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("chart"), dict):
        raise MalformedResponseError(f"{symbol}: unexpected chart response")

    chart = payload["chart"]
    error = chart.get("error")
    if error:
        description = error.get("description") if isinstance(error, dict) else None
        raise ProviderError(description or "Yahoo Finance error")

    results = chart.get("result") or []
    if not results or not isinstance(results[0], dict):
        raise NotFoundError(f"No price history for {symbol}")

    result = results[0]
    try:
        timestamps = result.get("timestamp") or []
        quotes = (result.get("indicators") or {}).get("quote") or [{}]
        if not isinstance(quotes, list):
            raise TypeError(f"quote is {type(quotes).__name__}, expected list")
        closes = (quotes[0] or {}).get("close") or []
        if not isinstance(timestamps, list) or not isinstance(closes, list):
            raise TypeError("timestamp and close must be lists")
    except (AttributeError, KeyError, IndexError, TypeError) as e:
        raise MalformedResponseError(f"{symbol}: unreadable chart result: {e}") from e

    if len(timestamps) != len(closes):
        raise MalformedResponseError(
            f"{symbol}: {len(timestamps)} timestamps but {len(closes)} closes"
        )

    try:
        return pd.DataFrame({
            "date": pd.to_datetime(pd.Series(timestamps, dtype="int64"), unit="s"),
            "close": pd.Series(closes, dtype="float64"),
        })
    except (TypeError, ValueError) as e:
        raise MalformedResponseError(f"{symbol}: unparseable chart data: {e}") from e


class YahooFinanceClient:
    """Fetch fundamentals and price history from Yahoo Finance.

    One ``requests.Session`` is held per client. Responses with 429/5xx
    status are retried with exponential backoff; timeouts are not retried.

    Args:
        config: Scorecard configuration (host, timeout, retry policy).
        session: Optional pre-built session (tests pass a mock).
    """

    def __init__(
        self,
        config: ScorecardConfig | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self._config = config or ScorecardConfig()
        self._session = session or requests.Session()
        self._session.headers.update(_HEADERS)

    def __enter__(self) -> YahooFinanceClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._session.close()

    def fetch_fundamentals(self, symbol: str) -> RawFinancialRecord:
        """Fetch the quoteSummary modules used for scoring.

        Args:
            symbol: Normalized ticker symbol (e.g. "RELIANCE.NS").

        Returns:
            RawFinancialRecord without price history.
        """
        url = f"{self._config.base_url}/v10/finance/quoteSummary/{symbol}"
        payload = self._get_json(url, {"modules": ",".join(_SUMMARY_MODULES)})
        record = parse_quote_summary(symbol, payload)
        logger.debug(
            "%s: fundamentals fetched (%d income statements)",
            symbol, len(record.income_statements),
        )
        return record

    def fetch_price_history(
        self, symbol: str, start: int, end: int
    ) -> pd.DataFrame:
        """Fetch daily closes between two epoch-second timestamps.

        Args:
            symbol: Normalized ticker symbol.
            start: Window start (epoch seconds).
            end: Window end (epoch seconds).

        Returns:
            DataFrame with columns date, close.
        """
        url = f"{self._config.base_url}/v8/finance/chart/{symbol}"
        params = {"period1": start, "period2": end, "interval": "1d"}
        history = parse_chart(symbol, self._get_json(url, params))
        logger.debug("%s: %d daily closes fetched", symbol, len(history))
        return history

    def _get_json(self, url: str, params: dict[str, Any]) -> Any:
        """GET a URL and decode the JSON body, retrying on 429/5xx.

        Yahoo reports unknown symbols as 404 with a JSON error document, so
        the body is decoded before the status code is considered.

        Raises:
            FetchTimeoutError: The request exceeded ``request_timeout``.
            ProviderError: Transport failure, non-JSON error status, or
                retryable status persisting after ``max_retries`` attempts.
            MalformedResponseError: A successful response with a non-JSON body.
        """
        timeout = self._config.request_timeout
        max_retries = self._config.max_retries

        for attempt in range(max_retries):
            try:
                response = self._session.get(url, params=params, timeout=timeout)
            except requests.Timeout as e:
                raise FetchTimeoutError(f"Request timeout after {timeout:g}s") from e
            except requests.RequestException as e:
                raise ProviderError(f"Request failed: {e}") from e

            if response.status_code in _RETRY_STATUS_CODES:
                if attempt < max_retries - 1:
                    sleep_time = self._config.backoff_factor * (2**attempt)
                    logger.warning(
                        "%s returned %d, retrying in %.1fs (attempt %d/%d)",
                        url,
                        response.status_code,
                        sleep_time,
                        attempt + 1,
                        max_retries,
                    )
                    time.sleep(sleep_time)
                    continue
                raise ProviderError(
                    f"HTTP {response.status_code} after {max_retries} attempts"
                )

            try:
                return response.json()
            except ValueError as e:
                if response.status_code >= 400:
                    raise ProviderError(f"HTTP {response.status_code}") from e
                raise MalformedResponseError("Invalid JSON response") from e

        # Unreachable: the final attempt either returns or raises.
        raise ProviderError(f"{url}: no response")
