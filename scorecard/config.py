"""Scorecard configuration constants and dataclasses."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

# Currency-scale divisor: revenue, market cap and capex are reported in crore.
CRORE: float = 10_000_000

# Trading-year convention for annualising daily price statistics.
TRADING_DAYS_PER_YEAR: int = 252

# Minimum valid daily closes before CAGR and volatility are computed.
MIN_PRICE_OBSERVATIONS: int = 100

# Minimum annual income statements for revenue volatility.
MIN_REVENUE_PERIODS: int = 3

# Post-tax approximation applied to operating income in ROIC.
ROIC_TAX_FACTOR: float = 0.75

# Sector labels treated as seasonal (case-sensitive substring match).
SEASONAL_SECTORS: tuple[str, ...] = (
    "Consumer Cyclical",
    "Consumer Defensive",
    "Consumer Discretionary",
    "Consumer Staples",
    "Retail",
)

CATEGORIES: tuple[str, ...] = (
    "scale", "growth", "value", "quality", "risk", "balance",
)

DEFAULT_CATEGORY_WEIGHTS: dict[str, float] = {
    "scale": 0.15,
    "growth": 0.15,
    "value": 0.25,
    "quality": 0.25,
    "risk": 0.10,
    "balance": 0.10,
}


@dataclass
class ScorecardConfig:
    """Main scorecard configuration.

    Attributes:
        market_suffix: Exchange suffix appended to bare ticker symbols.
        request_timeout: Per-request timeout in seconds.
        history_years: Calendar years of daily price history to fetch.
        base_url: Yahoo Finance API host.
        max_retries: Attempts per request on 429/5xx responses.
        backoff_factor: Base delay (seconds) for exponential backoff.
        category_weights: Final-score weight per category.
    """

    # Tickers
    market_suffix: str = ".NS"

    # Fetching
    request_timeout: float = 30.0
    history_years: int = 3
    base_url: str = "https://query1.finance.yahoo.com"
    max_retries: int = 3
    backoff_factor: float = 1.0

    # Scoring
    category_weights: dict[str, float] = field(
        default_factory=lambda: dict(DEFAULT_CATEGORY_WEIGHTS)
    )

    def __post_init__(self) -> None:
        if self.request_timeout <= 0:
            raise ValueError(
                f"request_timeout must be positive, got {self.request_timeout}"
            )
        if self.history_years <= 0:
            raise ValueError(
                f"history_years must be positive, got {self.history_years}"
            )
        if self.max_retries < 1:
            raise ValueError(f"max_retries must be >= 1, got {self.max_retries}")

        unknown = set(self.category_weights) - set(CATEGORIES)
        if unknown:
            raise ValueError(f"Unknown categories in weights: {sorted(unknown)}")
        if any(w < 0 for w in self.category_weights.values()):
            raise ValueError("Category weights must be non-negative")
        if sum(self.category_weights.values()) <= 0:
            raise ValueError("Category weights must have a positive sum")

    @classmethod
    def from_env(cls) -> ScorecardConfig:
        """Build a config, applying SCORECARD_* environment overrides.

        Recognised variables: SCORECARD_MARKET_SUFFIX, SCORECARD_TIMEOUT.

        Raises:
            ValueError: If SCORECARD_TIMEOUT is not a number.
        """
        config = cls()
        suffix = os.environ.get("SCORECARD_MARKET_SUFFIX")
        if suffix is not None:
            config.market_suffix = suffix
        timeout = os.environ.get("SCORECARD_TIMEOUT")
        if timeout:
            config.request_timeout = float(timeout)
            if config.request_timeout <= 0:
                raise ValueError(
                    f"SCORECARD_TIMEOUT must be positive, got {timeout}"
                )
        return config
