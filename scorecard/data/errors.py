"""Fetch-layer exceptions."""

from __future__ import annotations


class DataFetchError(Exception):
    """Base class for failures while fetching provider data."""


class ProviderError(DataFetchError):
    """The provider reported an error (e.g. unknown ticker) or the request failed."""


class NotFoundError(DataFetchError):
    """The provider returned no data object for the requested symbol."""


class FetchTimeoutError(DataFetchError, TimeoutError):
    """A request exceeded its timeout."""


class MalformedResponseError(DataFetchError):
    """The response body could not be parsed into the expected structure."""
