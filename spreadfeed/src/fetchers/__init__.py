"""
Exchange price fetchers used by FetcherPriceFeed leaves.

Usage:
    from spreadfeed.src.fetchers import get_fetcher, get_available_fetchers

    available = get_available_fetchers()
    # ['bitstamp', 'coinbase', 'kraken']

    fetcher = get_fetcher("coinbase")
    price = await fetcher.fetch("usdc", "usd")  # Decimal or None
"""

from .base import (
    FETCHER_REGISTRY,
    BaseFetcher,
    FetcherConfigError,
    FetcherError,
    FetcherHTTPError,
    get_available_fetchers,
    get_fetcher,
    parse_decimal,
    register_fetcher,
)

# Import all fetcher implementations to trigger registration
from .bitstamp import BitstampFetcher
from .coinbase import CoinbaseFetcher
from .kraken import KrakenFetcher

__all__ = [
    "BaseFetcher",
    "FetcherError",
    "FetcherConfigError",
    "FetcherHTTPError",
    "parse_decimal",
    "register_fetcher",
    "get_fetcher",
    "get_available_fetchers",
    "FETCHER_REGISTRY",
    "BitstampFetcher",
    "CoinbaseFetcher",
    "KrakenFetcher",
]
