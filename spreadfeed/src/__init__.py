"""
Basket Spread Price Feed - Price Aggregation Module

This module combines already-acquired price observations into a single
normalized spread price:
- FixedPoint: Integer fixed-point arithmetic (no floating point)
- PriceFeed: The capability shared by all feeds, plus error kinds
- MedianizerPriceFeed: Median or mean of several feeds
- BasketSpreadPriceFeed: Clamped basket spread divided by a denominator
- FetcherPriceFeed / ContractPriceFeed: Exchange and on-chain leaf feeds
- PriceFeedFactory: Builds feed trees from JSON configuration
- PriceMonitor: Periodic update and reporting loop
"""

from .BasketSpreadPriceFeed import BasketSpreadPriceFeed
from .ContractPriceFeed import ContractPriceFeed
from .FetcherPriceFeed import FetcherPriceFeed
from .MedianizerPriceFeed import MedianizerPriceFeed
from .PriceFeed import (
    NoPriceAvailableError,
    PriceDivisionByZeroError,
    PriceFeed,
    PriceFeedError,
    PriceFeedUpdateError,
    stage_all,
)
from .PriceFeedFactory import ConfigError, PriceFeedFactory, load_config
from .PriceFeedMock import PriceFeedMock
from .PriceMonitor import PriceMonitor

__all__ = [
    "BasketSpreadPriceFeed",
    "ConfigError",
    "ContractPriceFeed",
    "FetcherPriceFeed",
    "MedianizerPriceFeed",
    "NoPriceAvailableError",
    "PriceDivisionByZeroError",
    "PriceFeed",
    "PriceFeedError",
    "PriceFeedFactory",
    "PriceFeedMock",
    "PriceFeedUpdateError",
    "PriceMonitor",
    "load_config",
    "stage_all",
]
