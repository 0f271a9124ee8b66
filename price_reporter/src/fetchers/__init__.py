"""
Price sources for the HNT/USD oracle report.

Each source performs one request against a fixed upstream endpoint and maps
the response into a FixedPointPrice.

Usage:
    from price_reporter.src.fetchers import get_source, resolve_price

    # Get list of available sources
    available = get_available_sources()
    # ['bilaxy', 'binance-int', 'binance-us', 'coingecko']

    source = get_source("coingecko")
    price = await source.fetch()

    # A --price argument may also be a plain number
    source = resolve_price("1.2345")
"""

# Import base classes and utilities
from .base import (
    SOURCE_ALIASES,
    SOURCE_REGISTRY,
    PriceSource,
    get_available_sources,
    get_source,
    register_source,
)

# Import all source implementations to trigger registration
from .bilaxy import BilaxySource
from .binance import BinanceIntlSource, BinanceUSSource
from .coingecko import CoinGeckoSource
from .literal import LiteralSource, resolve_price

__all__ = [
    "PriceSource",
    "LiteralSource",
    # Registry functions
    "register_source",
    "get_source",
    "get_available_sources",
    "resolve_price",
    "SOURCE_ALIASES",
    "SOURCE_REGISTRY",
    # Source implementations
    "BilaxySource",
    "BinanceIntlSource",
    "BinanceUSSource",
    "CoinGeckoSource",
]
