"""Prometheus exporter publishing CoinMarketCap coin stats."""

from importlib import import_module
from typing import Any

__version__ = "0.1.0"

__all__ = [
    "CoinMarketCapScraper",
    "CoinRecord",
    "CoinStatsCollector",
    "ExporterConfig",
    "HTTPClient",
    "build_coin_metrics",
]

_EXPORTS = {
    "CoinMarketCapScraper": "scraper",
    "CoinRecord": "models",
    "CoinStatsCollector": "collector",
    "ExporterConfig": "config",
    "HTTPClient": "http_client",
    "build_coin_metrics": "metrics",
}


def __getattr__(name: str) -> Any:
    if name in _EXPORTS:
        module = import_module(f"{__name__}.{_EXPORTS[name]}")
        return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return sorted(__all__)
