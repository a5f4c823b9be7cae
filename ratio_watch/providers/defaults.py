"""
Default provider registry configuration.

Registers the built-in providers and builds the chain from WatchConfig.
To add a new provider, register it here and add it to providers.priority.
"""
from __future__ import annotations

from typing import Optional

from ..config import WatchConfig
from .cex.binance import BinanceProvider
from .cex.coingecko import CoinGeckoProvider
from .cex.coinpaprika import CoinPaprikaProvider
from .cex.nobitex import NobitexProvider
from .chain import PriceSourceChain
from .registry import ProviderRegistry
from .resilience import RetryConfig

# Preferred-market first; config.yaml can override
DEFAULT_PRIORITY = ["nobitex", "coingecko", "coinpaprika", "binance"]


def create_default_registry() -> ProviderRegistry:
    """Create a registry with all built-in providers."""
    registry = ProviderRegistry()
    registry.register("nobitex", NobitexProvider)
    registry.register("coingecko", CoinGeckoProvider)
    registry.register("coinpaprika", CoinPaprikaProvider)
    registry.register("binance", BinanceProvider)
    return registry


def create_price_chain(
    config: WatchConfig,
    registry: Optional[ProviderRegistry] = None,
) -> PriceSourceChain:
    """Build the price source chain in configured priority order."""
    reg = registry or create_default_registry()
    order = list(config.provider_priority) or DEFAULT_PRIORITY
    providers = reg.build_chain(order, timeout_s=config.http_timeout_s)
    return PriceSourceChain(
        providers=providers,
        retry_config=RetryConfig(max_retries=config.provider_retries),
    )
