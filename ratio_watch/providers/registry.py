"""
Provider registry: central catalog of available price providers.

Providers register themselves here by name. A configured priority list then
determines which providers are tried and in what order.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Type, Union

from ..core.errors import ConfigError
from .base import PriceProvider

logger = logging.getLogger(__name__)

ProviderFactory = Union[Type[PriceProvider], PriceProvider]


class ProviderRegistry:
    """
    Registry mapping provider names to factories/instances.

    Usage:
        registry = ProviderRegistry()
        registry.register("coingecko", CoinGeckoProvider)
        registry.register("binance", BinanceProvider)

        providers = registry.build_chain(["coingecko", "binance"], timeout_s=10.0)
    """

    def __init__(self) -> None:
        self._factories: Dict[str, ProviderFactory] = {}
        self._instances: Dict[str, PriceProvider] = {}

    def register(self, name: str, factory: ProviderFactory) -> None:
        """Register a provider class or a ready instance by name."""
        self._factories[name] = factory
        self._instances.pop(name, None)
        logger.debug("Registered price provider: %s", name)

    def get(self, name: str, **kwargs: Any) -> PriceProvider:
        """Get or instantiate a provider by name."""
        if name not in self._instances:
            factory = self._factories.get(name)
            if factory is None:
                raise ConfigError(
                    f"Unknown price provider '{name}'. Available: {list(self._factories)}"
                )
            if isinstance(factory, type):
                self._instances[name] = factory(**kwargs)
            else:
                self._instances[name] = factory
        return self._instances[name]

    @property
    def names(self) -> List[str]:
        return list(self._factories)

    def build_chain(self, priority: Optional[List[str]] = None, **kwargs: Any) -> List[PriceProvider]:
        """Build an ordered list of providers from a priority list; unknown names are an error."""
        names = priority or list(self._factories)
        return [self.get(n, **kwargs) for n in names]
