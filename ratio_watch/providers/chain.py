"""
Price source chain: ordered fallback across providers.

The chain tries providers in priority order and returns the first valid quote;
providers after the winner are never called. Results from different sources are
never mixed or reconciled. If every provider fails, AllSourcesFailedError is raised.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from ..core.errors import AllSourcesFailedError
from .base import PriceProvider, PriceQuote, ProviderHealth
from .resilience import RetryConfig, resilient_call

logger = logging.getLogger(__name__)


class PriceSourceChain:
    """
    Ordered chain of price providers with automatic fallback.

    Tries each provider in order, with retry protection per provider.
    Fetches are sequential so priority order, not response time, picks the winner.
    """

    def __init__(
        self,
        providers: Sequence[PriceProvider],
        retry_config: Optional[RetryConfig] = None,
    ) -> None:
        self._providers = list(providers)
        self._retry_config = retry_config or RetryConfig()
        self._health: Dict[str, ProviderHealth] = {
            p.provider_name: ProviderHealth(provider_name=p.provider_name) for p in self._providers
        }

    @property
    def provider_names(self) -> List[str]:
        return [p.provider_name for p in self._providers]

    def fetch(self) -> PriceQuote:
        """Return the first valid quote in priority order, or raise AllSourcesFailedError."""
        errors: List[str] = []
        for provider in self._providers:
            name = provider.provider_name
            health = self._health[name]
            try:
                quote = resilient_call(provider.fetch_quote, retry_config=self._retry_config)
            except Exception as exc:
                msg = f"{name}: {type(exc).__name__}: {exc}"
                errors.append(msg)
                health.record_failure(str(exc))
                logger.warning("Price source %s failed, trying next: %s", name, exc)
                continue

            if quote.is_valid():
                health.record_success()
                logger.debug("Price source %s won: %s", name, quote)
                return quote

            msg = f"{name}: invalid quote (btc={quote.btc}, xrp={quote.xrp}, gold={quote.gold})"
            errors.append(msg)
            health.record_failure(msg)
            logger.warning("Price source %s returned an invalid quote, trying next", name)

        logger.error("All %d price sources failed", len(self._providers))
        raise AllSourcesFailedError(errors)

    def get_health(self) -> Dict[str, ProviderHealth]:
        """Return health status for all providers in the chain."""
        return dict(self._health)
