"""
Price providers for ratio_watch.

Providers are registered by name and assembled into a priority chain from
configuration. The chain returns the first provider that yields a valid quote.
"""

from __future__ import annotations

from .base import PriceProvider, PriceQuote, ProviderHealth, ProviderStatus
from .chain import PriceSourceChain
from .registry import ProviderRegistry
from .resilience import RetryConfig, resilient_call

__all__ = [
    "PriceQuote",
    "PriceProvider",
    "ProviderHealth",
    "ProviderStatus",
    "ProviderRegistry",
    "PriceSourceChain",
    "RetryConfig",
    "resilient_call",
]
