"""Fake providers, sinks and stores for runner and provider tests (no live network)."""

from .providers import (
    FakePriceProvider,
    FakePriceProviderAlwaysFail,
    FakePriceProviderFailNThenSucceed,
    make_quote,
)
from .sinks import FailingNotifier, MemoryStateStore, RecordingNotifier

__all__ = [
    "FakePriceProvider",
    "FakePriceProviderAlwaysFail",
    "FakePriceProviderFailNThenSucceed",
    "make_quote",
    "RecordingNotifier",
    "FailingNotifier",
    "MemoryStateStore",
]
