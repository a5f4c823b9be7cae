"""
Tests for fake providers: deterministic data, fail-N-then-succeed, always-fail behavior.

No live network; validates that fakes behave as required for runner tests.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from ratio_watch.core.errors import AllSourcesFailedError
from ratio_watch.providers.chain import PriceSourceChain
from ratio_watch.providers.resilience import RetryConfig

from .providers import (
    FAKE_FETCHED_AT,
    FakePriceProvider,
    FakePriceProviderAlwaysFail,
    FakePriceProviderFailNThenSucceed,
)


class TestFakePriceProvider:
    """Always-succeed fake returns deterministic data."""

    def test_deterministic_quotes(self):
        p = FakePriceProvider("ok", btc=Decimal("60000"), xrp=Decimal("2"), gold=None)
        q1 = p.fetch_quote()
        q2 = p.fetch_quote()
        assert q1.source == "ok"
        assert q1.btc == Decimal("60000")
        assert q1.gold is None
        assert q1.fetched_at_utc == FAKE_FETCHED_AT
        assert q2 == q1
        assert p.call_count == 2


class TestFakePriceProviderFailNThenSucceed:
    def test_fails_then_succeeds(self):
        p = FakePriceProviderFailNThenSucceed("flaky", fail_times=2)
        with pytest.raises(RuntimeError, match="simulated failure"):
            p.fetch_quote()
        with pytest.raises(RuntimeError, match="simulated failure"):
            p.fetch_quote()
        assert p.fetch_quote().source == "flaky"

    def test_retry_within_provider_recovers(self):
        flaky = FakePriceProviderFailNThenSucceed("flaky", fail_times=1)
        backup = FakePriceProvider("backup")
        chain = PriceSourceChain(
            [flaky, backup],
            retry_config=RetryConfig(max_retries=2, base_delay_s=0.0),
        )
        assert chain.fetch().source == "flaky"
        assert backup.call_count == 0


class TestFakePriceProviderAlwaysFail:
    def test_always_raises(self):
        p = FakePriceProviderAlwaysFail("bad")
        for _ in range(3):
            with pytest.raises(RuntimeError, match="always fails"):
                p.fetch_quote()

    def test_chain_raises_when_all_fail(self):
        chain = PriceSourceChain(
            [FakePriceProviderAlwaysFail("a"), FakePriceProviderAlwaysFail("b")],
            retry_config=RetryConfig(max_retries=1),
        )
        with pytest.raises(AllSourcesFailedError, match="All price sources failed"):
            chain.fetch()
