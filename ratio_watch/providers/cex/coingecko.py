"""
CoinGecko price provider (the only built-in source with a gold price).

Uses the public CoinGecko simple price API (no authentication required):
  GET https://api.coingecko.com/api/v3/simple/price?ids=bitcoin,ripple,tether-gold&vs_currencies=usd
Gold is taken from Tether Gold (XAUT), one token per troy ounce.
"""
from __future__ import annotations

import requests

from ...core.errors import SourceUnavailable
from ..base import PriceQuote, safe_get, to_price, utc_now_iso

COINGECKO_BASE_URL = "https://api.coingecko.com"
HTTP_TIMEOUT_S = 10.0

_IDS = ("bitcoin", "ripple", "tether-gold")


class CoinGeckoProvider:
    """Fetch BTC, XRP and gold from CoinGecko."""

    def __init__(self, timeout_s: float = HTTP_TIMEOUT_S) -> None:
        self.timeout_s = timeout_s

    @property
    def provider_name(self) -> str:
        return "coingecko"

    def fetch_quote(self) -> PriceQuote:
        url = f"{COINGECKO_BASE_URL}/api/v3/simple/price"
        params = {"ids": ",".join(_IDS), "vs_currencies": "usd"}
        ts = utc_now_iso()

        resp = requests.get(url, params=params, timeout=self.timeout_s)
        if resp.status_code == 429:
            raise SourceUnavailable(self.provider_name, "rate limit (HTTP 429)")
        resp.raise_for_status()

        data = resp.json()
        gold_raw = safe_get(data, "tether-gold.usd")
        return PriceQuote(
            source="CoinGecko",
            btc=to_price(self.provider_name, safe_get(data, "bitcoin.usd"), "bitcoin.usd"),
            xrp=to_price(self.provider_name, safe_get(data, "ripple.usd"), "ripple.usd"),
            # A missing gold entry degrades bg/gr for this run instead of failing the source.
            gold=to_price(self.provider_name, gold_raw, "tether-gold.usd") if gold_raw is not None else None,
            fetched_at_utc=ts,
        )
