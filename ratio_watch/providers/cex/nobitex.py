"""
Nobitex price provider (preferred market, no gold).

Uses the public Nobitex market stats endpoint (no authentication required):
  GET https://api.nobitex.ir/market/stats?srcCurrency=btc,xrp&dstCurrency=usdt
Prices are the best ask (bestSell) of the USDT markets.
"""
from __future__ import annotations

import requests

from ...core.errors import SourceUnavailable
from ..base import PriceQuote, safe_get, to_price, utc_now_iso

NOBITEX_BASE_URL = "https://api.nobitex.ir"
HTTP_TIMEOUT_S = 10.0


class NobitexProvider:
    """Fetch BTC and XRP from Nobitex USDT markets."""

    def __init__(self, timeout_s: float = HTTP_TIMEOUT_S) -> None:
        self.timeout_s = timeout_s

    @property
    def provider_name(self) -> str:
        return "nobitex"

    def fetch_quote(self) -> PriceQuote:
        url = f"{NOBITEX_BASE_URL}/market/stats"
        params = {"srcCurrency": "btc,xrp", "dstCurrency": "usdt"}
        ts = utc_now_iso()

        resp = requests.get(url, params=params, timeout=self.timeout_s)
        if resp.status_code == 429:
            raise SourceUnavailable(self.provider_name, "rate limit (HTTP 429)")
        resp.raise_for_status()

        data = resp.json()
        stats = data.get("stats") if isinstance(data, dict) else None
        if not isinstance(stats, dict):
            raise SourceUnavailable(self.provider_name, "response missing stats")

        return PriceQuote(
            source="Nobitex",
            btc=to_price(self.provider_name, safe_get(stats.get("btc-usdt"), "bestSell"), "btc-usdt.bestSell"),
            xrp=to_price(self.provider_name, safe_get(stats.get("xrp-usdt"), "bestSell"), "xrp-usdt.bestSell"),
            gold=None,
            fetched_at_utc=ts,
        )
