"""
CoinPaprika price provider (no gold).

Uses the public CoinPaprika ticker API (no authentication required):
  GET https://api.coinpaprika.com/v1/tickers/{coin_id}
"""
from __future__ import annotations

from decimal import Decimal

import requests

from ...core.errors import SourceUnavailable
from ..base import PriceQuote, safe_get, to_price, utc_now_iso

COINPAPRIKA_BASE_URL = "https://api.coinpaprika.com"
HTTP_TIMEOUT_S = 10.0

BTC_ID = "btc-bitcoin"
XRP_ID = "xrp-xrp"


class CoinPaprikaProvider:
    """Fetch BTC and XRP USD prices from CoinPaprika tickers."""

    def __init__(self, timeout_s: float = HTTP_TIMEOUT_S) -> None:
        self.timeout_s = timeout_s

    @property
    def provider_name(self) -> str:
        return "coinpaprika"

    def _ticker_price(self, coin_id: str) -> Decimal:
        url = f"{COINPAPRIKA_BASE_URL}/v1/tickers/{coin_id}"
        resp = requests.get(url, timeout=self.timeout_s)
        if resp.status_code == 429:
            raise SourceUnavailable(self.provider_name, "rate limit (HTTP 429)")
        resp.raise_for_status()
        return to_price(self.provider_name, safe_get(resp.json(), "quotes.USD.price"), f"{coin_id} quotes.USD.price")

    def fetch_quote(self) -> PriceQuote:
        ts = utc_now_iso()
        return PriceQuote(
            source="CoinPaprika",
            btc=self._ticker_price(BTC_ID),
            xrp=self._ticker_price(XRP_ID),
            gold=None,
            fetched_at_utc=ts,
        )
