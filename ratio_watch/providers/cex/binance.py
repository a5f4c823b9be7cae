"""
Binance price provider (last resort, no gold).

Uses the public Binance ticker API (no authentication required):
  GET https://api.binance.com/api/v3/ticker/price?symbol={symbol}
"""
from __future__ import annotations

from decimal import Decimal

import requests

from ...core.errors import SourceUnavailable
from ..base import PriceQuote, safe_get, to_price, utc_now_iso

BINANCE_BASE_URL = "https://api.binance.com"
HTTP_TIMEOUT_S = 10.0


class BinanceProvider:
    """Fetch BTCUSDT and XRPUSDT last prices from Binance."""

    def __init__(self, timeout_s: float = HTTP_TIMEOUT_S) -> None:
        self.timeout_s = timeout_s

    @property
    def provider_name(self) -> str:
        return "binance"

    def _ticker_price(self, symbol: str) -> Decimal:
        url = f"{BINANCE_BASE_URL}/api/v3/ticker/price"
        resp = requests.get(url, params={"symbol": symbol}, timeout=self.timeout_s)
        if resp.status_code in (418, 429):
            raise SourceUnavailable(self.provider_name, f"rate limit (HTTP {resp.status_code})")
        resp.raise_for_status()
        return to_price(self.provider_name, safe_get(resp.json(), "price"), f"{symbol}.price")

    def fetch_quote(self) -> PriceQuote:
        ts = utc_now_iso()
        return PriceQuote(
            source="Binance",
            btc=self._ticker_price("BTCUSDT"),
            xrp=self._ticker_price("XRPUSDT"),
            gold=None,
            fetched_at_utc=ts,
        )
