"""Exchange and aggregator price providers."""
from __future__ import annotations

from .binance import BinanceProvider
from .coingecko import CoinGeckoProvider
from .coinpaprika import CoinPaprikaProvider
from .nobitex import NobitexProvider

__all__ = ["NobitexProvider", "CoinGeckoProvider", "CoinPaprikaProvider", "BinanceProvider"]
