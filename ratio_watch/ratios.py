"""
Ratio calculation: truncated integer ratios between BTC, XRP and gold prices.

    bg = floor(btc / gold)
    br = floor((btc / xrp) / 1000)
    gr = floor((gold / xrp) / 100)

Truncation is floor, not round: 14.99 -> 14. bg and gr are absent (None) when
the winning provider offers no gold price.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional

RATIO_NAMES = ("bg", "br", "gr")

_BR_SCALE = Decimal(1000)
_GR_SCALE = Decimal(100)


@dataclass(frozen=True)
class RatioSet:
    """Derived ratios for one price quote."""

    bg: Optional[int]
    br: int
    gr: Optional[int]

    def get(self, name: str) -> Optional[int]:
        if name not in RATIO_NAMES:
            raise KeyError(f"Unknown ratio '{name}'. Available: {list(RATIO_NAMES)}")
        return getattr(self, name)

    def to_dict(self) -> Dict[str, Optional[int]]:
        return {"bg": self.bg, "br": self.br, "gr": self.gr}

    @classmethod
    def from_dict(cls, data: Dict[str, Optional[int]]) -> RatioSet:
        bg, gr = data.get("bg"), data.get("gr")
        return cls(
            bg=int(bg) if bg is not None else None,
            br=int(data["br"]),
            gr=int(gr) if gr is not None else None,
        )


def truncate(x: Decimal) -> int:
    return int(math.floor(x))


def calculate_ratios(btc: Decimal, xrp: Decimal, gold: Optional[Decimal]) -> RatioSet:
    """
    Compute RatioSet from raw prices. btc and xrp must be positive; a missing or
    non-positive gold price yields bg=None and gr=None instead of dividing by it.
    """
    btc, xrp = Decimal(btc), Decimal(xrp)
    if not btc.is_finite() or not xrp.is_finite() or btc <= 0 or xrp <= 0:
        raise ValueError(f"btc and xrp must be positive finite prices (btc={btc}, xrp={xrp})")

    br = truncate((btc / xrp) / _BR_SCALE)
    if gold is None:
        return RatioSet(bg=None, br=br, gr=None)
    gold = Decimal(gold)
    if not gold.is_finite() or gold <= 0:
        return RatioSet(bg=None, br=br, gr=None)
    return RatioSet(
        bg=truncate(btc / gold),
        br=br,
        gr=truncate((gold / xrp) / _GR_SCALE),
    )


def format_ratio(value: Optional[int]) -> str:
    return "null" if value is None else str(value)
