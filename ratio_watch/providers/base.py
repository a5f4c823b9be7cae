"""
Provider interfaces and data contracts.

Every price provider implements PriceProvider: a name plus fetch_quote(),
which returns one PriceQuote holding BTC, XRP and (if offered) gold prices
from a single source. Quotes are frozen dataclasses scoped to one run.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Protocol, runtime_checkable

from ..core.errors import SourceUnavailable


class ProviderStatus(enum.Enum):
    """Health status of a data provider within one run."""

    OK = "OK"
    DEGRADED = "DEGRADED"
    DOWN = "DOWN"


@dataclass(frozen=True)
class PriceQuote:
    """Immutable price snapshot from exactly one provider. gold is None when not offered."""

    source: str
    btc: Decimal
    xrp: Decimal
    gold: Optional[Decimal]
    fetched_at_utc: str

    def is_valid(self) -> bool:
        if self.btc is None or self.xrp is None:
            return False
        if not (self.btc.is_finite() and self.xrp.is_finite()):
            return False
        # Unusable gold only degrades bg/gr; it never rejects the quote.
        return self.btc > 0 and self.xrp > 0


@dataclass
class ProviderHealth:
    """Mutable health state for a single provider instance."""

    provider_name: str
    status: ProviderStatus = ProviderStatus.OK
    last_ok_at: Optional[str] = None
    fail_count: int = 0
    last_error: Optional[str] = None

    def record_success(self) -> None:
        self.status = ProviderStatus.OK
        self.fail_count = 0
        self.last_ok_at = datetime.now(timezone.utc).isoformat(timespec="seconds")
        self.last_error = None

    def record_failure(self, error: str) -> None:
        self.fail_count += 1
        self.last_error = error[:500]
        if self.fail_count >= 2:
            self.status = ProviderStatus.DOWN
        else:
            self.status = ProviderStatus.DEGRADED


@runtime_checkable
class PriceProvider(Protocol):
    """Protocol for price providers."""

    @property
    def provider_name(self) -> str: ...

    def fetch_quote(self) -> PriceQuote:
        """Fetch current BTC/XRP (and optionally gold) prices. Raises on any failure."""
        ...


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def safe_get(d: Any, path: str, default: Any = None) -> Any:
    cur: Any = d
    for key in path.split("."):
        if not isinstance(cur, dict) or key not in cur:
            return default
        cur = cur[key]
    return cur


def to_price(provider_name: str, raw: Any, field: str) -> Decimal:
    """Parse a price field into Decimal; missing or unparsable values are a provider failure."""
    if raw is None or raw == "":
        raise SourceUnavailable(provider_name, f"response missing {field}")
    try:
        value = Decimal(str(raw))
    except (InvalidOperation, ValueError) as exc:
        raise SourceUnavailable(provider_name, f"unparsable {field}: {raw!r}") from exc
    return value
