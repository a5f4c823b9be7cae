"""
Shared exception types for ratio_watch.

Only AllSourcesFailedError reaches the caller of an invocation; every other
error is recovered where it is raised (logged, then skipped or defaulted).
"""

from __future__ import annotations

from typing import List, Optional


class RatioWatchError(Exception):
    """Base exception for ratio_watch; catch this for any package-raised error."""

    pass


class ConfigError(RatioWatchError):
    """Invalid or inconsistent configuration value."""

    pass


class SourceUnavailable(RatioWatchError):
    """A single price provider could not produce a usable quote."""

    def __init__(self, provider_name: str, message: str) -> None:
        super().__init__(f"{provider_name}: {message}")
        self.provider_name = provider_name


class AllSourcesFailedError(RatioWatchError):
    """Every configured price provider failed during one fetch."""

    def __init__(self, errors: Optional[List[str]] = None) -> None:
        self.errors = list(errors or [])
        detail = "; ".join(self.errors) if self.errors else "no providers configured"
        super().__init__(f"All price sources failed: {detail}")


class NotificationDeliveryError(RatioWatchError):
    """A notification sink failed to deliver a message."""

    pass


class StateFormatError(RatioWatchError):
    """Persisted state does not match the expected record schema."""

    pass


__all__ = [
    "RatioWatchError",
    "ConfigError",
    "SourceUnavailable",
    "AllSourcesFailedError",
    "NotificationDeliveryError",
    "StateFormatError",
]
