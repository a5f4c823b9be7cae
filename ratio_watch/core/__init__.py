"""Shared primitives for ratio_watch: exception taxonomy."""

from __future__ import annotations

from .errors import (
    AllSourcesFailedError,
    ConfigError,
    NotificationDeliveryError,
    RatioWatchError,
    SourceUnavailable,
    StateFormatError,
)

__all__ = [
    "RatioWatchError",
    "ConfigError",
    "SourceUnavailable",
    "AllSourcesFailedError",
    "NotificationDeliveryError",
    "StateFormatError",
]
