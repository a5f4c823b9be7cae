"""
Single source for "now" time. Supports deterministic mode for tests via
RATIO_WATCH_DETERMINISTIC_TIME (ISO format, e.g. 2026-01-01T00:00:00Z).
"""

from __future__ import annotations

import os
from datetime import datetime, timezone

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_utc(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def now_utc() -> datetime:
    """
    Return the current UTC time as an aware datetime.
    If env RATIO_WATCH_DETERMINISTIC_TIME is set, return that value instead.
    """
    fixed = os.environ.get("RATIO_WATCH_DETERMINISTIC_TIME", "").strip()
    if fixed:
        return parse_utc(fixed)
    return datetime.now(timezone.utc)


def now_utc_iso() -> str:
    return now_utc().isoformat(timespec="seconds")
