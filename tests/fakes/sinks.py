"""Fake notification sinks and an in-memory state store. No network, no disk."""

from __future__ import annotations

from typing import List, Optional

from ratio_watch.state import PersistedRecord


class RecordingNotifier:
    """Keeps every delivered message in order."""

    def __init__(self) -> None:
        self.sent: List[str] = []

    def deliver(self, text: str) -> None:
        self.sent.append(text)


class FailingNotifier:
    """Raises on every delivery, counting attempts."""

    def __init__(self) -> None:
        self.attempts = 0

    def deliver(self, text: str) -> None:
        self.attempts += 1
        raise ConnectionError("sink unreachable")


class MemoryStateStore:
    """State store backed by an attribute; counts saves."""

    def __init__(self, record: Optional[PersistedRecord] = None) -> None:
        self.record = record
        self.save_count = 0

    def load(self) -> Optional[PersistedRecord]:
        return self.record

    def save(self, record: PersistedRecord) -> None:
        self.record = record
        self.save_count += 1
