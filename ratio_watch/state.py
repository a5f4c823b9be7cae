"""
Persisted state between invocations.

One PersistedRecord holds the latest ratios, every per-ratio BoundaryState and
the RunHealthState. It is read once at the start of a run and written once at
the end. A missing, unreadable or malformed record loads as None, which callers
treat as a fresh start; it is never fatal.
"""
from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Union

from .boundary import BoundaryState, Zone
from .core.errors import StateFormatError
from .health import RunHealthState
from .ratios import RatioSet
from .timeutils import now_utc_iso, parse_utc

logger = logging.getLogger(__name__)

RECORD_VERSION = 1


def _ts_out(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _ts_in(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise StateFormatError(f"timestamp must be a string, got {type(value).__name__}")
    return parse_utc(value)


@dataclass(frozen=True)
class PersistedRecord:
    ratios: Optional[RatioSet] = None
    boundaries: Dict[str, BoundaryState] = field(default_factory=dict)
    health: RunHealthState = field(default_factory=RunHealthState)
    version: int = RECORD_VERSION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "ratios": self.ratios.to_dict() if self.ratios is not None else None,
            "boundaries": {
                name: {"zone": st.zone.value, "last_alert_at": _ts_out(st.last_alert_at)}
                for name, st in sorted(self.boundaries.items())
            },
            "health": {
                "last_run_at": _ts_out(self.health.last_run_at),
                "last_heartbeat_at": _ts_out(self.health.last_heartbeat_at),
                "warning_acknowledged": self.health.warning_acknowledged,
            },
        }

    @classmethod
    def from_dict(cls, data: Any) -> PersistedRecord:
        """Rebuild a record; raises StateFormatError on any schema mismatch."""
        if not isinstance(data, dict):
            raise StateFormatError("state record must be a JSON object")
        try:
            version = int(data.get("version", RECORD_VERSION))
            if version != RECORD_VERSION:
                raise StateFormatError(f"unsupported state version {version}")

            raw_ratios = data.get("ratios")
            ratios = RatioSet.from_dict(raw_ratios) if raw_ratios is not None else None

            boundaries: Dict[str, BoundaryState] = {}
            for name, raw in (data.get("boundaries") or {}).items():
                boundaries[name] = BoundaryState(
                    zone=Zone(raw["zone"]),
                    last_alert_at=_ts_in(raw["last_alert_at"]),
                )

            raw_health = data.get("health") or {}
            ack = raw_health.get("warning_acknowledged", False)
            if not isinstance(ack, bool):
                raise StateFormatError("health.warning_acknowledged must be a boolean")
            health = RunHealthState(
                last_run_at=_ts_in(raw_health.get("last_run_at")),
                last_heartbeat_at=_ts_in(raw_health.get("last_heartbeat_at")),
                warning_acknowledged=ack,
            )
        except StateFormatError:
            raise
        except (KeyError, TypeError, ValueError, AttributeError, OverflowError) as exc:
            raise StateFormatError(f"{type(exc).__name__}: {exc}") from exc
        for name, st in boundaries.items():
            if st.last_alert_at is None:
                raise StateFormatError(f"boundaries.{name}.last_alert_at is required")
        return cls(ratios=ratios, boundaries=boundaries, health=health, version=version)


class StateStore(Protocol):
    def load(self) -> Optional[PersistedRecord]: ...

    def save(self, record: PersistedRecord) -> None: ...


def _decode(payload: str, origin: str) -> Optional[PersistedRecord]:
    try:
        return PersistedRecord.from_dict(json.loads(payload))
    except (json.JSONDecodeError, RecursionError, StateFormatError) as exc:
        logger.warning("Ignoring corrupt state in %s, starting fresh: %s", origin, exc)
        return None


class JsonFileStateStore:
    """State as a single JSON file. Atomic: write to .tmp then rename."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def load(self) -> Optional[PersistedRecord]:
        if not self.path.exists():
            logger.info("No state at %s, starting fresh", self.path)
            return None
        try:
            payload = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Cannot read state %s, starting fresh: %s", self.path, exc)
            return None
        return _decode(payload, str(self.path))

    def save(self, record: PersistedRecord) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(record.to_dict(), f, indent=2, sort_keys=True)
        tmp.replace(self.path)


class SqliteStateStore:
    """State as one row in a SQLite key-value table; each save is a single transaction."""

    def __init__(self, path: Union[str, Path], key: str = "ratio_watch") -> None:
        self.path = str(path)
        self.key = key

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path)
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS watch_state (
                    key TEXT PRIMARY KEY,
                    payload TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );
                """
            )
        except sqlite3.DatabaseError:
            conn.close()
            raise
        return conn

    def load(self) -> Optional[PersistedRecord]:
        try:
            conn = self._connect()
        except sqlite3.DatabaseError as exc:
            logger.warning("Cannot open state db %s, starting fresh: %s", self.path, exc)
            return None
        try:
            row = conn.execute(
                "SELECT payload FROM watch_state WHERE key = ?", (self.key,)
            ).fetchone()
        except sqlite3.DatabaseError as exc:
            logger.warning("Cannot read state db %s, starting fresh: %s", self.path, exc)
            return None
        finally:
            conn.close()
        if row is None:
            logger.info("No state for %s in %s, starting fresh", self.key, self.path)
            return None
        return _decode(row[0], f"{self.path}:{self.key}")

    def save(self, record: PersistedRecord) -> None:
        payload = json.dumps(record.to_dict(), sort_keys=True)
        conn = self._connect()
        try:
            with conn:
                conn.execute(
                    """
                    INSERT INTO watch_state (key, payload, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        payload = excluded.payload,
                        updated_at = excluded.updated_at;
                    """,
                    (self.key, payload, now_utc_iso()),
                )
        finally:
            conn.close()


def create_state_store(backend: str, path: Union[str, Path]) -> StateStore:
    if backend == "sqlite":
        return SqliteStateStore(path)
    if backend == "json":
        return JsonFileStateStore(path)
    raise ValueError(f"Unknown state backend '{backend}'")
