"""
Run health monitoring: heartbeat cadence and stall detection of the scheduler.

The heartbeat says "the job is alive"; the stall warning says "the job used to
run regularly but the gap since the previous run is too long". They fire
independently and are suppressed by different rules.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Protocol, Sequence, Tuple
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunHealthState:
    last_run_at: Optional[datetime] = None
    last_heartbeat_at: Optional[datetime] = None
    warning_acknowledged: bool = False


@dataclass(frozen=True)
class HealthDecision:
    heartbeat_due: bool
    warning_due: bool
    new_state: RunHealthState
    gap: Optional[timedelta] = None


class HeartbeatPolicy(Protocol):
    def is_due(self, now: datetime, last_heartbeat_at: Optional[datetime]) -> bool: ...


class IntervalHeartbeat:
    """Due when no heartbeat was ever sent or the interval has elapsed since the last one."""

    def __init__(self, interval: timedelta) -> None:
        self.interval = interval

    def is_due(self, now: datetime, last_heartbeat_at: Optional[datetime]) -> bool:
        if last_heartbeat_at is None:
            return True
        return now - last_heartbeat_at >= self.interval


class WindowHeartbeat:
    """
    Due whenever the wall-clock hour (in tz) falls within any inclusive
    [start, end] window. Stateless: the previous heartbeat time is ignored.
    """

    def __init__(self, windows: Sequence[Tuple[int, int]], tz: str = "UTC") -> None:
        self.windows = tuple(windows)
        self.tz = ZoneInfo(tz)

    def is_due(self, now: datetime, last_heartbeat_at: Optional[datetime]) -> bool:
        hour = now.astimezone(self.tz).hour
        return any(start <= hour <= end for start, end in self.windows)


class RunHealthMonitor:
    """Decides heartbeat and stall-warning notifications for one invocation."""

    def __init__(self, heartbeat: HeartbeatPolicy, warning_interval: timedelta) -> None:
        self._heartbeat = heartbeat
        self._warning_interval = warning_interval

    @property
    def warning_interval(self) -> timedelta:
        return self._warning_interval

    def evaluate(self, now: datetime, state: RunHealthState) -> HealthDecision:
        heartbeat_due = self._heartbeat.is_due(now, state.last_heartbeat_at)
        last_heartbeat_at = now if heartbeat_due else state.last_heartbeat_at

        gap: Optional[timedelta] = None
        warning_due = False
        acknowledged = False
        if state.last_run_at is not None:
            gap = now - state.last_run_at
            if gap >= self._warning_interval:
                # One warning per stall episode.
                warning_due = not state.warning_acknowledged
                acknowledged = True
                if warning_due:
                    logger.warning(
                        "Previous run was %s ago (warning interval %s)", gap, self._warning_interval
                    )

        return HealthDecision(
            heartbeat_due=heartbeat_due,
            warning_due=warning_due,
            gap=gap,
            new_state=RunHealthState(
                last_run_at=now,
                last_heartbeat_at=last_heartbeat_at,
                warning_acknowledged=acknowledged,
            ),
        )


def build_heartbeat_policy(
    policy: str,
    interval: timedelta,
    windows: Sequence[Tuple[int, int]] = (),
    tz: str = "UTC",
) -> HeartbeatPolicy:
    """Create the single heartbeat policy used for the whole job."""
    if policy == "windows":
        return WindowHeartbeat(windows, tz)
    if policy == "interval":
        return IntervalHeartbeat(interval)
    raise ValueError(f"Unknown heartbeat policy '{policy}'")
