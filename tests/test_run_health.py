"""Run health monitor: heartbeat policies and stall warnings with acknowledgement."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from ratio_watch.health import (
    IntervalHeartbeat,
    RunHealthMonitor,
    RunHealthState,
    WindowHeartbeat,
    build_heartbeat_policy,
)

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
HEARTBEAT = timedelta(hours=6)
WARNING = timedelta(minutes=30)


def _monitor():
    return RunHealthMonitor(IntervalHeartbeat(HEARTBEAT), WARNING)


class TestHeartbeat:
    def test_first_run_heartbeat_due(self):
        d = _monitor().evaluate(T0, RunHealthState())
        assert d.heartbeat_due is True
        assert d.new_state.last_heartbeat_at == T0

    def test_heartbeat_not_due_before_interval(self):
        state = RunHealthState(last_run_at=T0, last_heartbeat_at=T0)
        d = _monitor().evaluate(T0 + timedelta(minutes=10), state)
        assert d.heartbeat_due is False
        assert d.new_state.last_heartbeat_at == T0

    def test_heartbeat_due_at_interval(self):
        state = RunHealthState(last_run_at=T0 + HEARTBEAT - timedelta(minutes=10), last_heartbeat_at=T0)
        d = _monitor().evaluate(T0 + HEARTBEAT, state)
        assert d.heartbeat_due is True
        assert d.new_state.last_heartbeat_at == T0 + HEARTBEAT

    @pytest.mark.parametrize("hour,due", [(7, False), (8, True), (10, True), (11, False), (22, True), (23, False)])
    def test_window_policy_inclusive_hours(self, hour, due):
        policy = WindowHeartbeat([(8, 10), (14, 16), (20, 22)], "UTC")
        now = datetime(2026, 3, 1, hour, 59, tzinfo=timezone.utc)
        assert policy.is_due(now, last_heartbeat_at=now) is due

    def test_window_policy_uses_configured_timezone(self):
        policy = WindowHeartbeat([(8, 8)], "Asia/Tehran")
        # 04:45 UTC is 08:15 in Tehran (UTC+03:30)
        assert policy.is_due(datetime(2026, 3, 1, 4, 45, tzinfo=timezone.utc), None) is True
        assert policy.is_due(datetime(2026, 3, 1, 8, 15, tzinfo=timezone.utc), None) is False

    def test_build_policy(self):
        assert isinstance(build_heartbeat_policy("interval", HEARTBEAT), IntervalHeartbeat)
        assert isinstance(build_heartbeat_policy("windows", HEARTBEAT, [(1, 2)]), WindowHeartbeat)
        with pytest.raises(ValueError):
            build_heartbeat_policy("hourly", HEARTBEAT)


class TestStallWarning:
    def test_no_warning_without_previous_run(self):
        d = _monitor().evaluate(T0, RunHealthState())
        assert d.warning_due is False
        assert d.gap is None
        assert d.new_state.last_run_at == T0
        assert d.new_state.warning_acknowledged is False

    def test_no_warning_for_regular_gap(self):
        state = RunHealthState(last_run_at=T0, last_heartbeat_at=T0)
        d = _monitor().evaluate(T0 + timedelta(minutes=5), state)
        assert d.warning_due is False
        assert d.gap == timedelta(minutes=5)

    def test_warning_fires_once_per_stall_episode(self):
        monitor = _monitor()
        state = RunHealthState(last_run_at=T0, last_heartbeat_at=T0)

        first = monitor.evaluate(T0 + timedelta(minutes=45), state)
        assert first.warning_due is True
        assert first.new_state.warning_acknowledged is True

        # Scheduler still slow: acknowledged, so no second warning
        second = monitor.evaluate(T0 + timedelta(minutes=90), first.new_state)
        assert second.warning_due is False
        assert second.new_state.warning_acknowledged is True

        # Back to normal cadence resets the episode
        third = monitor.evaluate(T0 + timedelta(minutes=95), second.new_state)
        assert third.warning_due is False
        assert third.new_state.warning_acknowledged is False

        fourth = monitor.evaluate(T0 + timedelta(minutes=140), third.new_state)
        assert fourth.warning_due is True

    def test_warning_at_exact_interval(self):
        state = RunHealthState(last_run_at=T0, last_heartbeat_at=T0)
        assert _monitor().evaluate(T0 + WARNING, state).warning_due is True
        assert _monitor().evaluate(T0 + WARNING - timedelta(seconds=1), state).warning_due is False
