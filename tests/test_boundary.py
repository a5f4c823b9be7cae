"""
Boundary tracker: zone classification, crossings, cooldown-gated repeats, recovery.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from ratio_watch.boundary import (
    AlertKind,
    Band,
    BoundaryState,
    BoundaryTracker,
    Zone,
    evaluate_boundary,
)
from ratio_watch.ratios import RatioSet
from ratio_watch.timeutils import EPOCH

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
COOLDOWN = timedelta(hours=1)
BAND = Band(lower=46, upper=50)


class TestBandClassification:
    @pytest.mark.parametrize("value", [46, 47, 48, 49, 50])
    def test_bounds_are_inclusive(self, value):
        assert BAND.classify(value) == Zone.INSIDE

    @pytest.mark.parametrize("value", [45, 0, -3])
    def test_below(self, value):
        assert BAND.classify(value) == Zone.BELOW

    @pytest.mark.parametrize("value", [51, 1000])
    def test_above(self, value):
        assert BAND.classify(value) == Zone.ABOVE

    def test_degenerate_band(self):
        band = Band(lower=7, upper=7)
        assert band.classify(7) == Zone.INSIDE
        assert band.classify(6) == Zone.BELOW
        assert band.classify(8) == Zone.ABOVE


class TestEvaluateBoundary:
    def test_absent_value_changes_nothing(self):
        state = BoundaryState(zone=Zone.ABOVE, last_alert_at=T0)
        d = evaluate_boundary(None, BAND, state, T0 + timedelta(days=3), COOLDOWN)
        assert d.alert is False
        assert d.new_state == state

    def test_inside_stays_inside_silently(self):
        state = BoundaryState()
        d = evaluate_boundary(48, BAND, state, T0, COOLDOWN)
        assert d.alert is False
        assert d.new_state == state

    @pytest.mark.parametrize("value,zone", [(45, Zone.BELOW), (51, Zone.ABOVE)])
    def test_leaving_band_alerts_immediately(self, value, zone):
        d = evaluate_boundary(value, BAND, BoundaryState(), T0, COOLDOWN)
        assert d.alert is True
        assert d.kind == AlertKind.CROSSING
        assert d.new_state == BoundaryState(zone=zone, last_alert_at=T0)

    def test_jump_across_band_is_a_new_crossing(self):
        state = BoundaryState(zone=Zone.BELOW, last_alert_at=T0)
        d = evaluate_boundary(52, BAND, state, T0 + timedelta(minutes=5), COOLDOWN)
        assert d.alert is True
        assert d.kind == AlertKind.CROSSING
        assert d.new_state.zone == Zone.ABOVE
        assert d.new_state.last_alert_at == T0 + timedelta(minutes=5)

    def test_same_zone_within_cooldown_is_idempotent(self):
        state = BoundaryState(zone=Zone.ABOVE, last_alert_at=T0)
        d = evaluate_boundary(53, BAND, state, T0 + timedelta(minutes=30), COOLDOWN)
        assert d.alert is False
        assert d.new_state == state

    def test_cooldown_edge(self):
        state = BoundaryState(zone=Zone.ABOVE, last_alert_at=T0)
        almost = evaluate_boundary(53, BAND, state, T0 + COOLDOWN - timedelta(microseconds=1), COOLDOWN)
        assert almost.alert is False
        exact = evaluate_boundary(53, BAND, state, T0 + COOLDOWN, COOLDOWN)
        assert exact.alert is True
        assert exact.kind == AlertKind.REPEAT
        assert exact.new_state == BoundaryState(zone=Zone.ABOVE, last_alert_at=T0 + COOLDOWN)

    def test_recovery_alerts_and_keeps_last_alert_at(self):
        state = BoundaryState(zone=Zone.BELOW, last_alert_at=T0)
        d = evaluate_boundary(46, BAND, state, T0 + timedelta(minutes=1), COOLDOWN)
        assert d.alert is True
        assert d.kind == AlertKind.RECOVERY
        assert d.new_state == BoundaryState(zone=Zone.INSIDE, last_alert_at=T0)

    def test_fresh_state_defaults(self):
        state = BoundaryState()
        assert state.zone == Zone.INSIDE
        assert state.last_alert_at == EPOCH


class TestBoundaryTracker:
    def _tracker(self):
        return BoundaryTracker(
            {"bg": Band(11, 15), "br": Band(46, 50), "gr": Band(32, 37)},
            cooldown=COOLDOWN,
        )

    def test_each_ratio_tracked_independently(self):
        tracker = self._tracker()
        decisions = tracker.evaluate(RatioSet(bg=16, br=48, gr=31), {}, T0)
        assert decisions["bg"].alert and decisions["bg"].new_state.zone == Zone.ABOVE
        assert not decisions["br"].alert
        assert decisions["gr"].alert and decisions["gr"].new_state.zone == Zone.BELOW

    def test_absent_gold_ratios_keep_their_state(self):
        tracker = self._tracker()
        prior = {"bg": BoundaryState(zone=Zone.ABOVE, last_alert_at=T0)}
        decisions = tracker.evaluate(RatioSet(bg=None, br=48, gr=None), prior, T0 + timedelta(hours=5))
        assert decisions["bg"].alert is False
        assert decisions["bg"].new_state == prior["bg"]
        assert decisions["gr"].new_state == BoundaryState()

    def test_only_configured_ratios_evaluated(self):
        tracker = BoundaryTracker({"br": BAND}, cooldown=COOLDOWN)
        decisions = tracker.evaluate(RatioSet(bg=99, br=48, gr=99), {}, T0)
        assert list(decisions) == ["br"]
        assert tracker.ratio_names == ["br"]

    def test_three_ticks_above_then_one_after_cooldown(self):
        tracker = BoundaryTracker({"br": BAND}, cooldown=COOLDOWN)
        states = {}
        alerts = []
        for minutes in (0, 20, 40, 61):
            decisions = tracker.evaluate(RatioSet(bg=None, br=55, gr=None), states, T0 + timedelta(minutes=minutes))
            alerts.append(decisions["br"].alert)
            states = {name: d.new_state for name, d in decisions.items()}
        assert alerts == [True, False, False, True]
