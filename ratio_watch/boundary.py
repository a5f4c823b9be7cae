"""
Boundary tracking: per-ratio zone state machine with re-alert cooldown.

Each tracked ratio sits in one of three zones relative to its inclusive band:

- BELOW:  value < lower
- INSIDE: lower <= value <= upper
- ABOVE:  value > upper

Transitions:
- INSIDE -> BELOW/ABOVE, BELOW <-> ABOVE: alert now, last_alert_at = now.
- BELOW -> BELOW, ABOVE -> ABOVE: alert only once the cooldown has elapsed
  since last_alert_at; last_alert_at moves only when that alert fires.
- BELOW/ABOVE -> INSIDE: recovery alert; last_alert_at is left as is.
- INSIDE -> INSIDE, or no value this run: nothing changes.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Dict, Mapping, Optional

from .ratios import RatioSet
from .timeutils import EPOCH

logger = logging.getLogger(__name__)


class Zone(enum.Enum):
    """Position of a ratio relative to its band."""

    BELOW = "below"
    INSIDE = "inside"
    ABOVE = "above"


class AlertKind(enum.Enum):
    CROSSING = "crossing"
    REPEAT = "repeat"
    RECOVERY = "recovery"


@dataclass(frozen=True)
class Band:
    """Inclusive [lower, upper] range defining INSIDE for a ratio."""

    lower: int
    upper: int

    def classify(self, value: int) -> Zone:
        if value < self.lower:
            return Zone.BELOW
        if value > self.upper:
            return Zone.ABOVE
        return Zone.INSIDE


@dataclass(frozen=True)
class BoundaryState:
    zone: Zone = Zone.INSIDE
    last_alert_at: datetime = EPOCH


@dataclass(frozen=True)
class BoundaryDecision:
    alert: bool
    new_state: BoundaryState
    kind: Optional[AlertKind] = None
    zone: Optional[Zone] = None


def evaluate_boundary(
    value: Optional[int],
    band: Band,
    state: BoundaryState,
    now: datetime,
    cooldown: timedelta,
) -> BoundaryDecision:
    """Decide whether this value warrants an alert and return the next state."""
    if value is None:
        return BoundaryDecision(alert=False, new_state=state)

    zone = band.classify(value)

    if zone == state.zone:
        if zone == Zone.INSIDE:
            return BoundaryDecision(alert=False, new_state=state, zone=zone)
        if now - state.last_alert_at >= cooldown:
            return BoundaryDecision(
                alert=True,
                new_state=replace(state, last_alert_at=now),
                kind=AlertKind.REPEAT,
                zone=zone,
            )
        return BoundaryDecision(alert=False, new_state=state, zone=zone)

    if zone == Zone.INSIDE:
        return BoundaryDecision(
            alert=True,
            new_state=replace(state, zone=zone),
            kind=AlertKind.RECOVERY,
            zone=zone,
        )

    return BoundaryDecision(
        alert=True,
        new_state=BoundaryState(zone=zone, last_alert_at=now),
        kind=AlertKind.CROSSING,
        zone=zone,
    )


class BoundaryTracker:
    """
    Runs the zone state machine independently for every configured ratio.

    Usage:
        tracker = BoundaryTracker({"br": Band(46, 50)}, cooldown=timedelta(hours=1))
        decisions = tracker.evaluate(ratios, previous_states, now)
    """

    def __init__(self, bands: Mapping[str, Band], cooldown: timedelta) -> None:
        self._bands = dict(bands)
        self._cooldown = cooldown

    @property
    def ratio_names(self):
        return list(self._bands)

    def evaluate(
        self,
        ratios: RatioSet,
        states: Mapping[str, BoundaryState],
        now: datetime,
    ) -> Dict[str, BoundaryDecision]:
        decisions: Dict[str, BoundaryDecision] = {}
        for name, band in self._bands.items():
            state = states.get(name) or BoundaryState()
            decision = evaluate_boundary(ratios.get(name), band, state, now, self._cooldown)
            if decision.alert:
                logger.info(
                    "%s=%s %s [%d, %d] -> %s",
                    name, ratios.get(name), decision.kind.value, band.lower, band.upper,
                    decision.new_state.zone.value,
                )
            decisions[name] = decision
        return decisions
