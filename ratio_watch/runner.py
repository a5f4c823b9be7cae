"""
One invocation: fetch prices, derive ratios, decide notifications, flush, persist.

The runner owns the persisted record for the duration of a run. If every price
source fails it sends a single fetch-error message and returns without touching
state, so the next successful run still measures its gap from the last good run.
Pending messages are flushed before the new state is saved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from .boundary import AlertKind, BoundaryState, BoundaryTracker
from .config import WatchConfig
from .core.errors import AllSourcesFailedError
from .health import RunHealthMonitor, build_heartbeat_policy
from .notify import Notifier, TelegramNotifier, flush
from .providers.base import PriceQuote
from .providers.chain import PriceSourceChain
from .providers.defaults import create_price_chain
from .ratios import RatioSet, calculate_ratios, format_ratio
from .state import PersistedRecord, StateStore, create_state_store
from .timeutils import now_utc

logger = logging.getLogger(__name__)

FETCH_ERROR_MESSAGE = "FetchError: BG null | BR null | GR null"


@dataclass
class WatchContext:
    """Collaborators for one run. Build with build_context() or assemble directly in tests."""

    chain: PriceSourceChain
    tracker: BoundaryTracker
    monitor: RunHealthMonitor
    notifier: Notifier
    store: StateStore
    notify_on_change: bool = False


@dataclass
class RunResult:
    fetch_failed: bool = False
    quote: Optional[PriceQuote] = None
    ratios: Optional[RatioSet] = None
    messages: List[str] = field(default_factory=list)
    delivered: int = 0
    saved: bool = False
    error: Optional[str] = None


def build_context(
    config: WatchConfig,
    *,
    notifier: Optional[Notifier] = None,
    store: Optional[StateStore] = None,
    chain: Optional[PriceSourceChain] = None,
) -> WatchContext:
    """Wire default collaborators from config; any of them can be replaced."""
    heartbeat = build_heartbeat_policy(
        config.heartbeat_policy,
        config.heartbeat_interval,
        config.heartbeat_windows,
        config.heartbeat_timezone,
    )
    return WatchContext(
        chain=chain or create_price_chain(config),
        tracker=BoundaryTracker(config.bands, config.cooldown),
        monitor=RunHealthMonitor(heartbeat, config.warning_interval),
        notifier=notifier
        or TelegramNotifier(config.telegram_bot_token, config.telegram_chat_id, config.telegram_timeout_s),
        store=store or create_state_store(config.state_backend, config.state_path),
        notify_on_change=config.notify_on_change,
    )


def format_duration(delta: timedelta) -> str:
    minutes = int(delta.total_seconds() // 60)
    hours, minutes = divmod(minutes, 60)
    if hours and minutes:
        return f"{hours}h{minutes:02d}m"
    if hours:
        return f"{hours}h"
    return f"{minutes}m"


def base_line(source: str, ratios: RatioSet) -> str:
    return (
        f"{source}: BG {format_ratio(ratios.bg)} | BR {format_ratio(ratios.br)} "
        f"| GR {format_ratio(ratios.gr)}"
    )


def change_line(ratios: RatioSet) -> str:
    return f"B/G: {format_ratio(ratios.bg)}\nB/R: {format_ratio(ratios.br)}\nG/R: {format_ratio(ratios.gr)}"


def run_once(
    ctx: WatchContext,
    *,
    now: Optional[datetime] = None,
    dry_run: bool = False,
    log: Optional[logging.Logger] = None,
) -> RunResult:
    """
    Run one tick. Returns RunResult; fetch_failed=True means every source failed
    and state was left untouched. With dry_run the state is never saved.
    """
    _log = log if log is not None else logger
    now = now or now_utc()
    result = RunResult()

    previous = ctx.store.load() or PersistedRecord()

    try:
        quote = ctx.chain.fetch()
    except AllSourcesFailedError as exc:
        _log.error("%s", exc)
        for name, health in ctx.chain.get_health().items():
            _log.info(
                "provider %s status=%s fail_count=%d last_ok_at=%s",
                name, health.status.value, health.fail_count, health.last_ok_at,
            )
        result.fetch_failed = True
        result.error = str(exc)
        result.messages = [FETCH_ERROR_MESSAGE]
        result.delivered = flush(ctx.notifier, result.messages)
        return result

    ratios = calculate_ratios(quote.btc, quote.xrp, quote.gold)
    result.quote, result.ratios = quote, ratios
    base = base_line(quote.source, ratios)

    health = ctx.monitor.evaluate(now, previous.health)
    boundaries = ctx.tracker.evaluate(ratios, previous.boundaries, now)

    messages: List[str] = []
    if health.warning_due and health.gap is not None:
        messages.append(
            f"Warning: no run for {format_duration(health.gap)}; "
            f"expected every {format_duration(ctx.monitor.warning_interval)}"
        )
    if health.heartbeat_due:
        messages.append(base)
    for name, decision in boundaries.items():
        if not decision.alert:
            continue
        if decision.kind == AlertKind.RECOVERY:
            messages.append(f"{base} ({name.upper()} back inside)")
        else:
            messages.append(f"{base} ({name.upper()})")
    if ctx.notify_on_change and ratios != previous.ratios:
        messages.append(change_line(ratios))

    result.messages = messages
    result.delivered = flush(ctx.notifier, messages)

    new_states: Dict[str, BoundaryState] = dict(previous.boundaries)
    new_states.update({name: d.new_state for name, d in boundaries.items()})
    record = PersistedRecord(ratios=ratios, boundaries=new_states, health=health.new_state)

    if dry_run:
        _log.info("dry run: state not saved")
    else:
        ctx.store.save(record)
        result.saved = True

    _log.info(
        "%s  OK  %s  fetched_at=%s messages=%d delivered=%d",
        now.isoformat(timespec="seconds"), base, quote.fetched_at_utc, len(messages), result.delivered,
    )
    return result
