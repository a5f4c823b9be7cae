"""
Load config from config.yaml with optional env overrides.
Single source of truth for provider order, ratio bands, alert and health intervals,
state location and notification credentials.

get_config() returns the merged dict; load_watch_config() validates it into a
frozen WatchConfig that is handed to components at construction time.
"""
from __future__ import annotations

import copy
import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from .boundary import Band
from .core.errors import ConfigError
from .ratios import RATIO_NAMES

# Defaults if no YAML or env
_DEFAULTS = {
    "providers": {
        "priority": ["nobitex", "coingecko", "coinpaprika", "binance"],
        "http_timeout_s": 10.0,
        "retries": 1,
    },
    "ratios": {
        "bg": {"lower": 11, "upper": 15},
        "br": {"lower": 46, "upper": 50},
        "gr": {"lower": 32, "upper": 37},
    },
    "alerts": {"cooldown_minutes": 60, "notify_on_change": False},
    "heartbeat": {
        "policy": "interval",
        "interval_minutes": 360,
        "windows": [[8, 10], [14, 16], [20, 22]],
        "timezone": "UTC",
    },
    "warning": {"interval_minutes": 30},
    "state": {"backend": "json", "path": "state.json"},
    "telegram": {"bot_token": "", "chat_id": "", "timeout_s": 10.0},
}

HEARTBEAT_POLICIES = ("interval", "windows")
STATE_BACKENDS = ("json", "sqlite")


def _config_yaml_path() -> Path:
    """config.yaml lives at repo root (parent of package dir) unless RATIO_WATCH_CONFIG is set."""
    override = os.environ.get("RATIO_WATCH_CONFIG", "").strip()
    if override:
        return Path(override)
    return Path(__file__).resolve().parent.parent / "config.yaml"


def _load_yaml(path: Optional[Path] = None) -> dict:
    config_path = path or _config_yaml_path()
    if not config_path.exists():
        return {}
    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Cannot parse {config_path}: {exc}") from exc
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    out = dict(base)
    for k, v in override.items():
        if k in out and isinstance(out[k], dict) and isinstance(v, dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _env_overrides() -> dict:
    overrides: dict = {}
    state_path = os.environ.get("RATIO_WATCH_STATE_PATH")
    if state_path:
        overrides.setdefault("state", {})["path"] = state_path
    providers = os.environ.get("RATIO_WATCH_PROVIDERS")
    if providers:
        names = [p.strip() for p in providers.split(",") if p.strip()]
        overrides.setdefault("providers", {})["priority"] = names
    bot = os.environ.get("TELEGRAM_BOT")
    if bot:
        overrides.setdefault("telegram", {})["bot_token"] = bot
    chat = os.environ.get("TELEGRAM_CHAT")
    if chat:
        overrides.setdefault("telegram", {})["chat_id"] = chat
    return overrides


def get_config(path: Optional[Path] = None) -> dict:
    """Return merged config: defaults <- config.yaml <- env."""
    merged = _deep_merge(copy.deepcopy(_DEFAULTS), _load_yaml(path))
    merged = _deep_merge(merged, _env_overrides())
    return merged


@dataclass(frozen=True)
class WatchConfig:
    """Validated, immutable configuration for one invocation."""

    provider_priority: Tuple[str, ...]
    http_timeout_s: float
    provider_retries: int
    bands: Dict[str, Band]
    cooldown: timedelta
    notify_on_change: bool
    heartbeat_policy: str
    heartbeat_interval: timedelta
    heartbeat_windows: Tuple[Tuple[int, int], ...]
    heartbeat_timezone: str
    warning_interval: timedelta
    state_backend: str
    state_path: str
    telegram_bot_token: str
    telegram_chat_id: str
    telegram_timeout_s: float

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any]) -> WatchConfig:
        try:
            providers = cfg.get("providers", {})
            priority = tuple(str(n).strip().lower() for n in providers.get("priority", []))
            if not priority:
                raise ConfigError("providers.priority must name at least one provider")

            bands: Dict[str, Band] = {}
            for name, band_cfg in (cfg.get("ratios") or {}).items():
                if name not in RATIO_NAMES:
                    raise ConfigError(f"Unknown ratio '{name}'. Available: {list(RATIO_NAMES)}")
                bands[name] = Band(lower=int(band_cfg["lower"]), upper=int(band_cfg["upper"]))

            alerts = cfg.get("alerts", {})
            heartbeat = cfg.get("heartbeat", {})
            warning = cfg.get("warning", {})
            state = cfg.get("state", {})
            telegram = cfg.get("telegram", {})

            windows = tuple((int(w[0]), int(w[1])) for w in heartbeat.get("windows", []))
            out = cls(
                provider_priority=priority,
                http_timeout_s=float(providers.get("http_timeout_s", 10.0)),
                provider_retries=int(providers.get("retries", 1)),
                bands=bands,
                cooldown=timedelta(minutes=float(alerts.get("cooldown_minutes", 60))),
                notify_on_change=bool(alerts.get("notify_on_change", False)),
                heartbeat_policy=str(heartbeat.get("policy", "interval")).lower(),
                heartbeat_interval=timedelta(minutes=float(heartbeat.get("interval_minutes", 360))),
                heartbeat_windows=windows,
                heartbeat_timezone=str(heartbeat.get("timezone", "UTC")),
                warning_interval=timedelta(minutes=float(warning.get("interval_minutes", 30))),
                state_backend=str(state.get("backend", "json")).lower(),
                state_path=str(state.get("path", "state.json")),
                telegram_bot_token=str(telegram.get("bot_token") or ""),
                telegram_chat_id=str(telegram.get("chat_id") or ""),
                telegram_timeout_s=float(telegram.get("timeout_s", 10.0)),
            )
        except (KeyError, TypeError, ValueError, IndexError) as exc:
            raise ConfigError(f"Invalid configuration: {type(exc).__name__}: {exc}") from exc
        out.validate()
        return out

    def validate(self) -> None:
        for name, band in self.bands.items():
            if band.lower > band.upper:
                raise ConfigError(f"ratios.{name}: lower {band.lower} > upper {band.upper}")
        if self.http_timeout_s <= 0:
            raise ConfigError("providers.http_timeout_s must be positive")
        if self.provider_retries < 1:
            raise ConfigError("providers.retries must be >= 1")
        if self.heartbeat_policy not in HEARTBEAT_POLICIES:
            raise ConfigError(
                f"heartbeat.policy '{self.heartbeat_policy}' not in {list(HEARTBEAT_POLICIES)}"
            )
        if self.heartbeat_policy == "interval" and self.heartbeat_interval <= timedelta(0):
            raise ConfigError("heartbeat.interval_minutes must be positive")
        for start, end in self.heartbeat_windows:
            if not (0 <= start <= 23 and 0 <= end <= 23) or start > end:
                raise ConfigError(f"heartbeat window [{start}, {end}] must satisfy 0 <= start <= end <= 23")
        try:
            ZoneInfo(self.heartbeat_timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ConfigError(f"heartbeat.timezone '{self.heartbeat_timezone}' is not a known zone") from exc
        if self.warning_interval <= timedelta(0):
            raise ConfigError("warning.interval_minutes must be positive")
        if self.cooldown < timedelta(0):
            raise ConfigError("alerts.cooldown_minutes must not be negative")
        if self.state_backend not in STATE_BACKENDS:
            raise ConfigError(f"state.backend '{self.state_backend}' not in {list(STATE_BACKENDS)}")


def load_watch_config(path: Optional[Path] = None) -> WatchConfig:
    """Merge defaults, YAML and env, then validate into a WatchConfig."""
    return WatchConfig.from_dict(get_config(path))
