"""
Top-level public API surface.
Canonical entrypoint: ratio-watch run (see ratio_watch.cli.main); library users
wire a WatchContext with build_context() and call run_once().
"""

from __future__ import annotations

from ._version import __version__
from .boundary import Band, BoundaryState, BoundaryTracker, Zone, evaluate_boundary
from .config import WatchConfig, load_watch_config
from .health import RunHealthMonitor, RunHealthState
from .ratios import RatioSet, calculate_ratios
from .runner import RunResult, WatchContext, build_context, run_once
from .state import PersistedRecord

# Do not add exports without updating __all__.
__all__ = [
    "__version__",
    "Band",
    "BoundaryState",
    "BoundaryTracker",
    "Zone",
    "evaluate_boundary",
    "WatchConfig",
    "load_watch_config",
    "RunHealthMonitor",
    "RunHealthState",
    "RatioSet",
    "calculate_ratios",
    "RunResult",
    "WatchContext",
    "build_context",
    "run_once",
    "PersistedRecord",
]
