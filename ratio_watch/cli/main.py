"""
Top-level CLI dispatcher: ratio-watch <command> [args...].

  run    one tick: fetch prices, evaluate, notify, persist
  state  print the persisted record as JSON

Exit codes: 0 OK, 1 all price sources failed, 2 configuration error.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from .._version import __version__
from ..config import WatchConfig, load_watch_config
from ..core.errors import ConfigError
from ..notify import LogNotifier
from ..runner import build_context, run_once
from ..state import create_state_store

EXIT_OK = 0
EXIT_FETCH_FAILED = 1
EXIT_CONFIG = 2


def _load_config(args: argparse.Namespace) -> WatchConfig:
    config = load_watch_config(Path(args.config) if args.config else None)
    if args.state:
        config = replace(config, state_path=args.state)
    return config


def _main_run(args: argparse.Namespace) -> int:
    config = _load_config(args)
    notifier = LogNotifier() if args.dry_run else None
    ctx = build_context(config, notifier=notifier)
    result = run_once(ctx, dry_run=args.dry_run)
    if args.dry_run:
        for text in result.messages:
            print(text)
    return EXIT_FETCH_FAILED if result.fetch_failed else EXIT_OK


def _main_state(args: argparse.Namespace) -> int:
    config = _load_config(args)
    record = create_state_store(config.state_backend, config.state_path).load()
    print(json.dumps(record.to_dict() if record is not None else None, indent=2, sort_keys=True))
    return EXIT_OK


def _add_common_options(
    parser: argparse.ArgumentParser, default: Optional[str] = None, log_level_default: str = "INFO"
) -> None:
    parser.add_argument(
        "--config", default=default, help="Path to config.yaml (default: repo root or RATIO_WATCH_CONFIG)"
    )
    parser.add_argument("--state", default=default, help="Override state.path")
    parser.add_argument("--log-level", default=log_level_default, help="Logging level (default INFO)")


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    parser = argparse.ArgumentParser(
        prog="ratio-watch",
        description="Poll BTC/XRP/gold prices and alert on ratio band crossings",
    )
    parser.add_argument("--version", action="version", version=f"ratio-watch {__version__}")
    _add_common_options(parser)
    # Same options after the subcommand; SUPPRESS keeps them from overwriting the top-level values.
    common = argparse.ArgumentParser(add_help=False)
    _add_common_options(common, default=argparse.SUPPRESS, log_level_default=argparse.SUPPRESS)
    subparsers = parser.add_subparsers(dest="command", help="command")
    p_run = subparsers.add_parser("run", parents=[common], help="Run one tick")
    p_run.add_argument("--dry-run", action="store_true", help="Print messages instead of sending; do not save state")
    subparsers.add_parser("state", parents=[common], help="Print the persisted state record")

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return EXIT_OK

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        if args.command == "run":
            return _main_run(args)
        return _main_state(args)
    except ConfigError as exc:
        print(f"Config error: {exc}", file=sys.stderr)
        return EXIT_CONFIG


if __name__ == "__main__":
    raise SystemExit(main())
