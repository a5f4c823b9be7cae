"""Allow python -m ratio_watch to run the CLI."""
from __future__ import annotations

from .cli.main import main

if __name__ == "__main__":
    raise SystemExit(main())
