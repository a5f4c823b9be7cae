"""Command-line entry points for ratio_watch."""
