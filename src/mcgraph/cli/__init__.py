"""Command-line interface for mcgraph (the mcg command)."""

from mcgraph.cli.main import main

__all__ = ["main"]
