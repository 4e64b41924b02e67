"""Command-line interface for bt2magnet."""

from __future__ import annotations

from bt2magnet.cli.main import cli, main

__all__ = ["cli", "main"]
