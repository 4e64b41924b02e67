"""Console utilities for Rich output."""

from __future__ import annotations

import sys
from typing import Any

from rich.console import Console
from rich.markup import escape


def create_console(stderr: bool = False) -> Console:
    """Create a Rich Console bound to the current stdout or stderr."""
    return Console(
        file=sys.stderr if stderr else sys.stdout,
        force_terminal=None,
        legacy_windows=False,
        safe_box=True,
    )


def print_warning(message: str, console: Console | None = None, **kwargs: Any) -> None:
    """Print a warning message with Rich formatting."""
    if console is None:
        console = create_console(stderr=True)
    console.print(f"[yellow]Warning:[/yellow] {escape(message)}", **kwargs)
