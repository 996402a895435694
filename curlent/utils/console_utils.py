"""Rich console helpers shared by the CLI and the progress reporter."""

from __future__ import annotations

import sys
from typing import Any

from rich.console import Console
from rich.markup import escape


def create_console(stderr: bool = False) -> Console:
    """Create a Rich Console bound to stdout or stderr."""
    return Console(
        file=sys.stderr if stderr else sys.stdout,
        stderr=stderr,
        highlight=False,
        legacy_windows=False,
        safe_box=True,
    )


def print_error(
    message: str,
    console: Console | None = None,
    **kwargs: Any,
) -> None:
    """Print an ``Error:`` line, by default to stderr."""
    if console is None:
        console = create_console(stderr=True)
    console.print(f"[red]Error:[/red] {escape(message)}", **kwargs)

