"""Console and logging helpers shared by the CLI and the executor."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.status import Status

console = Console()
err_console = Console(stderr=True)


def setup_rich_logging(log_level: str = "warning", *, console: Console | None = None) -> None:
    """Configure logging to use Rich for consistent, pretty output.

    Logs go to stderr by default so they never land inside the live output
    region, which is drawn on stdout.

    Args:
        log_level: Logging level (debug, info, warning, error).
        console: Optional Rich console to use (defaults to the stderr console).

    """
    level = getattr(logging, log_level.upper(), logging.WARNING)

    handler = RichHandler(
        console=console or err_console,
        show_time=True,
        show_level=True,
        show_path=False,  # Don't show file:line - too verbose
        rich_tracebacks=True,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


def create_status(text: str, style: str = "bold yellow", *, output: Console | None = None) -> Status:
    """Create a Rich status spinner with the given text and style."""
    return Status(f"[{style}]{escape(text)}[/{style}]", console=output or console)
