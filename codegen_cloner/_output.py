"""Console output helpers for the CLI."""

from __future__ import annotations

from typing import NoReturn

import typer
from rich.markup import escape

from codegen_cloner.core.utils import console, err_console


def error(msg: str) -> NoReturn:
    """Print an error message and exit."""
    err_console.print(f"[bold red]Error:[/bold red] {escape(msg)}")
    raise typer.Exit(1)


def success(msg: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]✓[/bold green] {escape(msg)}")


def info(msg: str) -> None:
    """Print an info message, with special styling for commands."""
    if msg.startswith("Running: "):
        cmd = escape(msg.removeprefix("Running: "))
        console.print(f"[dim]→[/dim] Running: [bold cyan]{cmd}[/bold cyan]")
    else:
        console.print(f"[dim]→[/dim] {escape(msg)}")
