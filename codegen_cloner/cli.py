"""Command-line entry point for Codegen Cloner."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError

from codegen_cloner._output import error, info, success
from codegen_cloner.config import exec_settings, load_config
from codegen_cloner.core.utils import console, setup_rich_logging
from codegen_cloner.streaming import ExecutionError, ExecutionRequest, StreamingExecutor

app = typer.Typer(
    name="codegen-cloner",
    help="Clone pull requests and stream their setup commands with a live, bounded view of the output.",
    add_completion=True,
    rich_markup_mode="markdown",
    no_args_is_help=True,
)


def set_config_defaults(ctx: typer.Context, config_file: str | None) -> None:
    """Set subcommand defaults from the ``[defaults]`` and per-command config tables."""
    config = load_config(config_file)
    try:
        ctx.default_map = {"run": exec_settings(config, "run").model_dump()}
    except ValidationError as e:
        error(f"Invalid configuration: {e}")


@app.callback()
def main(
    ctx: typer.Context,
    config_file: Annotated[
        str | None,
        typer.Option("--config", "-c", help="Path to config file"),
    ] = None,
) -> None:
    """Clone pull requests and stream their setup commands."""
    set_config_defaults(ctx, config_file)


@app.command(
    "run",
    context_settings={"allow_interspersed_args": False, "ignore_unknown_options": True},
)
def run(
    command: Annotated[
        list[str],
        typer.Argument(help="Command to run followed by its arguments"),
    ],
    cwd: Annotated[
        Path | None,
        typer.Option("--cwd", help="Working directory for the command"),
    ] = None,
    max_lines: Annotated[
        int,
        typer.Option("--max-lines", "-n", min=1, help="Number of output lines kept on screen"),
    ] = 10,
    show_output: Annotated[
        bool,
        typer.Option("--show-output/--no-show-output", help="Stream the command's output while it runs"),
    ] = True,
    spinner: Annotated[
        str | None,
        typer.Option("--spinner", "-s", help="Show a spinner with this label instead of a plain live view"),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option("--log-level", help="Set the log level (e.g., DEBUG, INFO, WARNING)."),
    ] = "warning",
) -> None:
    """Run a single command through the streaming executor.

    Options must come before the command; everything after it is passed
    through untouched, e.g. `codegen-cloner run -n 5 pnpm install --frozen-lockfile`.
    """
    setup_rich_logging(log_level)
    request = ExecutionRequest(
        command[0],
        tuple(command[1:]),
        cwd=cwd,
        max_lines=max_lines,
        show_output=show_output,
    )
    executor = StreamingExecutor(console=console)
    try:
        if spinner is not None:
            asyncio.run(executor.execute_with_spinner(request, spinner))
        else:
            info(f"Running: {request.command_line}")
            asyncio.run(executor.execute(request))
            success(f"Finished: {request.command_line}")
    except ExecutionError as e:
        error(str(e))
