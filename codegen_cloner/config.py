"""Config file loading and the pydantic model for executor defaults."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from codegen_cloner.constants import APP_NAME, DEFAULT_MAX_LINES
from codegen_cloner.core.utils import err_console

# --- Config File Loading ---

CONFIG_PATH = Path.home() / ".config" / APP_NAME / "config.toml"
CONFIG_PATH_2 = Path(f"{APP_NAME}.toml")


def _replace_dashed_keys(cfg: dict[str, Any]) -> dict[str, Any]:
    """Replace dashed keys with underscores in the config options."""
    return {k.replace("-", "_"): v for k, v in cfg.items()}


def load_config(config_path_str: str | None = None) -> dict[str, Any]:
    """Load the TOML configuration file, one dict per table."""
    if config_path_str:
        config_path = Path(config_path_str)
    elif CONFIG_PATH.exists():
        config_path = CONFIG_PATH
    elif CONFIG_PATH_2.exists():
        config_path = CONFIG_PATH_2
    else:
        return {}

    if config_path.exists():
        with config_path.open("rb") as f:
            cfg = tomllib.load(f)
            return {k: _replace_dashed_keys(v) for k, v in cfg.items() if isinstance(v, dict)}

    # Report error only if an explicit path was given
    if config_path_str:
        err_console.print(
            f"[bold red]Config file not found at {config_path_str}[/bold red]",
        )
    return {}


# --- Pydantic Models for Configuration ---


class ExecSettings(BaseModel):
    """Defaults for running a command through the streaming executor."""

    max_lines: int = Field(default=DEFAULT_MAX_LINES, ge=1)
    show_output: bool = True
    log_level: str = "warning"

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, v: str) -> str:
        level = v.lower()
        if level not in {"debug", "info", "warning", "error", "critical"}:
            msg = f"Unknown log level: {v!r}"
            raise ValueError(msg)
        return level


def exec_settings(config: dict[str, Any], command: str) -> ExecSettings:
    """Merge the ``[defaults]`` table with a command's own table and validate it."""
    merged = {**config.get("defaults", {}), **config.get(command, {})}
    return ExecSettings(**merged)
