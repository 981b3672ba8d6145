"""Test the config loading."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from pydantic import ValidationError

from codegen_cloner import config
from codegen_cloner.config import ExecSettings, exec_settings, load_config

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Provides a config file with dashed keys."""
    config_content = """
[defaults]
log-level = "INFO"
max-lines = 20

[run]
max-lines = 5
show-output = false
"""
    config_path = tmp_path / "config.toml"
    config_path.write_text(config_content)
    return config_path


def test_config_loader_key_replacement(config_file: Path) -> None:
    """Dashed keys are replaced with underscores."""
    cfg = load_config(str(config_file))
    assert cfg["defaults"]["log_level"] == "INFO"
    assert cfg["run"]["max_lines"] == 5
    assert cfg["run"]["show_output"] is False


def test_missing_explicit_config(tmp_path: Path) -> None:
    """A missing explicit path yields an empty config."""
    assert load_config(str(tmp_path / "nope.toml")) == {}


def test_no_config_anywhere(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Without any config file the result is empty."""
    monkeypatch.setattr(config, "CONFIG_PATH", tmp_path / "missing.toml")
    monkeypatch.setattr(config, "CONFIG_PATH_2", tmp_path / "also-missing.toml")
    assert load_config() == {}


def test_default_config_path_is_used(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """The user config file is picked up when no path is given."""
    path = tmp_path / "config.toml"
    path.write_text("[run]\nmax-lines = 7\n")
    monkeypatch.setattr(config, "CONFIG_PATH", path)
    assert load_config()["run"]["max_lines"] == 7


def test_exec_settings_merges_tables(config_file: Path) -> None:
    """The command table overrides [defaults]."""
    settings = exec_settings(load_config(str(config_file)), "run")
    assert settings.max_lines == 5
    assert settings.show_output is False
    assert settings.log_level == "info"


def test_exec_settings_defaults() -> None:
    """An empty config gives the built-in defaults."""
    settings = exec_settings({}, "run")
    assert settings == ExecSettings(max_lines=10, show_output=True, log_level="warning")


@pytest.mark.parametrize(
    "overrides",
    [{"max_lines": 0}, {"log_level": "loud"}],
)
def test_exec_settings_validation(overrides: dict[str, object]) -> None:
    """Out-of-range values are rejected."""
    with pytest.raises(ValidationError):
        ExecSettings(**overrides)  # type: ignore[arg-type]
