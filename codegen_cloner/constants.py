"""Default settings for the streaming command executor."""

from __future__ import annotations

# --- Display ---
DEFAULT_MAX_LINES = 10
REDRAW_INTERVAL_SECONDS = 0.1  # at most one live redraw per window

# --- Process lifecycle ---
DEFAULT_TIMEOUT_SECONDS = 30.0
GRACE_PERIOD_SECONDS = 0.1  # wait for pipe EOF after the process exits
KILL_WAIT_SECONDS = 2.0  # wait for a killed process to be reaped

# --- Config file locations ---
APP_NAME = "codegen-cloner"
