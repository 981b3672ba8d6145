"""Streaming command execution with a bounded live output view.

Every setup step (git, docker, pnpm) is run through :class:`StreamingExecutor`,
which shows the last few lines of output while the command runs and only
returns once the process has exited and its output pipes have drained.
"""

from __future__ import annotations

from .display import DisplayMode
from .errors import (
    CommandFailedError,
    CommandKilledError,
    CommandTimeoutError,
    ExecutionError,
    SpawnError,
)
from .executor import ExecutionRequest, StreamingExecutor, execute_with_streaming

__all__ = [
    "CommandFailedError",
    "CommandKilledError",
    "CommandTimeoutError",
    "DisplayMode",
    "ExecutionError",
    "ExecutionRequest",
    "SpawnError",
    "StreamingExecutor",
    "execute_with_streaming",
]
