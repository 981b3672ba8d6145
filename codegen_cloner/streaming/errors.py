"""Errors raised by the streaming executor."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


def _with_output(msg: str, output: Sequence[str]) -> str:
    if not output:
        return msg
    return msg + "\n" + "\n".join(output)


class ExecutionError(Exception):
    """Base class for every failure of a streamed command."""

    def __init__(self, msg: str, command_line: str) -> None:
        """Store the command line alongside the message."""
        super().__init__(msg)
        self.command_line = command_line


class SpawnError(ExecutionError):
    """The process could not be started (missing binary, bad cwd, permissions)."""

    def __init__(self, command_line: str, cause: OSError) -> None:
        """Wrap the OS error raised while spawning."""
        msg = f"Failed to start `{command_line}`: {cause.strerror or cause}"
        super().__init__(msg, command_line)
        self.cause = cause


class CommandFailedError(ExecutionError):
    """The process ran and exited with a non-zero status."""

    def __init__(self, exit_code: int, output: Sequence[str], command_line: str) -> None:
        """Build a message embedding the exit code and the captured output."""
        msg = _with_output(f"Command failed with exit code {exit_code}: {command_line}", output)
        super().__init__(msg, command_line)
        self.exit_code = exit_code
        self.output = tuple(output)


class CommandKilledError(ExecutionError):
    """The process was terminated by a signal instead of exiting."""

    def __init__(self, signal_number: int, output: Sequence[str], command_line: str) -> None:
        """Build a message embedding the signal number and the captured output."""
        msg = _with_output(f"Command killed by signal {signal_number}: {command_line}", output)
        super().__init__(msg, command_line)
        self.signal_number = signal_number
        self.output = tuple(output)


class CommandTimeoutError(ExecutionError):
    """The process exceeded the executor's time limit and was killed."""

    def __init__(self, timeout: float, command_line: str, pid: int | None = None) -> None:
        """Build a message naming the time limit and the command line."""
        msg = f"Command timed out after {timeout:g}s: {command_line}"
        super().__init__(msg, command_line)
        self.timeout = timeout
        self.pid = pid
