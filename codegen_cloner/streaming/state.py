"""Completion tracking for a single streamed command.

The subprocess protocol and the executor's timers never touch the state
directly: they post messages, and :meth:`ExecutionState.apply` folds them in
one at a time. The state reports an :class:`Outcome` exactly once, on the
first message after which the process has exited and both output pipes are
closed, or when the overall timeout fires. Every message after that is a
no-op.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)

STDOUT_FD = 1
STDERR_FD = 2


@dataclass(frozen=True)
class OutputReceived:
    """A chunk of bytes arrived on stdout or stderr."""

    fd: int
    data: bytes


@dataclass(frozen=True)
class StreamClosed:
    """stdout or stderr reached EOF."""

    fd: int


@dataclass(frozen=True)
class ProcessExited:
    """The child process exited (negative ``returncode`` means killed by a signal)."""

    returncode: int | None


@dataclass(frozen=True)
class GraceExpired:
    """The post-exit grace period ran out before the pipes closed."""


@dataclass(frozen=True)
class TimeoutExpired:
    """The overall execution timeout fired."""


Message = OutputReceived | StreamClosed | ProcessExited | GraceExpired | TimeoutExpired


class Outcome(Enum):
    """Terminal states of an execution that got past spawning."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    KILLED = "killed"
    TIMED_OUT = "timed_out"


@dataclass
class ExecutionState:
    """Lifecycle flags of one in-flight execution."""

    exited: bool = False
    exit_code: int | None = None
    stdout_closed: bool = False
    stderr_closed: bool = False
    timed_out: bool = False
    resolved: bool = False

    @property
    def drained(self) -> bool:
        """Whether both output pipes are closed (or were never opened)."""
        return self.stdout_closed and self.stderr_closed

    def apply(self, message: Message) -> Outcome | None:
        """Fold a lifecycle message into the state.

        Returns:
            The outcome the first time the execution becomes complete,
            ``None`` otherwise (including every call after that).

        """
        if self.resolved:
            return None

        if isinstance(message, ProcessExited):
            self.exited = True
            self.exit_code = message.returncode
        elif isinstance(message, StreamClosed):
            if message.fd == STDOUT_FD:
                self.stdout_closed = True
            elif message.fd == STDERR_FD:
                self.stderr_closed = True
        elif isinstance(message, GraceExpired):
            if not self.drained:
                logger.debug("Output pipes still open after exit, treating them as closed")
            self.stdout_closed = True
            self.stderr_closed = True
        elif isinstance(message, TimeoutExpired):
            self.timed_out = True

        return self._check_completion()

    def _check_completion(self) -> Outcome | None:
        if self.timed_out:
            outcome = Outcome.TIMED_OUT
        elif self.exited and self.drained:
            outcome = self._exit_outcome()
        else:
            return None
        self.resolved = True
        return outcome

    def _exit_outcome(self) -> Outcome:
        if self.exit_code == 0:
            return Outcome.SUCCEEDED
        if self.exit_code is None or self.exit_code < 0:
            return Outcome.KILLED
        return Outcome.FAILED
