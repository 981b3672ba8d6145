"""Run external commands while showing a bounded live view of their output."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import shlex
import subprocess
from dataclasses import dataclass
from typing import TYPE_CHECKING

from rich.markup import escape

from codegen_cloner.constants import (
    DEFAULT_MAX_LINES,
    DEFAULT_TIMEOUT_SECONDS,
    GRACE_PERIOD_SECONDS,
    KILL_WAIT_SECONDS,
    REDRAW_INTERVAL_SECONDS,
)
from codegen_cloner.core.utils import console as default_console
from codegen_cloner.core.utils import create_status

from .buffer import LineSplitter, OutputBuffer
from .display import (
    DisplayMode,
    LiveDisplay,
    NullDisplay,
    OutputDisplay,
    SpinnerDisplay,
    ThrottledDisplay,
)
from .errors import (
    CommandFailedError,
    CommandKilledError,
    CommandTimeoutError,
    SpawnError,
)
from .state import (
    STDERR_FD,
    STDOUT_FD,
    ExecutionState,
    GraceExpired,
    Message,
    Outcome,
    OutputReceived,
    ProcessExited,
    StreamClosed,
    TimeoutExpired,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from rich.console import Console
    from rich.status import Status

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionRequest:
    """A command to run, with how much of its output to show."""

    command: str
    args: tuple[str, ...] = ()
    cwd: Path | None = None
    max_lines: int = DEFAULT_MAX_LINES
    show_output: bool = True

    def __post_init__(self) -> None:
        """Validate the request and freeze ``args`` into a tuple."""
        if self.max_lines < 1:
            msg = f"max_lines must be at least 1, got {self.max_lines}"
            raise ValueError(msg)
        object.__setattr__(self, "args", tuple(self.args))

    @property
    def command_line(self) -> str:
        """The command and its arguments, shell-quoted for display."""
        return shlex.join([self.command, *self.args])


class _ExecutionProtocol(asyncio.SubprocessProtocol):
    """Translate subprocess callbacks into messages for the executor."""

    def __init__(self, inbox: asyncio.Queue[Message], exited: asyncio.Future[None]) -> None:
        self._inbox = inbox
        self._exited = exited
        self._transport: asyncio.SubprocessTransport | None = None

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self._transport = transport  # type: ignore[assignment]

    def pipe_data_received(self, fd: int, data: bytes | bytearray) -> None:
        self._inbox.put_nowait(OutputReceived(fd, bytes(data)))

    def pipe_connection_lost(self, fd: int, exc: Exception | None) -> None:  # noqa: ARG002
        self._inbox.put_nowait(StreamClosed(fd))

    def process_exited(self) -> None:
        assert self._transport is not None
        self._inbox.put_nowait(ProcessExited(self._transport.get_returncode()))
        if not self._exited.done():
            self._exited.set_result(None)


class StreamingExecutor:
    """Run one command at a time, streaming its output into a live view.

    An executor can be reused for sequential calls (the output buffer is
    reset each time) but not for overlapping ones; create one per concurrent
    task instead, as :func:`execute_with_streaming` does.

    Usage:
        executor = StreamingExecutor()
        await executor.execute(ExecutionRequest("pnpm", ("install",), cwd=path))
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        grace_period: float = GRACE_PERIOD_SECONDS,
        redraw_interval: float = REDRAW_INTERVAL_SECONDS,
        console: Console | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            timeout: Seconds before a running command is killed.
            grace_period: Seconds to wait for output pipes to close after exit.
            redraw_interval: Minimum seconds between live redraws.
            console: Rich console to draw on (defaults to the shared stdout console).

        """
        self.timeout = timeout
        self.grace_period = grace_period
        self.redraw_interval = redraw_interval
        self.console = console or default_console
        self._buffer = OutputBuffer()

    @property
    def output(self) -> tuple[str, ...]:
        """Lines buffered by the most recent execution."""
        return self._buffer.snapshot()

    async def execute(self, request: ExecutionRequest, *, spinner: Status | None = None) -> None:
        """Run ``request`` to completion.

        Args:
            request: The command to run.
            spinner: A running spinner that owns the terminal line. When given,
                output is rendered under the spinner without throttling and
                finishing the spinner is left to the caller.

        Raises:
            SpawnError: The process could not be started.
            CommandFailedError: The process exited with a non-zero status.
            CommandKilledError: The process was terminated by a signal.
            CommandTimeoutError: The process outlived ``timeout`` and was killed.

        """
        mode = DisplayMode.SPINNER if spinner is not None else DisplayMode.STREAMING
        self._buffer = OutputBuffer(request.max_lines)
        command_line = request.command_line
        loop = asyncio.get_running_loop()
        inbox: asyncio.Queue[Message] = asyncio.Queue()
        exited: asyncio.Future[None] = loop.create_future()

        logger.debug("Spawning %s (cwd=%s, display=%s)", command_line, request.cwd, mode.value)
        try:
            transport, _ = await loop.subprocess_exec(
                lambda: _ExecutionProtocol(inbox, exited),
                request.command,
                *request.args,
                cwd=request.cwd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as e:
            logger.debug("Failed to spawn %s: %s", command_line, e)
            raise SpawnError(command_line, e) from e

        pid = transport.get_pid()
        state = ExecutionState(
            stdout_closed=transport.get_pipe_transport(STDOUT_FD) is None,
            stderr_closed=transport.get_pipe_transport(STDERR_FD) is None,
        )
        display = self._make_display(request, spinner)
        splitters = {STDOUT_FD: LineSplitter(), STDERR_FD: LineSplitter()}
        timeout_handle = loop.call_later(self.timeout, inbox.put_nowait, TimeoutExpired())
        grace_handle: asyncio.TimerHandle | None = None

        try:
            while True:
                message = await inbox.get()
                if isinstance(message, OutputReceived):
                    self._show(splitters[message.fd].feed(message.data), command_line, display)
                    continue
                if isinstance(message, StreamClosed):
                    self._show(splitters[message.fd].flush(), command_line, display)
                elif isinstance(message, GraceExpired):
                    for splitter in splitters.values():
                        self._show(splitter.flush(), command_line, display)
                if isinstance(message, ProcessExited) and grace_handle is None:
                    logger.debug("%s exited with %s", command_line, message.returncode)
                    grace_handle = loop.call_later(
                        self.grace_period,
                        inbox.put_nowait,
                        GraceExpired(),
                    )
                outcome = state.apply(message)
                if outcome is not None:
                    break
        finally:
            timeout_handle.cancel()
            if grace_handle is not None:
                grace_handle.cancel()
            if not exited.done():
                await self._kill(transport, exited, command_line)
            transport.close()
            display.close()

        self._raise_for_outcome(outcome, state, command_line, pid)

    async def execute_with_spinner(self, request: ExecutionRequest, label: str) -> None:
        """Run ``request`` behind a spinner that ends as a success or failure line."""
        status = create_status(label, output=self.console)
        status.start()
        try:
            await self.execute(request, spinner=status)
        except BaseException:
            status.stop()
            self.console.print(f"[bold red]✗[/bold red] {escape(label)} - Failed", highlight=False)
            raise
        status.stop()
        self.console.print(f"[bold green]✓[/bold green] {escape(label)}", highlight=False)

    def _make_display(self, request: ExecutionRequest, spinner: Status | None) -> OutputDisplay:
        if not request.show_output:
            return NullDisplay()
        if spinner is not None:
            return SpinnerDisplay(spinner)
        return ThrottledDisplay(LiveDisplay(self.console), self.redraw_interval)

    def _show(self, lines: Sequence[str], command_line: str, display: OutputDisplay) -> None:
        if not lines:
            return
        for line in lines:
            self._buffer.push(line)
        display.update(command_line, self._buffer.snapshot())

    async def _kill(
        self,
        transport: asyncio.SubprocessTransport,
        exited: asyncio.Future[None],
        command_line: str,
    ) -> None:
        logger.debug("Killing %s (pid %s)", command_line, transport.get_pid())
        with contextlib.suppress(ProcessLookupError):
            transport.kill()
        try:
            await asyncio.wait_for(asyncio.shield(exited), KILL_WAIT_SECONDS)
        except TimeoutError:
            logger.warning("%s did not exit within %ss of being killed", command_line, KILL_WAIT_SECONDS)

    def _raise_for_outcome(
        self,
        outcome: Outcome,
        state: ExecutionState,
        command_line: str,
        pid: int,
    ) -> None:
        output = self._buffer.snapshot()
        if outcome is Outcome.SUCCEEDED:
            return
        if outcome is Outcome.TIMED_OUT:
            logger.warning("%s timed out after %ss", command_line, self.timeout)
            raise CommandTimeoutError(self.timeout, command_line, pid)
        if outcome is Outcome.KILLED:
            signal_number = -state.exit_code if state.exit_code is not None else 0
            raise CommandKilledError(signal_number, output, command_line)
        assert state.exit_code is not None
        raise CommandFailedError(state.exit_code, output, command_line)


async def execute_with_streaming(
    command: str,
    args: Sequence[str] = (),
    label: str = "",
    *,
    cwd: Path | None = None,
    max_lines: int = DEFAULT_MAX_LINES,
    console: Console | None = None,
) -> None:
    """Run a one-off command behind a spinner using a fresh executor."""
    request = ExecutionRequest(command, tuple(args), cwd=cwd, max_lines=max_lines)
    executor = StreamingExecutor(console=console)
    await executor.execute_with_spinner(request, label or request.command_line)
