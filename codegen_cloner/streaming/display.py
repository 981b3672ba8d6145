"""Live terminal views of a running command's output.

Two mutually exclusive modes exist. In streaming mode the executor owns a
transient Rich ``Live`` region that shows the command line followed by the
buffered output, redrawn at most once per ``REDRAW_INTERVAL_SECONDS``. In
spinner mode the caller owns a Rich ``Status`` and the output is rendered
beneath the spinner's label as soon as it changes; the spinner refreshes the
terminal at its own pace, so no throttle is applied.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from rich.console import Group
from rich.live import Live
from rich.text import Text

from codegen_cloner.constants import REDRAW_INTERVAL_SECONDS

if TYPE_CHECKING:
    from collections.abc import Sequence

    from rich.console import Console, RenderableType
    from rich.status import Status

_Frame = tuple[str, tuple[str, ...]]


class DisplayMode(Enum):
    """Who owns the terminal while a command runs."""

    STREAMING = "streaming"
    SPINNER = "spinner"


class OutputDisplay(Protocol):
    """Something that can show the buffered output of a command."""

    def update(self, command_line: str, lines: Sequence[str]) -> None:
        """Show the current buffer state."""
        ...

    def close(self) -> None:
        """Tear the view down; called exactly once per execution."""
        ...


def render_output(command_line: str, lines: Sequence[str]) -> Group:
    """Render the command echo line followed by the buffered output lines."""
    rows: list[RenderableType] = [Text(f"▶ {command_line}", style="blue")]
    rows.extend(Text(f"  {line}", style="bright_black") for line in lines)
    return Group(*rows)


class NullDisplay:
    """Display used when live output is turned off."""

    def update(self, command_line: str, lines: Sequence[str]) -> None:  # noqa: ARG002
        """Ignore the update."""

    def close(self) -> None:
        """Nothing to tear down."""


class LiveDisplay:
    """A transient region redrawn in place and erased when closed."""

    def __init__(self, console: Console) -> None:
        """Prepare the region; nothing is drawn until the first update."""
        self._live = Live(
            console=console,
            auto_refresh=False,
            transient=True,
            redirect_stdout=False,
            redirect_stderr=False,
        )
        self._started = False
        self.redraws = 0

    def update(self, command_line: str, lines: Sequence[str]) -> None:
        """Redraw the region with the given buffer state."""
        if not self._started:
            self._live.start()
            self._started = True
        self._live.update(render_output(command_line, lines), refresh=True)
        self.redraws += 1

    def close(self) -> None:
        """Erase the region from the terminal."""
        if self._started:
            self._live.stop()
            self._started = False


class SpinnerDisplay:
    """Render output beneath a caller-owned spinner's label."""

    def __init__(self, status: Status) -> None:
        """Remember the spinner's label so it can be restored on close."""
        self._status = status
        self._label = status.status
        self._last: _Frame | None = None
        self.redraws = 0

    def update(self, command_line: str, lines: Sequence[str]) -> None:
        """Redraw immediately, skipping frames identical to the previous one."""
        frame = (command_line, tuple(lines))
        if frame == self._last:
            return
        self._last = frame
        self._status.update(Group(self._label, render_output(command_line, lines)))
        self.redraws += 1

    def close(self) -> None:
        """Put the spinner's label back; finishing the spinner is up to its owner."""
        self._status.update(self._label)
        self._last = None


class ThrottledDisplay:
    """Forward updates to another display at most once per ``interval`` seconds.

    Updates arriving inside the window are coalesced: only the most recent
    buffer state is kept, and a single trailing redraw is scheduled on the
    event loop for when the window ends.
    """

    def __init__(self, inner: OutputDisplay, interval: float = REDRAW_INTERVAL_SECONDS) -> None:
        """Wrap ``inner``; must be created while an event loop is running."""
        self._inner = inner
        self._interval = interval
        self._loop = asyncio.get_running_loop()
        self._latest: _Frame | None = None
        self._drawn: _Frame | None = None
        self._last_draw = float("-inf")
        self._flush_handle: asyncio.TimerHandle | None = None

    def update(self, command_line: str, lines: Sequence[str]) -> None:
        """Record the newest state and draw it now or when the window ends."""
        self._latest = (command_line, tuple(lines))
        if self._flush_handle is not None:
            return
        wait = self._last_draw + self._interval - self._loop.time()
        if wait <= 0:
            self._draw()
        else:
            self._flush_handle = self._loop.call_later(wait, self._flush)

    def close(self) -> None:
        """Drop any pending redraw and close the wrapped display."""
        if self._flush_handle is not None:
            self._flush_handle.cancel()
            self._flush_handle = None
        self._inner.close()

    def _flush(self) -> None:
        self._flush_handle = None
        self._draw()

    def _draw(self) -> None:
        if self._latest is None or self._latest == self._drawn:
            return
        self._drawn = self._latest
        self._last_draw = self._loop.time()
        self._inner.update(*self._latest)
