"""Tests for the live output displays."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest
from rich.status import Status

from codegen_cloner.streaming.display import (
    LiveDisplay,
    NullDisplay,
    SpinnerDisplay,
    ThrottledDisplay,
    render_output,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from rich.console import Console


class RecordingDisplay:
    """Display that remembers every frame it was asked to draw."""

    def __init__(self) -> None:
        self.frames: list[tuple[str, tuple[str, ...]]] = []
        self.closed = 0

    def update(self, command_line: str, lines: Sequence[str]) -> None:
        self.frames.append((command_line, tuple(lines)))

    def close(self) -> None:
        self.closed += 1


def test_render_output(mock_console: Console) -> None:
    """The command echo comes first, then each buffered line."""
    with mock_console.capture() as capture:
        mock_console.print(render_output("pnpm install", ["Resolving", "Done"]))
    text = capture.get()
    assert text.index("▶ pnpm install") < text.index("Resolving") < text.index("Done")


def test_null_display_is_silent(mock_console: Console) -> None:
    """Turning output off draws nothing."""
    display = NullDisplay()
    display.update("ls", ["a"])
    display.close()
    assert mock_console.file.getvalue() == ""  # type: ignore[attr-defined]


class TestThrottledDisplay:
    """Tests for ThrottledDisplay."""

    @pytest.mark.asyncio
    async def test_burst_draws_once_then_trailing_flush(self) -> None:
        """A tight burst of updates is coalesced into one draw per window."""
        inner = RecordingDisplay()
        display = ThrottledDisplay(inner, interval=0.1)
        lines: list[str] = []
        for i in range(1000):
            lines.append(f"line {i}")
            display.update("cmd", lines[-10:])
        assert len(inner.frames) == 1
        assert inner.frames[0] == ("cmd", ("line 0",))

        await asyncio.sleep(0.15)
        assert len(inner.frames) == 2
        assert inner.frames[-1] == ("cmd", tuple(lines[-10:]))

    @pytest.mark.asyncio
    async def test_updates_after_window_draw_immediately(self) -> None:
        """Once the window has passed the next update is drawn right away."""
        inner = RecordingDisplay()
        display = ThrottledDisplay(inner, interval=0.05)
        display.update("cmd", ["a"])
        await asyncio.sleep(0.08)
        display.update("cmd", ["a", "b"])
        assert [frame[1] for frame in inner.frames] == [("a",), ("a", "b")]

    @pytest.mark.asyncio
    async def test_unchanged_state_is_not_redrawn(self) -> None:
        """The trailing flush skips a frame that was already drawn."""
        inner = RecordingDisplay()
        display = ThrottledDisplay(inner, interval=0.05)
        display.update("cmd", ["a"])
        display.update("cmd", ["a"])
        await asyncio.sleep(0.08)
        assert len(inner.frames) == 1

    @pytest.mark.asyncio
    async def test_close_cancels_pending_redraw(self) -> None:
        """Closing drops the trailing redraw and closes the wrapped display."""
        inner = RecordingDisplay()
        display = ThrottledDisplay(inner, interval=0.05)
        display.update("cmd", ["a"])
        display.update("cmd", ["a", "b"])
        display.close()
        await asyncio.sleep(0.08)
        assert len(inner.frames) == 1
        assert inner.closed == 1


class TestSpinnerDisplay:
    """Tests for SpinnerDisplay."""

    def test_redraws_without_throttle(self, mock_console: Console) -> None:
        """Every change is shown immediately while a spinner owns the line."""
        status = Status("Installing", console=mock_console)
        display = SpinnerDisplay(status)
        for i in range(5):
            display.update("pnpm install", [str(n) for n in range(i + 1)])
        assert display.redraws == 5

    def test_skips_duplicate_frames(self, mock_console: Console) -> None:
        """The same buffer state is never drawn twice in a row."""
        status = Status("Installing", console=mock_console)
        display = SpinnerDisplay(status)
        display.update("pnpm install", ["a"])
        display.update("pnpm install", ["a"])
        display.update("pnpm install", ["a", "b"])
        assert display.redraws == 2

    def test_close_restores_label(self, mock_console: Console) -> None:
        """The spinner goes back to its own label when the command ends."""
        status = Status("Installing", console=mock_console)
        display = SpinnerDisplay(status)
        display.update("pnpm install", ["a"])
        assert status.status != "Installing"
        display.close()
        assert status.status == "Installing"


class TestLiveDisplay:
    """Tests for LiveDisplay."""

    def test_draws_lazily_and_stops_on_close(self, mock_console: Console, monkeypatch: pytest.MonkeyPatch) -> None:
        """Nothing is drawn before output arrives, and close ends the region."""
        monkeypatch.setenv("TERM", "xterm-256color")
        display = LiveDisplay(mock_console)
        display.close()
        assert mock_console.file.getvalue() == ""  # type: ignore[attr-defined]

        display.update("git pull", ["Already up to date."])
        assert display.redraws == 1
        assert "▶ git pull" in mock_console.file.getvalue()  # type: ignore[attr-defined]
        display.close()
        assert not display._started
