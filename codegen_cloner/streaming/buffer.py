"""Bounded output buffer and incremental line splitting."""

from __future__ import annotations

import codecs
import re
from collections import deque
from typing import TYPE_CHECKING

from codegen_cloner.constants import DEFAULT_MAX_LINES

if TYPE_CHECKING:
    from collections.abc import Iterator

_NEWLINE = re.compile(r"[\r\n]")


class OutputBuffer:
    """Keep the most recent ``max_lines`` lines of output, oldest first."""

    def __init__(self, max_lines: int = DEFAULT_MAX_LINES) -> None:
        """Create an empty buffer holding at most ``max_lines`` lines."""
        if max_lines < 1:
            msg = f"max_lines must be at least 1, got {max_lines}"
            raise ValueError(msg)
        self._lines: deque[str] = deque(maxlen=max_lines)

    @property
    def max_lines(self) -> int:
        """Capacity of the buffer."""
        return self._lines.maxlen or 0

    def push(self, line: str) -> None:
        """Append a line, evicting the oldest one once the buffer is full."""
        self._lines.append(line)

    def snapshot(self) -> tuple[str, ...]:
        """Return the buffered lines in insertion order."""
        return tuple(self._lines)

    def clear(self) -> None:
        """Drop all buffered lines."""
        self._lines.clear()

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[str]:
        return iter(self._lines)


class LineSplitter:
    """Turn a stream of byte chunks into trimmed, non-blank lines.

    A line split across two chunks is held back until its terminator arrives
    or the stream is closed. Carriage returns count as line breaks so progress
    bars redraw as separate lines instead of one ever-growing entry. Blank
    lines, including the empty gap inside a CRLF pair, are dropped.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        """Create a splitter decoding with ``encoding`` (invalid bytes are replaced)."""
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._pending = ""

    def feed(self, data: bytes) -> list[str]:
        """Consume a chunk and return the lines it completed."""
        text = self._pending + self._decoder.decode(data)
        *complete, self._pending = _NEWLINE.split(text)
        return _clean(complete)

    def flush(self) -> list[str]:
        """Return whatever is left once the stream has ended."""
        text = self._pending + self._decoder.decode(b"", final=True)
        self._pending = ""
        return _clean(_NEWLINE.split(text))


def _clean(lines: list[str]) -> list[str]:
    return [stripped for line in lines if (stripped := line.strip())]
