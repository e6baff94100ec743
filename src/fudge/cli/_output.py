"""User-facing output for the Fudge CLI.

Every message a run prints goes through :class:`Reporter`, which has four
message classes (detail, notice, failure, success) plus the duration line.
"""
from __future__ import annotations

import sys
from contextlib import contextmanager
from time import perf_counter
from typing import Iterator, Optional, TextIO


def format_duration(seconds: float) -> str:
    """Format elapsed seconds as ``HH:MM:SS.fff``.

    Example:
        >>> format_duration(3725.5)
        '01:02:05.500'
    """
    millis = int(round(max(seconds, 0.0) * 1000))
    hours, rem = divmod(millis, 3_600_000)
    minutes, rem = divmod(rem, 60_000)
    secs, ms = divmod(rem, 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}.{ms:03d}"


class Reporter:
    """Prints run status; failures go to stderr, everything else to stdout."""

    def __init__(self, stream: Optional[TextIO] = None, err_stream: Optional[TextIO] = None) -> None:
        self._stream = stream
        self._err_stream = err_stream

    # Resolved lazily so pytest's capsys replacement of sys.stdout is honoured.
    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    @property
    def err_stream(self) -> TextIO:
        return self._err_stream or sys.stderr

    def _print(self, message: str, *, err: bool = False) -> None:
        print(message, file=self.err_stream if err else self.stream)

    def banner(self, version: str) -> None:
        self._print(f"Fudge v{version}")

    def detail(self, message: str) -> None:
        self._print(message)

    def output(self, text: str, prefix: str = "    ") -> None:
        """Echo captured backend/script output, indented."""
        for line in (text or "").splitlines():
            if line.strip():
                self._print(f"{prefix}{line.rstrip()}")

    def notice(self, message: str) -> None:
        self._print(f"Notice: {message}")

    def failure(self, message: str) -> None:
        self._print(f"Error: {message}", err=True)

    def success(self, message: str) -> None:
        self._print(f"✓ {message}")

    def duration(self, seconds: float) -> None:
        self._print(f"Duration: {format_duration(seconds)}")

    @contextmanager
    def timed(self) -> Iterator[None]:
        """Report the block's elapsed time when it exits, even by exception."""
        start = perf_counter()
        try:
            yield
        finally:
            self.duration(perf_counter() - start)


__all__ = [
    "Reporter",
    "format_duration",
]
