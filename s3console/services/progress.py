"""Progress reporters fed with ``(transferred, total)`` byte counts."""

from __future__ import annotations

import logging
import sys
from typing import Protocol, TextIO


def percentage(transferred: int, total: int) -> int:
    """Whole percent of ``total`` covered by ``transferred``; 0 when total is 0."""
    if total <= 0:
        return 0
    return transferred * 100 // total


class ProgressReporter(Protocol):
    def report(self, transferred: int, total: int) -> None:
        ...

    def finish(self) -> None:
        ...


class NullProgressReporter:
    def report(self, transferred: int, total: int) -> None:
        return None

    def finish(self) -> None:
        return None


class ConsoleProgressReporter:
    """Rewrites a single console line with the current percentage.

    Each emission starts with a carriage return so it overwrites the previous
    one; no newline is written until ``finish()``.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream if stream is not None else sys.stdout
        self._last: int | None = None

    def report(self, transferred: int, total: int) -> None:
        value = percentage(transferred, total)
        if value == self._last:
            return
        self._last = value
        self._stream.write(f"\r{value}")
        self._stream.flush()

    def finish(self) -> None:
        if self._last is not None:
            self._stream.write("\n")
            self._stream.flush()
        self._last = None


class LoggingProgressReporter:
    def __init__(self, logger: logging.Logger | None = None, *, step: int = 10) -> None:
        self._logger = logger or logging.getLogger("transfer.progress")
        self._step = max(step, 1)
        self._next = 0

    def report(self, transferred: int, total: int) -> None:
        value = percentage(transferred, total)
        if value < self._next:
            return
        self._logger.debug(
            "transfer_progress percent=%s transferred=%s total=%s",
            value,
            transferred,
            total,
            extra={
                "extra": {"percent": value, "transferred": transferred, "total": total}
            },
        )
        self._next = (value // self._step + 1) * self._step

    def finish(self) -> None:
        self._next = 0
