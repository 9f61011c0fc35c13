"""File readers that report progress while a request body is consumed."""

from __future__ import annotations

import os
from typing import BinaryIO, Callable

ProgressSink = Callable[[int, int], None]


class ProgressReader:
    """Read-only view over ``[offset, offset + length)`` of an open file.

    The sink receives ``(base + bytes read so far, total)`` after each read.
    botocore may read a body once to compute checksums and then seek back,
    so only reads that pass the previous high-water mark are reported; this
    keeps the reported count monotonic.
    """

    def __init__(
        self,
        fileobj: BinaryIO,
        *,
        offset: int = 0,
        length: int | None = None,
        on_progress: ProgressSink | None = None,
        base: int = 0,
        total: int | None = None,
    ) -> None:
        if length is None:
            length = fileobj.seek(0, os.SEEK_END) - offset
        self._file = fileobj
        self._offset = offset
        self._length = max(length, 0)
        self._position = 0
        self._high_water = 0
        self._on_progress = on_progress
        self._base = base
        self._total = self._length if total is None else total
        self._file.seek(offset)

    def __len__(self) -> int:
        return self._length

    def read(self, size: int = -1) -> bytes:
        remaining = self._length - self._position
        if remaining <= 0:
            return b""
        if size is None or size < 0 or size > remaining:
            size = remaining
        data = self._file.read(size)
        self._position += len(data)
        if self._position > self._high_water:
            self._high_water = self._position
            if self._on_progress is not None:
                self._on_progress(self._base + self._high_water, self._total)
        return data

    def seek(self, position: int, whence: int = os.SEEK_SET) -> int:
        if whence == os.SEEK_CUR:
            position += self._position
        elif whence == os.SEEK_END:
            position += self._length
        position = min(max(position, 0), self._length)
        self._file.seek(self._offset + position)
        self._position = position
        return position

    def tell(self) -> int:
        return self._position

    def seekable(self) -> bool:
        return True

    def readable(self) -> bool:
        return True

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> "ProgressReader":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def open_range(
    path: str | os.PathLike[str],
    *,
    offset: int = 0,
    length: int | None = None,
    on_progress: ProgressSink | None = None,
    base: int = 0,
    total: int | None = None,
) -> ProgressReader:
    """Open ``path`` and wrap the requested byte range in a ProgressReader."""
    fileobj = open(path, "rb")
    try:
        return ProgressReader(
            fileobj,
            offset=offset,
            length=length,
            on_progress=on_progress,
            base=base,
            total=total,
        )
    except Exception:
        fileobj.close()
        raise
