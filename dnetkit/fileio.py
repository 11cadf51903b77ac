"""A single-file bridge used to stream model data in and out."""

from __future__ import annotations

from enum import Enum
from typing import BinaryIO, Optional


class OpenMode(Enum):
    """How the bridge opens its file."""

    READ = "rb"
    WRITE = "wb"
    READ_PLUS = "r+b"
    WRITE_PLUS = "w+b"


class FileBridge:
    """Holds at most one open file, for reading or for writing."""

    def __init__(self) -> None:
        self._reader: Optional[BinaryIO] = None
        self._writer: Optional[BinaryIO] = None

    @property
    def is_open(self) -> bool:
        return self._reader is not None or self._writer is not None

    def open(self, path, mode: OpenMode) -> None:
        """Open ``path``; only one file may be open at a time."""
        if self.is_open:
            raise RuntimeError("a file is already open")
        handle = open(path, mode.value)
        if mode in (OpenMode.READ, OpenMode.READ_PLUS):
            self._reader = handle
        else:
            self._writer = handle

    def close(self) -> None:
        """Close whatever file is open."""
        for handle in (self._reader, self._writer):
            if handle is not None:
                handle.close()
        self._reader = None
        self._writer = None

    def read(self, size: int, count: int) -> bytes:
        """Read up to ``count`` items of ``size`` bytes."""
        if self._reader is None:
            raise RuntimeError("no file is open for reading")
        return self._reader.read(size * count)

    def write(self, data: bytes) -> int:
        """Write ``data`` and flush it; return the number of bytes written."""
        if self._writer is None:
            raise RuntimeError("no file is open for writing")
        written = self._writer.write(data)
        self._writer.flush()
        return written

    def __enter__(self) -> "FileBridge":
        return self

    def __exit__(self, *exc) -> None:
        self.close()