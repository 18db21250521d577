from __future__ import annotations

import os
from typing import Protocol

from ..errors import ConversionIOError


class ReadStream(Protocol):
    def readinto(self, buffer: bytearray | memoryview) -> int | None: ...

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int: ...

    def tell(self) -> int: ...


class WriteStream(Protocol):
    def write(self, data: bytes | bytearray | memoryview) -> int | None: ...


def readinto_exact(stream: ReadStream, view: memoryview, phase: str) -> None:
    """
    Fill `view` completely from `stream`.
    A short read (EOF before the view is full) is an error, same as an OSError.
    """
    want = len(view)
    got = 0
    while got < want:
        try:
            n = stream.readinto(view[got:])
        except OSError as e:
            raise ConversionIOError(phase, e) from e
        if not n:
            raise ConversionIOError(phase, detail=f"short read ({got} of {want} bytes)")
        got += n


def read_exact(stream: ReadStream, size: int, phase: str) -> bytes:
    buf = bytearray(size)
    readinto_exact(stream, memoryview(buf), phase)
    return bytes(buf)


def write_exact(stream: WriteStream, data: bytes | bytearray | memoryview, phase: str) -> None:
    view = memoryview(data)
    want = len(view)
    done = 0
    while done < want:
        try:
            n = stream.write(view[done:])
        except OSError as e:
            raise ConversionIOError(phase, e) from e
        # Buffered streams return None only in non-blocking mode.
        if n is None:
            n = 0
        if n <= 0:
            raise ConversionIOError(phase, detail=f"short write ({done} of {want} bytes)")
        done += n


def seek_to(stream: ReadStream, offset: int, phase: str, whence: int = os.SEEK_SET) -> int:
    try:
        return stream.seek(offset, whence)
    except OSError as e:
        raise ConversionIOError(phase, e) from e


def stream_size(stream: ReadStream, phase: str) -> int:
    """Total stream length; the current position is restored afterwards."""
    pos = seek_to(stream, 0, phase, os.SEEK_CUR)
    end = seek_to(stream, 0, phase, os.SEEK_END)
    seek_to(stream, pos, phase)
    return int(end)
