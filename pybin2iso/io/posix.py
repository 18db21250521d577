from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO


@dataclass
class ImageFile:
    path: str
    _fp: BinaryIO
    _size: int

    def size(self) -> int:
        return self._size

    @property
    def stream(self) -> BinaryIO:
        return self._fp

    def close(self) -> None:
        self._fp.close()

    def __enter__(self) -> "ImageFile":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


def open_posix_source(path: str | Path) -> ImageFile:
    p = str(path)
    flags = os.O_RDONLY
    if hasattr(os, "O_BINARY"):
        flags |= os.O_BINARY

    fd = os.open(p, flags)
    try:
        size = os.lseek(fd, 0, os.SEEK_END)
        os.lseek(fd, 0, os.SEEK_SET)
        fp = os.fdopen(fd, "rb")
    except OSError:
        os.close(fd)
        raise
    return ImageFile(path=p, _fp=fp, _size=int(size))


def open_posix_destination(path: str | Path, *, overwrite: bool = True) -> BinaryIO:
    return open(path, "wb" if overwrite else "xb")
