from .base import (
    ReadStream,
    WriteStream,
    read_exact,
    readinto_exact,
    seek_to,
    stream_size,
    write_exact,
)
from .posix import ImageFile, open_posix_destination, open_posix_source

open_source = open_posix_source
open_destination = open_posix_destination

__all__ = [
    "ImageFile",
    "ReadStream",
    "WriteStream",
    "open_destination",
    "open_source",
    "read_exact",
    "readinto_exact",
    "seek_to",
    "stream_size",
    "write_exact",
]
