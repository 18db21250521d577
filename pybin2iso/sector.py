"""
Raw CD sector layouts.

Mode 1 (2352): Sync (12), Address (3), Mode (1), Data (2048), ECC (288)
Mode 2 (2352): Sync (12), Address (3), Mode (1), Subheader (8), Data (2048), ECC (280)
Mode 2 (2336): Subheader (8), Data (2048), ECC (280)
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final, Optional

from .errors import UnsupportedModeError


SYNC_HEADER: Final[bytes] = b"\x00" + b"\xFF" * 10 + b"\x00"
MODE_OFFSET: Final[int] = 15
PROBE_SIZE: Final[int] = 16
PAYLOAD_SIZE: Final[int] = 2048
MAX_SECTOR_SIZE: Final[int] = 2352


class Layout(Enum):
    MODE2_2336 = (8, 2336, None)
    MODE1_2352 = (16, 2352, 1)
    MODE2_2352 = (24, 2352, 2)

    def __init__(self, header_size: int, sector_size: int, mode: Optional[int]):
        self.header_size = header_size
        self.sector_size = sector_size
        self.mode = mode

    @property
    def label(self) -> str:
        mode = 2 if self.mode is None else self.mode
        return f"Mode {mode} / {self.sector_size}"

    def payload(self, sector: bytes | bytearray | memoryview) -> bytes | bytearray | memoryview:
        return sector[self.header_size : self.header_size + PAYLOAD_SIZE]


@dataclass(frozen=True)
class ImageGeometry:
    sector_count: int
    tail_bytes: int

    @property
    def payload_size(self) -> int:
        return self.sector_count * PAYLOAD_SIZE


def detect_layout(probe: bytes | bytearray | memoryview) -> Layout:
    # Sync present means a headered 2352 sector; the mode byte picks 1 or 2.
    if bytes(probe[: len(SYNC_HEADER)]) != SYNC_HEADER:
        return Layout.MODE2_2336
    mode = probe[MODE_OFFSET]
    if mode == 1:
        return Layout.MODE1_2352
    if mode == 2:
        return Layout.MODE2_2352
    raise UnsupportedModeError(mode)


def compute_geometry(total_len: int, sector_size: int) -> ImageGeometry:
    return ImageGeometry(sector_count=total_len // sector_size, tail_bytes=total_len % sector_size)
