from __future__ import annotations

from typing import Final, Optional


PHASE_PROBE_READ: Final[str] = "probe read"
PHASE_SIZE: Final[str] = "size"
PHASE_SEEK: Final[str] = "seek"
PHASE_SECTOR_READ: Final[str] = "sector read"
PHASE_SECTOR_WRITE: Final[str] = "sector write"


class ConversionError(Exception):
    """Base class for fatal conversion failures."""


class ConversionIOError(ConversionError):
    def __init__(self, phase: str, cause: Optional[OSError] = None, detail: str = ""):
        self.phase = phase
        self.cause = cause
        self.detail = detail
        if cause is not None:
            msg = f"{phase} failed: {cause}"
        else:
            msg = f"{phase} failed: {detail or 'unexpected end of stream'}"
        super().__init__(msg)


class UnsupportedModeError(ConversionError):
    def __init__(self, observed: int):
        self.observed = int(observed)
        super().__init__(f"Unsupported track mode {self.observed}")


class MisalignedImageError(ConversionError):
    def __init__(self, sector_size: int, dropped_bytes: int):
        self.sector_size = int(sector_size)
        self.dropped_bytes = int(dropped_bytes)
        super().__init__(
            f"Image size is not a multiple of sector size {self.sector_size} "
            f"({self.dropped_bytes} trailing bytes)"
        )
