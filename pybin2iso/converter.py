from __future__ import annotations

import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Union

from .errors import (
    PHASE_PROBE_READ,
    PHASE_SECTOR_READ,
    PHASE_SECTOR_WRITE,
    PHASE_SEEK,
    PHASE_SIZE,
    MisalignedImageError,
)
from .io import open_destination, open_source
from .io.base import ReadStream, WriteStream, read_exact, readinto_exact, seek_to, stream_size, write_exact
from .sector import (
    MAX_SECTOR_SIZE,
    MODE_OFFSET,
    PAYLOAD_SIZE,
    PROBE_SIZE,
    ImageGeometry,
    Layout,
    compute_geometry,
    detect_layout,
)


LogCb = Callable[[str, str], None]
ProgressCb = Callable[[int, int], None]


@dataclass(frozen=True)
class ModeMismatch:
    sector_index: int
    observed: int
    expected: int

    @property
    def message(self) -> str:
        return f"Sector {self.sector_index} has different mode ({self.observed} instead of {self.expected})"


@dataclass(frozen=True)
class SizeMisaligned:
    sector_size: int
    dropped_bytes: int

    @property
    def message(self) -> str:
        return (
            f"Image size is not a factor of sector size {self.sector_size}, "
            f"last {self.dropped_bytes} bytes will be dropped"
        )


Diagnostic = Union[ModeMismatch, SizeMisaligned]


@dataclass
class ConversionResult:
    layout: Layout
    geometry: ImageGeometry
    sectors_written: int = 0
    warnings: list[Diagnostic] = field(default_factory=list)

    @property
    def bytes_written(self) -> int:
        return self.sectors_written * PAYLOAD_SIZE


class SectorConverter:
    """
    Re-packs a raw BIN stream into 2048-byte ISO sectors.

    The layout is decided once from the first 16 bytes; every later sector is
    extracted with that layout. A sector whose mode byte disagrees is reported
    but still extracted at the detected header offset.
    """

    def __init__(
        self,
        *,
        strict_alignment: bool = False,
        check_modes: bool = True,
        log_cb: Optional[LogCb] = None,
        progress_cb: Optional[ProgressCb] = None,
        log_interval_s: float = 2.0,
    ):
        self.strict_alignment = bool(strict_alignment)
        self.check_modes = bool(check_modes)
        self.log_cb = log_cb
        self.progress_cb = progress_cb
        self.log_interval_s = float(log_interval_s)
        self._buf = bytearray(MAX_SECTOR_SIZE)

    def _log(self, level: str, msg: str) -> None:
        if self.log_cb:
            self.log_cb(level, msg)

    def _warn(self, result: ConversionResult, diag: Diagnostic) -> None:
        result.warnings.append(diag)
        self._log("WARNING", diag.message)

    def probe(self, source: ReadStream, total_len: Optional[int] = None) -> tuple[Layout, ImageGeometry]:
        """Read the first sector header and size the image. Leaves `source` at offset 0."""
        head = read_exact(source, PROBE_SIZE, PHASE_PROBE_READ)
        layout = detect_layout(head)
        if total_len is None:
            total_len = stream_size(source, PHASE_SIZE)
        geometry = compute_geometry(int(total_len), layout.sector_size)
        seek_to(source, 0, PHASE_SEEK)
        return layout, geometry

    def run(
        self,
        source: ReadStream,
        destination: WriteStream,
        total_len: Optional[int] = None,
    ) -> ConversionResult:
        layout, geometry = self.probe(source, total_len)
        self._log("INFO", f"Detected {layout.label}, {geometry.sector_count} sectors")
        return self.convert(source, destination, layout, geometry)

    def convert(
        self,
        source: ReadStream,
        destination: WriteStream,
        layout: Layout,
        geometry: ImageGeometry,
    ) -> ConversionResult:
        result = ConversionResult(layout=layout, geometry=geometry)
        if geometry.tail_bytes:
            if self.strict_alignment:
                raise MisalignedImageError(layout.sector_size, geometry.tail_bytes)
            self._warn(result, SizeMisaligned(layout.sector_size, geometry.tail_bytes))

        view = memoryview(self._buf)
        sector = view[: layout.sector_size]
        payload = layout.payload(view)
        expected = layout.mode if self.check_modes else None

        total = geometry.sector_count
        t0 = time.time()
        last_log = t0
        for i in range(total):
            readinto_exact(source, sector, PHASE_SECTOR_READ)
            if expected is not None and self._buf[MODE_OFFSET] != expected:
                self._warn(result, ModeMismatch(i, self._buf[MODE_OFFSET], expected))
            write_exact(destination, payload, PHASE_SECTOR_WRITE)
            result.sectors_written += 1

            if self.progress_cb:
                self.progress_cb(i + 1, total)

            now = time.time()
            if self.log_cb and (now - last_log) >= self.log_interval_s:
                mb = result.bytes_written / (1024 * 1024)
                speed = mb / max(0.001, now - t0)
                self._log("INFO", f"Converting: {i + 1}/{total} sectors ({mb:.1f} MiB, {speed:.1f} MiB/s)")
                last_log = now

        return result


def convert_file(
    src_path: Path,
    dst_path: Path,
    *,
    strict_alignment: bool = False,
    check_modes: bool = True,
    overwrite: bool = True,
    log_cb: Optional[LogCb] = None,
    progress_cb: Optional[ProgressCb] = None,
    log_interval_s: float = 2.0,
) -> ConversionResult:
    """
    Convert the BIN at `src_path` into an ISO at `dst_path`.

    The destination is created only once the layout is known; if conversion
    fails or is interrupted afterwards the partial destination is removed.
    """
    src_path = Path(src_path)
    dst_path = Path(dst_path)
    if dst_path.exists() and os.path.samefile(src_path, dst_path):
        raise ValueError(f"Destination is the source image: {dst_path}")

    converter = SectorConverter(
        strict_alignment=strict_alignment,
        check_modes=check_modes,
        log_cb=log_cb,
        progress_cb=progress_cb,
        log_interval_s=log_interval_s,
    )
    with open_source(src_path) as src:
        layout, geometry = converter.probe(src.stream, src.size())
        if strict_alignment and geometry.tail_bytes:
            raise MisalignedImageError(layout.sector_size, geometry.tail_bytes)
        if log_cb:
            log_cb("INFO", f"Detected {layout.label}, {geometry.sector_count} sectors")

        with open_destination(dst_path, overwrite=overwrite) as dst:
            try:
                return converter.convert(src.stream, dst, layout, geometry)
            except BaseException:
                dst.close()
                dst_path.unlink(missing_ok=True)
                raise
