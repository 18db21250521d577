"""
Tests for sector layout detection and image geometry.
"""
from __future__ import annotations

import unittest

from pybin2iso.errors import UnsupportedModeError
from pybin2iso.sector import (
    MAX_SECTOR_SIZE,
    MODE_OFFSET,
    PAYLOAD_SIZE,
    SYNC_HEADER,
    ImageGeometry,
    Layout,
    compute_geometry,
    detect_layout,
)


def _probe(mode: int, sync: bytes = SYNC_HEADER) -> bytes:
    buf = bytearray(16)
    buf[0:12] = sync
    buf[12:15] = b"\x00\x02\x00"  # MSF 00:02:00
    buf[MODE_OFFSET] = mode
    return bytes(buf)


class TestLayout(unittest.TestCase):
    """Layout constants."""

    def test_sync_header(self):
        self.assertEqual(SYNC_HEADER, bytes([0x00] + [0xFF] * 10 + [0x00]))
        self.assertEqual(len(SYNC_HEADER), 12)

    def test_geometry_constants(self):
        self.assertEqual((Layout.MODE2_2336.header_size, Layout.MODE2_2336.sector_size), (8, 2336))
        self.assertEqual((Layout.MODE1_2352.header_size, Layout.MODE1_2352.sector_size), (16, 2352))
        self.assertEqual((Layout.MODE2_2352.header_size, Layout.MODE2_2352.sector_size), (24, 2352))
        self.assertIsNone(Layout.MODE2_2336.mode)
        self.assertEqual(Layout.MODE1_2352.mode, 1)
        self.assertEqual(Layout.MODE2_2352.mode, 2)

    def test_payload_fits_every_layout(self):
        for layout in Layout:
            self.assertLessEqual(layout.header_size + PAYLOAD_SIZE, layout.sector_size)
            self.assertLessEqual(layout.sector_size, MAX_SECTOR_SIZE)

    def test_payload_slice(self):
        sector = bytes(range(256)) * 10
        self.assertEqual(Layout.MODE1_2352.payload(sector), sector[16:2064])
        self.assertEqual(len(Layout.MODE2_2352.payload(sector)), PAYLOAD_SIZE)

    def test_labels(self):
        self.assertEqual(Layout.MODE1_2352.label, "Mode 1 / 2352")
        self.assertEqual(Layout.MODE2_2352.label, "Mode 2 / 2352")
        self.assertEqual(Layout.MODE2_2336.label, "Mode 2 / 2336")


class TestDetectLayout(unittest.TestCase):
    """Tests for detect_layout()."""

    def test_mode1(self):
        self.assertIs(detect_layout(_probe(1)), Layout.MODE1_2352)

    def test_mode2(self):
        self.assertIs(detect_layout(_probe(2)), Layout.MODE2_2352)

    def test_no_sync_is_headerless_mode2(self):
        """Without a sync header the mode byte is never consulted."""
        probe = _probe(7, sync=b"\x00" * 12)
        self.assertIs(detect_layout(probe), Layout.MODE2_2336)

    def test_partial_sync_is_headerless_mode2(self):
        sync = bytearray(SYNC_HEADER)
        sync[11] = 0xFF
        self.assertIs(detect_layout(_probe(1, sync=bytes(sync))), Layout.MODE2_2336)

    def test_unsupported_mode(self):
        with self.assertRaises(UnsupportedModeError) as ctx:
            detect_layout(_probe(7))
        self.assertEqual(ctx.exception.observed, 7)
        self.assertIn("7", str(ctx.exception))

    def test_mode_zero_unsupported(self):
        with self.assertRaises(UnsupportedModeError) as ctx:
            detect_layout(_probe(0))
        self.assertEqual(ctx.exception.observed, 0)

    def test_accepts_memoryview(self):
        self.assertIs(detect_layout(memoryview(_probe(2))), Layout.MODE2_2352)


class TestComputeGeometry(unittest.TestCase):
    """Tests for compute_geometry()."""

    def test_exact_multiple(self):
        self.assertEqual(compute_geometry(2352 * 10, 2352), ImageGeometry(10, 0))

    def test_tail(self):
        geo = compute_geometry(2336 * 3 + 100, 2336)
        self.assertEqual(geo.sector_count, 3)
        self.assertEqual(geo.tail_bytes, 100)

    def test_smaller_than_sector(self):
        self.assertEqual(compute_geometry(16, 2352), ImageGeometry(0, 16))

    def test_zero(self):
        self.assertEqual(compute_geometry(0, 2352), ImageGeometry(0, 0))

    def test_payload_size(self):
        self.assertEqual(compute_geometry(2352 * 4 + 1, 2352).payload_size, 4 * PAYLOAD_SIZE)


if __name__ == "__main__":
    unittest.main()
