from __future__ import annotations

import pytsk3

from .errors import PHASE_SECTOR_READ, PHASE_SEEK
from .io.base import ReadStream, read_exact, seek_to
from .sector import PAYLOAD_SIZE, ImageGeometry, Layout


class BinImg(pytsk3.Img_Info):
    """Presents a raw BIN image to The Sleuth Kit as its 2048-byte ISO view."""

    def __init__(self, source: ReadStream, layout: Layout, geometry: ImageGeometry, url: str = ""):
        self._source = source
        self._layout = layout
        self._geometry = geometry
        super().__init__(url=url or "pybin2iso://bin", type=pytsk3.TSK_IMG_TYPE_EXTERNAL)

    def close(self) -> None:
        pass

    def get_size(self) -> int:
        return int(self._geometry.payload_size)

    def read(self, offset: int, size: int) -> bytes:
        offset = int(offset)
        end = min(offset + int(size), self.get_size())
        out = bytearray()
        while offset < end:
            index, rel = divmod(offset, PAYLOAD_SIZE)
            take = min(PAYLOAD_SIZE - rel, end - offset)
            pos = index * self._layout.sector_size + self._layout.header_size + rel
            seek_to(self._source, pos, PHASE_SEEK)
            out += read_exact(self._source, take, PHASE_SECTOR_READ)
            offset += take
        return bytes(out)


def list_root(img: pytsk3.Img_Info) -> list[str]:
    fs = pytsk3.FS_Info(img)
    names: list[str] = []
    for entry in fs.open_dir(path="/"):
        name = entry.info.name.name
        if isinstance(name, bytes):
            name = name.decode("utf-8", "replace")
        if name in (".", ".."):
            continue
        names.append(name)
    return names
