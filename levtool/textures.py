"""Texture pages: RLE unpacking, texture names and overlay map segments."""

from __future__ import annotations

import logging
import struct
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from .texinfo import (
    CLUT_COLORS,
    TEXPAGE_4BIT_SIZE,
    Clut,
    TexBitmap,
    TexDetail,
)

log = logging.getLogger(__name__)

MAX_PAGE_CLUTS = 63
SPOOLED_COMP_TABLE_SIZE = 28
SPOOLED_PAGE_SIZE = 4 + MAX_PAGE_CLUTS * CLUT_COLORS * 2 + SPOOLED_COMP_TABLE_SIZE + TEXPAGE_4BIT_SIZE
OVERLAY_MAX_SEGMENTS = 256
PALETTE_SLOTS = 16

_CLUT = struct.Struct(f"<{CLUT_COLORS}H")
_INT = struct.Struct("<i")


def unpack_texture(data: bytes, offset: int = 0) -> tuple[bytes, int]:
    """Decode a run-length packed 4-bit page.

    The page is filled from its last byte backwards. Returns the page bytes
    and the offset just past the packed data.
    """
    dest = bytearray(TEXPAGE_4BIT_SIZE)
    pos = TEXPAGE_4BIT_SIZE - 1
    cursor = offset

    def take() -> int:
        nonlocal cursor
        if cursor >= len(data):
            raise ValueError("packed texture data is truncated")
        value = data[cursor]
        cursor += 1
        return value

    def put(value: int) -> None:
        nonlocal pos
        if pos >= 0:
            dest[pos] = value
        pos -= 1

    while pos >= 0:
        pix = take()
        if pix & 0x80:
            count = 2 - (pix - 256)
            value = take()
            for _ in range(count):
                put(value)
        else:
            for _ in range(pix + 1):
                put(take())

    return bytes(dest), cursor


def parse_texture_names(data: bytes) -> dict[int, str]:
    """Split a zero-separated names lump into a map of offset to name."""
    names: dict[int, str] = {}
    size = len(data)
    start = 0
    while True:
        end = data.find(b"\0", start)
        if end < 0:
            end = size
        names[start] = data[start:end].decode("latin-1")
        start = end + 1
        if start >= size:
            break
    return names


def overlay_segment_count(data: bytes) -> int:
    """Count overlay map segments whose offset points at RNC packed data."""
    header = OVERLAY_MAX_SEGMENTS * 2
    if len(data) < header:
        raise ValueError(f"overlay map data needs at least {header} bytes, got {len(data)}")
    offsets = struct.unpack_from(f"<{OVERLAY_MAX_SEGMENTS}H", data)
    return sum(1 for ofs in offsets if data[ofs:ofs + 3] == b"RNC")


def _read_int(data: bytes, offset: int) -> int:
    if offset + _INT.size > len(data):
        raise ValueError("texture page data is truncated")
    return _INT.unpack_from(data, offset)[0]


def _read_cluts(data: bytes, offset: int, count: int) -> list[Clut]:
    end = offset + count * _CLUT.size
    if end > len(data):
        raise ValueError("texture page palettes are truncated")
    return [tuple(_CLUT.unpack_from(data, offset + i * _CLUT.size)) for i in range(count)]


@dataclass
class TexturePage:
    """A texture page with its detail rectangles and 4-bit bitmap."""

    id: int = -1
    flags: int = 0
    details: list[TexDetail] = field(default_factory=list)
    bitmap: TexBitmap = field(default_factory=TexBitmap)

    @property
    def detail_count(self) -> int:
        return len(self.details)

    def find_detail(self, name: str, names: Mapping[int, str]) -> TexDetail | None:
        """Return the first detail whose name matches exactly, or None."""
        for detail in self.details:
            if names.get(detail.info.nameoffset) == name:
                return detail
        return None

    def palette_indices(self) -> list[int]:
        """Extra palette slots that at least one detail of the page uses."""
        return [
            slot
            for slot in range(PALETTE_SLOTS)
            if any(detail.extra_cluts[slot] is not None for detail in self.details)
        ]

    def add_extra_clut(self, texnum: int, palette: int, clut: Sequence[int]) -> bool:
        """Attach an extra palette to a detail; False if the detail does not exist."""
        if not 0 <= texnum < len(self.details):
            return False
        self.details[texnum].add_extra_clut(palette, clut)
        return True

    def load_bitmap(self, data: bytes, offset: int = 0, spooled: bool = False) -> int:
        """Load palettes and texels starting at offset; return the end offset.

        A page already holding texels is skipped over by its stored size.
        """
        if self.bitmap.data is not None:
            return offset + self.bitmap.rsize

        num_palettes = _read_int(data, offset)
        if spooled:
            if not 0 <= num_palettes <= MAX_PAGE_CLUTS:
                raise ValueError(f"bad palette count {num_palettes} in spooled page")
            if offset + SPOOLED_PAGE_SIZE > len(data):
                raise ValueError("spooled texture page is truncated")
            cluts = _read_cluts(data, offset + 4, num_palettes)
            texel_start = offset + 4 + MAX_PAGE_CLUTS * _CLUT.size + SPOOLED_COMP_TABLE_SIZE
            texels = bytes(data[texel_start:texel_start + TEXPAGE_4BIT_SIZE])
            end = offset + SPOOLED_PAGE_SIZE
        else:
            if num_palettes < 0:
                raise ValueError(f"bad palette count {num_palettes} in compressed page")
            cluts = _read_cluts(data, offset + 4, num_palettes)
            texels, end = unpack_texture(data, offset + 4 + num_palettes * _CLUT.size)

        self.bitmap = TexBitmap(data=texels, rsize=end - offset, cluts=cluts)
        log.debug(
            "PAGE %d (%s) datasize=%d",
            self.id, "spooled" if spooled else "compressed", self.bitmap.rsize,
        )
        return end

    def free_bitmap(self) -> None:
        """Drop the texels and palettes of the page."""
        self.bitmap = TexBitmap()