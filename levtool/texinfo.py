"""Texture page data records: detail rectangles, bitmaps and palettes."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

CLUT_COLORS = 16
MAX_EXTRA_CLUTS = 32
TEXPAGE_SIZE_X = 128
TEXPAGE_SIZE_Y = 256
TEXPAGE_4BIT_SIZE = TEXPAGE_SIZE_X * TEXPAGE_SIZE_Y

Clut = tuple[int, ...]


def _check_clut(clut: Sequence[int]) -> Clut:
    if len(clut) != CLUT_COLORS:
        raise ValueError(f"a palette holds {CLUT_COLORS} colours, got {len(clut)}")
    return tuple(clut)


@dataclass
class TexInfo:
    """Placement of a texture detail on its page."""

    id: int = 0
    nameoffset: int = 0
    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    @property
    def full_width(self) -> int:
        """Width in texels; 0 stands for the full page."""
        return self.width or TEXPAGE_SIZE_Y

    @property
    def full_height(self) -> int:
        """Height in texels; 0 stands for the full page."""
        return self.height or TEXPAGE_SIZE_Y


@dataclass
class TexBitmap:
    """Four-bit texel data of a page with its palettes."""

    data: bytes | None = None
    rsize: int = 0
    cluts: list[Clut] = field(default_factory=list)

    @property
    def num_palettes(self) -> int:
        return len(self.cluts)


@dataclass
class ExtClut:
    """An extra palette shared by several textures of one page."""

    clut: Clut
    palette: int
    tpage: int
    texnums: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.clut = _check_clut(self.clut)


@dataclass
class TexDetail:
    """A texture detail with the extra palettes that apply to it."""

    info: TexInfo
    page_num: int = 0
    detail_num: int = 0
    extra_cluts: list[Clut | None] = field(
        default_factory=lambda: [None] * MAX_EXTRA_CLUTS
    )

    @property
    def num_extra_cluts(self) -> int:
        """One past the highest extra palette slot in use."""
        used = [i for i, clut in enumerate(self.extra_cluts) if clut is not None]
        return used[-1] + 1 if used else 0

    def add_extra_clut(self, palette: int, clut: Sequence[int]) -> None:
        """Store an extra palette in the given slot."""
        if not 0 <= palette < MAX_EXTRA_CLUTS:
            raise ValueError(f"palette slot {palette} out of range 0..{MAX_EXTRA_CLUTS - 1}")
        self.extra_cluts[palette] = _check_clut(clut)

    def palettes(self, default_clut: Sequence[int]) -> list[Clut]:
        """The default palette followed by the extras; empty slots use the default."""
        default = _check_clut(default_clut)
        extras = self.extra_cluts[: self.num_extra_cluts]
        return [default] + [default if clut is None else clut for clut in extras]