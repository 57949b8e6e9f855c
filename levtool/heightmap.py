"""Road heightmap of a region: surface cells, BSP nodes and planes."""

from __future__ import annotations

import math
import struct
from collections.abc import Sequence
from dataclasses import dataclass, field

from .roads import RoadLanes

ONE = 4096
ANGLE_MASK = 4095
CELL_COUNT = 64 * 64
HEADER_TYPE = 2
LEVEL_END = -0x8000
EMPTY_LEAF = 0x7FFF
ROAD_SURFACE_BASE = 32

# type, planes offset, bsp offset, nodes offset
_HEADER = struct.Struct("<hHHH")
# surface type, a, b, c, d
_PLANE = struct.Struct("<hhhhi")

Position = tuple[int, int, int]


def _sext(value: int, bits: int) -> int:
    sign = 1 << (bits - 1)
    return (value & (sign * 2 - 1) ^ sign) - sign


def _div(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def isin(angle: int) -> int:
    """Fixed-point sine; a full turn is 4096 and the result is scaled by 4096."""
    return round(ONE * math.sin((angle & ANGLE_MASK) * 2.0 * math.pi / ONE))


def icos(angle: int) -> int:
    """Fixed-point cosine; a full turn is 4096 and the result is scaled by 4096."""
    return round(ONE * math.cos((angle & ANGLE_MASK) * 2.0 * math.pi / ONE))


def fixed_atan2(y: int, x: int) -> int:
    """Angle of (x, y) in 4096-per-turn units, in the range -2048..2048."""
    return round(math.atan2(y, x) * (ONE // 2) / math.pi)


@dataclass(frozen=True)
class Plane:
    """A heightmap plane; d holds the height, a, b and c the slope."""

    surface_type: int = 0
    a: int = 0
    b: int = 0
    c: int = 0
    d: int = 0


DEFAULT_PLANE = Plane()


@dataclass
class Curve:
    """A curved road: its centre, height, gradient and lanes."""

    mid_x: int = 0
    mid_z: int = 0
    gradient: int = 0
    height: int = 0
    connect_idx: tuple[int, int, int, int] = (-1, -1, -1, -1)
    lanes: RoadLanes = field(default_factory=RoadLanes)


def height_on_plane(position: Position, plane: Plane | None, curves: Sequence[Curve]) -> int:
    """Height of the plane at the position."""
    if plane is None:
        return 0
    vx, _, vz = position
    d = plane.d

    if ((d >> 1) ^ d) & 0x40000000:
        return d ^ 0x40000000

    if (plane.surface_type & 0xE000) == 0x4000 and plane.b == 0:
        curve = curves[(plane.surface_type & 0x1FFF) - ROAD_SURFACE_BASE]
        angle = fixed_atan2(curve.mid_z - vz, curve.mid_x - vx)
        return _div(curve.gradient * ((angle + 2048) & ANGLE_MASK), ONE) - curve.height

    if plane.b != 0:
        if plane.b == 0x4000:
            return -d
        lx = plane.a * (((vx - 512) & 0xFFFF) + 512)
        ly = plane.c * (((vz - 512) & 0xFFFF) + 512)
        return -d - _div(lx + ly, plane.b)

    return 0


@dataclass(frozen=True)
class _Node:
    angle: int
    dist: int
    offset: int
    is_node: bool


def _decode_node(word: int) -> _Node:
    return _Node(
        angle=_sext(word, 11),
        dist=_sext(word >> 11, 12),
        offset=_sext(word >> 23, 8),
        is_node=bool(word & 0x80000000),
    )


def _cell_index(x: int, z: int) -> int:
    return (x >> 10 & 63) + (z >> 10 & 63) * 64


@dataclass
class Heightmap:
    """Surface cells (signed shorts), level lists, BSP node words and planes."""

    surface: list[int]
    bsp: list[int] = field(default_factory=list)
    nodes: list[int] = field(default_factory=list)
    planes: list[Plane] = field(default_factory=list)

    @classmethod
    def from_bytes(cls, data: bytes, offset: int = 0) -> Heightmap:
        """Decode a heightmap whose header starts at offset."""
        if offset + _HEADER.size + CELL_COUNT * 2 > len(data):
            raise ValueError("road map data is truncated")
        kind, planes_ofs, bsp_ofs, nodes_ofs = _HEADER.unpack_from(data, offset)
        if kind != HEADER_TYPE:
            raise ValueError(f"Incorrect road map format (type {kind})")

        surface = list(struct.unpack_from(f"<{CELL_COUNT}h", data, offset + _HEADER.size))

        def words(start: int, size: int, fmt: str) -> list[int]:
            count = max(0, (len(data) - start) // size)
            return list(struct.unpack_from(f"<{count}{fmt}", data, start)) if count else []

        bsp = words(offset + bsp_ofs, 2, "h")
        nodes = words(offset + nodes_ofs, 4, "i")
        start = offset + planes_ofs
        count = max(0, (len(data) - start) // _PLANE.size)
        planes = [Plane(*_PLANE.unpack_from(data, start + i * _PLANE.size)) for i in range(count)]
        return cls(surface=surface, bsp=bsp, nodes=nodes, planes=planes)

    @staticmethod
    def _entry(entries: list[int], pos: int) -> int:
        if not 0 <= pos < len(entries):
            raise ValueError(f"heightmap reference {pos} out of range")
        return entries[pos]

    def _node(self, index: int) -> int:
        return self._entry(self.nodes, index)

    def _advance(self, index: int, word: int) -> int:
        offset = _decode_node(word).offset
        if offset == 0:
            raise ValueError(f"BSP node {index} loops onto itself")
        return index + offset

    def _plane(self, index: int) -> Plane | None:
        return self.planes[index] if 0 <= index < len(self.planes) else None

    def bsp_leaf(self, node_index: int, x: int, z: int) -> int:
        """Walk the BSP from a node and return the leaf value for (x, z)."""
        index = node_index
        word = self._node(index)
        while (node := _decode_node(word)).is_node:
            dot = z * icos(node.angle) - x * isin(node.angle)
            index = index + 1 if dot < node.dist * ONE else self._advance(index, word)
            word = self._node(index)
        return _sext(word, 16)

    @staticmethod
    def _is_multi_level(value: int, old_format: bool) -> bool:
        if old_format:
            return bool(value & 0x8000)
        return (value & 0x6000) == 0x2000

    def cell_plane(self, position: Position, old_format: bool = False) -> tuple[Plane | None, int]:
        """Return the plane under the position and the level it lies on."""
        vx, vy, vz = position
        entries = self.surface
        pos = _cell_index(vx, vz)
        value = self._entry(entries, pos)
        if value == -1:
            return DEFAULT_PLANE, 0

        level = 0
        if self._is_multi_level(value, old_format):
            entries = self.bsp
            pos = value & 0x1FFF
            while -256 - vy > self._entry(entries, pos):
                pos += 2
                level += 1
                if self._entry(entries, pos) == LEVEL_END:
                    break
            pos += 1

        mask = 0x1FFF if old_format else 0x3FFF
        while True:
            value = self._entry(entries, pos)
            if not value & 0x4000:
                break
            leaf = self.bsp_leaf(value & mask, vx & 1023, vz & 1023)
            if leaf != EMPTY_LEAF:
                value = leaf
                break
            level += 1
            pos += 2

        plane = self._plane(value)
        if plane is None or (plane.surface_type == -1 and plane.a == -1):
            return None, level
        return plane, level

    def _road_plane(self, index: int) -> Plane | None:
        plane = self._plane(index)
        return plane if plane is not None and plane.surface_type >= ROAD_SURFACE_BASE else None

    def _find_road_in_bsp(self, index: int) -> Plane | None:
        while True:
            word = self._node(index)
            if word >= 0:
                return self._road_plane(word)
            plane = self._find_road_in_bsp(index + 1)
            if plane is not None:
                return plane
            index = self._advance(index, word)

    def _resolve_old(self, value: int) -> Plane | None:
        if not value & 0x4000:
            return self._road_plane(value)
        search = value & 0x1FFF
        while _decode_node(word := self._node(search)).is_node:
            plane = self._find_road_in_bsp(search + 1)
            if plane is not None:
                return plane
            search = self._advance(search, word)
        return None

    def _resolve_retail(self, value: int) -> Plane | None:
        if value & 0x4000:
            return self._find_road_in_bsp(value & 0x3FFF)
        return self._road_plane(value)

    def _scan_levels(self, entries: list[int], pos: int, more: bool, resolve) -> Plane | None:
        # stops after the entry that follows the end-of-levels marker
        while True:
            if more and self._entry(entries, pos - 1) == LEVEL_END:
                more = False
            plane = resolve(self._entry(entries, pos))
            if plane is not None:
                return plane
            if not more:
                return None
            pos += 2

    def road_at(
        self, position: Position, old_format: bool = False, curves: Sequence[Curve] = ()
    ) -> tuple[int, int] | None:
        """Return (road index, surface height + 256) near the position, or None."""
        vx, _, vz = position
        pos = _cell_index(vx - 512, vz - 512)
        value = self._entry(self.surface, pos)
        if value == -1:
            return None

        entries = self.surface
        plane: Plane | None
        if old_format:
            if value & 0xE000:
                if value & 0x2000:
                    more = bool(value & 0x8000)
                    if more:
                        entries, pos = self.bsp, (value & 0x1FFF) + 1
                    plane = self._scan_levels(entries, pos, more, self._resolve_old)
                else:
                    plane = None
            else:
                plane = self._plane(value)
        elif value & 0x8000:
            more = (value & 0x6000) == 0x2000
            if more:
                entries, pos = self.bsp, (value & 0x1FFF) + 1
            plane = self._scan_levels(entries, pos, more, self._resolve_retail)
        elif not value & 0xE000:
            plane = self._plane(value)
        else:
            plane = None

        if plane is None or plane.surface_type < ROAD_SURFACE_BASE:
            return None
        height = height_on_plane(position, plane, curves) + 256
        return plane.surface_type - ROAD_SURFACE_BASE, height