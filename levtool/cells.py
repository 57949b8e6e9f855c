"""Packed cell objects of a region and iteration over a cell's object list."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field

CELL_NUMBER_MASK = 0x3FFF
LIST_HEADER_FLAG = 0x4000
LIST_END_FLAG = 0x8000
EMPTY_CELL = 0xFFFF


def _short(value: int) -> int:
    return ((value & 0xFFFF) ^ 0x8000) - 0x8000


@dataclass(frozen=True)
class PackedCellObject:
    """An 8-byte cell object: unsigned 16-bit position words and a packed value.

    The low bit of the Y word is the high bit of the model type; the value
    holds the rotation in its low six bits and the rest of the type above.
    """

    pos: tuple[int, int, int]
    value: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "pos", tuple(v & 0xFFFF for v in self.pos))
        object.__setattr__(self, "value", self.value & 0xFFFF)


@dataclass(frozen=True)
class CellObject:
    """A placed world object: position, rotation (64 steps per turn) and model type."""

    pos: tuple[int, int, int]
    yang: int
    type: int


@dataclass
class CellCache:
    """Object numbers already visited, shared between cells of one region."""

    computed: set[int] = field(default_factory=set)


def _is_dummy(pco: PackedCellObject) -> bool:
    return pco.value == 0xFFFF and bool(pco.pos[1] & 1)


def unpack_cell_object(pco: PackedCellObject, near_cell: tuple[int, int]) -> CellObject:
    """Expand a packed object relative to the world position of its cell."""
    near_x, near_z = near_cell
    vx, vy, vz = pco.pos
    x = near_x + _short(vx - near_x)
    z = near_z + _short(vz - near_z)
    y = _short(vy) >> 1
    return CellObject(
        pos=(x, y, z),
        yang=pco.value & 0x3F,
        type=(pco.value >> 6) | ((vy & 1) << 10),
    )


def near_cell_position(
    cell_x: int, cell_z: int, cells_across: int, cells_down: int, cell_size: int
) -> tuple[int, int]:
    """World X/Z of a cell's corner, with the map centred on the origin."""
    return (
        (cell_x - cells_across // 2) * cell_size,
        (cell_z - cells_down // 2) * cell_size,
    )


def spool_offsets(
    retail: bool, offset: int, cell_data_size: Sequence[int], roadm_size: int
) -> tuple[int, int, int, int]:
    """Block offsets of a spooled region's parts.

    Returns (cell pointers, cell data, cell objects, road map). cell_data_size
    holds the cell data, cell pointer and cell object sizes in that order.
    """
    if len(cell_data_size) != 3:
        raise ValueError(f"expected three cell data sizes, got {len(cell_data_size)}")
    data_size, pointers_size, objects_size = cell_data_size
    if retail:
        pointers = offset
        data = pointers + pointers_size
        objects = data + data_size
        road_map = objects + objects_size
    else:
        road_map = offset
        pointers = road_map + roadm_size
        data = pointers + pointers_size
        objects = data + data_size
    return pointers, data, objects, road_map


def iterate_cell(
    cell_data: Sequence[int],
    start: int | None,
    lookup: Callable[[int], PackedCellObject],
    cache: CellCache | None = None,
) -> Iterator[tuple[int, int, PackedCellObject]]:
    """Yield (list type, object number, packed object) for one cell.

    start is the cell pointer into cell_data; None or 0xFFFF means an empty
    cell. Entries flagged 0x4000 open a typed list, the entry flagged 0x8000
    is the last one. Dummy objects are skipped, and so are objects already
    recorded in the cache.
    """
    if start is None or start == EMPTY_CELL:
        return

    def entry(index: int) -> int:
        if not 0 <= index < len(cell_data):
            raise ValueError(f"cell data reference {index} out of range")
        return cell_data[index]

    pos = start
    list_type = -1
    if entry(pos) & LIST_HEADER_FLAG:
        list_type = entry(pos) & CELL_NUMBER_MASK
        pos += 1

    first = True
    while True:
        if not first:
            if entry(pos) & LIST_END_FLAG:
                return
            pos += 1
            if entry(pos) & LIST_HEADER_FLAG:
                list_type = entry(pos) & CELL_NUMBER_MASK
                pos += 1
        first = False

        num = entry(pos) & CELL_NUMBER_MASK
        pco = lookup(num)
        if _is_dummy(pco):
            continue
        if cache is not None:
            if num in cache.computed:
                continue
            cache.computed.add(num)
        yield list_type, num, pco