"""Road surface identifiers, lane flags and lookup of road records."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

SURFACE_KIND_MASK = 0xFFFFE000
SURFACE_INDEX_MASK = 0x1FFF


class SurfaceKind(IntEnum):
    """Kind of road surface, as encoded in the upper bits of a surface id."""

    STRAIGHT = 0x0000
    JUNCTION = 0x2000
    CURVE = 0x4000


def is_driveable_surface(surf_id: int) -> bool:
    """Whether the id denotes any road surface at all."""
    return (surf_id & SURFACE_KIND_MASK) != SURFACE_KIND_MASK


def surface_kind(
    surf_id: int, num_straights: int, num_curves: int, num_junctions: int
) -> SurfaceKind | None:
    """Classify a surface id; None when it names no existing road."""
    if surf_id < 0:
        return None
    index = surf_id & SURFACE_INDEX_MASK
    limits = {
        SurfaceKind.STRAIGHT: num_straights,
        SurfaceKind.JUNCTION: num_junctions,
        SurfaceKind.CURVE: num_curves,
    }
    for kind, limit in limits.items():
        if (surf_id & SURFACE_KIND_MASK) == kind and index < limit:
            return kind
    return None


@dataclass(frozen=True)
class RoadLanes:
    """Packed lane description of a straight or curved road."""

    num_lanes: int = 0
    lane_dirs: int = 0
    ai_lanes: int = 0

    def __post_init__(self) -> None:
        for name in ("num_lanes", "lane_dirs", "ai_lanes"):
            object.__setattr__(self, name, getattr(self, name) & 0xFF)

    def lane_count(self) -> int:
        """Number of lanes in each direction."""
        return self.num_lanes & 0xF

    def width_in_lanes(self) -> int:
        """Total road width in lanes."""
        return self.lane_count() * 2

    def is_ai_lane(self, lane: int) -> bool:
        """Whether computer-driven cars may use the lane."""
        return bool(self.ai_lanes >> (lane // 2) & 1)

    def leftmost_parking(self) -> bool:
        """Whether parking is allowed on the leftmost lane."""
        return (self.num_lanes & 0x40) != 0

    def rightmost_parking(self) -> bool:
        """Whether parking is allowed on the rightmost lane."""
        return (self.num_lanes & 0x80) != 0

    def lane_direction(self, lane: int) -> int:
        """Direction bit of a lane."""
        if self.lane_dirs == 0xFF and self.num_lanes == 1:
            return lane & 1
        return self.lane_dirs >> (lane // 2) & 1

    def speed_limit(self) -> int:
        """Speed limit id of the road."""
        return (self.num_lanes >> 4) & 3

    def has_fast_lanes(self) -> bool:
        """Whether the road has fast lanes."""
        return bool((self.num_lanes >> 6) & 1)

    def parking_allowed_at(self, lane: int) -> bool:
        """Whether a car may park on the given lane."""
        return (self.leftmost_parking() and lane == 0) or (
            self.rightmost_parking() and lane == self.width_in_lanes() - 1
        )


@dataclass
class RoadInfo:
    """Summary of the road record a surface id refers to."""

    surf_id: int
    kind: SurfaceKind
    connect_idx: Sequence[int]
    lanes: RoadLanes | None = None
    flags: int | None = None
    road: Any = None


class RoadNetwork:
    """Straights, curves and junctions of a level, addressed by surface id.

    Straight and curve records expose ``connect_idx`` and ``lanes``;
    junction records expose ``exit_idx`` and ``flags``.
    """

    def __init__(
        self,
        straights: Sequence[Any] = (),
        curves: Sequence[Any] = (),
        junctions: Sequence[Any] = (),
    ) -> None:
        self.straights = list(straights)
        self.curves = list(curves)
        self.junctions = list(junctions)

    def _kind(self, surf_id: int) -> SurfaceKind | None:
        return surface_kind(
            surf_id, len(self.straights), len(self.curves), len(self.junctions)
        )

    def straight(self, surf_id: int) -> Any:
        """The straight for the id, or None."""
        if self._kind(surf_id) is SurfaceKind.STRAIGHT:
            return self.straights[surf_id & SURFACE_INDEX_MASK]
        return None

    def curve(self, surf_id: int) -> Any:
        """The curve for the id, or None."""
        if self._kind(surf_id) is SurfaceKind.CURVE:
            return self.curves[surf_id & SURFACE_INDEX_MASK]
        return None

    def junction(self, surf_id: int) -> Any:
        """The junction for the id, or None."""
        if self._kind(surf_id) is SurfaceKind.JUNCTION:
            return self.junctions[surf_id & SURFACE_INDEX_MASK]
        return None

    def road_info(self, surf_id: int) -> RoadInfo | None:
        """Describe any road surface; None when the id names no road."""
        curve = self.curve(surf_id)
        if curve is not None:
            return RoadInfo(surf_id, SurfaceKind.CURVE, curve.connect_idx, lanes=curve.lanes, road=curve)
        straight = self.straight(surf_id)
        if straight is not None:
            return RoadInfo(
                surf_id, SurfaceKind.STRAIGHT, straight.connect_idx, lanes=straight.lanes, road=straight
            )
        junction = self.junction(surf_id)
        if junction is not None:
            return RoadInfo(
                surf_id, SurfaceKind.JUNCTION, junction.exit_idx, flags=junction.flags, road=junction
            )
        return None