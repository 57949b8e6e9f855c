import struct

import pytest

from levtool.heightmap import (
    DEFAULT_PLANE,
    Curve,
    Heightmap,
    Plane,
    fixed_atan2,
    height_on_plane,
    icos,
    isin,
)


def node_word(angle, dist, offset):
    word = (angle & 0x7FF) | ((dist & 0xFFF) << 11) | ((offset & 0xFF) << 23) | (1 << 31)
    return word - (1 << 32)


def empty_surface():
    return [-1] * 4096


def test_fixed_sine_cosine_at_zero():
    assert isin(0) == 0
    assert icos(0) == 4096
    assert isin(1024) == 4096


@pytest.mark.parametrize("angle", [0, 100, 777, 2048, 3000, 4095])
def test_sine_cosine_invariants(angle):
    assert abs(isin(angle) ** 2 + icos(angle) ** 2 - 4096 ** 2) < 3 * 4096
    assert isin(angle) == isin(angle + 4096)
    assert icos(angle) == icos(-angle)


def test_fixed_atan2_symmetry():
    assert fixed_atan2(0, 5) == 0
    for y, x in [(3, 7), (10, -4), (1, 1)]:
        assert fixed_atan2(-y, x) == -fixed_atan2(y, x)
        assert -2048 <= fixed_atan2(y, x) <= 2048


def test_height_on_missing_plane_is_zero():
    assert height_on_plane((1, 2, 3), None, []) == 0


def test_height_on_flat_plane():
    assert height_on_plane((0, 0, 0), Plane(b=0x4000, d=-300), []) == 300


def test_height_with_tagged_d():
    plane = Plane(d=0x40000000 | 5)
    assert height_on_plane((0, 0, 0), plane, []) == 5


def test_height_on_plane_without_slope_is_zero():
    assert height_on_plane((10, 0, 10), Plane(a=3, c=4, d=-100), []) == 0


def test_height_on_level_plane_with_divisor():
    assert height_on_plane((700, 0, 900), Plane(b=4096, d=-100), []) == 100


def test_height_on_curve_with_zero_gradient():
    plane = Plane(surface_type=0x4000 | 32, b=0, d=0)
    curves = [Curve(mid_x=100, mid_z=-50, gradient=0, height=77)]
    assert height_on_plane((0, 0, 0), plane, curves) == -77


def test_empty_cell_gives_default_plane():
    hm = Heightmap(surface=empty_surface())
    assert hm.cell_plane((0, 0, 0)) == (DEFAULT_PLANE, 0)


def test_direct_plane_index():
    surface = empty_surface()
    surface[0] = 1
    planes = [Plane(surface_type=1), Plane(surface_type=40, d=-5)]
    hm = Heightmap(surface=surface, planes=planes)
    assert hm.cell_plane((10, 0, 10)) == (planes[1], 0)


def test_invalid_plane_is_none():
    surface = empty_surface()
    surface[0] = 0
    hm = Heightmap(surface=surface, planes=[Plane(surface_type=-1, a=-1)])
    assert hm.cell_plane((0, 0, 0)) == (None, 0)


def _bsp_nodes():
    return [node_word(0, 512, 2), 0, 1]


def test_bsp_leaf_sides():
    hm = Heightmap(surface=empty_surface(), nodes=_bsp_nodes())
    assert hm.bsp_leaf(0, 0, 100) == 0
    assert hm.bsp_leaf(0, 0, 700) == 1


def test_bsp_zero_offset_is_rejected():
    hm = Heightmap(surface=empty_surface(), nodes=[node_word(0, -10, 0)])
    with pytest.raises(ValueError):
        hm.bsp_leaf(0, 0, 100)


def test_cell_plane_through_bsp():
    surface = empty_surface()
    surface[0] = 0x4000
    planes = [Plane(surface_type=1), Plane(surface_type=2)]
    hm = Heightmap(surface=surface, nodes=_bsp_nodes(), planes=planes)
    assert hm.cell_plane((0, 0, 100)) == (planes[0], 0)
    assert hm.cell_plane((0, 0, 700)) == (planes[1], 0)


def test_cell_plane_multi_level():
    surface = empty_surface()
    surface[0] = 0x2000
    planes = [Plane(surface_type=1), Plane(surface_type=2)]
    hm = Heightmap(surface=surface, bsp=[-1000, 0, -0x8000, 1], planes=planes)
    assert hm.cell_plane((0, 0, 0)) == (planes[1], 1)
    assert hm.cell_plane((0, 1000, 0)) == (planes[0], 0)


def test_empty_leaf_moves_to_next_level():
    surface = empty_surface()
    surface[0] = 0x2000
    planes = [Plane(surface_type=1), Plane(surface_type=2)]
    hm = Heightmap(
        surface=surface,
        bsp=[-1000, 0x4000, -0x8000, 1],
        nodes=[node_word(0, 512, 2), 0x7FFF, 0],
        planes=planes,
    )
    assert hm.cell_plane((0, 1000, 100)) == (planes[1], 1)


def test_road_at_empty_cell():
    hm = Heightmap(surface=empty_surface())
    assert hm.road_at((512, 0, 512)) is None


def test_road_at_direct_plane():
    surface = empty_surface()
    surface[0] = 0
    road = Plane(surface_type=32 + 5, b=0x4000, d=-50)
    hm = Heightmap(surface=surface, planes=[road])
    position = (512, 0, 512)
    assert hm.road_at(position) == (5, height_on_plane(position, road, []) + 256)


def test_road_at_non_road_plane():
    surface = empty_surface()
    surface[0] = 0
    hm = Heightmap(surface=surface, planes=[Plane(surface_type=3)])
    assert hm.road_at((512, 0, 512)) is None


def test_road_at_through_bsp_retail():
    surface = empty_surface()
    surface[0] = -16384  # 0xC000: single level with BSP
    road = Plane(surface_type=32 + 7, b=0x4000, d=-40)
    hm = Heightmap(surface=surface, nodes=_bsp_nodes(), planes=[Plane(surface_type=3), road])
    result = hm.road_at((512, 0, 512))
    assert result[0] == 7
    assert result[1] == height_on_plane((512, 0, 512), road, []) + 256


def test_road_at_old_format_levels():
    surface = empty_surface()
    surface[0] = -24576  # 0xA000: old format, several levels at bsp[0]
    road = Plane(surface_type=32 + 2, b=0x4000, d=-10)
    hm = Heightmap(surface=surface, bsp=[-1000, 0, -0x8000, 1], planes=[Plane(surface_type=3), road])
    assert hm.road_at((512, 0, 512), old_format=True)[0] == 2


def _heightmap_bytes(kind=2):
    surface = [-1] * 4096
    surface[0] = 0x2000
    surface[5] = 1
    bsp = [-1000, 0, -0x8000, 1]
    nodes = _bsp_nodes()
    planes = [Plane(1, 2, 3, 4, -5), Plane(40, 0, 0x4000, 0, -9)]
    bsp_ofs = 8 + 8192
    nodes_ofs = bsp_ofs + 2 * len(bsp)
    planes_ofs = nodes_ofs + 4 * len(nodes)
    data = struct.pack("<hHHH", kind, planes_ofs, bsp_ofs, nodes_ofs)
    data += struct.pack("<4096h", *surface)
    data += struct.pack(f"<{len(bsp)}h", *bsp)
    data += struct.pack(f"<{len(nodes)}i", *nodes)
    for p in planes:
        data += struct.pack("<hhhhi", p.surface_type, p.a, p.b, p.c, p.d)
    return data, bsp, nodes, planes


def test_from_bytes_round_trip():
    data, bsp, nodes, planes = _heightmap_bytes()
    prefix = b"\x00" * 4
    hm = Heightmap.from_bytes(prefix + data, 4)
    assert hm.surface[5] == 1
    assert hm.bsp[:4] == bsp
    assert hm.nodes[:3] == nodes
    assert hm.planes[:2] == planes
    assert hm.cell_plane((0, 0, 0)) == (planes[1], 1)


def test_from_bytes_rejects_wrong_type():
    data, *_ = _heightmap_bytes(kind=1)
    with pytest.raises(ValueError):
        Heightmap.from_bytes(data)


def test_from_bytes_rejects_truncated():
    with pytest.raises(ValueError):
        Heightmap.from_bytes(b"\x02\x00" + b"\x00" * 100)