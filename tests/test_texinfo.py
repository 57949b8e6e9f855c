import pytest

from levtool.texinfo import ExtClut, TexBitmap, TexDetail, TexInfo

RED = tuple(range(16))
BLUE = tuple(range(100, 116))
GREY = tuple([0x4210] * 16)


def test_texinfo_zero_size_means_full_page():
    info = TexInfo(x=4, y=8, width=0, height=0)
    assert (info.full_width, info.full_height) == (256, 256)
    sized = TexInfo(width=32, height=16)
    assert (sized.full_width, sized.full_height) == (32, 16)


def test_bitmap_num_palettes():
    bitmap = TexBitmap(data=bytes(4), cluts=[RED, BLUE])
    assert bitmap.num_palettes == 2
    assert TexBitmap().num_palettes == 0


def test_ext_clut_validates_length():
    clut = ExtClut(clut=list(RED), palette=1, tpage=2)
    assert clut.clut == RED
    with pytest.raises(ValueError):
        ExtClut(clut=(1, 2, 3), palette=0, tpage=0)


def test_add_extra_clut_tracks_count():
    detail = TexDetail(TexInfo())
    assert detail.num_extra_cluts == 0
    detail.add_extra_clut(2, BLUE)
    assert detail.num_extra_cluts == 3
    detail.add_extra_clut(0, RED)
    assert detail.num_extra_cluts == 3
    assert detail.extra_cluts[2] == BLUE


def test_add_extra_clut_rejects_bad_slot():
    detail = TexDetail(TexInfo())
    with pytest.raises(ValueError):
        detail.add_extra_clut(32, RED)
    with pytest.raises(ValueError):
        detail.add_extra_clut(-1, RED)
    with pytest.raises(ValueError):
        detail.add_extra_clut(0, (1, 2))


def test_palettes_fill_gaps_with_default():
    detail = TexDetail(TexInfo())
    detail.add_extra_clut(1, BLUE)
    assert detail.palettes(GREY) == [GREY, GREY, BLUE]


def test_palettes_default_only():
    detail = TexDetail(TexInfo(), page_num=3, detail_num=1)
    assert detail.palettes(RED) == [RED]
    with pytest.raises(ValueError):
        detail.palettes((1,))