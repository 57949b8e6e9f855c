import math

import pytest

from levtool.cells import CellObject
from levtool.export_regions import (
    EXPORT_SCALING,
    cell_world_transform,
    level_mtl,
    unity_instantiate_line,
    unity_region_header,
    unity_script,
)


def test_level_mtl_uses_level_stem():
    text = level_mtl(2, "levels/MIAMI.LEV")
    assert text == (
        "newmtl page_0\r\nmap_Kd ../MIAMI_textures/PAGE_0.tga\r\n"
        "newmtl page_1\r\nmap_Kd ../MIAMI_textures/PAGE_1.tga\r\n"
    )


def test_level_mtl_empty():
    assert level_mtl(0, "MIAMI.LEV") == ""


def test_unity_script_wraps_body():
    script = unity_script("MIAMI_reg4", "var x = 1;")
    assert script.startswith("using System.Collections;\n")
    assert "public class MIAMI_reg4 : MonoBehaviour\n" in script
    assert "\tvoid Start()\n\t{\nvar x = 1;\n\t}\n" in script
    assert script.endswith("}")


def test_unity_instantiate_line_zero_angle():
    line = unity_instantiate_line(3, 7, "MOD_1", (1.0, 2.0, 0.5), 0)
    assert line == (
        "var reg3_o7 = Instantiate(MOD_1, new Vector3(1f,2f,0.5f), "
        "Quaternion.Euler(0.0f,-180f,0.0f)) as GameObject;\n"
    )


def test_unity_instantiate_line_quarter_turn():
    line = unity_instantiate_line(0, 0, "A", (0.0, 0.0, 0.0), 16)
    assert "Quaternion.Euler(0.0f,-270f,0.0f)" in line


def test_unity_region_header():
    text = unity_region_header("out/MIAMI_models", ["A", "B"])
    lines = text.splitlines()
    assert lines[0] == 'var modelsPath = "MIAMI_models/";'
    assert lines[3] == 'var A = Resources.Load(modelsPath + "A") as GameObject;'
    assert lines[-1] == "// total 2 models"
    assert len(lines) == 3 + 2 + 1


def test_cell_world_transform_translation():
    co = CellObject(pos=(4096, -8192, 2048), yang=0, type=1)
    m = cell_world_transform(co)
    assert m[0][3] == pytest.approx(4096 * -EXPORT_SCALING)
    assert m[1][3] == pytest.approx(-8192 * -EXPORT_SCALING)
    assert m[2][3] == pytest.approx(2048 * EXPORT_SCALING)
    assert m[3] == (0.0, 0.0, 0.0, 1.0)
    assert [row[:3] for row in m[:3]] == [
        (1.0, 0.0, -0.0),
        (0.0, 1.0, 0.0),
        (0.0, 0.0, 1.0),
    ]


@pytest.mark.parametrize("yang", [0, 5, 16, 33, 63])
def test_cell_world_transform_rotation_is_orthonormal(yang):
    m = cell_world_transform(CellObject(pos=(0, 0, 0), yang=yang, type=0))
    rows = [row[:3] for row in m[:3]]
    for i in range(3):
        for j in range(3):
            dot = sum(a * b for a, b in zip(rows[i], rows[j]))
            assert dot == pytest.approx(1.0 if i == j else 0.0, abs=1e-12)


def test_cell_world_transform_quarter_turn():
    m = cell_world_transform(CellObject(pos=(0, 0, 0), yang=16, type=0))
    assert m[0][0] == pytest.approx(0.0, abs=1e-12)
    assert m[2][0] == pytest.approx(math.sin(math.pi / 2))
    assert m[0][2] == pytest.approx(-1.0)