"""Region export helpers: material library, Unity scripts and cell transforms."""

from __future__ import annotations

import math
import os
from collections.abc import Iterable

from .cells import CellObject

# world units per exported unit
EXPORT_SCALING = 1.0 / 4096.0
YANG_STEPS = 64

Matrix4 = tuple[
    tuple[float, float, float, float],
    tuple[float, float, float, float],
    tuple[float, float, float, float],
    tuple[float, float, float, float],
]

UNITY_SCRIPT_TEMPLATE = (
    "using System.Collections;\n"
    "using System.Collections.Generic;\n"
    "using UnityEngine;\n"
    "public class {name} : MonoBehaviour\n"
    "{{\n"
    "\tvoid Start()\n"
    "\t{{\n"
    "{body}\n"
    "\t}}\n"
    "\tvoid Update()\n"
    "\t{{\n"
    "\t}}\n"
    "}}"
)


def _g(value: float) -> str:
    return f"{value:g}"


def _level_stem(level_name: str) -> str:
    return os.path.splitext(os.path.basename(level_name))[0]


def level_mtl(page_count: int, level_name: str) -> str:
    """Material library text for a level's region models."""
    stem = _level_stem(level_name)
    return "".join(
        f"newmtl page_{i}\r\nmap_Kd ../{stem}_textures/PAGE_{i}.tga\r\n"
        for i in range(page_count)
    )


def unity_script(class_name: str, body: str) -> str:
    """Wrap region statements into a Unity MonoBehaviour script."""
    return UNITY_SCRIPT_TEMPLATE.format(name=class_name, body=body)


def _yang_radians(yang: int) -> float:
    return yang / YANG_STEPS * math.pi * 2.0


def unity_instantiate_line(
    region: int,
    index: int,
    model_name: str,
    position: tuple[float, float, float],
    yang: int,
) -> str:
    """Unity statement placing one model; position is in exported units."""
    x, y, z = position
    degrees = math.degrees(_yang_radians(yang)) + 180.0
    return (
        f"var reg{region}_o{index} = Instantiate({model_name}, "
        f"new Vector3({_g(x)}f,{_g(y)}f,{_g(z)}f), "
        f"Quaternion.Euler(0.0f,{_g(-degrees)}f,0.0f)) as GameObject;\n"
    )


def unity_region_header(models_path: str, model_names: Iterable[str]) -> str:
    """Unity statements loading every model resource a region may use."""
    lines = [
        f'var modelsPath = "{os.path.basename(models_path)}/";\n',
        "// Load resources\n",
        "// You must have them placed to Assets/Resources/ folder\n",
    ]
    count = 0
    for name in model_names:
        lines.append(f'var {name} = Resources.Load(modelsPath + "{name}") as GameObject;\n')
        count += 1
    lines.append(f"// total {count} models\n")
    return "".join(lines)


def _world_position(cell_object: CellObject) -> tuple[float, float, float]:
    vx, vy, vz = cell_object.pos
    return vx * -EXPORT_SCALING, vy * -EXPORT_SCALING, vz * EXPORT_SCALING


def cell_world_transform(cell_object: CellObject) -> Matrix4:
    """Row-major matrix (for column vectors) placing a cell object in the world.

    It rotates about Y by the object's angle, then translates to its
    exported position.
    """
    tx, ty, tz = _world_position(cell_object)
    angle = _yang_radians(cell_object.yang)
    s, c = math.sin(angle), math.cos(angle)
    return (
        (c, 0.0, -s, tx),
        (0.0, 1.0, 0.0, ty),
        (s, 0.0, c, tz),
        (0.0, 0.0, 0.0, 1.0),
    )