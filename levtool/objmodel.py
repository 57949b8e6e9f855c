"""Wavefront OBJ/MTL loading into a simple polygon model."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

log = logging.getLogger(__name__)

Vector3 = tuple[float, float, float]
Vector2 = tuple[float, float]

_FLOAT_RE = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_INT_RE = re.compile(r"\s*[+-]?\d+")

MAX_FACE_VERTICES = 4


def _atof(text: str | None) -> float:
    if not text:
        return 0.0
    match = _FLOAT_RE.match(text)
    return float(match.group()) if match else 0.0


def _atoi(text: str | None) -> int:
    if not text:
        return 0
    match = _INT_RE.match(text)
    return int(match.group()) if match else 0


@dataclass
class Polygon:
    """A triangle or quad with zero-based vertex, texcoord and normal indices."""

    vindices: list[int]
    tindices: list[int] = field(default_factory=list)
    nindices: list[int] = field(default_factory=list)
    smooth: bool = False
    flags: int = 0
    extra_data: int = 0

    def __post_init__(self) -> None:
        count = len(self.vindices)
        self.tindices = list(self.tindices) + [0] * (count - len(self.tindices))
        self.nindices = list(self.nindices) + [0] * (count - len(self.nindices))

    @property
    def vcount(self) -> int:
        return len(self.vindices)


@dataclass
class Group:
    """Polygons sharing one material."""

    name: str
    texture: str = ""
    polygons: list[Polygon] = field(default_factory=list)


@dataclass
class Model:
    """A polygon model with shared vertex, normal and texcoord lists."""

    name: str = ""
    verts: list[Vector3] = field(default_factory=list)
    normals: list[Vector3] = field(default_factory=list)
    texcoords: list[Vector2] = field(default_factory=list)
    groups: list[Group] = field(default_factory=list)

    def find_group(self, name: str) -> Group | None:
        """Return the first group whose name matches, ignoring case."""
        wanted = name.lower()
        return next((g for g in self.groups if g.name.lower() == wanted), None)


def _rest_of_line(line: str, key: str) -> str:
    return line.strip()[len(key):].strip()


def parse_mtl(text: str) -> list[tuple[str, str]]:
    """Parse MTL text into (material name, texture) pairs in file order."""
    materials: list[tuple[str, str]] = []
    for line in text.splitlines():
        fields = line.split()
        if not fields or fields[0].startswith("#"):
            continue
        key = fields[0].lower()
        if key == "newmtl":
            name = _rest_of_line(line, fields[0])
            materials.append((name, name))
        elif key == "map_kd" and materials:
            materials[-1] = (materials[-1][0], _rest_of_line(line, fields[0]))
    log.debug("Num materials: %d", len(materials))
    return materials


def load_mtl(path: str | Path) -> list[tuple[str, str]]:
    """Read and parse an MTL file."""
    return parse_mtl(Path(path).read_text(encoding="utf-8", errors="replace"))


def mtl_texture(name: str, materials: list[tuple[str, str]]) -> str:
    """Return the texture of the named material, or the name itself."""
    return next((tex for mat, tex in materials if mat == name), name)


def _parse_face(entries: list[str], smooth: bool) -> Polygon:
    entries = entries[:MAX_FACE_VERTICES]
    vindices: list[int] = []
    tindices: list[int] = []
    nindices: list[int] = []
    if entries:
        first = entries[0]
        slashes = first[1:].count("/")
        double = "//" in first
    for entry in entries:
        parts = entry.split("/")

        def part(i: int) -> int:
            return _atoi(parts[i]) if i < len(parts) else 0

        if double and slashes == 2:
            vindices.append(part(0) - 1)
            tindices.append(0)
            nindices.append(part(2) - 1)
        elif not double and slashes == 2:
            vindices.append(part(0) - 1)
            tindices.append(part(1) - 1)
            nindices.append(part(2) - 1)
        elif not double and slashes == 1:
            vindices.append(part(0) - 1)
            tindices.append(part(1) - 1)
            nindices.append(0)
        else:
            vindices.append(_atoi(entry) - 1)
            tindices.append(0)
            nindices.append(0)
    return Polygon(vindices, tindices, nindices, smooth=smooth)


def parse_obj(text: str) -> Model:
    """Parse OBJ text into a Model; raise ValueError if it has no faces."""
    model = Model(name="temp")
    material = "error"
    current: Group | None = None
    smooth = False

    for line in text.splitlines():
        fields = line.split()
        if not fields:
            continue
        key, args = fields[0], fields[1:]
        if key.startswith("#"):
            continue
        if key[0] == "v":
            kind = key[1:2]
            if kind == "t":
                u, v = (_atof(a) for a in (args + [""] * 2)[:2])
                model.texcoords.append((u, 1.0 - v))
            else:
                x, y, z = (_atof(a) for a in (args + [""] * 3)[:3])
                (model.normals if kind == "n" else model.verts).append((x, y, z))
        elif key.lower() == "f":
            found = model.find_group(material)
            if found is not None:
                current = found
            elif current is None:
                current = Group(name=material, texture=material)
                model.groups.append(current)
            current.polygons.append(_parse_face(args, smooth))
        elif key[0] == "g":
            current = None
        elif key[0] == "s":
            smooth = _rest_of_line(line, key).lower() != "off"
        elif key.lower() == "usemtl":
            current = None
            material = _rest_of_line(line, key)

    log.debug(
        "%d verts, %d normals, %d texcoords in OBJ",
        len(model.verts), len(model.normals), len(model.texcoords),
    )
    if not model.normals:
        log.warning("No normals found. Did you forget to export them?")
    if not model.groups:
        raise ValueError("OBJ data contains no faces")
    return model


def load_obj(path: str | Path) -> Model:
    """Read and parse an OBJ file."""
    return parse_obj(Path(path).read_text(encoding="utf-8", errors="replace"))