"""Writing of level models as Wavefront OBJ text and their material library."""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TextIO

log = logging.getLogger(__name__)

Vector3 = tuple[float, float, float]


@dataclass
class Face:
    """A triangle or quad; textured when page is set, smooth when normals are given."""

    vindices: Sequence[int]
    uvs: Sequence[tuple[int, int]] | None = None
    page: int | None = None
    nindices: Sequence[int] | None = None

    def __post_init__(self) -> None:
        count = len(self.vindices)
        if count not in (3, 4):
            raise ValueError(f"a face has 3 or 4 vertices, got {count}")
        if self.page is not None and (self.uvs is None or len(self.uvs) != count):
            raise ValueError("a textured face needs one UV per vertex")
        if self.nindices is not None and len(self.nindices) != count:
            raise ValueError("a smooth face needs one normal per vertex")

    @property
    def textured(self) -> bool:
        return self.page is not None

    @property
    def smooth(self) -> bool:
        return self.nindices is not None


@dataclass
class ObjCounters:
    """Running vertex and texcoord totals when several models share one OBJ."""

    vertices: int = 0
    texcoords: int = 0


def _g(value: float) -> str:
    return f"{value:g}"


def write_obj_model(
    stream: TextIO,
    name: str,
    vertices: Sequence[Vector3],
    normals: Sequence[Vector3],
    faces: Sequence[Face],
    counters: ObjCounters | None = None,
    flip_faces: bool = True,
) -> int:
    """Write one model as an OBJ object; return the number of faces written.

    Vertices and normals are written as given. With counters, indices continue
    from earlier models in the same stream and the totals are advanced.
    """
    counters = counters if counters is not None else ObjCounters()
    write = stream.write

    write(f"g {name}\r\n")
    write(f"o {name}\r\n")
    for x, y, z in vertices:
        write(f"v {_g(x)} {_g(y)} {_g(z)}\r\n")
    for x, y, z in normals:
        write(f"vn {_g(x)} {_g(y)} {_g(z)}\r\n")
    write("usemtl none\r\n")

    num_texcoords = counters.texcoords
    num_verts = counters.vertices
    prev_smooth = False
    prev_page = -1
    written = 0

    for number, face in enumerate(faces):
        if any(not 0 <= v < len(vertices) for v in face.vindices):
            log.error("poly id=%d has invalid indices", number)
            continue

        if face.textured:
            if prev_page != face.page:
                write(f"usemtl page_{face.page}\r\n")
            prev_page = face.page
        else:
            if prev_page != -1:
                write("usemtl none\r\n")
            prev_page = -1

        if face.smooth != prev_smooth:
            write(f"s {'1' if face.smooth else 'off'}\r\n")
            prev_smooth = face.smooth

        order = range(len(face.vindices))
        if flip_faces:
            order = reversed(order)

        parts = []
        for vi in order:
            value = str(face.vindices[vi] + 1 + num_verts)
            if face.textured:
                u, v = face.uvs[vi]
                fs_u = (u + 0.5) / 256.0
                fs_v = (v + 0.5) / 256.0
                write(f"vt {_g(fs_u)} {_g(1.0 - fs_v)}\r\n")
                num_texcoords += 1
                value += f"/{num_texcoords}"
            if face.smooth:
                if not face.textured:
                    value += "/"
                value += f"/{face.nindices[vi] + 1 + num_verts}"
            parts.append(value + " ")

        write("f " + "".join(parts) + "\r\n")
        written += 1

    counters.texcoords = num_texcoords
    counters.vertices = num_verts + len(vertices)
    return written


def model_pages_mtl(page_count: int, texture_dir: str) -> str:
    """Material library text mapping page_N materials to PAGE_N.tga images."""
    folder = os.path.splitext(os.path.basename(texture_dir))[0]
    return "".join(
        f"newmtl page_{i}\r\nmap_Kd ../{folder}/PAGE_{i}.tga\r\n"
        for i in range(page_count)
    )


def model_file_name(name: str | None, index: int) -> str:
    """The model's own name, or MOD_<index> when it has none."""
    return name if name else f"MOD_{index}"