"""Merging of near-identical vertices and normals."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from .objmodel import Model, Vector3

log = logging.getLogger(__name__)

VERTEX_LINK_TOLERANCE = 0.0001


def _similar(a: float, b: float, tolerance: float) -> bool:
    return abs(a - b) <= tolerance


def find_vector(
    vector: Vector3, vectors: Sequence[Vector3], tolerance: float = VERTEX_LINK_TOLERANCE
) -> int | None:
    """Return the index of the first vector within tolerance, or None."""
    for index, other in enumerate(vectors):
        if all(_similar(a, b, tolerance) for a, b in zip(other, vector)):
            return index
    return None


def deduplicate(
    vectors: Sequence[Vector3], tolerance: float = VERTEX_LINK_TOLERANCE
) -> tuple[list[Vector3], list[int]]:
    """Merge close vectors; return the unique list and an old-to-new index map."""
    unique: list[Vector3] = []
    remap: list[int] = []
    for vector in vectors:
        index = find_vector(vector, unique, tolerance)
        if index is None:
            index = len(unique)
            unique.append(vector)
        remap.append(index)
    return unique, remap


def _remap(index: int, table: list[int]) -> int:
    return table[index] if 0 <= index < len(table) else index


def optimize_model(model: Model) -> None:
    """Merge duplicate vertices and normals in place and remap polygon indices."""
    before = len(model.verts)
    model.verts, vertex_remap = deduplicate(model.verts)
    log.info("Vertex count before: %d after: %d", before, len(model.verts))

    before = len(model.normals)
    model.normals, normal_remap = deduplicate(model.normals)
    log.info("Normal count before: %d after: %d", before, len(model.normals))

    for group in model.groups:
        for poly in group.polygons:
            poly.vindices = [_remap(i, vertex_remap) for i in poly.vindices]
            poly.nindices = [_remap(i, normal_remap) for i in poly.nindices]