# levtool

A library for working with level data of a PSX-era racing game. It reads
Wavefront OBJ models and merges their duplicate vertices, decodes texture
pages, texture name tables and overlay map headers, walks road heightmaps
and cell object lists, and produces the OBJ, MTL and Unity script text used
when exporting models and regions.

It has no dependencies outside the standard library.

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Modules

- `levtool.objmodel`: `parse_obj` and `load_obj` read OBJ text or files into
  a `Model` made of `Group`s of `Polygon`s (triangles and quads, indices
  zero-based); `parse_mtl`, `load_mtl` and `mtl_texture` read material
  libraries. `Model.find_group` looks a group up by name, ignoring case.
  `parse_obj` raises `ValueError` when the data has no faces.
- `levtool.optimize`: `find_vector`, `deduplicate` and `optimize_model`
  merge vertices and normals lying within 0.0001 of each other and remap
  the polygons to the merged lists.
- `levtool.texinfo`: the records of a texture page: `TexInfo` (detail
  rectangle; a width or height of 0 means the full 256 texels),
  `TexBitmap`, `ExtClut` and `TexDetail`, whose `add_extra_clut` and
  `palettes` manage the extra 16-colour palettes of a detail.
- `levtool.textures`: `unpack_texture` decodes a run-length packed 4-bit
  page, `parse_texture_names` splits a names lump into an offset-to-name
  map, `overlay_segment_count` counts RNC-packed overlay map segments, and
  `TexturePage` holds a page's details and bitmap (`find_detail`,
  `palette_indices`, `add_extra_clut`, `load_bitmap`, `free_bitmap`).
- `levtool.roads`: surface ids (`SurfaceKind`, `surface_kind`,
  `is_driveable_surface`), lane flags (`RoadLanes`) and `RoadNetwork`,
  which returns the straight, curve or junction a surface id names, or a
  `RoadInfo` summary of it.
- `levtool.heightmap`: fixed-point trigonometry (`isin`, `icos`,
  `fixed_atan2`; 4096 units per turn), `height_on_plane`, and `Heightmap`,
  decoded with `Heightmap.from_bytes`, whose `bsp_leaf`, `cell_plane` and
  `road_at` find the plane or road under a world position. Malformed data
  raises `ValueError`.
- `levtool.cells`: `PackedCellObject`, `CellObject`, `unpack_cell_object`,
  `near_cell_position`, `spool_offsets` for the block layout of a spooled
  region, and `iterate_cell`, a generator over a cell's object list that
  skips dummy objects and, with a `CellCache`, objects already seen.
- `levtool.objexport`: `write_obj_model` writes a model's vertices, normals
  and `Face`s as an OBJ object, continuing indices across models through
  `ObjCounters`; `model_pages_mtl` and `model_file_name` give the material
  library text and default model names.
- `levtool.export_regions`: `level_mtl`, `unity_script`,
  `unity_instantiate_line`, `unity_region_header` and
  `cell_world_transform` (a 4×4 matrix placing a cell object in the world).

## Examples

```python
from levtool.objmodel import parse_obj
from levtool.optimize import optimize_model

text = "v 0 0 0\nv 1 0 0\nv 0 1 0\nv 1 0 0\nf 1 2 3\nf 1 4 3\n"
model = parse_obj(text)
optimize_model(model)
print(len(model.verts))                                  # 3
print([p.vindices for p in model.groups[0].polygons])    # [[0, 1, 2], [0, 1, 2]]
```

```python
from levtool.roads import RoadLanes

lanes = RoadLanes(num_lanes=0x42)
print(lanes.lane_count(), lanes.width_in_lanes())        # 2 4
print(lanes.parking_allowed_at(0))                       # True
```

## What it does not do

levtool is a library of building blocks and has no command-line program.
It does not open a whole level file and walk its lumps, does not compile
OBJ models into the game's binary model format or build car damage
tables, and does not write image files: texture pages, palettes and
overlay segments are handled as bytes and numbers, and exported models,
material libraries and scripts are produced as text for the caller to
save.