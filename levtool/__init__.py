"""Read OBJ models, texture pages, road heightmaps and cell objects of a PSX racing game's levels, and lay them out for export."""

__version__ = "0.1.0"