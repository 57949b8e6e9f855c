[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "levtool"
version = "0.1.0"
description = "Read OBJ models, texture pages, road heightmaps and cell objects of a PSX racing game's levels, and lay them out for export"
requires-python = ">=3.10"
dependencies = []
keywords = ["level", "obj", "wavefront", "texture", "heightmap", "psx", "cell-objects"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Graphics :: Graphics Conversion",
    "Topic :: Games/Entertainment",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["levtool"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
