[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "voxelterrain"
version = "0.1.0"
description = "Chunked voxel worlds with procedural noise terrain and greedy quad meshing"
requires-python = ">=3.10"
keywords = ["voxel", "terrain", "perlin", "noise", "greedy-meshing", "chunks"]
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
    "Topic :: Games/Entertainment",
    "Topic :: Multimedia :: Graphics :: 3D Modeling",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["voxelterrain"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
