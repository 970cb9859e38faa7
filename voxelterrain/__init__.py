"""Chunked voxel worlds with noise terrain and greedy quad meshing."""

__version__ = "0.1.0"
__all__ = ["chunk", "mesh", "terrain", "world"]