"""Voxel chunk generation, run-directional greedy meshing and chunk spawners."""

__version__ = "0.1.0"