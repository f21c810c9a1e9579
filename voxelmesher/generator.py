"""Base of voxel generators: grid layout, voxel counting and mesh delegation."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from voxelmesher.chunk import Chunk, MesherVariables, VoxelChange
from voxelmesher.voxel import IntVector, Voxel, VoxelType

if TYPE_CHECKING:
    from voxelmesher.mesher_base import MesherBase


class VoxelGeneratorBase(ABC):
    """Fills chunks with voxels and hands them to a mesher.

    Grid indices place y fastest, then z, then x.
    """

    def __init__(
        self,
        mesher: MesherBase,
        *,
        voxel_count_per_chunk_dimension: int = 32,
        voxel_size: float = 20.0,
    ) -> None:
        if mesher is None:
            raise ValueError("a mesher must be set")
        if voxel_count_per_chunk_dimension < 0:
            raise ValueError("voxel count per chunk dimension must not be negative")
        if voxel_size < 0:
            raise ValueError("voxel size must not be negative")
        self.voxel_count_per_chunk_dimension = int(voxel_count_per_chunk_dimension)
        self.voxel_size = float(voxel_size)
        self.mesher = mesher
        self._lock = threading.Lock()
        mesher.set_voxel_generator(self)

    @property
    def chunk_axis_size(self) -> float:
        """Edge length of a chunk in world units."""
        return self.voxel_count_per_chunk_dimension * self.voxel_size

    @property
    def voxel_count_per_chunk_layer(self) -> int:
        return self.voxel_count_per_chunk_dimension * self.voxel_count_per_chunk_dimension

    @property
    def voxel_count_per_chunk(self) -> int:
        return self.voxel_count_per_chunk_layer * self.voxel_count_per_chunk_dimension

    def change_known_voxel_at_index(
        self, voxel_grid: List[Voxel], voxel_table: Dict[int, int], index: int, voxel: Voxel
    ) -> None:
        """Replace the voxel at index and keep the chunk's id counts in step."""
        with self._lock:
            previous = voxel_grid[index]
            self.remove_voxel_from_chunk_table(voxel_table, previous)
            voxel_grid[index] = voxel
            voxel_table[voxel.voxel_id] = voxel_table.get(voxel.voxel_id, 0) + 1

    def calculate_voxel_index(self, x: int, y: int, z: int) -> int:
        """Linear grid index of grid coordinates; offsets may give negative values."""
        dimension = self.voxel_count_per_chunk_dimension
        return y + z * dimension + x * self.voxel_count_per_chunk_layer

    def calculate_position_index(self, position: IntVector) -> int:
        """Linear grid index of a grid position."""
        return self.calculate_voxel_index(position.x, position.y, position.z)

    def generate_mesh(self, mesh_vars: MesherVariables, voxel_change: Optional[VoxelChange] = None) -> None:
        """Mesh a chunk with the attached mesher."""
        self.mesher.generate_mesh(mesh_vars, voxel_change)

    def highest_elevation_at_location(self, location: Tuple[float, float, float]) -> float:
        """Highest terrain point at a world location."""
        return self.chunk_axis_size

    @abstractmethod
    def voxel_type_by_id(self, voxel_id: int) -> Tuple[str, VoxelType]:
        """Name and type of the voxel with the given id."""

    @abstractmethod
    def voxel_by_name(self, voxel_name: str) -> Voxel:
        """Voxel of the given name, or an empty voxel when the name is unknown."""

    @abstractmethod
    def generate_voxels(self, chunk: Chunk) -> None:
        """Fill the chunk's voxel model."""

    @staticmethod
    def remove_voxel_from_chunk_table(voxel_table: Dict[int, int], voxel: Voxel) -> None:
        """Decrease the count of a non-empty voxel's id, dropping it at zero."""
        if voxel.is_empty() or voxel.voxel_id not in voxel_table:
            return
        voxel_table[voxel.voxel_id] -= 1
        if voxel_table[voxel.voxel_id] < 1:
            del voxel_table[voxel.voxel_id]