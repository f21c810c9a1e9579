"""Generators that fill chunks with a single voxel type taken from a voxel table."""

from __future__ import annotations

from abc import ABC
from typing import TYPE_CHECKING, Any, Mapping, Tuple

from voxelmesher.chunk import Chunk
from voxelmesher.generator import VoxelGeneratorBase
from voxelmesher.voxel import Voxel, VoxelType

if TYPE_CHECKING:
    from voxelmesher.mesher_base import MesherBase


class SingleVoxelGeneratorBase(VoxelGeneratorBase, ABC):
    """Generator bound to one named row of an ordered voxel type table."""

    def __init__(
        self,
        mesher: MesherBase,
        voxel_types: Mapping[str, VoxelType],
        voxel_name: str,
        **kwargs: Any,
    ) -> None:
        if voxel_types is None or not voxel_name:
            raise ValueError("table row with voxel type must be set")
        self.voxel_types = dict(voxel_types)
        self.voxel_name = voxel_name
        super().__init__(mesher, **kwargs)

    def single_voxel(self) -> Voxel:
        """The voxel of the bound row."""
        return self.voxel_by_name(self.voxel_name)

    def voxel_type_by_id(self, voxel_id: int) -> Tuple[str, VoxelType]:
        names = list(self.voxel_types)
        if not 0 <= voxel_id < len(names):
            raise IndexError("voxel id out of bounds")
        name = names[voxel_id]
        return name, self.voxel_types[name]

    def voxel_by_name(self, voxel_name: str) -> Voxel:
        """Voxel whose id is the row position of the name; transparency comes from the bound row."""
        for index, name in enumerate(self.voxel_types):
            if name == voxel_name:
                bound_type = self.voxel_types[self.voxel_name]
                return Voxel(index, bound_type.is_transparent)
        return Voxel()


class SingleVoxelGenerator(SingleVoxelGeneratorBase):
    """Fills the whole chunk with the bound voxel."""

    def generate_voxels(self, chunk: Chunk) -> None:
        voxel = self.single_voxel()
        count = self.voxel_count_per_chunk
        chunk.chunk_voxel_id_table[voxel.voxel_id] = count
        self.mesher.compress_voxel_grid(chunk, [voxel] * count)


class FractionFillVoxelGridGenerator(SingleVoxelGeneratorBase):
    """Fills a corner block of the chunk, each axis cut to 1/fraction of its length."""

    def __init__(
        self,
        mesher: MesherBase,
        voxel_types: Mapping[str, VoxelType],
        voxel_name: str,
        *,
        x_fraction: int = 1,
        y_fraction: int = 1,
        z_fraction: int = 1,
        **kwargs: Any,
    ) -> None:
        if min(x_fraction, y_fraction, z_fraction) < 1:
            raise ValueError("fractions must be at least 1")
        self.x_fraction = x_fraction
        self.y_fraction = y_fraction
        self.z_fraction = z_fraction
        super().__init__(mesher, voxel_types, voxel_name, **kwargs)

    def generate_voxels(self, chunk: Chunk) -> None:
        voxel = self.single_voxel()
        dimension = self.voxel_count_per_chunk_dimension
        voxel_grid = [Voxel()] * self.voxel_count_per_chunk

        for x in range(dimension // self.x_fraction):
            for y in range(dimension // self.y_fraction):
                for z in range(dimension // self.z_fraction):
                    index = self.calculate_voxel_index(x, y, z)
                    self.change_known_voxel_at_index(voxel_grid, chunk.chunk_voxel_id_table, index, voxel)

        self.mesher.compress_voxel_grid(chunk, voxel_grid)