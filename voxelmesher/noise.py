"""Generator filling chunks from per-voxel-type 2D noise height fields."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, List, Mapping, Optional, Tuple

from voxelmesher.chunk import Chunk
from voxelmesher.generator import VoxelGeneratorBase
from voxelmesher.voxel import Voxel, VoxelType

if TYPE_CHECKING:
    from voxelmesher.mesher_base import MesherBase

Noise2D = Callable[[float, float], float]
# (noise type, seed, frequency) -> 2D noise function
NoiseFactory = Callable[[str, int, float], Noise2D]


@dataclass
class NoiseSurfaceGenerator:
    """Noise functions of one voxel type together with its name and parameters."""

    surface_generator: Optional[Noise2D]
    reverse_surface_generator: Optional[Noise2D]
    voxel_name: str
    voxel_type: VoxelType


class NoiseVoxelGridGenerator(VoxelGeneratorBase):
    """Fills chunks with terrain; a voxel type's id is its position in the table.

    Later types overwrite earlier ones where their surfaces overlap.
    """

    def __init__(
        self,
        mesher: MesherBase,
        voxel_types: Mapping[str, VoxelType],
        noise_factory: NoiseFactory,
        **kwargs: Any,
    ) -> None:
        if voxel_types is None:
            raise ValueError("voxel table must be set")
        self.surface_generators: List[NoiseSurfaceGenerator] = []
        for name, voxel_type in voxel_types.items():
            surface = noise_factory(
                voxel_type.surface_noise_type,
                voxel_type.surface_noise_seed,
                voxel_type.surface_noise_frequency,
            )
            reversed_surface = noise_factory(
                voxel_type.reversed_surface_noise_type,
                voxel_type.reversed_surface_noise_seed,
                voxel_type.reversed_surface_noise_frequency,
            )
            self.surface_generators.append(
                NoiseSurfaceGenerator(surface, reversed_surface, name, voxel_type)
            )
        super().__init__(mesher, **kwargs)

    def generate_voxels(self, chunk: Chunk) -> None:
        dimension = self.voxel_count_per_chunk_dimension
        grid_position = chunk.grid_position * dimension

        if self.is_chunk_position_out_of_bounds(grid_position.z, grid_position.z + dimension - 1):
            # No surface can reach into this chunk.
            return

        voxel_grid = [Voxel()] * self.voxel_count_per_chunk

        for x in range(dimension):
            for y in range(dimension):
                for z in range(dimension):
                    index = self.calculate_voxel_index(x, y, z)
                    for voxel_id, generator in enumerate(self.surface_generators):
                        if generator.surface_generator is None:
                            return
                        voxel_type = generator.voxel_type
                        if not voxel_type.generate_noise:
                            continue

                        voxel = Voxel(voxel_id, voxel_type.is_transparent)
                        pos_x = float(x + grid_position.x)
                        pos_y = float(y + grid_position.y)
                        current_elevation = grid_position.z + z

                        elevation = self.compute_surface_gradient(
                            pos_x,
                            pos_y,
                            generator.surface_generator,
                            voxel_type.surface_elevation,
                            voxel_type.surface_distance_from_sea_level,
                        )

                        if voxel_type.generate_reversed_surface:
                            if generator.reverse_surface_generator is None:
                                return
                            depth = self.compute_surface_gradient(
                                pos_x,
                                pos_y,
                                generator.reverse_surface_generator,
                                voxel_type.reversed_surface_depth,
                                voxel_type.reversed_surface_distance_from_sea_level,
                            )
                            add_voxel = -depth < current_elevation < elevation
                        else:
                            add_voxel = current_elevation < elevation

                        if add_voxel:
                            self.change_known_voxel_at_index(
                                voxel_grid, chunk.chunk_voxel_id_table, index, voxel
                            )

        self.mesher.compress_voxel_grid(chunk, voxel_grid)

    def highest_elevation_at_location(self, location: Tuple[float, float, float]) -> float:
        """Highest surface over all voxel types at a location, in world units; never below 0."""
        max_elevation = 0.0
        for generator in self.surface_generators:
            elevation = self.compute_surface_gradient(
                location[0],
                location[1],
                generator.surface_generator,
                generator.voxel_type.surface_elevation,
                generator.voxel_type.surface_distance_from_sea_level,
            )
            max_elevation = max(max_elevation, elevation)
        return max_elevation * self.voxel_size

    def voxel_type_by_id(self, voxel_id: int) -> Tuple[str, VoxelType]:
        if not 0 <= voxel_id < len(self.surface_generators):
            raise IndexError("voxel id out of bounds")
        generator = self.surface_generators[voxel_id]
        return generator.voxel_name, generator.voxel_type

    def voxel_by_name(self, voxel_name: str) -> Voxel:
        for index, generator in enumerate(self.surface_generators):
            if generator.voxel_name == voxel_name:
                return Voxel(index, generator.voxel_type.is_transparent)
        return Voxel()

    @staticmethod
    def compute_surface_gradient(
        pos_x: float,
        pos_y: float,
        noise: Noise2D,
        elevation: float,
        distance_from_surface_level: float,
    ) -> float:
        """Surface height at a position: scaled noise shifted by a sea level distance."""
        return noise(pos_x, pos_y) * elevation + distance_from_surface_level

    def is_chunk_position_out_of_bounds(self, min_z_position: float, max_z_position: float) -> bool:
        """True when no voxel type can generate voxels between the two heights."""
        for generator in self.surface_generators:
            voxel_type = generator.voxel_type
            below_surface = min_z_position < (
                voxel_type.surface_elevation + voxel_type.surface_distance_from_sea_level
            )
            above_reversed = voxel_type.generate_reversed_surface and max_z_position > (
                -voxel_type.surface_distance_from_sea_level
                + voxel_type.reversed_surface_distance_from_sea_level
            )
            if below_surface or above_reversed:
                return False
        return True