"""Base of chunk spawners: placing chunks on the grid and turning hits into voxel edits."""

from __future__ import annotations

import concurrent.futures
import math
from abc import ABC, abstractmethod
from concurrent.futures import Executor, Future
from typing import List, Optional, Sequence, Tuple

from voxelmesher.chunk import Chunk, MesherVariables
from voxelmesher.face import FaceDirection
from voxelmesher.generator import VoxelGeneratorBase
from voxelmesher.voxel import IntVector

Vector3 = Tuple[float, float, float]


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class ChunkSpawnerBase(ABC):
    """Places chunks in the world, fills them through a generator and edits their voxels."""

    def __init__(
        self,
        voxel_generator: VoxelGeneratorBase,
        *,
        use_world_center: bool = False,
        location: Sequence[float] = (0.0, 0.0, 0.0),
    ) -> None:
        if voxel_generator is None:
            raise ValueError("voxel generator must be valid")
        self.voxel_generator = voxel_generator
        self.use_world_center = use_world_center
        self.location: Vector3 = (float(location[0]), float(location[1]), float(location[2]))
        self.center_grid_position = IntVector()

    def highest_elevation_at_location(self, location: Vector3) -> float:
        """Highest terrain point at a world location."""
        return self.voxel_generator.highest_elevation_at_location(location)

    def change_voxel_at_hit(
        self, hit_position: Vector3, hit_normal: Vector3, voxel_name: str, pick: bool
    ) -> None:
        """Change the voxel at a surface hit; pick targets the hit voxel, otherwise the one in front."""
        if pick:
            adjusted = tuple(_clamp(n, 0.0, 1.0) for n in hit_normal)
        else:
            adjusted = tuple(-_clamp(n, -1.0, 0.0) for n in hit_normal)

        voxel_size = self.voxel_generator.voxel_size
        position = [p - a * voxel_size for p, a in zip(hit_position, adjusted)]

        if not self.use_world_center:
            position = [p - l for p, l in zip(position, self.location)]

        chunk_grid_position = self.world_position_to_chunk_grid_position(tuple(position))
        chunk_size = self.voxel_generator.chunk_axis_size
        voxel_position = IntVector(
            *(
                int((p - c * chunk_size) / voxel_size)
                for p, c in zip(position, chunk_grid_position)
            )
        )

        self.change_voxel_in_chunk(chunk_grid_position, voxel_position, voxel_name)

    @abstractmethod
    def change_voxel_in_chunk(
        self, chunk_grid_position: IntVector, voxel_position: IntVector, voxel_name: str
    ) -> None:
        """Place the named voxel at a position inside the chunk at a grid position."""

    @abstractmethod
    def spawn_chunks(self) -> None:
        """Spawn and mesh the spawner's chunks."""

    @staticmethod
    def add_side_chunk(
        mesh_vars: MesherVariables, direction: FaceDirection, chunk: Optional[Chunk]
    ) -> None:
        """Register a neighbouring chunk on one side of the chunk being meshed."""
        mesh_vars.chunk_params.side_chunks[FaceDirection(direction)] = chunk

    def add_chunk_to_grid(
        self, chunk: Chunk, grid_position: IntVector, executor: Optional[Executor] = None
    ) -> Optional[Future]:
        """Place a chunk on the grid and fill it, on the executor when one is given."""
        chunk.grid_position = grid_position
        if executor is not None:
            return executor.submit(self.voxel_generator.generate_voxels, chunk)
        self.voxel_generator.generate_voxels(chunk)
        return None

    def world_position_to_chunk_grid_position(self, world_position: Vector3) -> IntVector:
        """Grid position of the chunk containing a world position."""
        chunk_size = self.voxel_generator.chunk_axis_size
        return IntVector(*(math.floor(c / chunk_size) for c in world_position))

    @staticmethod
    def wait_for_all_tasks(tasks: List[Future]) -> None:
        """Block until every task has finished, then empty the list."""
        pending = [task for task in tasks if task is not None and not task.done()]
        if pending:
            concurrent.futures.wait(pending)
        tasks.clear()