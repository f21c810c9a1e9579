"""Spawners that show a single chunk, with or without generated neighbours."""

from __future__ import annotations

from abc import abstractmethod
from typing import Any, List, Optional

from voxelmesher.chunk import Chunk, MesherVariables, VoxelChange
from voxelmesher.face import CHUNK_FACE_COUNT, FaceDirection, FaceToDirection
from voxelmesher.generator import VoxelGeneratorBase
from voxelmesher.spawner import ChunkSpawnerBase
from voxelmesher.voxel import IntVector


class SingleChunkSpawnerBase(ChunkSpawnerBase):
    """Spawner owning exactly one chunk."""

    def __init__(
        self,
        voxel_generator: VoxelGeneratorBase,
        *,
        single_chunk_grid_position: IntVector = IntVector(),
        align_grid_position_with_spawner: bool = True,
        **kwargs: Any,
    ) -> None:
        super().__init__(voxel_generator, **kwargs)
        self.single_chunk_grid_position = single_chunk_grid_position
        self.align_grid_position_with_spawner = align_grid_position_with_spawner
        self.single_chunk: Optional[Chunk] = None

    def begin_play(self) -> None:
        """Create, fill and mesh the single chunk."""
        if self.align_grid_position_with_spawner:
            self.single_chunk_grid_position = self.world_position_to_chunk_grid_position(self.location)

        self.single_chunk = Chunk()
        self.add_chunk_to_grid(self.single_chunk, self.single_chunk_grid_position)
        self.start_meshing()

    def spawn_chunks(self) -> None:
        self.begin_play()

    def change_voxel_in_chunk(
        self, chunk_grid_position: IntVector, voxel_position: IntVector, voxel_name: str
    ) -> None:
        if chunk_grid_position != self.single_chunk_grid_position:
            # Edits outside the single chunk are ignored.
            return
        self.start_meshing(VoxelChange(voxel_name, voxel_position))

    def _require_chunk(self) -> Chunk:
        if self.single_chunk is None:
            raise RuntimeError("single chunk has not been spawned")
        return self.single_chunk

    @abstractmethod
    def start_meshing(self, voxel_change: Optional[VoxelChange] = None) -> None:
        """Mesh the single chunk, applying voxel_change first if given."""


class SingleChunkSpawner(SingleChunkSpawnerBase):
    """Single chunk without neighbours; its borders are always shown."""

    def __init__(self, voxel_generator: VoxelGeneratorBase, **kwargs: Any) -> None:
        kwargs["use_world_center"] = True
        super().__init__(voxel_generator, **kwargs)

    def start_meshing(self, voxel_change: Optional[VoxelChange] = None) -> None:
        chunk = self._require_chunk()
        mesh_vars = MesherVariables()
        mesh_vars.chunk_params.spawner = self
        mesh_vars.chunk_params.original_chunk = chunk
        for direction in (
            FaceDirection.TOP,
            FaceDirection.BOTTOM,
            FaceDirection.FRONT,
            FaceDirection.BACK,
            FaceDirection.RIGHT,
            FaceDirection.LEFT,
        ):
            self.add_side_chunk(mesh_vars, direction, None)
        mesh_vars.chunk_params.show_borders = True
        mesh_vars.chunk_params.world_transform = self.use_world_center
        self.voxel_generator.generate_mesh(mesh_vars, voxel_change)


class SingleBorderlessChunkSpawner(SingleChunkSpawnerBase):
    """Single chunk whose borders are hidden by generated, unmeshed neighbours."""

    def __init__(self, voxel_generator: VoxelGeneratorBase, **kwargs: Any) -> None:
        super().__init__(voxel_generator, **kwargs)
        self.side_chunks: List[Optional[Chunk]] = [None] * CHUNK_FACE_COUNT

    def start_meshing(self, voxel_change: Optional[VoxelChange] = None) -> None:
        chunk = self._require_chunk()
        mesh_vars = MesherVariables()
        mesh_vars.chunk_params.spawner = self
        mesh_vars.chunk_params.original_chunk = chunk
        mesh_vars.chunk_params.world_transform = self.use_world_center

        for face_direction in (
            FaceToDirection.TOP,
            FaceToDirection.BOTTOM,
            FaceToDirection.BACK,
            FaceToDirection.FRONT,
            FaceToDirection.RIGHT,
            FaceToDirection.LEFT,
        ):
            self._spawn_side_chunk(mesh_vars, face_direction)

        self.voxel_generator.generate_mesh(mesh_vars, voxel_change)

    def _spawn_side_chunk(self, mesh_vars: MesherVariables, face_direction: FaceToDirection) -> None:
        side_chunk = Chunk()
        self.side_chunks[face_direction.face_side] = side_chunk
        grid_position = self.single_chunk_grid_position + face_direction.direction
        self.add_chunk_to_grid(side_chunk, grid_position)
        self.add_side_chunk(mesh_vars, face_direction.face_side, side_chunk)