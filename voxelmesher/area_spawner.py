"""Spawners that fill an area around a centre with chunks, mesh them and despawn distant ones."""

from __future__ import annotations

import math
import threading
from abc import abstractmethod
from collections import deque
from concurrent.futures import Executor, Future
from typing import Any, Deque, Dict, Iterable, List, Optional, Set, Tuple

from voxelmesher.chunk import Chunk, MesherVariables, VoxelChange
from voxelmesher.face import CHUNK_FACE_COUNT, FaceToDirection
from voxelmesher.generator import VoxelGeneratorBase
from voxelmesher.spawner import ChunkSpawnerBase, Vector3
from voxelmesher.voxel import IntVector


def _distance(a: IntVector, b: IntVector) -> float:
    return math.dist(tuple(a), tuple(b))


class AreaChunkSpawnerBase(ChunkSpawnerBase):
    """Keeps a grid of chunks around a centre and meshes them once their neighbours exist.

    With an executor, area generation, voxel filling and neighbour remeshing run on it;
    without one everything runs in the calling thread.
    """

    def __init__(
        self,
        voxel_generator: VoxelGeneratorBase,
        *,
        spawn_zone: int = 2,
        spawn_center_chunk: bool = True,
        executor: Optional[Executor] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(voxel_generator, **kwargs)
        self.spawn_zone = spawn_zone
        self.spawn_center_chunk = spawn_center_chunk
        self.executor = executor
        self.chunk_grid: Dict[IntVector, Chunk] = {}
        self.show_chunk_borders = False
        # Mesh actors released by chunks that lost their mesh, ready for reuse.
        self.unused_actors: Deque[object] = deque()
        self._edit_handle: Optional[Future] = None
        self._grid_lock = threading.Lock()

    def begin_play(self) -> Optional[Future]:
        """Spawn and mesh the centre chunk, then start spawning the area."""
        if self.use_world_center:
            self.center_grid_position = self.world_position_to_chunk_grid_position(self.location)

        if self.spawn_center_chunk:
            self.spawn_chunk(self.center_grid_position)
            mesh_vars = MesherVariables()
            mesh_vars.chunk_params.executed_on_main_thread = True
            self.generate_chunk_mesh(mesh_vars, self.center_grid_position)

        return self.spawn_chunks()

    def change_voxel_in_chunk(
        self, chunk_grid_position: IntVector, voxel_position: IntVector, voxel_name: str
    ) -> None:
        dimension = self.voxel_generator.voxel_count_per_chunk_dimension
        if any(c < 0 or c >= dimension for c in chunk_grid_position):
            return

        if self._edit_handle is not None and not self._edit_handle.done():
            return

        chunk = self.chunk_grid.get(chunk_grid_position)
        if chunk is None:
            return

        mesh_vars = MesherVariables()
        chunk.is_active = False
        self.generate_chunk_mesh(mesh_vars, chunk.grid_position, VoxelChange(voxel_name, voxel_position))

        side_chunks = list(mesh_vars.chunk_params.side_chunks)
        if self.executor is not None:
            self._edit_handle = self.executor.submit(self._remesh_side_chunks, side_chunks)
        else:
            self._remesh_side_chunks(side_chunks)

    def _remesh_side_chunks(self, side_chunks: Iterable[Optional[Chunk]]) -> None:
        side_mesh_vars = MesherVariables()
        for side_chunk in side_chunks:
            if side_chunk is not None:
                side_chunk.is_active = False
                self.generate_chunk_mesh(side_mesh_vars, side_chunk.grid_position)

    @abstractmethod
    def generate_area(self) -> None:
        """Spawn and mesh the chunks of the area."""

    def generate_chunk_mesh(
        self,
        mesh_vars: MesherVariables,
        chunk_grid_position: IntVector,
        voxel_change: Optional[VoxelChange] = None,
    ) -> None:
        """Mesh the chunk at a grid position; it becomes active once all its neighbours exist."""
        chunk = self.chunk_grid.get(chunk_grid_position)
        if chunk is None or chunk.is_active:
            return

        params = mesh_vars.chunk_params
        params.spawner = self
        params.original_chunk = chunk
        params.show_borders = self.show_chunk_borders
        params.world_transform = self.use_world_center

        for face_direction in (
            FaceToDirection.TOP,
            FaceToDirection.BOTTOM,
            FaceToDirection.RIGHT,
            FaceToDirection.LEFT,
            FaceToDirection.FRONT,
            FaceToDirection.BACK,
        ):
            self._add_chunk_from_grid(mesh_vars, face_direction)

        if chunk.chunk_mesh_actor is None:
            try:
                chunk.chunk_mesh_actor = self.unused_actors.popleft()
            except IndexError:
                pass

        self.voxel_generator.generate_mesh(mesh_vars, voxel_change)

        if not chunk.has_mesh:
            if chunk.chunk_mesh_actor is not None:
                self.unused_actors.append(chunk.chunk_mesh_actor)
            chunk.chunk_mesh_actor = None

        if any(side is None for side in params.side_chunks):
            # Missing neighbours: the chunk must be meshed again later.
            return

        chunk.is_active = True

    def _add_chunk_from_grid(self, mesh_vars: MesherVariables, face_direction: FaceToDirection) -> None:
        position = mesh_vars.chunk_params.original_chunk.grid_position + face_direction.direction
        self.add_side_chunk(mesh_vars, face_direction.face_side, self.chunk_grid.get(position))

    def _new_chunk(self) -> Chunk:
        return Chunk()

    def spawn_chunk(self, chunk_grid_position: IntVector, tasks: Optional[List[Future]] = None) -> None:
        """Create and fill a chunk at a free grid position.

        When tasks is given and an executor is set, the chunk is filled on the executor
        and the pending future is appended to tasks.
        """
        if chunk_grid_position in self.chunk_grid:
            return

        chunk = self._new_chunk()
        executor = self.executor if tasks is not None else None
        future = self.add_chunk_to_grid(chunk, chunk_grid_position, executor)
        if future is not None and not future.done():
            tasks.append(future)

        with self._grid_lock:
            self.chunk_grid[chunk_grid_position] = chunk

    def spawn_chunks(self) -> Optional[Future]:
        """Generate the area, on the executor when one is set."""
        if self.executor is not None:
            return self.executor.submit(self.generate_area)
        self.generate_area()
        return None


class DespawnChunkSpawnerBase(AreaChunkSpawnerBase):
    """Area spawner that follows a moving centre and pools chunks that fall out of range."""

    def __init__(
        self,
        voxel_generator: VoxelGeneratorBase,
        *,
        despawn_zone: int = 2,
        chunks_above_spawner: int = 0,
        chunks_below_spawner: int = 0,
        buffer_zone: int = 1,
        **kwargs: Any,
    ) -> None:
        super().__init__(voxel_generator, **kwargs)
        self.despawn_zone = despawn_zone
        self.chunks_above_spawner = chunks_above_spawner
        self.chunks_below_spawner = chunks_below_spawner
        self.buffer_zone = buffer_zone
        self.despawned_chunks: Deque[Chunk] = deque()
        self._despawn_handle: Optional[Future] = None

    def begin_play(self) -> Optional[Future]:
        self.show_chunk_borders = self.buffer_zone == 0
        return super().begin_play()

    def change_grid_center_to_position(self, new_position: Vector3) -> None:
        """Move the centre; when its chunk changes, spawn around it and despawn the rest."""
        new_grid_position = self.world_position_to_chunk_grid_position(new_position)
        if self.center_grid_position != new_grid_position:
            self.center_grid_position = new_grid_position
            self.spawn_chunks()
            self.despawn_chunks()

    def despawn_chunks(self) -> None:
        """Move chunks beyond the spawn and despawn zones into the chunk pool."""
        if self._despawn_handle is not None and not self._despawn_handle.done():
            return
        if self.executor is not None:
            self._despawn_handle = self.executor.submit(self._despawn)
        else:
            self._despawn()

    def _despawn(self) -> None:
        limit = self.spawn_zone + self.despawn_zone
        for key in list(self.chunk_grid):
            if _distance(self.center_grid_position, key) <= limit:
                continue
            chunk = self.chunk_grid.get(key)
            if chunk is None:
                return

            actor = chunk.chunk_mesh_actor
            if actor is not None:
                actor.clear()
                self.unused_actors.append(actor)
                chunk.chunk_mesh_actor = None

            chunk.is_active = False
            chunk.chunk_voxel_id_table.clear()

            with self._grid_lock:
                self.chunk_grid.pop(key, None)

            self.despawned_chunks.append(chunk)

    def _new_chunk(self) -> Chunk:
        try:
            return self.despawned_chunks.popleft()
        except IndexError:
            return Chunk()

    def spawn_chunk(self, chunk_grid_position: IntVector, tasks: Optional[List[Future]] = None) -> None:
        """Spawn a chunk, reusing one from the pool when available."""
        super().spawn_chunk(chunk_grid_position, tasks)


class CenterAreaChunkSpawner(DespawnChunkSpawnerBase):
    """Spawns chunks breadth first around the centre and meshes those within the mesh zone."""

    _LOWER_THREAD_LIMIT = 6

    def __init__(self, voxel_generator: VoxelGeneratorBase, *, mesh_zone: int = 2, **kwargs: Any) -> None:
        super().__init__(voxel_generator, **kwargs)
        self.mesh_zone = mesh_zone

    def generate_area(self) -> None:
        mesh_vars = MesherVariables()
        mesh_vars.chunk_params.show_borders = self.buffer_zone == 0

        initial_center = self.center_grid_position
        visited: Set[IntVector] = set()
        queue: Deque[IntVector] = deque([initial_center])
        self.spawn_chunk(initial_center)
        tasks: List[Future] = []

        directions: Tuple[Tuple[FaceToDirection, int], ...] = (
            (FaceToDirection.FRONT, self.spawn_zone),
            (FaceToDirection.RIGHT, self.spawn_zone),
            (FaceToDirection.LEFT, self.spawn_zone),
            (FaceToDirection.BACK, self.spawn_zone),
            (FaceToDirection.TOP, self.chunks_above_spawner),
            (FaceToDirection.BOTTOM, self.chunks_below_spawner),
        )

        if self.spawn_center_chunk:
            visited.add(self.center_grid_position)

        while queue and initial_center == self.center_grid_position:
            center = queue.popleft()

            if len(tasks) >= self._LOWER_THREAD_LIMIT:
                self.wait_for_all_tasks(tasks)

            for face_direction, limit in directions:
                position = center + face_direction.direction
                if _distance(initial_center, position) < limit + self.buffer_zone:
                    if position not in self.chunk_grid:
                        self.spawn_chunk(position, tasks)
                    if position not in visited:
                        visited.add(position)
                        queue.append(position)

            if _distance(initial_center, center) < self.mesh_zone:
                self.wait_for_all_tasks(tasks)
                self.generate_chunk_mesh(mesh_vars, center)

        self.wait_for_all_tasks(tasks)


class CubicAreaChunkSpawner(DespawnChunkSpawnerBase):
    """Fills a box of chunks around the centre, then meshes them in the same order."""

    def _box_positions(self) -> List[IntVector]:
        low = self.center_grid_position - IntVector(
            self.spawn_zone, self.spawn_zone, self.chunks_below_spawner
        )
        high = self.center_grid_position + IntVector(
            self.spawn_zone, self.spawn_zone, self.chunks_above_spawner
        )
        return [
            IntVector(x, y, z)
            for x in range(low.x, high.x)
            for y in range(low.y, high.y)
            for z in range(low.z, high.z)
        ]

    def generate_area(self) -> None:
        positions = self._box_positions()
        for position in positions:
            self.spawn_chunk(position)

        mesh_vars = MesherVariables()
        for position in positions:
            self.generate_chunk_mesh(mesh_vars, position)


class PreloadedVoxelCenterAreaChunkSpawner(AreaChunkSpawnerBase):
    """Fills every chunk within the spawn zone first, then meshes them all with borders shown."""

    def begin_play(self) -> Optional[Future]:
        self.show_chunk_borders = True
        return super().begin_play()

    def generate_area(self) -> None:
        initial_center = self.center_grid_position
        visited: Set[IntVector] = set()
        queue: Deque[IntVector] = deque()
        self.spawn_chunk(initial_center)
        tasks: List[Future] = []

        queue.append(initial_center)
        directions = (
            FaceToDirection.FRONT,
            FaceToDirection.RIGHT,
            FaceToDirection.LEFT,
            FaceToDirection.BACK,
            FaceToDirection.TOP,
            FaceToDirection.BOTTOM,
        )
        visited.add(self.center_grid_position)

        while queue and initial_center == self.center_grid_position:
            center = queue.popleft()
            for face_direction in directions:
                position = center + face_direction.direction
                if _distance(initial_center, position) < self.spawn_zone:
                    if position not in self.chunk_grid:
                        self.spawn_chunk(position, tasks)
                    if position not in visited:
                        visited.add(position)
                        queue.append(position)

            if len(tasks) >= CHUNK_FACE_COUNT:
                self.wait_for_all_tasks(tasks)

        self.wait_for_all_tasks(tasks)

        mesh_vars = MesherVariables()
        for position in visited:
            self.generate_chunk_mesh(mesh_vars, position)