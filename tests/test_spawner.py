import math
from concurrent.futures import ThreadPoolExecutor

import pytest

from voxelmesher.chunk import Chunk, MesherVariables
from voxelmesher.face import FaceDirection
from voxelmesher.run_directional import RunDirectionalMesher
from voxelmesher.single_generators import SingleVoxelGenerator
from voxelmesher.spawner import ChunkSpawnerBase
from voxelmesher.voxel import IntVector, VoxelType


class RecordingSpawner(ChunkSpawnerBase):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.changes = []
        self.spawned = 0

    def change_voxel_in_chunk(self, chunk_grid_position, voxel_position, voxel_name):
        self.changes.append((chunk_grid_position, voxel_position, voxel_name))

    def spawn_chunks(self):
        self.spawned += 1


def make_generator(dimension=2, voxel_size=10.0):
    return SingleVoxelGenerator(
        RunDirectionalMesher(),
        {"stone": VoxelType()},
        "stone",
        voxel_count_per_chunk_dimension=dimension,
        voxel_size=voxel_size,
    )


def test_missing_generator_raises():
    with pytest.raises(ValueError):
        RecordingSpawner(None)
    generator = SingleVoxelGenerator(RunDirectionalMesher(), {"stone": VoxelType()}, "stone")
    spawner = RecordingSpawner(generator)
    assert spawner.world_position_to_chunk_grid_position((0.0, 0.0, 0.0)) == IntVector()


def test_abstract_base_cannot_be_instantiated():
    with pytest.raises(TypeError):
        ChunkSpawnerBase(make_generator())


@pytest.mark.parametrize(
    "position",
    [(25.0, -5.0, 0.0), (0.0, 0.0, 0.0), (-0.5, 19.99, 40.0), (100.0, -100.0, 3.0)],
)
def test_world_position_to_chunk_grid_position_contains_point(position):
    generator = make_generator()
    spawner = RecordingSpawner(generator)
    grid = spawner.world_position_to_chunk_grid_position(position)
    size = generator.chunk_axis_size
    for coordinate, cell in zip(position, grid):
        assert cell * size <= coordinate < (cell + 1) * size


def test_world_position_to_chunk_grid_position_floors_negative():
    spawner = RecordingSpawner(make_generator())
    assert spawner.world_position_to_chunk_grid_position((25.0, -5.0, 0.0)) == IntVector(1, -1, 0)


def test_change_voxel_at_hit_pick_steps_into_hit_voxel():
    spawner = RecordingSpawner(make_generator())
    spawner.change_voxel_at_hit((25.0, 5.0, 15.0), (0.0, 0.0, 1.0), "stone", True)
    assert spawner.changes == [(IntVector(1, 0, 0), IntVector(0, 0, 0), "stone")]


def test_change_voxel_at_hit_place_keeps_position_for_positive_normal():
    generator = make_generator()
    spawner = RecordingSpawner(generator)
    hit = (25.0, 5.0, 15.0)
    spawner.change_voxel_at_hit(hit, (0.0, 0.0, 1.0), "stone", False)
    chunk_pos, voxel_pos, name = spawner.changes[0]
    assert name == "stone"
    assert chunk_pos == spawner.world_position_to_chunk_grid_position(hit)
    for coordinate, cell, voxel in zip(hit, chunk_pos, voxel_pos):
        start = cell * generator.chunk_axis_size + voxel * generator.voxel_size
        assert start <= coordinate < start + generator.voxel_size


def test_change_voxel_at_hit_uses_local_coordinates():
    generator = make_generator()
    offset = (40.0, 0.0, 0.0)
    local = RecordingSpawner(generator, location=offset)
    world = RecordingSpawner(generator, use_world_center=True, location=offset)
    hit = (45.0, 5.0, 5.0)
    local.change_voxel_at_hit(hit, (0.0, 0.0, 0.0), "stone", True)
    world.change_voxel_at_hit(hit, (0.0, 0.0, 0.0), "stone", True)
    shifted = tuple(h - o for h, o in zip(hit, offset))
    assert local.changes[0][0] == world.world_position_to_chunk_grid_position(shifted)
    assert world.changes[0][0] == world.world_position_to_chunk_grid_position(hit)
    assert local.changes[0][0] != world.changes[0][0]


def test_add_side_chunk_sets_slot():
    mesh_vars = MesherVariables()
    chunk = Chunk()
    ChunkSpawnerBase.add_side_chunk(mesh_vars, FaceDirection.LEFT, chunk)
    assert mesh_vars.chunk_params.side_chunks[FaceDirection.LEFT] is chunk
    assert sum(c is not None for c in mesh_vars.chunk_params.side_chunks) == 1
    ChunkSpawnerBase.add_side_chunk(mesh_vars, FaceDirection.LEFT, None)
    assert mesh_vars.chunk_params.side_chunks[FaceDirection.LEFT] is None


def test_add_chunk_to_grid_synchronously():
    generator = make_generator()
    spawner = RecordingSpawner(generator)
    chunk = Chunk()
    result = spawner.add_chunk_to_grid(chunk, IntVector(2, 3, 4))
    assert result is None
    assert chunk.grid_position == IntVector(2, 3, 4)
    assert chunk.chunk_voxel_id_table == {0: generator.voxel_count_per_chunk}
    assert len(chunk.voxel_model.voxel_grid) == generator.voxel_count_per_chunk


def test_add_chunk_to_grid_with_executor_and_wait():
    generator = make_generator()
    spawner = RecordingSpawner(generator)
    chunks = [Chunk() for _ in range(4)]
    with ThreadPoolExecutor(max_workers=2) as executor:
        tasks = [
            spawner.add_chunk_to_grid(chunk, IntVector(i, 0, 0), executor)
            for i, chunk in enumerate(chunks)
        ]
        ChunkSpawnerBase.wait_for_all_tasks(tasks)
    assert tasks == []
    for i, chunk in enumerate(chunks):
        assert chunk.grid_position == IntVector(i, 0, 0)
        assert chunk.chunk_voxel_id_table == {0: generator.voxel_count_per_chunk}


def test_highest_elevation_delegates_to_generator():
    generator = make_generator(dimension=3, voxel_size=5.0)
    spawner = RecordingSpawner(generator)
    assert math.isclose(
        spawner.highest_elevation_at_location((1.0, 2.0, 3.0)), generator.chunk_axis_size
    )