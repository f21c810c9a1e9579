import pytest

from voxelmesher.face import FaceToDirection
from voxelmesher.mesher_base import FACE_NORMALS_AND_TANGENTS, ChunkMesh
from voxelmesher.run_directional import RunDirectionalMesher
from voxelmesher.single_generators import SingleVoxelGenerator
from voxelmesher.single_spawner import (
    SingleBorderlessChunkSpawner,
    SingleChunkSpawner,
    SingleChunkSpawnerBase,
)
from voxelmesher.voxel import IntVector, VoxelType


def make_generator():
    return SingleVoxelGenerator(
        RunDirectionalMesher(),
        {"stone": VoxelType()},
        "stone",
        voxel_count_per_chunk_dimension=2,
        voxel_size=10.0,
    )


def test_base_is_abstract():
    with pytest.raises(TypeError):
        SingleChunkSpawnerBase(make_generator())


def test_single_chunk_spawner_forces_world_center():
    spawner = SingleChunkSpawner(make_generator(), use_world_center=False)
    assert spawner.use_world_center is True


def test_start_meshing_before_begin_play_raises():
    spawner = SingleChunkSpawner(make_generator())
    with pytest.raises(RuntimeError):
        spawner.start_meshing()


def test_begin_play_aligns_with_location():
    spawner = SingleChunkSpawner(make_generator(), location=(45.0, -5.0, 0.0))
    spawner.begin_play()
    expected = spawner.world_position_to_chunk_grid_position(spawner.location)
    assert spawner.single_chunk_grid_position == expected
    assert spawner.single_chunk.grid_position == expected


def test_begin_play_keeps_position_without_alignment():
    spawner = SingleChunkSpawner(
        make_generator(),
        location=(45.0, 0.0, 0.0),
        single_chunk_grid_position=IntVector(3, 3, 3),
        align_grid_position_with_spawner=False,
    )
    spawner.begin_play()
    assert spawner.single_chunk.grid_position == IntVector(3, 3, 3)


def test_single_chunk_is_meshed_on_all_sides():
    spawner = SingleChunkSpawner(make_generator())
    spawner.begin_play()
    chunk = spawner.single_chunk
    assert chunk.has_mesh is True
    actor = chunk.chunk_mesh_actor
    assert isinstance(actor, ChunkMesh)
    assert actor.parent is spawner
    assert actor.triangles and len(actor.triangles) % 2 == 0
    normals = {vertex.normal for vertex in actor.vertices}
    assert normals == {normal for normal, _ in FACE_NORMALS_AND_TANGENTS}
    assert {t[3] for t in actor.triangles} == {0}
    assert actor.material_slots[0][0] == "stone"


def test_change_outside_chunk_is_ignored():
    generator = make_generator()
    spawner = SingleChunkSpawner(generator)
    spawner.begin_play()
    before = dict(spawner.single_chunk.chunk_voxel_id_table)
    spawner.change_voxel_in_chunk(IntVector(5, 0, 0), IntVector(0, 0, 0), "unknown")
    assert spawner.single_chunk.chunk_voxel_id_table == before


def test_change_inside_chunk_removes_voxel():
    generator = make_generator()
    spawner = SingleChunkSpawner(generator)
    spawner.begin_play()
    chunk = spawner.single_chunk
    before = chunk.chunk_voxel_id_table[0]
    spawner.change_voxel_in_chunk(spawner.single_chunk_grid_position, IntVector(0, 0, 0), "unknown")
    assert chunk.chunk_voxel_id_table[0] == before - 1
    index = generator.calculate_position_index(IntVector(0, 0, 0))
    assert chunk.voxel_model.voxel_grid[index].is_empty()
    assert chunk.has_mesh is True


def test_borderless_spawner_creates_neighbours():
    spawner = SingleBorderlessChunkSpawner(
        make_generator(), single_chunk_grid_position=IntVector(1, 1, 1),
        align_grid_position_with_spawner=False,
    )
    spawner.begin_play()
    for entry in (
        FaceToDirection.FRONT,
        FaceToDirection.BACK,
        FaceToDirection.RIGHT,
        FaceToDirection.LEFT,
        FaceToDirection.BOTTOM,
        FaceToDirection.TOP,
    ):
        side = spawner.side_chunks[entry.face_side]
        assert side.grid_position == IntVector(1, 1, 1) + entry.direction
        assert side.voxel_model is not None and side.chunk_voxel_id_table


def test_borderless_full_chunk_surrounded_by_full_chunks_has_no_mesh():
    spawner = SingleBorderlessChunkSpawner(make_generator())
    spawner.begin_play()
    assert spawner.single_chunk.has_mesh is False
    assert spawner.single_chunk.chunk_mesh_actor is None
    assert all(side is not None for side in spawner.side_chunks)