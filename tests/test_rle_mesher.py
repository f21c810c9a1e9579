from collections import Counter

import pytest

from voxelmesher.chunk import Chunk, ChunkParams, MesherVariables, RLEVoxelGrid, VoxelChange, VoxelGrid
from voxelmesher.face import FaceDirection
from voxelmesher.mesher_base import ChunkMesh
from voxelmesher.rle_mesher import RLERunDirectionalMesher
from voxelmesher.single_generators import FractionFillVoxelGridGenerator
from voxelmesher.voxel import IntVector, Voxel, VoxelType

TYPES = {"stone": VoxelType(), "glass": VoxelType(is_transparent=True)}


def _setup(dim=4, y_fraction=2):
    mesher = RLERunDirectionalMesher()
    generator = FractionFillVoxelGridGenerator(
        mesher,
        TYPES,
        "stone",
        y_fraction=y_fraction,
        voxel_count_per_chunk_dimension=dim,
        voxel_size=1.0,
    )
    chunk = Chunk(chunk_mesh_actor=ChunkMesh())
    generator.generate_voxels(chunk)
    return generator, chunk


def _mesh_vars(chunk):
    return MesherVariables(chunk_params=ChunkParams(original_chunk=chunk, show_borders=True))


def _expand(runs):
    return [run.voxel for run in runs for _ in range(run.run_length)]


def test_compress_builds_runs():
    mesher = RLERunDirectionalMesher()
    chunk = Chunk()
    grid = [Voxel(1), Voxel(1), Voxel(2), Voxel(1)]
    mesher.compress_voxel_grid(chunk, grid)
    runs = chunk.voxel_model.rle_voxel_grid
    assert [run.run_length for run in runs] == [2, 1, 1]
    assert _expand(runs) == grid


def test_compress_round_trip_and_adjacent_runs_differ():
    mesher = RLERunDirectionalMesher()
    chunk = Chunk()
    grid = [Voxel(), Voxel(), Voxel(3), Voxel(3), Voxel(3), Voxel(), Voxel(4)]
    mesher.compress_voxel_grid(chunk, grid)
    runs = chunk.voxel_model.rle_voxel_grid
    assert isinstance(chunk.voxel_model, RLEVoxelGrid)
    assert _expand(runs) == grid
    assert all(a.voxel != b.voxel for a, b in zip(runs, runs[1:]))


def test_compress_empty_grid_raises():
    with pytest.raises(ValueError):
        RLERunDirectionalMesher().compress_voxel_grid(Chunk(), [])


def test_generator_produces_full_length_model():
    generator, chunk = _setup()
    runs = chunk.voxel_model.rle_voxel_grid
    assert len(_expand(runs)) == generator.voxel_count_per_chunk
    assert sum(not v.is_empty() for v in _expand(runs)) == chunk.chunk_voxel_id_table[0]


def test_mesh_one_face_per_column_per_side():
    dim = 4
    generator, chunk = _setup(dim=dim, y_fraction=2)
    mesh_vars = _mesh_vars(chunk)
    generator.generate_mesh(mesh_vars)

    local_id = mesh_vars.voxel_id_to_local_voxel_map[0]
    total = 0
    for side in FaceDirection:
        faces = mesh_vars.faces[side][local_id]
        assert len(faces) == dim * dim
        total += len(faces)
    for face in mesh_vars.faces[FaceDirection.FRONT][local_id]:
        assert face.end_vertex_down.y - face.start_vertex_down.y == dim // 2

    actor = chunk.chunk_mesh_actor
    assert chunk.has_mesh is True
    assert len(actor.triangles) == 2 * total
    assert len(actor.vertices) == 4 * total


def test_run_spanning_columns_is_split_per_column():
    dim = 3
    generator, chunk = _setup(dim=dim, y_fraction=1)
    assert len(chunk.voxel_model.rle_voxel_grid) == 1
    mesh_vars = _mesh_vars(chunk)
    generator.generate_mesh(mesh_vars)
    faces = mesh_vars.faces[FaceDirection.TOP][0]
    assert len(faces) == dim * dim
    assert all(f.end_vertex_down.y - f.start_vertex_down.y == dim for f in faces)


def test_empty_chunk_is_not_meshed():
    generator, _ = _setup()
    chunk = Chunk(has_mesh=True)
    chunk.voxel_model = RLEVoxelGrid([])
    generator.generate_mesh(_mesh_vars(chunk))
    assert chunk.has_mesh is False
    assert chunk.voxel_model.rle_voxel_grid == []


def test_other_model_is_ignored():
    generator, chunk = _setup()
    model = VoxelGrid([Voxel(0)] * generator.voxel_count_per_chunk)
    chunk.voxel_model = model
    generator.generate_mesh(_mesh_vars(chunk))
    assert chunk.voxel_model is model
    assert chunk.has_mesh is False


@pytest.mark.parametrize(
    "name, position",
    [
        ("stone", (0, 2, 0)),
        ("air", (0, 1, 0)),
        ("air", (0, 0, 0)),
        ("glass", (0, 2, 0)),
    ],
)
def test_edit_matches_flat_grid(name, position):
    generator, chunk = _setup()
    before = _expand(chunk.voxel_model.rle_voxel_grid)
    pos = IntVector(*position)
    expected = list(before)
    expected[generator.calculate_position_index(pos)] = generator.voxel_by_name(name)

    generator.generate_mesh(_mesh_vars(chunk), VoxelChange(name, pos))

    runs = chunk.voxel_model.rle_voxel_grid
    assert _expand(runs) == expected
    assert all(a.voxel != b.voxel for a, b in zip(runs, runs[1:]))
    counts = Counter(v.voxel_id for v in expected if not v.is_empty())
    assert chunk.chunk_voxel_id_table == dict(counts)
    assert chunk.has_mesh is True


def test_edit_adds_faces_for_new_voxel():
    generator, chunk = _setup()
    mesh_vars = _mesh_vars(chunk)
    generator.generate_mesh(mesh_vars, VoxelChange("glass", IntVector(0, 2, 0)))
    glass_local = mesh_vars.voxel_id_to_local_voxel_map[1]
    faces = mesh_vars.faces[FaceDirection.FRONT][glass_local]
    assert len(faces) == 1
    assert faces[0].start_vertex_down == IntVector(0, 2, 0)
    assert faces[0].voxel == Voxel(1)