# voxelmesher

Voxel chunk generation and mesh building for block worlds, in plain Python
with no dependencies.

A world is split into cubic chunks. Generators fill each chunk with voxels.
Meshers turn the voxels into quads and merge neighbouring faces into larger
ones, so the mesh stays small. Spawners place chunks on a grid, fill them,
mesh them and remesh them after edits.

## Install

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Quick start

```python
from voxelmesher.run_directional import RunDirectionalMesher
from voxelmesher.single_generators import FractionFillVoxelGridGenerator
from voxelmesher.single_spawner import SingleChunkSpawner
from voxelmesher.voxel import IntVector, VoxelType

voxel_types = {"stone": VoxelType(), "glass": VoxelType(is_transparent=True)}

mesher = RunDirectionalMesher()
generator = FractionFillVoxelGridGenerator(
    mesher, voxel_types, "stone",
    y_fraction=2,
    voxel_count_per_chunk_dimension=8,
    voxel_size=10.0,
)
spawner = SingleChunkSpawner(generator)
spawner.begin_play()

mesh = spawner.single_chunk.chunk_mesh_actor   # a ChunkMesh
print(len(mesh.vertices), len(mesh.triangles))

# Place a glass voxel in the chunk and remesh it.
spawner.change_voxel_in_chunk(IntVector(0, 0, 0), IntVector(1, 1, 1), "glass")
```

A generator is built around a mesher and attaches itself to it. The voxel
type table is an ordered mapping: a voxel's id is the position of its name
in the table.

## Modules

- `voxelmesher.voxel`: `IntVector`, `Voxel` (equality compares only the
  voxel id), `RLEVoxel` (a run of equal voxels) and `VoxelType` (the
  settings of one kind of voxel, including its noise parameters).
- `voxelmesher.face`: `FaceDirection`, `FaceToDirection` and
  `face_to_direction`, `ChunkFace` with its `create_*_face` creators and
  `merge_face_end`, `merge_face_start` and `merge_face_up`,
  `StaticMergeData` and `MeshingDirections`.
- `voxelmesher.chunk`: `Chunk`, `VoxelChange`, `ChunkParams`,
  `MesherVariables` and the voxel models `VoxelGrid` (one voxel per cell)
  and `RLEVoxelGrid` (runs).
- `voxelmesher.mesher_base`: `MesherBase` and the mesh it produces,
  `ChunkMesh`, made of `MeshVertex` entries and triangles tagged with a poly
  group per voxel type, plus one material slot per voxel type.
- `voxelmesher.run_directional`: `RunDirectionalMesher`. It builds faces
  merged along runs on a `VoxelGrid`, then merges them across rows.
- `voxelmesher.rle_mesher`: `RLERunDirectionalMesher`. It stores chunks as
  an `RLEVoxelGrid`, emits one quad per side for each run, and can apply a
  single voxel edit to the runs while meshing.
- `voxelmesher.generator`: `VoxelGeneratorBase`, with grid layout, voxel
  counting (`change_known_voxel_at_index`, `remove_voxel_from_chunk_table`)
  and mesh delegation.
- `voxelmesher.single_generators`: `SingleVoxelGenerator` fills a whole
  chunk with one voxel. `FractionFillVoxelGridGenerator` fills a corner
  block, with each axis cut to `1/x_fraction`, `1/y_fraction` and
  `1/z_fraction` of its length.
- `voxelmesher.noise`: `NoiseVoxelGridGenerator` builds terrain from 2D
  height fields, one per voxel type, with optional reversed surfaces for
  floating islands. Later types overwrite earlier ones where they overlap.
- `voxelmesher.spawner`: `ChunkSpawnerBase`, with grid placement,
  `world_position_to_chunk_grid_position`, `change_voxel_at_hit` and
  `wait_for_all_tasks`.
- `voxelmesher.single_spawner`: `SingleChunkSpawner` meshes one chunk with
  its borders shown. `SingleBorderlessChunkSpawner` also generates the six
  neighbours, without meshing them, so the borders between chunks are
  hidden.
- `voxelmesher.area_spawner`:
  - `CubicAreaChunkSpawner` fills and meshes a box of chunks.
  - `CenterAreaChunkSpawner` spawns breadth-first around a centre and
    meshes chunks within `mesh_zone`.
  - `PreloadedVoxelCenterAreaChunkSpawner` fills everything within the
    spawn zone first, then meshes it.

  The despawning spawners follow a moving centre through
  `change_grid_center_to_position` and pool chunks that fall out of range.
  Pass a `concurrent.futures.Executor` as `executor` to run area generation,
  voxel filling, despawning and neighbour remeshing on it. Without an
  executor everything runs in the calling thread.

## Indexing

A voxel at `(x, y, z)` in a chunk of dimension `n` sits at index
`y + z * n + x * n * n`. `VoxelGeneratorBase.calculate_voxel_index` and
`calculate_position_index` compute it. The Y axis is the run direction:
runs and merged faces grow along Y.

## Editing voxels

Call `change_voxel_in_chunk` on a spawner with a chunk grid position, a
voxel position inside the chunk and a voxel name. The chunk is remeshed with
a `VoxelChange`. Area spawners also remesh the chunk's neighbours.

`change_voxel_at_hit` takes a hit position and a surface normal. With
`pick=True`, the positive normal components move the position back by one
voxel. With `pick=False`, the negative components move it forward by one
voxel. The result is turned into a chunk and voxel position.

With `RunDirectionalMesher`, a name the generator does not know clears the
voxel at that position.

## What the package does not do

- It draws nothing. `ChunkMesh` is plain data: vertices, triangles, material
  slots and a location. Rendering and collision are left to the caller.
- It ships no noise functions. `NoiseVoxelGridGenerator` takes a
  `noise_factory(noise_type, seed, frequency)` that returns a
  `(x, y) -> float` function.
- It has no command-line tool and does not save chunks.