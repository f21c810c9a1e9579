"""Chunks, voxel models and the variables shared by one meshing pass."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from voxelmesher.face import CHUNK_FACE_COUNT, ChunkFace
from voxelmesher.voxel import IntVector, RLEVoxel, Voxel


class VoxelModel(ABC):
    """Storage of the voxels belonging to one chunk."""

    @abstractmethod
    def get_voxel_at_index(self, index: int) -> Voxel:
        """Return the voxel stored at a linear grid index."""


@dataclass
class VoxelGrid(VoxelModel):
    """Uncompressed voxel model: one voxel per grid cell."""

    voxel_grid: List[Voxel] = field(default_factory=list)

    def get_voxel_at_index(self, index: int) -> Voxel:
        if index < 0:
            raise IndexError(f"voxel index {index} out of range")
        return self.voxel_grid[index]


@dataclass
class RLEVoxelGrid(VoxelModel):
    """Run-length encoded voxel model."""

    rle_voxel_grid: List[RLEVoxel] = field(default_factory=list)

    def get_voxel_at_index(self, index: int) -> Voxel:
        if index < 0:
            raise IndexError(f"voxel index {index} out of range")
        offset = 0
        for run in self.rle_voxel_grid:
            offset += max(run.run_length, 0)
            if index < offset:
                return run.voxel
        raise IndexError(f"voxel index {index} out of range")


@dataclass(eq=False)
class Chunk:
    """A cubic block of voxels placed on the chunk grid."""

    chunk_mesh_actor: Optional[object] = None
    voxel_model: Optional[VoxelModel] = None
    # voxel id -> number of voxels of that id in the chunk
    chunk_voxel_id_table: Dict[int, int] = field(default_factory=dict)
    grid_position: IntVector = field(default_factory=IntVector)
    has_mesh: bool = False
    is_active: bool = False


@dataclass(frozen=True)
class VoxelChange:
    """Request to place a named voxel at a position inside a chunk."""

    voxel_name: str
    voxel_position: IntVector


def _empty_side_chunks() -> List[Optional[Chunk]]:
    return [None] * CHUNK_FACE_COUNT


@dataclass
class ChunkParams:
    """The chunk being meshed, its neighbours and meshing options."""

    side_chunks: List[Optional[Chunk]] = field(default_factory=_empty_side_chunks)
    original_chunk: Optional[Chunk] = None
    spawner: Optional[object] = None
    world_transform: bool = False
    show_borders: bool = False
    executed_on_main_thread: bool = False


def _empty_face_containers() -> List[List[List[ChunkFace]]]:
    return [[] for _ in range(CHUNK_FACE_COUNT)]


@dataclass
class MesherVariables:
    """Face containers per side and local voxel ids for one meshing pass."""

    faces: List[List[List[ChunkFace]]] = field(default_factory=_empty_face_containers)
    chunk_params: ChunkParams = field(default_factory=ChunkParams)
    voxel_id_to_local_voxel_map: Dict[int, int] = field(default_factory=dict)