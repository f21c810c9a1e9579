"""Quad faces of voxels, face directions and per-direction merge data."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Callable, ClassVar, Dict, Tuple

from voxelmesher.voxel import IntVector, Voxel

CHUNK_FACE_COUNT = 6


class FaceDirection(IntEnum):
    """Side of a voxel; the value is the index of its face container."""

    FRONT = 0
    BACK = 1
    RIGHT = 2
    LEFT = 3
    BOTTOM = 4
    TOP = 5


@dataclass(frozen=True)
class FaceToDirection:
    """Pairs a face side with the grid offset pointing out of that side."""

    FRONT: ClassVar[FaceToDirection]
    BACK: ClassVar[FaceToDirection]
    RIGHT: ClassVar[FaceToDirection]
    LEFT: ClassVar[FaceToDirection]
    BOTTOM: ClassVar[FaceToDirection]
    TOP: ClassVar[FaceToDirection]

    face_side: FaceDirection
    direction: IntVector


FaceToDirection.TOP = FaceToDirection(FaceDirection.TOP, IntVector(0, 0, 1))
FaceToDirection.BOTTOM = FaceToDirection(FaceDirection.BOTTOM, IntVector(0, 0, -1))
FaceToDirection.BACK = FaceToDirection(FaceDirection.BACK, IntVector(1, 0, 0))
FaceToDirection.FRONT = FaceToDirection(FaceDirection.FRONT, IntVector(-1, 0, 0))
FaceToDirection.LEFT = FaceToDirection(FaceDirection.LEFT, IntVector(0, 1, 0))
FaceToDirection.RIGHT = FaceToDirection(FaceDirection.RIGHT, IntVector(0, -1, 0))

_DIRECTIONS: Dict[FaceDirection, FaceToDirection] = {
    entry.face_side: entry
    for entry in (
        FaceToDirection.FRONT,
        FaceToDirection.BACK,
        FaceToDirection.RIGHT,
        FaceToDirection.LEFT,
        FaceToDirection.BOTTOM,
        FaceToDirection.TOP,
    )
}


def face_to_direction(face_side: FaceDirection) -> FaceToDirection:
    """Return the direction entry belonging to a face side."""
    return _DIRECTIONS[FaceDirection(face_side)]


Vector3 = Tuple[float, float, float]


def _scaled(vertex: IntVector, voxel_size: float) -> Vector3:
    return (vertex.x * voxel_size, vertex.y * voxel_size, vertex.z * voxel_size)


@dataclass
class ChunkFace:
    """A quad given by four grid vertices, belonging to one voxel."""

    voxel: Voxel = field(default_factory=Voxel)
    start_vertex_down: IntVector = field(default_factory=IntVector)
    end_vertex_down: IntVector = field(default_factory=IntVector)
    end_vertex_up: IntVector = field(default_factory=IntVector)
    start_vertex_up: IntVector = field(default_factory=IntVector)

    @staticmethod
    def create_front_face(voxel: Voxel, initial_position: IntVector, run_length: int = 1) -> ChunkFace:
        p = initial_position
        return ChunkFace(
            voxel,
            p,
            p + IntVector(0, run_length, 0),
            p + IntVector(0, run_length, 1),
            p + IntVector(0, 0, 1),
        )

    @staticmethod
    def create_back_face(voxel: Voxel, initial_position: IntVector, run_length: int = 1) -> ChunkFace:
        p = initial_position
        return ChunkFace(
            voxel,
            p + IntVector(1, run_length, 0),
            p + IntVector(1, 0, 0),
            p + IntVector(1, 0, 1),
            p + IntVector(1, run_length, 1),
        )

    @staticmethod
    def create_left_face(voxel: Voxel, initial_position: IntVector, run_length: int = 1) -> ChunkFace:
        p = initial_position
        return ChunkFace(
            voxel,
            p + IntVector(0, run_length, 0),
            p + IntVector(1, run_length, 0),
            p + IntVector(1, run_length, 1),
            p + IntVector(0, run_length, 1),
        )

    @staticmethod
    def create_right_face(voxel: Voxel, initial_position: IntVector, run_length: int = 1) -> ChunkFace:
        p = initial_position
        return ChunkFace(
            voxel,
            p + IntVector(1, 0, 0),
            p,
            p + IntVector(0, 0, 1),
            p + IntVector(1, 0, 1),
        )

    @staticmethod
    def create_top_face(voxel: Voxel, initial_position: IntVector, run_length: int = 1) -> ChunkFace:
        p = initial_position
        return ChunkFace(
            voxel,
            p + IntVector(0, 0, 1),
            p + IntVector(0, run_length, 1),
            p + IntVector(1, run_length, 1),
            p + IntVector(1, 0, 1),
        )

    @staticmethod
    def create_bottom_face(voxel: Voxel, initial_position: IntVector, run_length: int = 1) -> ChunkFace:
        p = initial_position
        return ChunkFace(
            voxel,
            p + IntVector(0, run_length, 0),
            p,
            p + IntVector(1, 0, 0),
            p + IntVector(1, run_length, 0),
        )

    @staticmethod
    def merge_face_end(prev_face: ChunkFace, new_face: ChunkFace) -> bool:
        """Extend prev_face past its end edge; return True if merged."""
        if (
            prev_face.end_vertex_down == new_face.start_vertex_down
            and prev_face.end_vertex_up == new_face.start_vertex_up
        ):
            prev_face.end_vertex_down = new_face.end_vertex_down
            prev_face.end_vertex_up = new_face.end_vertex_up
            return True
        return False

    @staticmethod
    def merge_face_start(prev_face: ChunkFace, new_face: ChunkFace) -> bool:
        """Extend prev_face past its start edge; return True if merged."""
        if (
            prev_face.start_vertex_up == new_face.end_vertex_up
            and prev_face.start_vertex_down == new_face.end_vertex_down
        ):
            prev_face.start_vertex_down = new_face.start_vertex_down
            prev_face.start_vertex_up = new_face.start_vertex_up
            return True
        return False

    @staticmethod
    def merge_face_up(prev_face: ChunkFace, new_face: ChunkFace) -> bool:
        """Extend prev_face past its upper edge; return True if merged."""
        if (
            prev_face.start_vertex_up == new_face.start_vertex_down
            and prev_face.end_vertex_up == new_face.end_vertex_down
        ):
            prev_face.start_vertex_up = new_face.start_vertex_up
            prev_face.end_vertex_up = new_face.end_vertex_up
            return True
        return False

    def final_start_vertex_down(self, voxel_size: float) -> Vector3:
        return _scaled(self.start_vertex_down, voxel_size)

    def final_start_vertex_up(self, voxel_size: float) -> Vector3:
        return _scaled(self.start_vertex_up, voxel_size)

    def final_end_vertex_down(self, voxel_size: float) -> Vector3:
        return _scaled(self.end_vertex_down, voxel_size)

    def final_end_vertex_up(self, voxel_size: float) -> Vector3:
        return _scaled(self.end_vertex_up, voxel_size)


FaceMerger = Callable[[ChunkFace, ChunkFace], bool]
FaceCreator = Callable[[Voxel, IntVector, int], ChunkFace]


@dataclass(frozen=True)
class StaticMergeData:
    """Per-side face creator and the merge used along the run direction."""

    FRONT: ClassVar[StaticMergeData]
    BACK: ClassVar[StaticMergeData]
    RIGHT: ClassVar[StaticMergeData]
    LEFT: ClassVar[StaticMergeData]
    TOP: ClassVar[StaticMergeData]
    BOTTOM: ClassVar[StaticMergeData]

    face_side: FaceDirection
    run_direction_face_merge: FaceMerger
    face_creator: FaceCreator


StaticMergeData.FRONT = StaticMergeData(
    FaceDirection.FRONT, ChunkFace.merge_face_end, ChunkFace.create_front_face
)
StaticMergeData.BACK = StaticMergeData(
    FaceDirection.BACK, ChunkFace.merge_face_start, ChunkFace.create_back_face
)
StaticMergeData.RIGHT = StaticMergeData(
    FaceDirection.RIGHT, ChunkFace.merge_face_start, ChunkFace.create_right_face
)
StaticMergeData.LEFT = StaticMergeData(
    FaceDirection.LEFT, ChunkFace.merge_face_end, ChunkFace.create_left_face
)
StaticMergeData.TOP = StaticMergeData(
    FaceDirection.TOP, ChunkFace.merge_face_end, ChunkFace.create_top_face
)
StaticMergeData.BOTTOM = StaticMergeData(
    FaceDirection.BOTTOM, ChunkFace.merge_face_start, ChunkFace.create_bottom_face
)


@dataclass
class MeshingDirections:
    """Merge data of one side plus the grid index offsets used while meshing."""

    static_meshing_data: StaticMergeData
    forward_voxel_index: int = 0
    chunk_border_index: int = 0
    previous_voxel_index: int = 0