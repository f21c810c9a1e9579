"""Common machinery of meshers: face containers, mesh building and chunk mesh actors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Tuple

from voxelmesher.chunk import Chunk, ChunkParams, MesherVariables, VoxelChange, VoxelGrid
from voxelmesher.face import (
    CHUNK_FACE_COUNT,
    FaceDirection,
    MeshingDirections,
    StaticMergeData,
    Vector3,
)
from voxelmesher.voxel import IntVector, Voxel

if TYPE_CHECKING:
    from voxelmesher.generator import VoxelGeneratorBase

Vector2 = Tuple[float, float]
Color = Tuple[int, int, int, int]
Triangle = Tuple[int, int, int, int]

WHITE: Color = (255, 255, 255, 255)

# Normal and tangent of each face side, indexed by FaceDirection.
FACE_NORMALS_AND_TANGENTS: Tuple[Tuple[Vector3, Vector3], ...] = (
    ((-1.0, 0.0, 0.0), (0.0, 1.0, 0.0)),  # front
    ((1.0, 0.0, 0.0), (0.0, 1.0, 0.0)),  # back
    ((0.0, -1.0, 0.0), (1.0, 0.0, 0.0)),  # right
    ((0.0, 1.0, 0.0), (1.0, 0.0, 0.0)),  # left
    ((0.0, 0.0, -1.0), (1.0, 0.0, 0.0)),  # bottom
    ((0.0, 0.0, 1.0), (1.0, 0.0, 0.0)),  # top
)

_QUAD_TEX_COORDS: Tuple[Vector2, ...] = ((0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0))


@dataclass(frozen=True)
class MeshVertex:
    """A mesh vertex with its shading attributes."""

    position: Vector3
    normal: Vector3
    tangent: Vector3
    tex_coord: Vector2
    color: Color = WHITE


@dataclass(eq=False)
class ChunkMesh:
    """Renderable mesh of one chunk: geometry, material slots and placement."""

    location: Vector3 = (0.0, 0.0, 0.0)
    parent: Optional[object] = None
    keep_world_transform: bool = True
    vertices: List[MeshVertex] = field(default_factory=list)
    # (v0, v1, v2, poly group)
    triangles: List[Triangle] = field(default_factory=list)
    # material slot -> (voxel name, material)
    material_slots: Dict[int, Tuple[str, object]] = field(default_factory=dict)
    collision_sections: List[int] = field(default_factory=list)

    def clear(self) -> None:
        """Remove all geometry, sections and material slots."""
        self.vertices.clear()
        self.triangles.clear()
        self.material_slots.clear()
        self.collision_sections.clear()

    def add_vertex(
        self, position: Vector3, normal: Vector3, tangent: Vector3, tex_coord: Vector2
    ) -> int:
        """Append a white vertex and return its index."""
        self.vertices.append(MeshVertex(tuple(position), tuple(normal), tuple(tangent), tuple(tex_coord)))
        return len(self.vertices) - 1

    def add_triangle(self, v0: int, v1: int, v2: int, poly_group: int) -> None:
        """Append a triangle over existing vertices, tagged with a poly group."""
        for index in (v0, v1, v2):
            if not 0 <= index < len(self.vertices):
                raise IndexError(f"vertex index {index} out of range")
        self.triangles.append((v0, v1, v2, poly_group))


class MesherBase(ABC):
    """Base class of components that turn chunk voxel models into meshes."""

    def __init__(self) -> None:
        self.voxel_generator: Optional[VoxelGeneratorBase] = None
        self.front_face_template = MeshingDirections(StaticMergeData.FRONT)
        self.back_face_template = MeshingDirections(StaticMergeData.BACK)
        self.right_face_template = MeshingDirections(StaticMergeData.RIGHT)
        self.left_face_template = MeshingDirections(StaticMergeData.LEFT)
        self.top_face_template = MeshingDirections(StaticMergeData.TOP)
        self.bottom_face_template = MeshingDirections(StaticMergeData.BOTTOM)

    def set_voxel_generator(self, voxel_generator: VoxelGeneratorBase) -> None:
        """Attach the generator whose grid layout the mesher follows."""
        self.voxel_generator = voxel_generator
        self.update_all_faces_params()

    @abstractmethod
    def generate_mesh(self, mesh_vars: MesherVariables, voxel_change: Optional[VoxelChange] = None) -> None:
        """Mesh the chunk held by mesh_vars, applying voxel_change first if given."""

    def compress_voxel_grid(self, chunk: Chunk, voxel_grid: Sequence[Voxel]) -> None:
        """Store a flat voxel grid as the chunk's voxel model."""
        chunk.voxel_model = VoxelGrid(list(voxel_grid))

    def _require_generator(self) -> VoxelGeneratorBase:
        if self.voxel_generator is None:
            raise RuntimeError("voxel generator is not set")
        return self.voxel_generator

    @staticmethod
    def _is_min_border(x: int) -> bool:
        return x == 0

    def _is_max_border(self, x: int) -> bool:
        return x == self._require_generator().voxel_count_per_chunk_dimension - 1

    def update_all_faces_params(self) -> None:
        """Recompute the grid index offsets of every face template."""
        generator = self._require_generator()
        last = generator.voxel_count_per_chunk_dimension - 1

        self._update_face_params(
            self.front_face_template, IntVector(-1, 0, 0), IntVector(last, 0, 0), IntVector(0, -1, 0)
        )
        self._update_face_params(
            self.back_face_template, IntVector(1, 0, 0), IntVector(0, 0, 0), IntVector(0, -1, 0)
        )
        self._update_face_params(
            self.right_face_template, IntVector(0, -1, 0), IntVector(0, last, 0), IntVector(-1, 0, 0)
        )
        self._update_face_params(
            self.left_face_template, IntVector(0, 1, 0), IntVector(0, 0, 0), IntVector(-1, 0, 0)
        )
        self._update_face_params(
            self.bottom_face_template, IntVector(0, 0, -1), IntVector(0, 0, last), IntVector(0, -1, 0)
        )
        self._update_face_params(
            self.top_face_template, IntVector(0, 0, 1), IntVector(0, 0, 0), IntVector(0, -1, 0)
        )

    def _update_face_params(
        self,
        face: MeshingDirections,
        forward: IntVector,
        chunk_border: IntVector,
        previous: IntVector,
    ) -> None:
        generator = self._require_generator()
        face.forward_voxel_index = generator.calculate_position_index(forward)
        face.previous_voxel_index = generator.calculate_position_index(previous)
        face.chunk_border_index = generator.calculate_position_index(chunk_border)

    @staticmethod
    def _original_chunk(mesh_vars: MesherVariables) -> Chunk:
        chunk = mesh_vars.chunk_params.original_chunk
        if chunk is None:
            raise ValueError("mesher variables hold no chunk")
        return chunk

    @staticmethod
    def empty_actor(mesh_vars: MesherVariables) -> bool:
        """Mark the chunk unmeshed; return True (clearing any actor) if it holds no voxels."""
        chunk = MesherBase._original_chunk(mesh_vars)
        chunk.has_mesh = False
        if not chunk.chunk_voxel_id_table:
            if chunk.chunk_mesh_actor is not None:
                chunk.chunk_mesh_actor.clear()
            return True
        return False

    def init_face_containers(self, mesh_vars: MesherVariables) -> None:
        """Assign local ids to the chunk's voxel ids and prepare empty face lists."""
        chunk = self._original_chunk(mesh_vars)
        table = chunk.chunk_voxel_id_table

        local_map = mesh_vars.voxel_id_to_local_voxel_map
        local_map.clear()
        local_map.update((voxel_id, local_id) for local_id, voxel_id in enumerate(table))

        count = len(table)
        for containers in mesh_vars.faces:
            del containers[count:]
            for face_list in containers:
                face_list.clear()
            containers.extend([] for _ in range(count - len(containers)))

    def generate_mesh_from_faces(self, mesh_vars: MesherVariables) -> None:
        """Build quads from the collected faces and place them in the chunk's mesh."""
        generator = self.voxel_generator
        if generator is None:
            return

        voxel_size = generator.voxel_size
        stream = ChunkMesh()
        # voxel id -> poly group of the quads that are actually displayed
        local_voxel_table: Dict[int, int] = {}

        for voxel_id, local_id in mesh_vars.voxel_id_to_local_voxel_map.items():
            for face_index in range(CHUNK_FACE_COUNT):
                normal, tangent = FACE_NORMALS_AND_TANGENTS[face_index]
                for face in mesh_vars.faces[face_index][local_id]:
                    corners = (
                        face.final_start_vertex_down(voxel_size),
                        face.final_end_vertex_down(voxel_size),
                        face.final_end_vertex_up(voxel_size),
                        face.final_start_vertex_up(voxel_size),
                    )
                    v0, v1, v2, v3 = (
                        stream.add_vertex(corner, normal, tangent, tex_coord)
                        for corner, tex_coord in zip(corners, _QUAD_TEX_COORDS)
                    )
                    poly_group = local_voxel_table.setdefault(voxel_id, len(local_voxel_table))
                    stream.add_triangle(v0, v1, v2, poly_group)
                    stream.add_triangle(v2, v3, v0, poly_group)

        chunk = mesh_vars.chunk_params.original_chunk
        if chunk is None or not local_voxel_table:
            return

        self._generate_actor_mesh(local_voxel_table, stream, mesh_vars.chunk_params)
        chunk.has_mesh = True

    def _generate_actor_mesh(
        self, local_voxel_table: Dict[int, int], stream: ChunkMesh, chunk_params: ChunkParams
    ) -> None:
        generator = self._require_generator()
        chunk = chunk_params.original_chunk
        actor = chunk.chunk_mesh_actor
        location = tuple(float(c) * generator.chunk_axis_size for c in chunk.grid_position)

        if actor is None:
            if chunk_params.spawner is None:
                return
            actor = ChunkMesh(
                location=location,
                parent=chunk_params.spawner,
                keep_world_transform=chunk_params.world_transform,
            )
        else:
            actor.location = location

        chunk.chunk_mesh_actor = actor

        actor.clear()
        actor.vertices.extend(stream.vertices)
        actor.triangles.extend(stream.triangles)

        for voxel_id, material_id in local_voxel_table.items():
            name, voxel_type = generator.voxel_type_by_id(voxel_id)
            actor.material_slots[material_id] = (name, voxel_type.material)
            actor.collision_sections.append(material_id)