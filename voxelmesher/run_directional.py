"""Mesher that merges voxel faces along runs and then greedily across rows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from voxelmesher.chunk import ChunkParams, MesherVariables, VoxelChange, VoxelGrid
from voxelmesher.face import ChunkFace, FaceDirection, MeshingDirections
from voxelmesher.mesher_base import MesherBase
from voxelmesher.voxel import IntVector, Voxel


@dataclass(frozen=True)
class _VoxelIndexParams:
    is_border: bool
    forward_voxel_index: int
    previous_voxel_index: int
    current_voxel_index: int
    current_voxel: Voxel
    face_direction: FaceDirection


class RunDirectionalMesher(MesherBase):
    """Meshes uncompressed voxel grids with run direction greedy merging."""

    def generate_mesh(self, mesh_vars: MesherVariables, voxel_change: Optional[VoxelChange] = None) -> None:
        if self.empty_actor(mesh_vars):
            return

        chunk = self._original_chunk(mesh_vars)
        voxel_grid = chunk.voxel_model
        if not isinstance(voxel_grid, VoxelGrid):
            return

        if voxel_change is not None:
            self.change_voxel_id(voxel_grid, chunk.chunk_voxel_id_table, voxel_change)

        self.init_face_containers(mesh_vars)
        self.face_generation(voxel_grid, mesh_vars)
        self.directional_greedy_meshing(mesh_vars)
        self.generate_mesh_from_faces(mesh_vars)

    def face_generation(self, voxel_grid: VoxelGrid, mesh_vars: MesherVariables) -> None:
        """Collect visible faces of every voxel, merging them along each run."""
        generator = self._require_generator()
        dimension = generator.voxel_count_per_chunk_dimension
        grid = voxel_grid.voxel_grid

        for x in range(dimension):
            # Borders decide whether voxels of a neighbouring chunk are needed.
            min_border = self._is_min_border(x)
            max_border = self._is_max_border(x)

            x_axis_index = generator.calculate_voxel_index(x, 0, 0)
            y_axis_index = generator.calculate_voxel_index(0, x, 0)
            z_axis_index = generator.calculate_voxel_index(0, 0, x)

            for z in range(dimension):
                for y in range(dimension):
                    # Coordinates are permuted so that every face list comes out sorted.
                    self._increment_run(
                        IntVector(x, y, z), x_axis_index, min_border, max_border,
                        self.front_face_template, self.back_face_template, mesh_vars, grid,
                    )
                    self._increment_run(
                        IntVector(y, x, z), y_axis_index, min_border, max_border,
                        self.right_face_template, self.left_face_template, mesh_vars, grid,
                    )
                    self._increment_run(
                        IntVector(z, y, x), z_axis_index, min_border, max_border,
                        self.bottom_face_template, self.top_face_template, mesh_vars, grid,
                    )

    def _increment_run(
        self,
        position: IntVector,
        axis_voxel_index: int,
        is_min_border: bool,
        is_max_border: bool,
        face_template: MeshingDirections,
        reversed_face_template: MeshingDirections,
        mesh_vars: MesherVariables,
        grid: List[Voxel],
    ) -> None:
        generator = self._require_generator()
        index = generator.calculate_position_index(position)
        voxel = grid[index]
        if voxel.is_empty():
            return

        local_voxel_id = mesh_vars.voxel_id_to_local_voxel_map[voxel.voxel_id]
        face_side = face_template.static_meshing_data.face_side
        reversed_side = reversed_face_template.static_meshing_data.face_side

        self._add_face(
            grid, face_template, is_min_border, index, position, voxel, axis_voxel_index,
            mesh_vars.faces[face_side][local_voxel_id], mesh_vars.chunk_params,
        )
        self._add_face(
            grid, reversed_face_template, is_max_border, index, position, voxel, axis_voxel_index,
            mesh_vars.faces[reversed_side][local_voxel_id], mesh_vars.chunk_params,
        )

    @classmethod
    def _add_face(
        cls,
        grid: List[Voxel],
        face_template: MeshingDirections,
        is_border: bool,
        index: int,
        position: IntVector,
        voxel: Voxel,
        axis_voxel_index: int,
        chunk_faces: List[ChunkFace],
        chunk_params: ChunkParams,
    ) -> None:
        merge_data = face_template.static_meshing_data
        params = _VoxelIndexParams(
            is_border=is_border,
            forward_voxel_index=face_template.forward_voxel_index + index,
            previous_voxel_index=face_template.previous_voxel_index + index,
            current_voxel_index=index - axis_voxel_index + face_template.chunk_border_index,
            current_voxel=voxel,
            face_direction=merge_data.face_side,
        )

        if not (cls._is_border_voxel_visible(params, chunk_params) or cls._is_voxel_visible(grid, params)):
            return

        new_face = merge_data.face_creator(voxel, position, 1)
        # Faces arrive sorted, so only the last one can continue the run.
        if chunk_faces and merge_data.run_direction_face_merge(chunk_faces[-1], new_face):
            return
        chunk_faces.append(new_face)

    @staticmethod
    def _is_border_voxel_visible(params: _VoxelIndexParams, chunk_params: ChunkParams) -> bool:
        if not params.is_border:
            return False
        side_chunk = chunk_params.side_chunks[params.face_direction]
        if side_chunk is None:
            return chunk_params.show_borders
        model = side_chunk.voxel_model
        next_voxel = Voxel() if model is None else model.get_voxel_at_index(params.current_voxel_index)
        return next_voxel.is_transparent() and next_voxel != params.current_voxel

    @staticmethod
    def _is_voxel_visible(grid: List[Voxel], params: _VoxelIndexParams) -> bool:
        if params.is_border or not 0 <= params.forward_voxel_index < len(grid):
            return False
        next_voxel = grid[params.forward_voxel_index]
        return next_voxel.is_transparent() and next_voxel != params.current_voxel

    @staticmethod
    def directional_greedy_meshing(mesh_vars: MesherVariables) -> None:
        """Merge run faces of neighbouring rows into larger quads."""
        for containers in mesh_vars.faces:
            for local_voxel_id in mesh_vars.voxel_id_to_local_voxel_map.values():
                faces = containers[local_voxel_id]
                for i in range(len(faces) - 2, -1, -1):
                    next_face = faces[i + 1]
                    # Walk back through the current row to reach the previous one.
                    for back_index in range(i, -1, -1):
                        face = faces[back_index]
                        if face.start_vertex_up.z < next_face.start_vertex_down.z:
                            break
                        if ChunkFace.merge_face_up(face, next_face):
                            del faces[i + 1]
                            break

    def change_voxel_id(self, voxel_grid: VoxelGrid, voxel_table: dict, voxel_change: VoxelChange) -> None:
        """Apply a voxel change to the grid and the chunk's id counts."""
        generator = self._require_generator()
        index = generator.calculate_position_index(voxel_change.voxel_position)
        voxel = generator.voxel_by_name(voxel_change.voxel_name)
        grid = voxel_grid.voxel_grid

        if not 0 <= index < len(grid):
            return

        if voxel.is_empty():
            generator.remove_voxel_from_chunk_table(voxel_table, grid[index])
            grid[index] = voxel
        else:
            generator.change_known_voxel_at_index(grid, voxel_table, index, voxel)