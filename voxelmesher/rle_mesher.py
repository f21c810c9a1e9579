"""Mesher working directly on run-length encoded voxel grids, with in-place edits."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from voxelmesher.chunk import Chunk, MesherVariables, RLEVoxelGrid, VoxelChange
from voxelmesher.face import StaticMergeData
from voxelmesher.mesher_base import MesherBase
from voxelmesher.voxel import IntVector, RLEVoxel, Voxel

# Order in which the faces of a run are created.
_RUN_FACES = (
    StaticMergeData.FRONT,
    StaticMergeData.BACK,
    StaticMergeData.TOP,
    StaticMergeData.BOTTOM,
    StaticMergeData.RIGHT,
    StaticMergeData.LEFT,
)


def _copy_run(run: RLEVoxel) -> RLEVoxel:
    return RLEVoxel(run.run_length, run.voxel)


def _is_valid_index(runs: Sequence[RLEVoxel], index: int) -> bool:
    return 0 <= index < len(runs)


@dataclass
class _IndexParams:
    voxel_grid: List[RLEVoxel]
    current_rle_run: RLEVoxel
    new_voxel_grid: Optional[List[RLEVoxel]] = None
    voxel_change: Optional[VoxelChange] = None
    edit_voxel: Voxel = field(default_factory=Voxel)
    replaced_voxel: Voxel = field(default_factory=Voxel)
    traversed_run: int = 0
    y_start: int = 0
    edit_area_index: int = 0
    run_index: int = -1


class RLERunDirectionalMesher(MesherBase):
    """Meshes run-length encoded voxel grids; each run along y becomes one quad per side."""

    def compress_voxel_grid(self, chunk: Chunk, voxel_grid: Sequence[Voxel]) -> None:
        """Store a flat voxel grid as run-length encoded runs."""
        if not voxel_grid:
            raise ValueError("voxel grid is empty")
        runs: List[RLEVoxel] = []
        for voxel in voxel_grid:
            if runs and runs[-1].voxel == voxel:
                runs[-1].run_length += 1
            else:
                runs.append(RLEVoxel(1, voxel))
        chunk.voxel_model = RLEVoxelGrid(runs)

    def generate_mesh(self, mesh_vars: MesherVariables, voxel_change: Optional[VoxelChange] = None) -> None:
        if self.empty_actor(mesh_vars):
            return

        chunk = self._original_chunk(mesh_vars)
        model = chunk.voxel_model
        if not isinstance(model, RLEVoxelGrid):
            return

        generator = self._require_generator()
        grid = model.rle_voxel_grid
        params = _IndexParams(voxel_grid=grid, current_rle_run=_copy_run(grid[0]))
        table: Dict[int, int] = chunk.chunk_voxel_id_table

        if voxel_change is not None:
            params.voxel_change = voxel_change
            params.new_voxel_grid = []
            params.edit_voxel = generator.voxel_by_name(voxel_change.voxel_name)
            if not params.edit_voxel.is_empty():
                table.setdefault(params.edit_voxel.voxel_id, 0)

        self.init_face_containers(mesh_vars)

        params.traversed_run = params.current_rle_run.run_length
        if not self._traverse(mesh_vars, params, generator.voxel_count_per_chunk_dimension):
            return

        self.generate_mesh_from_faces(mesh_vars)

        if voxel_change is not None:
            if not params.edit_voxel.is_empty():
                table[params.edit_voxel.voxel_id] += 1
            replaced = params.replaced_voxel
            if not replaced.is_empty():
                table[replaced.voxel_id] -= 1
                if table[replaced.voxel_id] <= 0:
                    del table[replaced.voxel_id]
            model.rle_voxel_grid = params.new_voxel_grid

    def _traverse(self, mesh_vars: MesherVariables, params: _IndexParams, dimension: int) -> bool:
        """Walk the runs column by column, emitting faces and applying the edit; False aborts."""
        change = params.voxel_change
        edited = False

        for x in range(dimension):
            for z in range(dimension):
                params.y_start = 0

                while params.y_start < dimension:
                    if params.traversed_run == params.current_rle_run.run_length:
                        if params.edit_area_index == 0:
                            is_new_run = True
                            params.run_index += 1
                            params.current_rle_run = _copy_run(params.voxel_grid[params.run_index])
                        else:
                            is_new_run = False
                            new_grid = params.new_voxel_grid
                            params.current_rle_run = _copy_run(
                                new_grid[len(new_grid) - params.edit_area_index]
                            )
                            params.edit_area_index -= 1
                        y_end = params.current_rle_run.run_length
                        params.traversed_run = 0
                    else:
                        is_new_run = False
                        y_end = params.current_rle_run.run_length - params.traversed_run

                    if change is not None:
                        if is_new_run:
                            params.new_voxel_grid.append(_copy_run(params.current_rle_run))

                        position = change.voxel_position
                        if (
                            not edited
                            and x == position.x
                            and z == position.z
                            and params.y_start <= position.y
                        ):
                            run_end = params.y_start + y_end
                            if run_end >= position.y:
                                edited = True
                                if not self._calculate_mid_run_edit_index(params, run_end):
                                    return False
                                continue

                    if params.y_start + y_end > dimension:
                        y_end = dimension - params.y_start

                    if not params.current_rle_run.is_voxel_empty():
                        initial_position = IntVector(x, params.y_start, z)
                        for merge_data in _RUN_FACES:
                            self._create_face(
                                mesh_vars, merge_data, initial_position, params.current_rle_run, y_end
                            )

                    params.traversed_run += y_end
                    params.y_start += y_end

                if change is not None and not edited:
                    position = change.voxel_position
                    at_next_column_start = position.y == 0 and (
                        (x == position.x and z + 1 == position.z)
                        or (x + 1 == position.x and position.z == 0 and z == dimension - 1)
                    )
                    if at_next_column_start:
                        edited = True
                        if not self._calculate_border_run_edit_index(params):
                            return False
        return True

    @staticmethod
    def _create_face(
        mesh_vars: MesherVariables,
        merge_data: StaticMergeData,
        initial_position: IntVector,
        rle_voxel: RLEVoxel,
        y_end: int,
    ) -> None:
        local_voxel_id = mesh_vars.voxel_id_to_local_voxel_map[rle_voxel.voxel.voxel_id]
        new_face = merge_data.face_creator(rle_voxel.voxel, initial_position, y_end)
        mesh_vars.faces[merge_data.face_side][local_voxel_id].append(new_face)

    @classmethod
    def _calculate_mid_run_edit_index(cls, params: _IndexParams, run_end: int) -> bool:
        position = params.voxel_change.voxel_position
        new_grid = params.new_voxel_grid

        if run_end == position.y:
            last_run = new_grid[-1]
            if last_run.voxel == params.edit_voxel:
                last_run.run_length += 1
            else:
                new_grid.append(RLEVoxel(1, params.edit_voxel))
                params.edit_area_index = 1

            next_run_index = params.run_index + 1
            if _is_valid_index(params.voxel_grid, next_run_index):
                if params.voxel_grid[next_run_index].voxel == params.edit_voxel:
                    return False
                cls._first_run_edit_index(params)

            params.current_rle_run = _copy_run(last_run)
        elif params.current_rle_run.voxel != params.edit_voxel:
            if position.y == 0:
                # Only reached for the very first voxel of the model.
                last_run = new_grid[-1]
                temp_run = _copy_run(last_run)
                params.replaced_voxel = temp_run.voxel
                last_run.run_length = 1
                last_run.voxel = params.edit_voxel
                temp_run.run_length -= 1

                if temp_run.is_run_empty():
                    next_run = params.voxel_grid[params.run_index + 1]
                    if next_run.voxel == params.edit_voxel:
                        params.run_index += 1
                        last_run.run_length += next_run.run_length
                else:
                    new_grid.append(temp_run)
                    params.edit_area_index = 1

                params.current_rle_run = _copy_run(last_run)
            else:
                mid_run_length = params.traversed_run + position.y - params.y_start
                end_run_length = new_grid[-1].run_length - mid_run_length - 1
                cls._calculate_mid_run(mid_run_length, end_run_length, params)
        else:
            return False

        return True

    @classmethod
    def _calculate_border_run_edit_index(cls, params: _IndexParams) -> bool:
        new_grid = params.new_voxel_grid
        last_run = new_grid[-1]

        if params.traversed_run != last_run.run_length:
            if last_run.voxel == params.edit_voxel:
                return False
            cls._calculate_mid_run(
                params.traversed_run, last_run.run_length - params.traversed_run - 1, params
            )
        else:
            if last_run.voxel == params.edit_voxel:
                last_run.run_length += 1
                cls._first_run_edit_index(params)
            elif _is_valid_index(params.voxel_grid, params.run_index + 1):
                if params.voxel_grid[params.run_index + 1].voxel == params.edit_voxel:
                    return False
                params.edit_area_index = 1
                new_grid.append(RLEVoxel(1, params.edit_voxel))
                cls._first_run_edit_index(params)

            params.current_rle_run = _copy_run(last_run)

        return True

    @staticmethod
    def _calculate_mid_run(mid_run_length: int, end_run_length: int, params: _IndexParams) -> None:
        new_grid = params.new_voxel_grid
        last_run = new_grid[-1]
        split_run = RLEVoxel(end_run_length, last_run.voxel)
        last_run.run_length = mid_run_length
        params.replaced_voxel = last_run.voxel
        params.current_rle_run = _copy_run(last_run)

        if split_run.is_run_empty():
            next_index = params.run_index + 1
            if (
                _is_valid_index(params.voxel_grid, next_index)
                and params.voxel_grid[next_index].voxel == params.edit_voxel
            ):
                params.voxel_grid[next_index].run_length += 1
            else:
                new_grid.append(RLEVoxel(1, params.edit_voxel))
                params.edit_area_index = 1
        else:
            new_grid.append(RLEVoxel(1, params.edit_voxel))
            new_grid.append(split_run)
            params.edit_area_index = 2

    @staticmethod
    def _first_run_edit_index(params: _IndexParams) -> None:
        next_run = params.voxel_grid[params.run_index + 1]
        last_run = params.new_voxel_grid[-1]

        params.replaced_voxel = next_run.voxel
        next_run.run_length -= 1

        if next_run.is_run_empty():
            params.run_index += 1
            next_next_index = params.run_index + 1
            if _is_valid_index(params.voxel_grid, next_next_index):
                next_next_run = params.voxel_grid[next_next_index]
                if next_next_run.voxel == last_run.voxel:
                    params.run_index += 1
                    last_run.run_length += next_next_run.run_length