"""Voxels, run-length encoded voxel runs, integer grid vectors and voxel types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Iterator, Optional

EMPTY_VOXEL = -1


@dataclass(frozen=True)
class IntVector:
    """Immutable three-component integer vector used for grid positions."""

    x: int = 0
    y: int = 0
    z: int = 0

    def __add__(self, other: IntVector) -> IntVector:
        if not isinstance(other, IntVector):
            return NotImplemented
        return IntVector(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: IntVector) -> IntVector:
        if not isinstance(other, IntVector):
            return NotImplemented
        return IntVector(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, factor: int) -> IntVector:
        if isinstance(factor, bool) or not isinstance(factor, int):
            return NotImplemented
        return IntVector(self.x * factor, self.y * factor, self.z * factor)

    __rmul__ = __mul__

    def __neg__(self) -> IntVector:
        return IntVector(-self.x, -self.y, -self.z)

    def __iter__(self) -> Iterator[int]:
        yield self.x
        yield self.y
        yield self.z


@dataclass(frozen=True, eq=False)
class Voxel:
    """A single voxel identified by its type id; equality ignores transparency."""

    EMPTY: ClassVar[int] = EMPTY_VOXEL

    voxel_id: int = EMPTY_VOXEL
    transparent: bool = False

    def is_empty(self) -> bool:
        return self.voxel_id == EMPTY_VOXEL

    def is_transparent(self) -> bool:
        return self.transparent or self.is_empty()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Voxel):
            return NotImplemented
        return self.voxel_id == other.voxel_id

    def __hash__(self) -> int:
        return hash(self.voxel_id)


@dataclass
class RLEVoxel:
    """A run of identical voxels in a run-length encoded grid."""

    run_length: int
    voxel: Voxel = field(default_factory=Voxel)

    def is_voxel_empty(self) -> bool:
        return self.voxel.is_empty()

    def is_transparent(self) -> bool:
        return self.voxel.is_transparent()

    def is_run_empty(self) -> bool:
        return self.run_length <= 0


@dataclass
class VoxelType:
    """Description of a voxel kind and the parameters of its terrain noise."""

    material: Optional[object] = None
    generate_noise: bool = True
    is_transparent: bool = False
    generate_reversed_surface: bool = False

    surface_elevation: float = 100.0
    surface_distance_from_sea_level: int = 20
    surface_noise_seed: int = 1234
    surface_noise_type: str = "ValueFractal"
    surface_noise_frequency: float = 0.007

    reversed_surface_depth: float = 150.0
    reversed_surface_distance_from_sea_level: int = -20
    reversed_surface_noise_seed: int = 1234
    reversed_surface_noise_type: str = "ValueFractal"
    reversed_surface_noise_frequency: float = 0.05