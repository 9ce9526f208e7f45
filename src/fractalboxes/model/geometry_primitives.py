"""
Geometric Primitives for Picking and Rendering.
"""
from __future__ import annotations

import itertools as it
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
from scipy.spatial.transform import Rotation

if TYPE_CHECKING:
    import numpy.typing as npt


def _unit_cube_corners() -> npt.NDArray[np.float64]:
    return np.array(list(it.product((0.5, -0.5), repeat=3)), dtype=np.float64)


def _unit_cube_edges(corners: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Pairs of corners exactly one unit apart, each edge listed once."""
    edges = [
        (a, b)
        for (i, a), (j, b) in it.combinations(enumerate(corners), 2)
        if np.isclose(np.linalg.norm(a - b), 1.0)
    ]
    return np.array(edges, dtype=np.float64)


# Corners of the unit cube centred at the origin, shape (8, 3)
UNIT_CUBE_CORNERS: npt.NDArray[np.float64] = _unit_cube_corners()

# The 12 wireframe segments of the unit cube, shape (12, 2, 3)
UNIT_CUBE_EDGES: npt.NDArray[np.float64] = _unit_cube_edges(UNIT_CUBE_CORNERS)

# Quad faces as indices into UNIT_CUBE_CORNERS, counter-clockwise seen from outside.
# Corner index = 4*ix + 2*iy + iz where i* = 0 for +0.5 and 1 for -0.5.
UNIT_CUBE_FACES: npt.NDArray[np.int_] = np.array([
    [0, 2, 3, 1],  # +x
    [4, 5, 7, 6],  # -x
    [0, 1, 5, 4],  # +y
    [2, 6, 7, 3],  # -y
    [0, 4, 6, 2],  # +z
    [1, 3, 7, 5],  # -z
], dtype=np.int_)


def _as_vector3(value: npt.ArrayLike, name: str) -> npt.NDArray[np.float64]:
    arr = np.asarray(value, dtype=np.float64).reshape(-1)
    if arr.shape != (3,):
        raise ValueError(f"'{name}' must have 3 components, got shape {arr.shape}.")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"'{name}' must be finite, got {arr}.")
    return arr


@dataclass(frozen=True)
class Ray:
    """
    A half-line in world space: P(t) = origin + t * direction, t >= 0.

    The direction is NOT required to be unit length; intersection times are
    expressed in multiples of it, exactly as the camera hands it over.
    """
    origin: npt.NDArray[np.float64]
    direction: npt.NDArray[np.float64]

    def __post_init__(self) -> None:
        object.__setattr__(self, "origin", _as_vector3(self.origin, "origin"))
        direction = _as_vector3(self.direction, "direction")
        if not np.any(direction):
            raise ValueError("Ray direction must be non-zero.")
        object.__setattr__(self, "direction", direction)

    @classmethod
    def through(cls, near: npt.ArrayLike, far: npt.ArrayLike) -> Ray:
        """Ray starting at `near` and pointing towards `far`."""
        near_arr = _as_vector3(near, "near")
        return cls(origin=near_arr, direction=_as_vector3(far, "far") - near_arr)

    def point_at(self, t: float) -> npt.NDArray[np.float64]:
        return self.origin + t * self.direction

    def unit_direction(self) -> npt.NDArray[np.float64]:
        return self.direction / np.linalg.norm(self.direction)


@dataclass(frozen=True)
class Cuboid:
    """
    An oriented box used for intersection tests.

    Scale is folded into `half_extents`; the placement is rigid only.
    """
    half_extents: npt.NDArray[np.float64]
    translation: npt.NDArray[np.float64]
    rotation: Rotation

    def to_local(self, point: npt.ArrayLike) -> npt.NDArray[np.float64]:
        """World point -> cuboid frame."""
        return self.rotation.inv().apply(np.asarray(point, dtype=np.float64) - self.translation)

    def vector_to_local(self, vector: npt.ArrayLike) -> npt.NDArray[np.float64]:
        return self.rotation.inv().apply(np.asarray(vector, dtype=np.float64))
