from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import numpy as np
from scipy.spatial.transform import Rotation

if TYPE_CHECKING:
    from numpy import typing as npt

from fractalboxes.model.geometry_primitives import Ray, Cuboid


class DegenerateRayError(ValueError):
    """The ray cannot intersect the requested surface (e.g. parallel to a plane)."""


def axis_angle(axis: npt.ArrayLike, angle: float) -> Rotation:
    """Rotation of `angle` radians about `axis` (normalized here)."""
    axis_arr = np.asarray(axis, dtype=np.float64)
    norm = np.linalg.norm(axis_arr)
    if norm == 0.0:
        raise ValueError("Rotation axis must be non-zero.")
    return Rotation.from_rotvec(axis_arr / norm * angle)


def rigid_matrix(translation: npt.ArrayLike, rotation: Rotation) -> npt.NDArray[np.float64]:
    """Homogeneous 4x4 matrix of rotation followed by translation."""
    matrix = np.eye(4)
    matrix[:3, :3] = rotation.as_matrix()
    matrix[:3, 3] = translation
    return matrix


def scaling_matrix(scale: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """Homogeneous 4x4 nonuniform scaling."""
    matrix = np.eye(4)
    matrix[:3, :3] = np.diag(np.asarray(scale, dtype=np.float64))
    return matrix


def transform_points(matrix: npt.NDArray[np.float64], points: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """
    Applies a homogeneous 4x4 matrix to an (..., 3) array of points.

    Args:
        matrix: (4, 4) affine transform.
        points: Array whose last axis has length 3.

    Returns:
        Transformed points with the same shape as the input.
    """
    pts = np.asarray(points, dtype=np.float64)
    return pts @ matrix[:3, :3].T + matrix[:3, 3]


def ray_cuboid_toi(ray: Ray, cuboid: Cuboid, *, solid: bool = True, eps: float = 1e-12) -> Optional[float]:
    """
    Time of impact of a ray with an oriented box (slab method).

    The ray is taken into the cuboid's frame, where the box is axis aligned
    and centred at the origin, and clipped against the three slabs
    |x_i| <= half_extents_i.

    Args:
        ray: World-space ray; the result is measured in units of ray.direction.
        cuboid: The oriented box.
        solid: If True, a ray starting inside the box hits it at t = 0.
               Otherwise the exit point is reported.
        eps: Tolerance for direction components treated as parallel to a slab.

    Returns:
        The smallest non-negative t of the hit, or None when the ray misses.
    """
    origin = cuboid.to_local(ray.origin)
    direction = cuboid.vector_to_local(ray.direction)
    half = cuboid.half_extents

    t_near = -np.inf
    t_far = np.inf

    for axis in range(3):
        if abs(direction[axis]) < eps:
            # Parallel to this slab: either always inside it or never
            if abs(origin[axis]) > half[axis]:
                return None
            continue

        t1 = (-half[axis] - origin[axis]) / direction[axis]
        t2 = (half[axis] - origin[axis]) / direction[axis]
        if t1 > t2:
            t1, t2 = t2, t1

        t_near = max(t_near, t1)
        t_far = min(t_far, t2)
        if t_near > t_far:
            return None

    if t_far < 0.0:
        # Box entirely behind the ray
        return None

    if t_near >= 0.0:
        return float(t_near)

    # Origin inside the box
    return 0.0 if solid else float(t_far)


def ray_plane_toi(
    ray: Ray,
    plane_normal: npt.ArrayLike,
    plane_point: npt.ArrayLike = (0.0, 0.0, 0.0),
    eps: float = 1e-12
) -> float:
    """
    Intersection time of a ray with an (infinite, two-sided) plane.

    Solves (origin + t*direction - plane_point) . n = 0 for t.

    Raises:
        ValueError: If the normal is zero.
        DegenerateRayError: If the ray is parallel to the plane.
    """
    normal = np.asarray(plane_normal, dtype=np.float64)
    norm = np.linalg.norm(normal)
    if norm == 0.0:
        raise ValueError("Plane normal must be non-zero.")
    normal = normal / norm

    denom = float(np.dot(ray.direction, normal))
    if abs(denom) < eps:
        raise DegenerateRayError(
            f"Ray (origin={ray.origin}, direction={ray.direction}) is parallel to the plane with normal {normal}."
        )

    return float(np.dot(np.asarray(plane_point, dtype=np.float64) - ray.origin, normal) / denom)


def place_on_camera_plane(ray: Ray, plane_normal: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """
    Point where `ray` meets the plane through the world origin facing the camera.

    Args:
        ray: Cursor ray.
        plane_normal: Camera eye minus focal point.

    Raises:
        DegenerateRayError: If the ray runs parallel to that plane.
    """
    return ray.point_at(ray_plane_toi(ray, plane_normal))


def nearest_rotation_matrices(matrices: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """
    Projects a stack of (M, 3, 3) matrices onto the closest proper rotations.

    Uses the polar decomposition via SVD; the sign of the last singular
    direction is flipped where needed so that det = +1.
    """
    u, _, vt = np.linalg.svd(matrices)
    det = np.linalg.det(u @ vt)
    u[..., :, -1] *= np.where(det < 0.0, -1.0, 1.0)[..., None]
    return u @ vt


def decompose_transforms(
    matrices: npt.NDArray[np.float64]
) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """
    Splits composed affine transforms into translation, rotation and scale.

    For each (4, 4) matrix:
      - translation: its last column,
      - scale: the norm of each column of the leading 3x3 block,
      - rotation: that block with each column divided by its own scale,
        re-orthonormalized and returned as a unit quaternion.

    Columns of zero length (a box flattened to nothing along an axis) keep a
    divisor of one; the orthonormalization then fills the missing axis.

    Args:
        matrices: (M, 4, 4) stack.

    Returns:
        (translations (M, 3), quaternions (M, 4) in scalar-last x, y, z, w order, scales (M, 3))
    """
    matrices = np.asarray(matrices, dtype=np.float64).reshape(-1, 4, 4)
    count = matrices.shape[0]

    translations = matrices[:, :3, 3].copy()
    linear = matrices[:, :3, :3]
    scales = np.linalg.norm(linear, axis=1)

    if count == 0:
        return translations, np.empty((0, 4)), scales

    divisors = np.where(scales > 0.0, scales, 1.0)
    rotations = nearest_rotation_matrices(linear / divisors[:, None, :])
    quaternions = Rotation.from_matrix(rotations).as_quat()

    return translations, quaternions.reshape(count, 4), scales
