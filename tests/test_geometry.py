import math

import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from fractalboxes.model.box import Box
from fractalboxes.model.geometry_primitives import UNIT_CUBE_CORNERS, UNIT_CUBE_EDGES, UNIT_CUBE_FACES, Ray
from fractalboxes.model.geometry_utils import (
    DegenerateRayError,
    decompose_transforms,
    place_on_camera_plane,
    ray_cuboid_toi,
    ray_plane_toi,
    rigid_matrix,
    scaling_matrix,
)


def unit_box_cuboid():
    return Box.create(1).cuboid()


def test_unit_cube_tables():
    assert UNIT_CUBE_CORNERS.shape == (8, 3)
    assert UNIT_CUBE_EDGES.shape == (12, 2, 3)
    assert UNIT_CUBE_FACES.shape == (6, 4)
    lengths = np.linalg.norm(UNIT_CUBE_EDGES[:, 1] - UNIT_CUBE_EDGES[:, 0], axis=1)
    assert np.allclose(lengths, 1.0)


def test_faces_point_outwards():
    for face in UNIT_CUBE_FACES:
        a, b, c = UNIT_CUBE_CORNERS[face[:3]]
        normal = np.cross(b - a, c - b)
        centre = UNIT_CUBE_CORNERS[face].mean(axis=0)
        assert np.dot(normal, centre) > 0.0


def test_ray_requires_direction():
    with pytest.raises(ValueError):
        Ray(origin=(0, 0, 0), direction=(0, 0, 0))


def test_ray_hits_front_face():
    ray = Ray(origin=(0, 0, -4), direction=(0, 0, 1))
    assert math.isclose(ray_cuboid_toi(ray, unit_box_cuboid()), 3.75)


def test_toi_measured_in_direction_units():
    ray = Ray(origin=(0, 0, -4), direction=(0, 0, 2))
    assert math.isclose(ray_cuboid_toi(ray, unit_box_cuboid()), 1.875)


def test_ray_starting_inside_hits_at_zero():
    ray = Ray(origin=(0.1, 0, 0), direction=(0, 1, 0))
    assert ray_cuboid_toi(ray, unit_box_cuboid()) == 0.0
    assert math.isclose(ray_cuboid_toi(ray, unit_box_cuboid(), solid=False), 0.25)


def test_ray_misses_beside_and_behind():
    assert ray_cuboid_toi(Ray(origin=(1, 0, -4), direction=(0, 0, 1)), unit_box_cuboid()) is None
    assert ray_cuboid_toi(Ray(origin=(0, 0, 4), direction=(0, 0, 1)), unit_box_cuboid()) is None


def test_ray_hits_rotated_box():
    box = Box.create(1)
    box.orientation = Rotation.from_euler("z", 45, degrees=True)
    ray = Ray(origin=(-4, 0, 0), direction=(1, 0, 0))
    # The corner of the rotated square faces the ray
    expected = 4.0 - 0.25 * math.sqrt(2.0)
    assert math.isclose(ray_cuboid_toi(ray, box.cuboid()), expected, rel_tol=1e-9)


def test_ray_plane_intersection():
    ray = Ray(origin=(0.5, 0.5, -4), direction=(0, 0, 1))
    t = ray_plane_toi(ray, (0, 0, -4))
    assert math.isclose(t, 4.0)
    assert np.allclose(ray.point_at(t), (0.5, 0.5, 0.0))


def test_ray_parallel_to_plane_raises():
    ray = Ray(origin=(0, 0, -4), direction=(1, 0, 0))
    with pytest.raises(DegenerateRayError):
        ray_plane_toi(ray, (0, 0, 1))
    assert issubclass(DegenerateRayError, ValueError)


def test_decompose_recovers_parts():
    rotation = Rotation.from_euler("xyz", [20, -35, 110], degrees=True)
    matrix = rigid_matrix((1.0, -2.0, 0.5), rotation) @ scaling_matrix((0.5, 2.0, 0.1))

    translations, quaternions, scales = decompose_transforms(matrix[None])

    assert np.allclose(translations[0], (1.0, -2.0, 0.5))
    assert np.allclose(scales[0], (0.5, 2.0, 0.1))
    assert np.allclose(Rotation.from_quat(quaternions[0]).as_matrix(), rotation.as_matrix())


def test_decompose_zero_scale_axis():
    matrix = scaling_matrix((0.0, 1.0, 1.0))
    _, quaternions, scales = decompose_transforms(matrix[None])
    assert np.allclose(scales[0], (0.0, 1.0, 1.0))
    assert math.isclose(np.linalg.norm(quaternions[0]), 1.0)


def test_decompose_empty_stack():
    translations, quaternions, scales = decompose_transforms(np.empty((0, 4, 4)))
    assert translations.shape == (0, 3)
    assert quaternions.shape == (0, 4)
    assert scales.shape == (0, 3)


def test_place_on_camera_plane():
    ray = Ray(origin=(0, 1, -4), direction=(0, -0.25, 1))
    assert np.allclose(place_on_camera_plane(ray, (0, 0, -4)), (0, 0, 0))
