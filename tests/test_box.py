import math

import numpy as np
from scipy.spatial.transform import Rotation

from fractalboxes import config
from fractalboxes.model.box import Box


def test_defaults():
    box = Box.create(7)
    assert box.id == 7
    assert np.allclose(box.origin, 0.0)
    assert np.allclose(box.scale, config.DEFAULT_BOX_SCALE)
    assert np.allclose(box.color, config.DEFAULT_BOX_COLOR)
    assert np.allclose(box.transform(), np.diag([0.5, 0.5, 0.5, 1.0]))
    assert not box.hovered


def test_equality_is_identity():
    a = Box.create(1)
    b = Box.create(1)
    b.origin = np.array([3.0, 0.0, 0.0])
    assert a == b
    assert a != Box.create(2)
    assert len({a, b}) == 1


def test_transform_applies_scale_before_rotation():
    box = Box.create(1)
    box.scale = np.array([2.0, 1.0, 1.0])
    box.orientation = Rotation.from_euler("z", 90, degrees=True)
    box.origin = np.array([0.0, 0.0, 1.0])

    tip = box.transform() @ np.array([0.5, 0.0, 0.0, 1.0])
    assert np.allclose(tip[:3], (0.0, 1.0, 1.0))


def test_edges_follow_transform():
    box = Box.create(1)
    edges = box.edges()
    assert edges.shape == (12, 2, 3)
    assert math.isclose(np.abs(edges).max(), 0.25)
    assert math.isclose(np.abs(box.enlarged_edges()).max(), 0.25 * config.SELECTION_BBOX_SCALE)


def test_corner_marker_sits_on_corner():
    box = Box.create(1)
    box.origin = np.array([1.0, 2.0, 3.0])
    marker = box.corner_marker_edges()
    expected = box.origin + config.CORNER_MARKER_PUSH * np.array([-0.25, 0.25, -0.25])
    assert marker.shape == (12, 2, 3)
    assert np.allclose(marker.reshape(-1, 3).mean(axis=0), expected)


def test_rescale_clamps_at_zero():
    box = Box.create(1)
    box.rescale((-1.0, 0.1, 0.0))
    assert np.allclose(box.scale, (0.0, 0.6, 0.5))


def test_rotate_local_and_reset():
    box = Box.create(1)
    box.orientation = Rotation.from_euler("z", 90, degrees=True)
    box.rotate_local(Rotation.from_euler("x", 90, degrees=True))

    # Local x of the box is world y, so the second turn is about world y
    expected = Rotation.from_euler("z", 90, degrees=True) * Rotation.from_euler("x", 90, degrees=True)
    assert np.allclose(box.orientation.as_matrix(), expected.as_matrix())

    box.reset_orientation()
    assert np.allclose(box.orientation.as_matrix(), np.eye(3))


def test_cuboid_folds_scale_into_half_extents():
    box = Box.create(1)
    box.scale = np.array([1.0, 2.0, 0.0])
    box.origin = np.array([0.0, 1.0, 0.0])

    cuboid = box.cuboid()
    assert np.allclose(cuboid.half_extents, (0.5, 1.0, 0.0))
    assert np.allclose(cuboid.translation, box.origin)
    assert np.allclose(box.cuboid_transform()[:3, :3], np.eye(3))
    assert np.allclose(box.cuboid_transform()[:3, 3], box.origin)
