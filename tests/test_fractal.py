import math

import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from fractalboxes.model.box import Box
from fractalboxes.model.fractal import (
    FullRenderSet,
    PointCloudRenderSet,
    RenderKind,
    build_render_set,
    box_transforms,
    candidate_count,
    compose_transforms,
)


def make_boxes(*origins, colors=None):
    boxes = []
    for i, origin in enumerate(origins):
        box = Box.create(i + 1)
        box.origin = np.array(origin, dtype=float)
        if colors is not None:
            box.color = np.array(colors[i], dtype=float)
        boxes.append(box)
    return boxes


def test_candidate_count():
    assert candidate_count(3, 0) == 3
    assert candidate_count(3, 2) == 27
    assert candidate_count(0, 4) == 0
    with pytest.raises(ValueError):
        candidate_count(2, -1)


def test_depth_zero_is_base_boxes():
    boxes = make_boxes((1, 0, 0), (0, 2, 0))
    render_set = build_render_set(boxes, 0)

    assert isinstance(render_set, FullRenderSet)
    assert render_set.kind is RenderKind.BASE
    assert len(render_set) == 2
    assert np.allclose(render_set.translations, [(1, 0, 0), (0, 2, 0)])
    assert np.allclose(render_set.transforms(), box_transforms(boxes))


def test_products_are_lexicographic():
    boxes = make_boxes((1, 0, 0), (0, 2, 0))
    render_set = build_render_set(boxes, 1)

    assert render_set.kind is RenderKind.FULL
    assert len(render_set) == 4
    # T_i @ T_j moves by t_i + 0.5 * t_j
    expected = [(1.5, 0, 0), (1, 1, 0), (0.5, 2, 0), (0, 3, 0)]
    assert np.allclose(render_set.translations, expected)
    assert np.allclose(render_set.scales, 0.25)


def test_composed_transforms_round_trip():
    boxes = make_boxes((0.3, 0, 0), (0, -0.4, 0.2))
    boxes[0].orientation = Rotation.from_euler("xyz", [10, 20, 30], degrees=True)
    boxes[1].scale = np.full(3, 0.3)
    boxes[1].orientation = Rotation.from_euler("z", 90, degrees=True)

    products = compose_transforms(box_transforms(boxes), 2)
    render_set = build_render_set(boxes, 2)

    assert products.shape == (8, 4, 4)
    assert np.allclose(render_set.transforms(), products)


def test_rotations_compose():
    boxes = make_boxes((0, 0, 0))
    boxes[0].orientation = Rotation.from_euler("z", 90, degrees=True)

    render_set = build_render_set(boxes, 1)
    assert math.isclose(Rotation.from_quat(render_set.quaternions[0]).magnitude(), math.pi)


def test_point_cloud_above_ceiling():
    boxes = make_boxes((1, 0, 0), (0, 2, 0))
    boxes[0].orientation = Rotation.from_euler("y", 30, degrees=True)

    full = build_render_set(boxes, 2, ceiling=8)
    cloud = build_render_set(boxes, 2, ceiling=7)

    assert isinstance(full, FullRenderSet)
    assert isinstance(cloud, PointCloudRenderSet)
    assert cloud.kind is RenderKind.POINT_CLOUD
    assert len(cloud) == 8
    assert np.allclose(cloud.points, full.translations)
    assert np.allclose(cloud.colors, full.colors)


def test_colors_blend_by_hue():
    boxes = make_boxes((0, 0, 0), (1, 0, 0), colors=[(1, 0, 0), (0, 1, 0)])
    render_set = build_render_set(boxes, 1)
    expected = [(1, 0, 0), (1, 1, 0), (1, 1, 0), (0, 1, 0)]
    assert np.allclose(render_set.colors, expected)


def test_empty_world():
    render_set = build_render_set([], 3)
    assert len(render_set) == 0
    assert len(build_render_set([], 0)) == 0


def test_iterating_full_set():
    boxes = make_boxes((1, 0, 0))
    pairs = list(build_render_set(boxes, 1))
    assert len(pairs) == 1
    transform, color = pairs[0]
    assert transform.shape == (4, 4)
    assert np.allclose(color, 1.0)


def test_nonuniform_scale_keeps_column_norms():
    boxes = make_boxes((0, 0, 0), (1, 0, 0))
    boxes[0].scale = np.array([1.0, 0.5, 0.25])
    boxes[1].orientation = Rotation.from_euler("z", 45, degrees=True)

    products = compose_transforms(box_transforms(boxes), 1)
    render_set = build_render_set(boxes, 1)

    assert np.allclose(render_set.scales, np.linalg.norm(products[:, :3, :3], axis=1))
    assert np.allclose(render_set.translations, products[:, :3, 3])
