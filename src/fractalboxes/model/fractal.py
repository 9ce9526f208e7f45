"""
Fractal Composition Engine
==========================
Turns the ordered list of base boxes and an iteration depth into the set of
things to draw.

Every ordered (depth + 1)-tuple of base transforms is multiplied left to
right, T1 @ T2 @ ... @ T(depth+1), giving N ** (depth + 1) combinations.
While that count stays within the ceiling, each product is decomposed back
into translation/rotation/scale and drawn as a box (Full). Above it, each
product is only applied to the world origin and drawn as a point
(PointCloud), which costs one matrix-vector product per combination.

Combinations are enumerated in lexicographic order with the first tuple
member most significant, i.e. the order of itertools.product.

The engine is pure: the same boxes and depth always give the same result.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Iterator, Sequence, Union, TYPE_CHECKING

import numpy as np
from scipy.spatial.transform import Rotation

from fractalboxes import config
from fractalboxes.model.colors import colors_from_hues, hue_vectors, hues_from_vectors, rgb_to_hsl
from fractalboxes.model.geometry_utils import decompose_transforms

if TYPE_CHECKING:
    import numpy.typing as npt
    from fractalboxes.model.box import Box

logger = logging.getLogger(__name__)


class RenderKind(StrEnum):
    BASE = "base"
    FULL = "full"
    POINT_CLOUD = "point cloud"


@dataclass(frozen=True)
class FullRenderSet:
    """
    One box per entry.

    Attributes:
        translations: (M, 3)
        quaternions: (M, 4), scalar-last (x, y, z, w)
        scales: (M, 3)
        colors: (M, 3)
        composed: False at depth 0, where the base boxes are used unchanged.
    """
    translations: npt.NDArray[np.float64]
    quaternions: npt.NDArray[np.float64]
    scales: npt.NDArray[np.float64]
    colors: npt.NDArray[np.float64]
    composed: bool = True

    @property
    def kind(self) -> RenderKind:
        return RenderKind.FULL if self.composed else RenderKind.BASE

    def __len__(self) -> int:
        return self.translations.shape[0]

    def transforms(self) -> npt.NDArray[np.float64]:
        """Full (rigid @ scale) transforms, shape (M, 4, 4)."""
        count = len(self)
        matrices = np.tile(np.eye(4), (count, 1, 1))
        if count == 0:
            return matrices
        rotations = Rotation.from_quat(self.quaternions).as_matrix().reshape(count, 3, 3)
        matrices[:, :3, :3] = rotations * self.scales[:, None, :]
        matrices[:, :3, 3] = self.translations
        return matrices

    def __iter__(self) -> Iterator[tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]]:
        """Yields (transform, color) pairs."""
        return iter(zip(self.transforms(), self.colors))


@dataclass(frozen=True)
class PointCloudRenderSet:
    """
    One point per combination. Display only: points are not pickable.

    Attributes:
        points: (M, 3)
        colors: (M, 3)
    """
    points: npt.NDArray[np.float64]
    colors: npt.NDArray[np.float64]

    @property
    def kind(self) -> RenderKind:
        return RenderKind.POINT_CLOUD

    def __len__(self) -> int:
        return self.points.shape[0]

    def __iter__(self) -> Iterator[tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]]:
        """Yields (point, color) pairs."""
        return iter(zip(self.points, self.colors))


RenderSet = Union[FullRenderSet, PointCloudRenderSet]


def candidate_count(n_boxes: int, depth: int) -> int:
    """Number of combinations at `depth`: n_boxes ** (depth + 1)."""
    if depth < 0:
        raise ValueError(f"Depth must be >= 0, got {depth}.")
    return n_boxes ** (depth + 1)


def box_transforms(boxes: Sequence[Box]) -> npt.NDArray[np.float64]:
    """Full transforms of the base boxes, shape (N, 4, 4)."""
    if not boxes:
        return np.empty((0, 4, 4))
    return np.stack([box.transform() for box in boxes])


def compose_transforms(matrices: npt.NDArray[np.float64], depth: int) -> npt.NDArray[np.float64]:
    """
    All ordered products of (depth + 1) base matrices.

    Args:
        matrices: (N, 4, 4) base transforms.
        depth: Number of self-compositions.

    Returns:
        (N ** (depth + 1), 4, 4); entry (i1, ..., ik) flattened lexicographically
        holds matrices[i1] @ ... @ matrices[ik].
    """
    base = np.asarray(matrices, dtype=np.float64)
    products = base
    for _ in range(depth):
        products = (products[:, None] @ base[None, :]).reshape(-1, 4, 4)
    return products


def compose_points(matrices: npt.NDArray[np.float64], depth: int) -> npt.NDArray[np.float64]:
    """
    The world origin pushed through every ordered product of (depth + 1) matrices.

    Built right to left: the suffix products are only ever needed applied to
    a point, so each step is one batched matrix-vector product and no 4x4
    product is ever formed.

    Returns:
        (N ** (depth + 1), 3), in the same order as compose_transforms.
    """
    matrices = np.asarray(matrices, dtype=np.float64)
    linear = matrices[:, :3, :3]
    offsets = matrices[:, :3, 3]

    points = offsets.copy()  # T_last @ origin
    for _ in range(depth):
        # new[j, s] = T_j @ points[s], flattened so that j is most significant
        points = (np.einsum("jab,sb->jsa", linear, points) + offsets[:, None, :]).reshape(-1, 3)
    return points


def compose_colors(colors: npt.NDArray[np.float64], depth: int) -> npt.NDArray[np.float64]:
    """
    Hue blend of every ordered (depth + 1)-tuple of base colors.

    Each member contributes its unit hue vector; the sum's angle is the hue.
    Saturation and lightness are those of the first base color.

    Returns:
        (N ** (depth + 1), 3), in the same order as compose_transforms.
    """
    colors = np.asarray(colors, dtype=np.float64).reshape(-1, 3)
    if colors.shape[0] == 0:
        return np.empty((0, 3))

    _, saturation, lightness = rgb_to_hsl(colors[0])

    vectors = hue_vectors(colors)
    sums = vectors.copy()
    for _ in range(depth):
        sums = (sums[:, None, :] + vectors[None, :, :]).reshape(-1, 2)

    return colors_from_hues(hues_from_vectors(sums), saturation, lightness)


def _base_render_set(boxes: Sequence[Box]) -> FullRenderSet:
    count = len(boxes)
    if count == 0:
        return FullRenderSet(
            translations=np.empty((0, 3)),
            quaternions=np.empty((0, 4)),
            scales=np.empty((0, 3)),
            colors=np.empty((0, 3)),
            composed=False,
        )
    return FullRenderSet(
        translations=np.stack([box.origin for box in boxes]),
        quaternions=np.stack([box.orientation.as_quat() for box in boxes]),
        scales=np.stack([box.scale for box in boxes]),
        colors=np.stack([box.color for box in boxes]),
        composed=False,
    )


def build_render_set(boxes: Sequence[Box], depth: int, ceiling: int = config.MAX_CUBES) -> RenderSet:
    """
    Generates the render set for `boxes` at `depth`.

    Args:
        boxes: Base boxes in composition order.
        depth: Iteration depth (>= 0).
        ceiling: Largest combination count still instantiated as full boxes.

    Returns:
        The base boxes unchanged at depth 0; otherwise a FullRenderSet or,
        when N ** (depth + 1) > ceiling, a PointCloudRenderSet.

    Raises:
        ValueError: If depth is negative.
    """
    count = candidate_count(len(boxes), depth)

    if depth == 0:
        logger.debug(f"Depth 0: rendering {count} base boxes directly.")
        return _base_render_set(boxes)

    matrices = box_transforms(boxes)
    colors = compose_colors(np.stack([box.color for box in boxes]) if boxes else np.empty((0, 3)), depth)

    if count > ceiling:
        logger.info(
            f"{count} combinations at depth {depth} exceed the ceiling of {ceiling}; "
            f"falling back to a point cloud."
        )
        return PointCloudRenderSet(points=compose_points(matrices, depth), colors=colors)

    translations, quaternions, scales = decompose_transforms(compose_transforms(matrices, depth))
    logger.info(f"Instantiated {count} boxes at depth {depth}.")
    return FullRenderSet(
        translations=translations,
        quaternions=quaternions,
        scales=scales,
        colors=colors,
    )
