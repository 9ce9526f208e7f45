"""
Box Entity
==========
The one kind of object the editor places: a unit cube moved by a rigid
transform and stretched by a nonuniform scale.

Boxes are mutated in place every frame (dragging, keyboard edits) and are
compared against handles captured in earlier frames, so equality is the
identity of the box (its id), never the current field values.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np
from scipy.spatial.transform import Rotation

from fractalboxes import config
from fractalboxes.model.geometry_primitives import UNIT_CUBE_EDGES, Cuboid
from fractalboxes.model.geometry_utils import rigid_matrix, scaling_matrix, transform_points

if TYPE_CHECKING:
    import numpy.typing as npt


def _default_scale() -> npt.NDArray[np.float64]:
    return np.full(3, config.DEFAULT_BOX_SCALE)


def _default_color() -> npt.NDArray[np.float64]:
    return np.array(config.DEFAULT_BOX_COLOR, dtype=np.float64)


@dataclass(eq=False)
class Box:
    """
    Geometric and visual state of one placeable cuboid.

    Attributes:
        id: Unique, monotonically assigned by the owning World.
        origin: World position of the box centre.
        orientation: Unit quaternion (scipy Rotation).
        scale: Edge lengths along the local axes, every component >= 0.
        color: RGB in [0, 1].
        hovered: True while the box is the nearest hit under the cursor.
    """
    id: int
    origin: npt.NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))
    orientation: Rotation = field(default_factory=Rotation.identity)
    scale: npt.NDArray[np.float64] = field(default_factory=_default_scale)
    color: npt.NDArray[np.float64] = field(default_factory=_default_color)
    hovered: bool = False

    @classmethod
    def create(cls, box_id: int) -> Box:
        """A fresh box with default scale and color at the world origin."""
        return cls(id=box_id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Box):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    # ------------------------------------------------------------------------------
    # Derived transforms
    # ------------------------------------------------------------------------------

    def rigid_transform(self) -> npt.NDArray[np.float64]:
        """Rotation + translation, scale excluded."""
        return rigid_matrix(self.origin, self.orientation)

    def transform(self) -> npt.NDArray[np.float64]:
        """Full transform: nonuniform scale first, then the rigid placement."""
        return self.rigid_transform() @ scaling_matrix(self.scale)

    def cuboid(self) -> Cuboid:
        """The picking shape: scale folded into the half-extents, rigid placement only."""
        return Cuboid(
            half_extents=self.scale / 2.0,
            translation=self.origin.copy(),
            rotation=self.orientation,
        )

    def cuboid_transform(self) -> npt.NDArray[np.float64]:
        return self.rigid_transform()

    # ------------------------------------------------------------------------------
    # Wireframes
    # ------------------------------------------------------------------------------

    def edges(self) -> npt.NDArray[np.float64]:
        """The 12 wireframe segments of the transformed unit cube, shape (12, 2, 3)."""
        return transform_points(self.transform(), UNIT_CUBE_EDGES)

    def enlarged_edges(self, factor: float = config.SELECTION_BBOX_SCALE) -> npt.NDArray[np.float64]:
        """
        Wireframe of the box grown uniformly by `factor` about its centre.

        Used for the selection highlight so that it stays visible around the
        box whatever its own size.
        """
        return transform_points(self.transform() @ scaling_matrix(np.full(3, factor)), UNIT_CUBE_EDGES)

    def corner_marker_edges(self) -> npt.NDArray[np.float64]:
        """
        A tiny cube marking the box's (-x, +y, -z) corner, pushed slightly outwards.

        The marker stays readable for zero-sized boxes that are otherwise invisible.
        """
        corner = config.CORNER_MARKER_PUSH * (np.array([-0.5, 0.5, -0.5]) * self.scale)
        corner = self.orientation.apply(corner) + self.origin
        marker_scale = config.CORNER_MARKER_SCALE * float(np.linalg.norm(self.scale))
        return UNIT_CUBE_EDGES * marker_scale + corner

    # ------------------------------------------------------------------------------
    # In-place edits
    # ------------------------------------------------------------------------------

    def translate(self, delta: npt.ArrayLike) -> None:
        self.origin = self.origin + np.asarray(delta, dtype=np.float64)

    def rotate_local(self, rotation: Rotation) -> None:
        """Applies `rotation` in the box's own frame: orientation := orientation * rotation."""
        self.orientation = self.orientation * rotation

    def reset_orientation(self) -> None:
        self.orientation = Rotation.identity()

    def rescale(self, delta: npt.ArrayLike) -> None:
        """Adds `delta` per axis; components never go below zero."""
        self.scale = np.maximum(self.scale + np.asarray(delta, dtype=np.float64), 0.0)
