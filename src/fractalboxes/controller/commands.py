"""
Edit Commands
=============
Abstract, already-decoded edits applied to the selected box.

The application shell turns key presses and scroll steps into these; the
Editor applies them. Each command knows how to mutate a Box in place and
whether it is allowed while the box is being dragged.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union, TYPE_CHECKING

import numpy as np

from fractalboxes import config
from fractalboxes.model.colors import shift_hue
from fractalboxes.model.geometry_utils import axis_angle

if TYPE_CHECKING:
    import numpy.typing as npt
    from fractalboxes.model.box import Box


def _vector3(value: npt.ArrayLike) -> npt.NDArray[np.float64]:
    arr = np.asarray(value, dtype=np.float64).reshape(-1)
    if arr.shape != (3,):
        raise ValueError(f"Expected 3 components, got shape {arr.shape}.")
    return arr


@dataclass(frozen=True)
class Translate:
    """Moves the box origin by `delta` (world axes)."""
    delta: tuple[float, float, float]

    # The drag owns the origin while it lasts
    allowed_while_dragging = False

    def apply(self, box: Box) -> None:
        box.translate(_vector3(self.delta))

    @classmethod
    def step(cls, direction: npt.ArrayLike, fine: bool = False) -> Translate:
        factor = config.TRANSLATE_ADJUST_BASE * (config.TRANSLATE_ADJUST_FINE if fine else 1.0)
        return cls(delta=tuple(factor * _vector3(direction)))


@dataclass(frozen=True)
class Rotate:
    """Rotates the box about one of its own axes by `angle` radians."""
    axis: tuple[float, float, float]
    angle: float

    allowed_while_dragging = True

    def apply(self, box: Box) -> None:
        box.rotate_local(axis_angle(self.axis, self.angle))

    @classmethod
    def step(cls, axis: npt.ArrayLike, fine: bool = False) -> Rotate:
        factor = config.ROTATE_ADJUST_BASE * (config.ROTATE_ADJUST_FINE if fine else 1.0)
        return cls(axis=tuple(_vector3(axis)), angle=factor)


@dataclass(frozen=True)
class ResetOrientation:
    allowed_while_dragging = True

    def apply(self, box: Box) -> None:
        box.reset_orientation()


@dataclass(frozen=True)
class Rescale:
    """Adds `delta` to the box scale per axis, clamped at zero."""
    delta: tuple[float, float, float]

    allowed_while_dragging = True

    def apply(self, box: Box) -> None:
        box.rescale(_vector3(self.delta))

    @classmethod
    def step(cls, axes: npt.ArrayLike, offset: float, fine: bool = False) -> Rescale:
        """
        Args:
            axes: Mask of the affected axes, e.g. (1, 0, 0) or (1, 1, 1).
            offset: Scroll offset (signed number of steps).
            fine: Use the fine step.
        """
        factor = config.SCALE_ADJUST_BASE * (config.SCALE_ADJUST_FINE if fine else 1.0)
        return cls(delta=tuple(factor * offset * _vector3(axes)))


@dataclass(frozen=True)
class ShiftHue:
    """Rotates the box color's hue by `degrees`."""
    degrees: float

    allowed_while_dragging = True

    def apply(self, box: Box) -> None:
        box.color = shift_hue(box.color, self.degrees)

    @classmethod
    def step(cls, offset: float, fine: bool = False) -> ShiftHue:
        factor = config.COLOR_ADJUST_BASE * (config.COLOR_ADJUST_FINE if fine else 1.0)
        return cls(degrees=factor * offset)


EditCommand = Union[Translate, Rotate, ResetOrientation, Rescale, ShiftHue]
