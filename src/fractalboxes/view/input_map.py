"""
Input Mapping
=============
Decodes raw Qt keys and wheel steps into editor commands.

Why is this file needed?
------------------------
The controller only understands abstract commands (Translate, Rotate, ...).
This table is the one place that knows which physical key means what, so the
window's event filter stays a thin dispatcher.
"""
from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Qt

from fractalboxes.controller.commands import EditCommand, Rescale, Rotate, ShiftHue, Translate

# World-axis direction of each translation key
TRANSLATION_KEYS: dict[Qt.Key, tuple[float, float, float]] = {
    Qt.Key.Key_W: (0.0, 0.0, 1.0),
    Qt.Key.Key_S: (0.0, 0.0, -1.0),
    Qt.Key.Key_A: (1.0, 0.0, 0.0),
    Qt.Key.Key_D: (-1.0, 0.0, 0.0),
    Qt.Key.Key_R: (0.0, 1.0, 0.0),
    Qt.Key.Key_F: (0.0, -1.0, 0.0),
}

# Local rotation axis (positive angle) of each rotation key
ROTATION_KEYS: dict[Qt.Key, tuple[float, float, float]] = {
    Qt.Key.Key_I: (1.0, 0.0, 0.0),
    Qt.Key.Key_K: (-1.0, 0.0, 0.0),
    Qt.Key.Key_L: (0.0, 0.0, 1.0),
    Qt.Key.Key_J: (0.0, 0.0, -1.0),
    Qt.Key.Key_O: (0.0, 1.0, 0.0),
    Qt.Key.Key_U: (0.0, -1.0, 0.0),
}

# Keys that, held down, turn the mouse wheel into a scale edit (checked in order)
SCALE_KEYS: dict[Qt.Key, tuple[float, float, float]] = {
    Qt.Key.Key_B: (1.0, 1.0, 1.0),
    Qt.Key.Key_X: (1.0, 0.0, 0.0),
    Qt.Key.Key_Y: (0.0, 1.0, 0.0),
    Qt.Key.Key_Z: (0.0, 0.0, 1.0),
}

HUE_KEY = Qt.Key.Key_C

# One notch of a standard mouse wheel
WHEEL_STEP = 120.0


def key_command(key: Qt.Key, fine: bool) -> Optional[EditCommand]:
    """Edit command bound to a single key press, if any."""
    if key in TRANSLATION_KEYS:
        return Translate.step(TRANSLATION_KEYS[key], fine=fine)
    if key in ROTATION_KEYS:
        return Rotate.step(ROTATION_KEYS[key], fine=fine)
    return None


def wheel_command(held_keys: set[Qt.Key], offset: float, fine: bool) -> Optional[EditCommand]:
    """
    Edit command for a wheel step given the keys currently held.

    Returns:
        None when no modifier key is held, in which case the wheel zooms the camera.
    """
    for key, axes in SCALE_KEYS.items():
        if key in held_keys:
            return Rescale.step(axes, offset, fine=fine)
    if HUE_KEY in held_keys:
        return ShiftHue.step(offset, fine=fine)
    return None
