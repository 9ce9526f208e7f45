"""
Configuration & Global Constants
================================
This module serves as the central registry for the editor's tuning constants.

Why is this file needed?
------------------------
1. Abstraction: It prevents magic numbers (step sizes, ceilings, tints)
   scattered throughout the model, controller and view.
2. Consistency: The keyboard shell and the tests read the very same values,
   so a "fine" rotation step in the GUI is the one asserted in the tests.

Exports:
    MAX_CUBES (int): Instantiation ceiling above which the fractal falls back
        to a point cloud.
    SELECTION_BBOX_SCALE (float): Uniform enlargement of the selection wireframe.
"""
import math
import os

# --- Editing steps ---
# "Fine" variants multiply the base step (modifier key held).
TRANSLATE_ADJUST_BASE: float = 0.1
TRANSLATE_ADJUST_FINE: float = 0.1

ROTATE_ADJUST_BASE: float = (2.0 * math.pi) / 24.0
ROTATE_ADJUST_FINE: float = 1.0 / 12.0

SCALE_ADJUST_BASE: float = 0.06
SCALE_ADJUST_FINE: float = 0.25

# Degrees of hue per scroll step
COLOR_ADJUST_BASE: float = 2.0
COLOR_ADJUST_FINE: float = 0.25

# --- Entities ---
DEFAULT_BOX_SCALE: float = 0.5
DEFAULT_BOX_COLOR: tuple[float, float, float] = (1.0, 1.0, 1.0)
DOUBLED_BOX_FACTOR: float = 2.0

# --- Fractal composition ---
MAX_CUBES: int = 2_000

# --- Render-time feedback (never written back to a Box) ---
SELECTION_BBOX_SCALE: float = 1.1
HOVER_TINT: tuple[float, float, float] = (0.15, 0.15, 0.15)  # additive
SELECTION_TINT: tuple[float, float, float] = (1.0, 0.8, 0.8)  # multiplicative
CORNER_MARKER_SCALE: float = 0.01
CORNER_MARKER_PUSH: float = 1.05

# Wireframe colors (RGB)
REFERENCE_CUBE_COLOR: tuple[float, float, float] = (1.0, 1.0, 1.0)
CORNER_MARKER_COLOR: tuple[float, float, float] = (0.0, 1.0, 1.0)
BASE_WIREFRAME_COLOR: tuple[float, float, float] = (0.5, 0.5, 0.9)
SELECTION_WIREFRAME_COLOR: tuple[float, float, float] = (1.0, 0.5, 0.5)

# --- Window / viewport ---
WINDOW_TITLE: str = "Fractal Boxes"
WINDOW_SIZE: tuple[int, int] = (1400, 800)
BACKGROUND_COLOR: tuple[float, float, float] = (0.1, 0.1, 0.1)
FRAME_INTERVAL_MS: int = 1000 // 70
CAMERA_POSITION: tuple[float, float, float] = (0.0, 0.0, -4.0)
CAMERA_FOCAL_POINT: tuple[float, float, float] = (0.0, 0.0, 0.0)
POINT_CLOUD_SIZE: float = 2.0

# --- Logging ---
LOG_LEVEL_ENV: str = "FRACTALBOXES_LOG_LEVEL"


def get_log_level_name(default: str = "INFO") -> str:
    """Log level requested through the environment, upper-cased."""
    return os.environ.get(LOG_LEVEL_ENV, default).strip().upper() or default
