"""
Color Utilities
===============
Hue/saturation/lightness helpers for editing and for the fractal color blend.

Hues are handled as angles. Blending sums unit vectors (sin, cos) of the
member hues and reads the hue back from the resultant's angle, so a mix of
350 deg and 10 deg lands on 0 deg instead of 180 deg.
"""
from __future__ import annotations

import colorsys
from typing import TYPE_CHECKING

import numpy as np

from fractalboxes import config

if TYPE_CHECKING:
    import numpy.typing as npt

TAU = 2.0 * np.pi


def rgb_to_hsl(rgb: npt.ArrayLike) -> tuple[float, float, float]:
    """
    Args:
        rgb: Color with components in [0, 1].

    Returns:
        (hue in [0, 1), saturation, lightness)
    """
    r, g, b = np.clip(np.asarray(rgb, dtype=np.float64), 0.0, 1.0)
    h, l, s = colorsys.rgb_to_hls(r, g, b)
    return h, s, l


def hsl_to_rgb(hue: float, saturation: float, lightness: float) -> npt.NDArray[np.float64]:
    return np.array(colorsys.hls_to_rgb(hue % 1.0, lightness, saturation), dtype=np.float64)


def shift_hue(rgb: npt.ArrayLike, degrees: float) -> npt.NDArray[np.float64]:
    """Rotates the hue of a color, wrapping around the color wheel."""
    h, s, l = rgb_to_hsl(rgb)
    return hsl_to_rgb(h + degrees / 360.0, s, l)


def hue_vectors(colors: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """
    Unit hue vectors of an (N, 3) array of colors.

    Returns:
        (N, 2) array of (sin, cos) of each hue angle.
    """
    colors = np.asarray(colors, dtype=np.float64).reshape(-1, 3)
    angles = np.array([rgb_to_hsl(c)[0] for c in colors], dtype=np.float64) * TAU
    return np.column_stack((np.sin(angles), np.cos(angles)))


def hues_from_vectors(vectors: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """
    Hue in [0, 1) of each summed (sin, cos) vector.

    A resultant of zero length (hues cancelling out exactly) reads as hue 0.
    """
    vectors = np.asarray(vectors, dtype=np.float64).reshape(-1, 2)
    angles = np.arctan2(vectors[:, 0], vectors[:, 1])
    return np.mod(angles, TAU) / TAU


def _hue_channel(m1: float, m2: float, hue: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    # Array form of colorsys._v
    hue = np.mod(hue, 1.0)
    return np.select(
        [hue < 1.0 / 6.0, hue < 0.5, hue < 2.0 / 3.0],
        [m1 + (m2 - m1) * hue * 6.0, np.full_like(hue, m2), m1 + (m2 - m1) * (2.0 / 3.0 - hue) * 6.0],
        default=m1,
    )


def colors_from_hues(hues: npt.ArrayLike, saturation: float, lightness: float) -> npt.NDArray[np.float64]:
    """
    Recombines hues with a fixed saturation/lightness into an (N, 3) RGB array.

    Vectorized equivalent of colorsys.hls_to_rgb; the point-cloud path calls
    it with one hue per combination.
    """
    hues = np.asarray(hues, dtype=np.float64).reshape(-1)
    if saturation == 0.0:
        return np.full((hues.size, 3), lightness, dtype=np.float64)

    m2 = lightness * (1.0 + saturation) if lightness <= 0.5 else lightness + saturation - lightness * saturation
    m1 = 2.0 * lightness - m2
    return np.column_stack((
        _hue_channel(m1, m2, hues + 1.0 / 3.0),
        _hue_channel(m1, m2, hues),
        _hue_channel(m1, m2, hues - 1.0 / 3.0),
    ))


# ------------------------------------------------------------------------------
# Render-time feedback
# ------------------------------------------------------------------------------

def display_color(rgb: npt.ArrayLike, *, hovered: bool = False, selected: bool = False) -> npt.NDArray[np.float64]:
    """
    The color a box is drawn with. Never written back to the box.

    Hover brightens additively, selection tints multiplicatively.
    """
    color = np.asarray(rgb, dtype=np.float64).copy()
    if hovered:
        color = color + np.asarray(config.HOVER_TINT)
    if selected:
        color = color * np.asarray(config.SELECTION_TINT)
    return np.clip(color, 0.0, 1.0)
