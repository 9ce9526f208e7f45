"""Ray picking against the boxes of a World."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

import numpy as np

from fractalboxes.model.geometry_utils import ray_cuboid_toi

if TYPE_CHECKING:
    import numpy.typing as npt
    from fractalboxes.model.box import Box
    from fractalboxes.model.geometry_primitives import Ray
    from fractalboxes.model.world import BoxHandle, World


@dataclass(frozen=True)
class Hit:
    """Nearest intersection of a ray with a box."""
    handle: BoxHandle
    box: Box
    toi: float
    impact: npt.NDArray[np.float64]


def nearest_intersection(world: World, ray: Ray) -> Optional[Hit]:
    """
    Finds the box hit first along `ray`.

    Every box is tested with its rigid placement and half-extents
    (scale / 2). Among equal times of impact the earliest box in creation
    order wins, which keeps the choice stable within one query.

    Returns:
        The hit, or None when the world is empty or nothing is hit.
    """
    best: Optional[tuple[float, BoxHandle, Box]] = None

    for handle, box in world.items():
        toi = ray_cuboid_toi(ray, box.cuboid(), solid=True)
        if toi is None:
            continue
        if best is None or toi < best[0]:
            best = (toi, handle, box)

    if best is None:
        return None

    toi, handle, box = best
    return Hit(handle=handle, box=box, toi=toi, impact=ray.point_at(toi))
