"""
Editor Controller (Selection & Drag State Machine)
==================================================
This module is the single entry point through which the application shell
changes the World.

Why is this file needed?
------------------------
1. State machine: It owns the Idle -> Selected -> Dragging transitions that
   a press, a release, a deselect or a delete cause.
2. Dragging: It keeps the point grabbed on a box glued to the cursor ray at
   the original camera distance, even while the box is rotated mid-drag.
3. Regeneration: It raises a dirty flag on every edit that changes what the
   fractal looks like; the shell consumes that flag once per frame and only
   then asks for a new render set.

Nothing here knows about Qt or PyVista: a world-space Ray goes in, Boxes and
render sets come out.
"""
from __future__ import annotations

import logging
from enum import StrEnum
from typing import Optional, TYPE_CHECKING

import numpy as np

from fractalboxes import config
from fractalboxes.model.fractal import RenderSet, build_render_set, candidate_count
from fractalboxes.model.geometry_utils import place_on_camera_plane
from fractalboxes.model.picking import Hit, nearest_intersection
from fractalboxes.model.world import DragState, World

if TYPE_CHECKING:
    import numpy.typing as npt
    from fractalboxes.controller.commands import EditCommand
    from fractalboxes.model.box import Box
    from fractalboxes.model.geometry_primitives import Ray
    from fractalboxes.model.world import BoxHandle

logger = logging.getLogger(__name__)


class EditorMode(StrEnum):
    IDLE = "idle"
    SELECTED = "selected"
    DRAGGING = "dragging"


class Editor:
    def __init__(self, world: Optional[World] = None, ceiling: int = config.MAX_CUBES) -> None:
        self.world: World = world if world is not None else World()
        self.ceiling: int = ceiling
        self.wireframes_enabled: bool = True

        # The first frame always needs a render set
        self._dirty: bool = True

    # ------------------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------------------

    @property
    def mode(self) -> EditorMode:
        if self.world.selected_box() is None:
            return EditorMode.IDLE
        if self.world.drag_state is None:
            return EditorMode.SELECTED
        return EditorMode.DRAGGING

    @property
    def depth(self) -> int:
        return self.world.depth

    def selection(self) -> Optional[Box]:
        return self.world.selected_box()

    def pick(self, ray: Ray) -> Optional[Hit]:
        return nearest_intersection(self.world, ray)

    def cube_count(self) -> int:
        return candidate_count(len(self.world), self.world.depth)

    # ------------------------------------------------------------------------------
    # Per-frame updates
    # ------------------------------------------------------------------------------

    def update_hover(self, ray: Ray) -> Optional[Hit]:
        """Flags exactly the nearest hit box (if any) as hovered."""
        hit = self.pick(ray)
        for box in self.world.boxes():
            box.hovered = hit is not None and box == hit.box
        return hit

    def on_drag_tick(self, ray: Ray) -> None:
        """
        Moves the dragged box so the grabbed point sits on `ray` again.

        The grab offset was measured in the box's orientation at the press;
        it is carried through the rotation accumulated since then rather than
        re-measured, so rotating mid-drag spins the box about the grab point.
        """
        drag = self.world.drag_state
        if drag is None:
            return

        box = self.world.selected_box()
        if box is None:
            # selected_box() already dropped the drag of a deleted box
            return

        rotation = box.orientation * drag.origin_orientation.inv()
        terminus = ray.origin + drag.camera_dist * ray.unit_direction()
        box.origin = terminus - rotation.apply(drag.local_handle_offset)

    # ------------------------------------------------------------------------------
    # Selection state machine
    # ------------------------------------------------------------------------------

    def on_press(self, ray: Ray) -> Optional[Box]:
        """
        Selects the box under the ray and starts dragging it.

        A press on empty space clears the selection.

        Returns:
            The selected box, or None.
        """
        hit = self.pick(ray)
        if hit is None:
            if self.world.selection is not None:
                logger.debug("Press on empty space; deselecting.")
            self.world.clear_selection()
            return None

        self.world.selection = hit.handle
        self.world.drag_state = DragState(
            origin_orientation=hit.box.orientation,
            local_handle_offset=hit.impact - hit.box.origin,
            camera_dist=float(np.linalg.norm(ray.origin - hit.impact)),
        )
        logger.debug(f"Selected box #{hit.box.id} at t={hit.toi:.4f}; drag started.")
        return hit.box

    def on_release(self) -> None:
        if self.world.drag_state is None:
            return
        self.world.drag_state = None
        self.mark_dirty()
        logger.debug("Drag finished.")

    def deselect(self) -> None:
        self.world.clear_selection()

    def delete_selected(self) -> bool:
        """
        Removes the selected box from the world.

        Returns:
            True if a box was deleted.
        """
        handle = self.world.selection
        self.world.clear_selection()
        if handle is None:
            return False

        box = self.world.remove(handle)
        if box is None:
            return False

        logger.info(f"Deleted box #{box.id}; {len(self.world)} boxes left.")
        self.mark_dirty()
        return True

    # ------------------------------------------------------------------------------
    # Entities
    # ------------------------------------------------------------------------------

    def create_box(self, origin: npt.ArrayLike, doubled: bool = False) -> BoxHandle:
        """
        Adds a default box centred at `origin`.

        Args:
            origin: World position.
            doubled: Multiply the default scale by DOUBLED_BOX_FACTOR.
        """
        origin_arr = np.asarray(origin, dtype=np.float64).reshape(-1)
        if origin_arr.shape != (3,):
            raise ValueError(f"Box origin must have 3 components, got shape {origin_arr.shape}.")

        handle, box = self.world.new_box()
        box.origin = origin_arr.copy()
        if doubled:
            box.scale = box.scale * config.DOUBLED_BOX_FACTOR

        logger.info(f"Created box #{box.id} at {np.round(box.origin, 3)}; {len(self.world)} boxes.")
        self.mark_dirty()
        return handle

    def create_box_at_cursor(self, ray: Ray, plane_normal: npt.ArrayLike, doubled: bool = False) -> BoxHandle:
        """
        Places a new box where `ray` meets the plane through the world origin
        with normal `plane_normal` (the camera's viewing axis).

        Raises:
            DegenerateRayError: The ray is parallel to the plane; nothing is created.
        """
        origin = place_on_camera_plane(ray, plane_normal)
        return self.create_box(origin, doubled=doubled)

    def edit_selected(self, command: EditCommand) -> bool:
        """
        Applies an edit command to the selected box.

        Returns:
            True if the box changed; False without a selection or when the
            command is not allowed during the current drag.
        """
        box = self.world.selected_box()
        if box is None:
            return False

        if self.world.drag_state is not None and not command.allowed_while_dragging:
            logger.debug(f"Ignoring {command} while dragging.")
            return False

        command.apply(box)
        logger.debug(f"Applied {command} to box #{box.id}.")
        self.mark_dirty()
        return True

    # ------------------------------------------------------------------------------
    # Iteration depth
    # ------------------------------------------------------------------------------

    def set_depth(self, depth: int) -> None:
        if depth < 0:
            raise ValueError(f"Iteration depth must be >= 0, got {depth}.")
        if depth == self.world.depth:
            return
        self.world.depth = depth
        logger.info(f"Iteration depth set to {depth} ({self.cube_count()} cubes).")
        self.mark_dirty()

    def increase_depth(self) -> None:
        self.set_depth(self.world.depth + 1)

    def decrease_depth(self) -> None:
        if self.world.depth == 0:
            logger.debug("Depth already 0; nothing to decrease.")
            return
        self.set_depth(self.world.depth - 1)

    # ------------------------------------------------------------------------------
    # Rendering support
    # ------------------------------------------------------------------------------

    def toggle_wireframes(self) -> None:
        self.wireframes_enabled = not self.wireframes_enabled

    def mark_dirty(self) -> None:
        self._dirty = True

    def take_dirty(self) -> bool:
        """Returns the dirty flag and clears it."""
        dirty, self._dirty = self._dirty, False
        return dirty

    def render_set(self, depth: Optional[int] = None) -> RenderSet:
        """Render set of the current boxes at `depth` (default: the world's depth)."""
        return build_render_set(
            self.world.boxes(),
            self.world.depth if depth is None else depth,
            self.ceiling,
        )

    def status_lines(self) -> list[str]:
        """Overlay text: depth, cube count and the selected box's transform."""
        lines = [
            f"iterations: {self.world.depth}",
            f"cubes: {self.cube_count()}",
        ]
        box = self.world.selected_box()
        if box is not None:
            lines.append("selected transform (matrix representation)")
            lines.extend(format_matrix(box.transform()))
        return lines


def format_matrix(matrix: npt.NDArray[np.float64]) -> list[str]:
    return [" ".join(f"{value: >6.2f}" for value in row) for row in matrix]
