"""
3D Visualization Widget (PyVista Wrapper) - Box Editor Viewport
"""

from __future__ import annotations

from typing import Optional, TYPE_CHECKING

import logging
import numpy as np
import numpy.typing as npt

from PySide6.QtWidgets import QWidget, QVBoxLayout

from pyvistaqt import QtInteractor
import pyvista as pv

from fractalboxes import config
from fractalboxes.model.colors import display_color
from fractalboxes.model.fractal import FullRenderSet, PointCloudRenderSet, RenderSet
from fractalboxes.model.geometry_primitives import UNIT_CUBE_EDGES, Ray
from fractalboxes.view.widgets.vtk_utils import COLOR_ARRAY, VtkUtils

if TYPE_CHECKING:
    from fractalboxes.controller.editor import Editor

logger = logging.getLogger(__name__)


class BoxViewport(QWidget):
    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)

        self.layout_box: QVBoxLayout = QVBoxLayout(self)
        self.layout_box.setContentsMargins(0, 0, 0, 0)

        self.plotter: QtInteractor = QtInteractor(self)
        self.layout_box.addWidget(self.plotter)

        self._init_plotter()

        self._vtk_utils = VtkUtils()

        # --- Actors state ---
        self._fractal_actor: Optional[pv.Actor] = None
        self._base_actor: Optional[pv.Actor] = None
        self._wireframe_actors: list[pv.Actor] = []

        # Last cursor position in VTK display coordinates
        self._cursor: Optional[tuple[float, float]] = None

    # ------------------------------------------------------------------------------
    # Camera & cursor
    # ------------------------------------------------------------------------------

    def set_cursor_from_widget(self, x: float, y: float) -> None:
        """Stores a cursor position given in (logical) widget pixels, origin top-left."""
        ratio = self.plotter.devicePixelRatioF()
        self._cursor = (x * ratio, (self.plotter.height() - y) * ratio)

    def cursor_ray(self) -> Optional[Ray]:
        """World ray under the last known cursor position, None before the mouse moved."""
        if self._cursor is None:
            return None
        return self.unproject(*self._cursor)

    def unproject(self, display_x: float, display_y: float) -> Optional[Ray]:
        """
        Ray from the near clipping plane to the far one through a display pixel.
        """
        ren = self.plotter.renderer
        ends = []
        for depth in (0.0, 1.0):
            ren.SetDisplayPoint(display_x, display_y, depth)
            ren.DisplayToWorld()
            x, y, z, w = ren.GetWorldPoint()
            if w == 0.0:
                return None
            ends.append(np.array([x, y, z]) / w)

        near, far = ends
        if np.allclose(near, far):
            return None
        return Ray.through(near, far)

    def camera_axis(self) -> npt.NDArray[np.float64]:
        """Camera eye minus focal point: normal of the placement plane."""
        cam = self.plotter.camera
        return np.asarray(cam.position, dtype=np.float64) - np.asarray(cam.focal_point, dtype=np.float64)

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    def show_render_set(self, render_set: RenderSet) -> None:
        """Replaces the composed fractal actor. Depth-0 sets are drawn per frame instead."""
        if self._fractal_actor is not None:
            self.plotter.remove_actor(self._fractal_actor, render=False)
            self._fractal_actor = None

        if len(render_set) == 0:
            return

        if isinstance(render_set, PointCloudRenderSet):
            cloud = self._vtk_utils.points_to_polydata(render_set.points, render_set.colors)
            self._fractal_actor = self.plotter.add_mesh(
                cloud,
                scalars=COLOR_ARRAY,
                rgb=True,
                style="points",
                point_size=config.POINT_CLOUD_SIZE,
                pickable=False,
                show_scalar_bar=False,
                render=False,
            )
            logger.debug(f"Drew point cloud with {len(render_set)} points.")
        elif isinstance(render_set, FullRenderSet) and render_set.composed:
            mesh = self._vtk_utils.boxes_to_polydata(render_set.transforms(), render_set.colors)
            self._fractal_actor = self.plotter.add_mesh(
                mesh,
                scalars=COLOR_ARRAY,
                rgb=True,
                pickable=False,
                show_scalar_bar=False,
                render=False,
            )
            logger.debug(f"Drew {len(render_set)} composed boxes.")

    def draw_frame(self, editor: Editor) -> None:
        """
        Refreshes the per-frame layers:
        1. Base boxes (solid at depth 0, tinted for hover/selection)
        2. Wireframes (reference cube, corner markers, base outlines, selection)
        3. Status text
        """
        self._draw_base_boxes(editor)
        self._draw_wireframes(editor)
        self.plotter.add_text(
            "\n".join(editor.status_lines()),
            position="upper_left",
            font_size=10,
            color="white",
            name="status",
        )
        self.plotter.render()

    # ------------------------------------------------------------------------------
    # Internal: Layer Management
    # ------------------------------------------------------------------------------

    def _draw_base_boxes(self, editor: Editor) -> None:
        if self._base_actor is not None:
            self.plotter.remove_actor(self._base_actor, render=False)
            self._base_actor = None

        boxes = editor.world.boxes()
        if editor.depth > 0 or not boxes:
            return

        selected = editor.selection()
        transforms = np.stack([box.transform() for box in boxes])
        colors = np.stack([
            display_color(box.color, hovered=box.hovered, selected=box == selected)
            for box in boxes
        ])
        mesh = self._vtk_utils.boxes_to_polydata(transforms, colors)
        self._base_actor = self.plotter.add_mesh(
            mesh, scalars=COLOR_ARRAY, rgb=True, pickable=False, show_scalar_bar=False, render=False
        )

    def _draw_wireframes(self, editor: Editor) -> None:
        for actor in self._wireframe_actors:
            self.plotter.remove_actor(actor, render=False)
        self._wireframe_actors.clear()

        if not editor.wireframes_enabled:
            return

        boxes = editor.world.boxes()
        selected = editor.selection()

        layers: list[tuple[npt.NDArray[np.float64], tuple[float, float, float]]] = [
            (UNIT_CUBE_EDGES, config.REFERENCE_CUBE_COLOR),
        ]
        if boxes:
            layers.append((np.concatenate([box.corner_marker_edges() for box in boxes]), config.CORNER_MARKER_COLOR))

        if editor.depth > 0:
            outlines = [box.edges() for box in boxes if box != selected]
            if outlines:
                layers.append((np.concatenate(outlines), config.BASE_WIREFRAME_COLOR))

        if selected is not None:
            layers.append((selected.enlarged_edges(), config.SELECTION_WIREFRAME_COLOR))

        for segments, color in layers:
            actor = self.plotter.add_mesh(
                self._vtk_utils.segments_to_polydata(segments),
                color=color,
                line_width=1,
                pickable=False,
                show_scalar_bar=False,
                render=False,
            )
            self._wireframe_actors.append(actor)

    # ------------------------------------------------------------------------------
    # Internal: Setup
    # ------------------------------------------------------------------------------

    def _init_plotter(self) -> None:
        self.plotter.set_background(config.BACKGROUND_COLOR)
        self.plotter.camera.position = config.CAMERA_POSITION
        self.plotter.camera.focal_point = config.CAMERA_FOCAL_POINT
        self.plotter.camera.up = (0.0, 1.0, 0.0)
        # Left-button events never reach VTK: the window consumes them for selection/dragging
        self.plotter.enable_custom_trackball_style(right="rotate", middle="pan")

    def close(self) -> bool:
        self.plotter.close()
        return super().close()
