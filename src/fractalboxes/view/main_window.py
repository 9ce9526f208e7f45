"""
Main Application Window
=======================
The GUI container that hosts the 3D viewport and drives the frame loop.

Why is this file needed?
------------------------
1. Routing: It decodes mouse and keyboard events on the viewport into
   Editor calls (select, drag, edit, create, delete, depth).
2. Frame loop: A QTimer ticks once per frame: hover -> drag -> regenerate
   the fractal if the editor is dirty -> redraw the per-frame layers.
"""
import logging

from PySide6.QtWidgets import QMainWindow, QMessageBox
from PySide6.QtCore import QEvent, QObject, Qt, QTimer
from PySide6.QtGui import QAction, QKeyEvent, QMouseEvent, QWheelEvent

from fractalboxes import config
from fractalboxes.controller.commands import ResetOrientation
from fractalboxes.controller.editor import Editor
from fractalboxes.model.geometry_utils import DegenerateRayError
from fractalboxes.view.input_map import WHEEL_STEP, key_command, wheel_command
from fractalboxes.view.widgets.plot_3d import BoxViewport

logger = logging.getLogger(__name__)

HELP_TEXT = """\
Left click: select / drag a box     Right drag: orbit     Middle drag: pan
N: new box at cursor (Shift: double size)     Esc: deselect
Backspace: reset orientation (Shift: delete box)
W/S, A/D, R/F: move along z, x, y     I/K, U/O, J/L: rotate about x, y, z
Wheel + X/Y/Z: scale one axis     Wheel + B: scale all     Wheel + C: hue
Shift: fine steps     Right/Left: iteration depth     Tab: wireframes"""


class MainWindow(QMainWindow):
    def __init__(self, editor: Editor) -> None:
        super().__init__()
        self.editor: Editor = editor

        self.setWindowTitle(config.WINDOW_TITLE)
        self.resize(*config.WINDOW_SIZE)

        # --- CENTRAL 3D VIEWPORT ---
        self.viewport = BoxViewport()
        self.setCentralWidget(self.viewport)

        # Keys currently held (scale/hue modifiers for the wheel)
        self._held_keys: set[int] = set()

        # --- INPUT ROUTING ---
        self.viewport.plotter.setMouseTracking(True)
        self.viewport.plotter.installEventFilter(self)

        # --- ACTIONS & MENUS ---
        self._create_actions()
        self._create_menus()

        # --- FRAME LOOP ---
        self._frame_timer = QTimer(self)
        self._frame_timer.setInterval(config.FRAME_INTERVAL_MS)
        self._frame_timer.timeout.connect(self.on_frame)
        self._frame_timer.start()

    def _create_actions(self) -> None:
        self.act_new = QAction("New Scene", self)
        self.act_new.triggered.connect(self.on_new_scene)

        self.act_exit = QAction("Exit", self)
        self.act_exit.triggered.connect(self.close)

        self.act_wireframes = QAction("Wireframes", self)
        self.act_wireframes.setCheckable(True)
        self.act_wireframes.setChecked(self.editor.wireframes_enabled)
        self.act_wireframes.toggled.connect(self.on_wireframes_toggled)

        self.act_depth_up = QAction("Increase Depth", self)
        self.act_depth_up.triggered.connect(self.editor.increase_depth)

        self.act_depth_down = QAction("Decrease Depth", self)
        self.act_depth_down.triggered.connect(self.editor.decrease_depth)

        self.act_help = QAction("Controls", self)
        self.act_help.triggered.connect(self.on_help)

    def _create_menus(self) -> None:
        menu_file = self.menuBar().addMenu("File")
        menu_file.addAction(self.act_new)
        menu_file.addSeparator()
        menu_file.addAction(self.act_exit)

        menu_view = self.menuBar().addMenu("View")
        menu_view.addAction(self.act_wireframes)
        menu_view.addSeparator()
        menu_view.addAction(self.act_depth_up)
        menu_view.addAction(self.act_depth_down)

        menu_help = self.menuBar().addMenu("Help")
        menu_help.addAction(self.act_help)

    # ------------------------------------------------------------------------------
    # Frame loop
    # ------------------------------------------------------------------------------

    def on_frame(self) -> None:
        ray = self.viewport.cursor_ray()
        if ray is not None:
            self.editor.update_hover(ray)
            self.editor.on_drag_tick(ray)

        if self.editor.take_dirty():
            try:
                render_set = self.editor.render_set()
            except MemoryError:
                logger.error(
                    f"Not enough memory for {self.editor.cube_count()} cubes at depth {self.editor.depth}; "
                    f"keeping the previous fractal."
                )
            else:
                self.viewport.show_render_set(render_set)

        self.viewport.draw_frame(self.editor)

    # ------------------------------------------------------------------------------
    # Event routing
    # ------------------------------------------------------------------------------

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:
        """Consumes the events the editor handles; everything else reaches VTK."""
        etype = event.type()

        if etype == QEvent.Type.MouseMove:
            pos = event.position()
            self.viewport.set_cursor_from_widget(pos.x(), pos.y())
            return False

        if etype in (QEvent.Type.MouseButtonPress, QEvent.Type.MouseButtonDblClick, QEvent.Type.MouseButtonRelease):
            return self._on_mouse_button(event)

        if etype == QEvent.Type.Wheel:
            return self._on_wheel(event)

        if etype == QEvent.Type.KeyPress:
            return self._on_key_press(event)

        if etype == QEvent.Type.KeyRelease:
            if not event.isAutoRepeat():
                self._held_keys.discard(event.key())
            return False

        if etype == QEvent.Type.FocusOut:
            # Releases happening in another window never reach us
            self._held_keys.clear()
            return False

        return super().eventFilter(watched, event)

    def _on_mouse_button(self, event: QMouseEvent) -> bool:
        if event.button() != Qt.MouseButton.LeftButton:
            return False

        pos = event.position()
        self.viewport.set_cursor_from_widget(pos.x(), pos.y())

        if event.type() == QEvent.Type.MouseButtonRelease:
            self.editor.on_release()
            return True

        ray = self.viewport.cursor_ray()
        if ray is None:
            self.editor.deselect()
        else:
            self.editor.on_press(ray)
        return True

    def _on_wheel(self, event: QWheelEvent) -> bool:
        if self.editor.selection() is None:
            return False

        offset = event.angleDelta().y() / WHEEL_STEP
        fine = bool(event.modifiers() & Qt.KeyboardModifier.ShiftModifier)
        command = wheel_command(self._held_keys, offset, fine)
        if command is None:
            return False

        self.editor.edit_selected(command)
        return True

    def _on_key_press(self, event: QKeyEvent) -> bool:
        key = event.key()
        shift = bool(event.modifiers() & Qt.KeyboardModifier.ShiftModifier)

        if not event.isAutoRepeat():
            self._held_keys.add(key)

        command = key_command(key, fine=shift)
        if command is not None:
            self.editor.edit_selected(command)
            return True

        if key == Qt.Key.Key_N:
            self._create_box_at_cursor(doubled=shift)
        elif key == Qt.Key.Key_Backspace:
            if shift:
                self.editor.delete_selected()
            else:
                self.editor.edit_selected(ResetOrientation())
        elif key == Qt.Key.Key_Escape:
            self.editor.deselect()
        elif key == Qt.Key.Key_Right:
            self.editor.increase_depth()
        elif key == Qt.Key.Key_Left:
            self.editor.decrease_depth()
        elif key == Qt.Key.Key_Tab:
            self.act_wireframes.toggle()
        elif key in (Qt.Key.Key_X, Qt.Key.Key_Y, Qt.Key.Key_Z, Qt.Key.Key_B, Qt.Key.Key_C):
            # Wheel modifiers only; keep them away from VTK's own key bindings
            pass
        else:
            return False
        return True

    def _create_box_at_cursor(self, doubled: bool) -> None:
        ray = self.viewport.cursor_ray()
        if ray is None:
            logger.warning("No cursor position yet; cannot place a box.")
            return
        try:
            self.editor.create_box_at_cursor(ray, self.viewport.camera_axis(), doubled=doubled)
        except DegenerateRayError as e:
            logger.error(f"Box placement aborted: {e}")

    # ------------------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------------------

    def on_new_scene(self) -> None:
        self.editor.world.reset()
        self.editor.mark_dirty()

    def on_wireframes_toggled(self, checked: bool) -> None:
        if checked != self.editor.wireframes_enabled:
            self.editor.toggle_wireframes()

    def on_help(self) -> None:
        QMessageBox.information(self, "Controls", HELP_TEXT)

    def changeEvent(self, event) -> None:
        if event.type() == QEvent.Type.ActivationChange and not self.isActiveWindow():
            self._held_keys.clear()
        super().changeEvent(event)

    def closeEvent(self, event) -> None:
        self._frame_timer.stop()
        self.viewport.close()
        super().closeEvent(event)
