import math

import numpy as np
import pytest

from fractalboxes.controller.commands import Rotate, Translate
from fractalboxes.controller.editor import Editor, EditorMode, format_matrix
from fractalboxes.model.geometry_primitives import Ray
from fractalboxes.model.geometry_utils import DegenerateRayError

FORWARD = Ray(origin=(0, 0, -4), direction=(0, 0, 1))
ASIDE = Ray(origin=(3, 0, -4), direction=(0, 0, 1))


def editor_with_box(origin=(0.0, 0.0, 0.0)):
    editor = Editor()
    editor.create_box(origin)
    editor.take_dirty()
    return editor


def test_press_release_cycle():
    editor = editor_with_box()
    assert editor.mode is EditorMode.IDLE

    selected = editor.on_press(FORWARD)
    assert selected is not None
    assert editor.mode is EditorMode.DRAGGING
    assert editor.world.drag_state is not None

    editor.on_release()
    assert editor.mode is EditorMode.SELECTED
    assert editor.selection() is selected


def test_press_on_empty_space_deselects():
    editor = editor_with_box()
    editor.on_press(FORWARD)
    editor.on_release()

    assert editor.on_press(ASIDE) is None
    assert editor.mode is EditorMode.IDLE


def test_deselect_drops_drag():
    editor = editor_with_box()
    editor.on_press(FORWARD)
    editor.deselect()
    assert editor.mode is EditorMode.IDLE
    assert editor.world.drag_state is None


def test_delete_selected():
    editor = editor_with_box()
    assert not editor.delete_selected()

    editor.on_press(FORWARD)
    assert editor.delete_selected()
    assert editor.mode is EditorMode.IDLE
    assert len(editor.world) == 0
    assert editor.take_dirty()


def test_selection_of_removed_box_reads_idle():
    editor = editor_with_box()
    editor.on_press(FORWARD)
    editor.world.remove(editor.world.selection)
    assert editor.mode is EditorMode.IDLE
    editor.on_drag_tick(FORWARD)


def test_drag_tick_with_same_ray_keeps_box():
    editor = editor_with_box((0.1, 0.05, 0.0))
    box = editor.on_press(FORWARD)
    before = box.origin.copy()

    editor.on_drag_tick(FORWARD)
    editor.on_drag_tick(FORWARD)
    assert np.allclose(box.origin, before)


def test_drag_follows_ray_at_camera_distance():
    editor = editor_with_box()
    box = editor.on_press(FORWARD)

    editor.on_drag_tick(Ray(origin=(1, 0, -4), direction=(0, 0, 1)))
    assert np.allclose(box.origin, (1.0, 0.0, 0.0))


def test_grab_point_stays_on_ray_while_rotating():
    editor = editor_with_box()
    box = editor.on_press(FORWARD)

    assert editor.edit_selected(Rotate(axis=(1.0, 0.0, 0.0), angle=math.pi / 2))
    editor.on_drag_tick(FORWARD)

    # The grabbed front-face point (0, 0, -0.25) swung to (0, 0.25, 0) about the centre
    assert np.allclose(box.origin, (0.0, -0.25, -0.25))


def test_translate_ignored_while_dragging():
    editor = editor_with_box()
    box = editor.on_press(FORWARD)

    assert not editor.edit_selected(Translate(delta=(0.0, 0.0, 0.1)))
    assert np.allclose(box.origin, 0.0)

    editor.on_release()
    assert editor.edit_selected(Translate(delta=(0.0, 0.0, 0.1)))
    assert np.allclose(box.origin, (0.0, 0.0, 0.1))


def test_edit_without_selection():
    editor = editor_with_box()
    assert not editor.edit_selected(Translate(delta=(1.0, 0.0, 0.0)))
    assert not editor.take_dirty()


def test_depth_changes():
    editor = editor_with_box()
    editor.decrease_depth()
    assert editor.depth == 0
    assert not editor.take_dirty()

    editor.increase_depth()
    assert editor.depth == 1
    assert editor.take_dirty()

    with pytest.raises(ValueError):
        editor.set_depth(-1)


def test_dirty_flag():
    editor = Editor()
    assert editor.take_dirty()
    assert not editor.take_dirty()

    editor.create_box((0, 0, 0))
    assert editor.take_dirty()

    editor.on_press(FORWARD)
    editor.on_drag_tick(ASIDE)
    assert not editor.take_dirty()

    editor.on_release()
    assert editor.take_dirty()


def test_create_doubled_box():
    editor = Editor()
    handle = editor.create_box((1, 2, 3), doubled=True)
    box = editor.world.get(handle)
    assert np.allclose(box.scale, 1.0)
    assert np.allclose(box.origin, (1, 2, 3))


def test_create_box_at_cursor():
    editor = Editor()
    ray = Ray(origin=(0.5, 0.5, -4), direction=(0, 0, 1))
    handle = editor.create_box_at_cursor(ray, plane_normal=(0, 0, -4))
    assert np.allclose(editor.world.get(handle).origin, (0.5, 0.5, 0.0))


def test_create_box_at_cursor_parallel_ray():
    editor = Editor()
    ray = Ray(origin=(0, 0, -4), direction=(1, 0, 0))
    with pytest.raises(DegenerateRayError):
        editor.create_box_at_cursor(ray, plane_normal=(0, 0, -4))
    assert len(editor.world) == 0


def test_hover_marks_only_nearest():
    editor = Editor()
    editor.create_box((0, 0, 1))
    editor.create_box((0, 0, 0))
    editor.update_hover(FORWARD)
    assert [box.hovered for box in editor.world.boxes()] == [False, True]

    editor.update_hover(ASIDE)
    assert not any(box.hovered for box in editor.world.boxes())


def test_cube_count():
    editor = Editor()
    for x in range(3):
        editor.create_box((x, 0, 0))
    editor.set_depth(2)
    assert editor.cube_count() == 27


def test_status_lines():
    editor = editor_with_box()
    assert editor.status_lines() == ["iterations: 0", "cubes: 1"]

    editor.on_press(FORWARD)
    lines = editor.status_lines()
    assert len(lines) == 7
    assert lines[3] == "  0.50   0.00   0.00   0.00"


def test_format_matrix():
    assert format_matrix(np.eye(4))[0] == "  1.00   0.00   0.00   0.00"
    assert format_matrix(np.diag([-1.5, 2.0, 3.0, 1.0]))[0] == " -1.50   0.00   0.00   0.00"
