"""
World State (Data Model)
========================
This module defines the central data structure of the running editor.

Why is this file needed?
------------------------
1. Ownership: The World is the only owner of Boxes. Everything else (the
   selection, an active drag, the view) holds a BoxHandle.
2. Staleness: A handle is an (index, generation) pair into a dense slot
   table. Deleting a box bumps the slot's generation, so a handle captured
   before the deletion resolves to None instead of to whatever box reuses
   the slot later.
3. Decoupling: The controller writes to this object; the view only reads.

Classes:
    BoxHandle: Non-owning, generation-checked reference to a Box.
    DragState: Snapshot taken when a press-and-hold drag starts.
    World: The container of boxes, selection, drag and iteration depth.
"""
from __future__ import annotations

import itertools as it
import logging
from dataclasses import dataclass, field
from typing import Iterator, Optional, TYPE_CHECKING

import numpy as np
from scipy.spatial.transform import Rotation

from fractalboxes.model.box import Box

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoxHandle:
    index: int
    generation: int


@dataclass
class _Slot:
    generation: int = 0
    box: Optional[Box] = None


@dataclass
class DragState:
    """
    Exists only while a press-and-hold drag is active.

    Attributes:
        origin_orientation: Box orientation at the moment of the press.
        local_handle_offset: Impact point minus box origin at the press.
        camera_dist: Distance from the ray origin to the impact point.
    """
    origin_orientation: Rotation
    local_handle_offset: npt.NDArray[np.float64]
    camera_dist: float


@dataclass
class World:
    """
    Owns all boxes plus the current selection, drag and iteration depth.

    Boxes are kept in creation order; that order is the order in which they
    enter the fractal composition.
    """
    depth: int = 0
    selection: Optional[BoxHandle] = None
    drag_state: Optional[DragState] = None

    _slots: list[_Slot] = field(default_factory=list)
    _free: list[int] = field(default_factory=list)
    _order: list[int] = field(default_factory=list)
    _ids: Iterator[int] = field(default_factory=lambda: it.count(1))

    # ------------------------------------------------------------------------------
    # Handle table
    # ------------------------------------------------------------------------------

    def new_box(self) -> tuple[BoxHandle, Box]:
        """Creates a default box with a fresh id and stores it."""
        box = Box.create(next(self._ids))
        return self.insert(box), box

    def insert(self, box: Box) -> BoxHandle:
        if self._free:
            index = self._free.pop()
            slot = self._slots[index]
        else:
            index = len(self._slots)
            slot = _Slot()
            self._slots.append(slot)

        slot.box = box
        self._order.append(index)
        logger.debug(f"Stored box #{box.id} in slot {index} (generation {slot.generation}).")
        return BoxHandle(index=index, generation=slot.generation)

    def get(self, handle: Optional[BoxHandle]) -> Optional[Box]:
        """Resolves a handle; None if it is None, stale, or out of range."""
        if handle is None or not 0 <= handle.index < len(self._slots):
            return None
        slot = self._slots[handle.index]
        if slot.generation != handle.generation:
            return None
        return slot.box

    def remove(self, handle: BoxHandle) -> Optional[Box]:
        """Deletes the box behind `handle`, invalidating every copy of the handle."""
        box = self.get(handle)
        if box is None:
            return None

        slot = self._slots[handle.index]
        slot.box = None
        slot.generation += 1
        self._free.append(handle.index)
        self._order.remove(handle.index)
        return box

    def boxes(self) -> list[Box]:
        """Live boxes in creation order."""
        return [self._slots[index].box for index in self._order]

    def items(self) -> list[tuple[BoxHandle, Box]]:
        return [
            (BoxHandle(index=index, generation=self._slots[index].generation), self._slots[index].box)
            for index in self._order
        ]

    def __len__(self) -> int:
        return len(self._order)

    # ------------------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------------------

    def selected_box(self) -> Optional[Box]:
        """
        The selected box, or None.

        A selection whose box was deleted is cleared here, together with any
        drag that depended on it.
        """
        box = self.get(self.selection)
        if box is None and self.selection is not None:
            logger.debug("Selection referred to a deleted box; clearing it.")
            self.selection = None
            self.drag_state = None
        return box

    def clear_selection(self) -> None:
        self.selection = None
        self.drag_state = None

    def reset(self) -> None:
        """Clear all data for a new scene."""
        self.depth = 0
        self.selection = None
        self.drag_state = None
        self._slots = []
        self._free = []
        self._order = []
        self._ids = it.count(1)
        logger.info("World state has been reset.")
