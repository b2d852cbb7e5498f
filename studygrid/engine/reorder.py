"""Drag-reorder engine for studygrid.

A drag gesture moves one block to the position of another block in the
store's ordered list. Ordering is independent of the blocks' time slots.

The default strategy treats every block as one flat sortable list regardless
of day. A day-scoped strategy is provided as a drop-in replacement.
"""

import logging
import math
from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional, Sequence, Tuple, TypeVar

from studygrid.models.constants import ACTIVATION_DISTANCE_PX
from studygrid.models.schedule_block import ScheduleBlock
from studygrid.store.errors import BlockNotFound, DragInProgress

logger = logging.getLogger(__name__)

T = TypeVar("T")


def move_element(items: Sequence[T], old_index: int, new_index: int) -> List[T]:
    """Remove the item at old_index and insert it at new_index (move, not swap)."""
    size = len(items)
    if not 0 <= old_index < size or not 0 <= new_index < size:
        raise IndexError(f"Move {old_index} -> {new_index} out of range for {size} items")
    moved = list(items)
    item = moved.pop(old_index)
    moved.insert(new_index, item)
    return moved


def _index_of(blocks: Sequence[ScheduleBlock], block_id: str) -> int:
    for index, block in enumerate(blocks):
        if block.id == block_id:
            return index
    return -1


class ReorderStrategy(ABC):
    """Computes the new full ordering for a drop of ``active_id`` onto ``over_id``."""

    @abstractmethod
    def reorder(
        self,
        blocks: Sequence[ScheduleBlock],
        active_id: str,
        over_id: str,
    ) -> Optional[List[ScheduleBlock]]:
        """Return the reordered list, or None when the drop changes nothing."""


class FlatReorderStrategy(ReorderStrategy):
    """Moves within the whole list, regardless of day."""

    def reorder(self, blocks, active_id, over_id):
        old_index = _index_of(blocks, active_id)
        new_index = _index_of(blocks, over_id)
        if old_index < 0 or new_index < 0 or old_index == new_index:
            return None
        return move_element(blocks, old_index, new_index)


class DayScopedReorderStrategy(ReorderStrategy):
    """Moves only among blocks sharing the dragged block's day.

    Blocks on other days keep their positions in the flat list.
    """

    def reorder(self, blocks, active_id, over_id):
        old_flat = _index_of(blocks, active_id)
        new_flat = _index_of(blocks, over_id)
        if old_flat < 0 or new_flat < 0 or old_flat == new_flat:
            return None
        day = blocks[old_flat].day_of_week
        if blocks[new_flat].day_of_week != day:
            return None

        positions = [i for i, block in enumerate(blocks) if block.day_of_week == day]
        day_blocks = [blocks[i] for i in positions]
        moved = move_element(day_blocks, positions.index(old_flat), positions.index(new_flat))

        result = list(blocks)
        for position, block in zip(positions, moved):
            result[position] = block
        return result


class DragState(str, Enum):
    """Drag gesture state."""
    IDLE = "idle"
    DRAGGING = "dragging"
    DROPPED = "dropped"
    CANCELLED = "cancelled"


class DragSession:
    """Single-pointer drag gesture over a BlockStore.

    Press on a block's handle, move past the activation distance to start
    dragging, then release over another block to drop. While dragging, the
    store is locked so nothing else can change the list being reordered.
    """

    def __init__(
        self,
        store,
        strategy: Optional[ReorderStrategy] = None,
        activation_distance: float = ACTIVATION_DISTANCE_PX,
    ):
        self.store = store
        self.strategy = strategy or FlatReorderStrategy()
        self.activation_distance = activation_distance
        self.state = DragState.IDLE
        self.active_id: Optional[str] = None
        self._origin: Optional[Tuple[float, float]] = None
        self._items: Tuple[ScheduleBlock, ...] = ()

    @property
    def pressed(self) -> bool:
        return self._origin is not None

    def press(self, block_id: str, x: float, y: float) -> None:
        """Pointer down on a block's drag handle."""
        if self.state == DragState.DRAGGING or (self.state == DragState.IDLE and self.pressed):
            raise DragInProgress("A drag gesture is already active")
        if self.state in (DragState.DROPPED, DragState.CANCELLED):
            self.reset()
        if self.store.get_block(block_id) is None:
            raise BlockNotFound(block_id)
        self.active_id = block_id
        self._origin = (x, y)

    def move(self, x: float, y: float) -> DragState:
        """Pointer moved. Activates the drag once past the activation distance."""
        if self.state != DragState.IDLE or not self.pressed:
            return self.state
        distance = math.hypot(x - self._origin[0], y - self._origin[1])
        if distance > self.activation_distance:
            self.store.lock()
            self._items = tuple(self.store.blocks)
            self.state = DragState.DRAGGING
            logger.debug(f"Drag started for block {self.active_id}")
        return self.state

    def release(self, over_id: Optional[str] = None) -> DragState:
        """Pointer up, optionally over another block.

        Dropping outside any block, onto the dragged block itself, or before
        the drag activated leaves the order unchanged.
        """
        if self.state != DragState.DRAGGING:
            if self.pressed:
                # Plain click: the gesture never activated
                self._finish(DragState.CANCELLED)
            return self.state

        new_order = None
        if over_id is not None:
            new_order = self.strategy.reorder(self._items, self.active_id, over_id)
        if new_order is None:
            return self.cancel()

        self.store.unlock()
        self._finish(DragState.DROPPED)
        logger.debug(f"Dropped block {self.active_id} onto {over_id}")
        self.store.reorder_blocks(new_order)
        return self.state

    def cancel(self) -> DragState:
        """Abort the gesture (e.g. escape key). The store is not touched."""
        if self.state == DragState.DRAGGING:
            self.store.unlock()
        if self.state == DragState.DRAGGING or self.pressed:
            self._finish(DragState.CANCELLED)
        return self.state

    def reset(self) -> None:
        if self.state == DragState.DRAGGING:
            self.store.unlock()
        self.state = DragState.IDLE
        self.active_id = None
        self._origin = None
        self._items = ()

    def _finish(self, state: DragState) -> None:
        self.state = state
        self._origin = None
        self._items = ()
