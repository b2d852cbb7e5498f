"""Block store for studygrid.

Single source of truth for one user's schedule blocks. Every mutation
updates the in-memory list first, notifies subscribers synchronously, and
only then writes to the persistence collaborator (optimistic update).
Failed writes are rolled back in memory where that is possible, and always
surfaced on the error channel and raised to the caller.
"""

import logging
from contextlib import contextmanager
from typing import Callable, Dict, List, Optional, Protocol, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError

from studygrid.engine.grid import day_summary, validate_block
from studygrid.models.constants import DEFAULT_WINDOW_END, DEFAULT_WINDOW_START
from studygrid.models.schedule_block import (
    BlockInput,
    BlockStatus,
    BlockUpdate,
    ScheduleBlock,
    STATUS_TRANSITIONS,
)
from studygrid.store.errors import (
    BlockNotFound,
    InvalidStatusTransition,
    PartialReorderFailure,
    StorageUnavailable,
    StoreLocked,
    StudyGridError,
)

logger = logging.getLogger(__name__)

# Errors raised by storage backends that mean "could not reach / write storage"
STORAGE_ERRORS = (SQLAlchemyError, OSError)

# Fields that may not be cleared through a partial update
_REQUIRED_FIELDS = {"topic_name", "day_of_week", "start_hour", "end_hour", "status"}

StateListener = Callable[[Tuple[ScheduleBlock, ...]], None]
ErrorListener = Callable[[StudyGridError], None]


class BlockStorage(Protocol):
    """Persistence collaborator for schedule blocks, scoped by user."""

    def select(self, user_id: str) -> List[ScheduleBlock]:
        """All blocks for the user ordered by order_index."""

    def insert(self, block: ScheduleBlock) -> ScheduleBlock:
        ...

    def update(self, user_id: str, block_id: str, fields: Dict) -> None:
        ...

    def delete(self, user_id: str, block_id: str) -> None:
        ...


class BlockStore:
    """Ordered, validated, observable list of a user's schedule blocks."""

    def __init__(
        self,
        user_id: str,
        storage: BlockStorage,
        window_start: int = DEFAULT_WINDOW_START,
        window_end: int = DEFAULT_WINDOW_END,
    ):
        self.user_id = user_id
        self.storage = storage
        self.window_start = window_start
        self.window_end = window_end
        self._blocks: List[ScheduleBlock] = []
        self._listeners: List[StateListener] = []
        self._error_listeners: List[ErrorListener] = []
        self._locked = False

    # Observation

    @property
    def blocks(self) -> Tuple[ScheduleBlock, ...]:
        """Current in-memory snapshot in display order."""
        return tuple(self._blocks)

    def __len__(self) -> int:
        return len(self._blocks)

    def get_block(self, block_id: str) -> Optional[ScheduleBlock]:
        for block in self._blocks:
            if block.id == block_id:
                return block
        return None

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a state listener. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def on_error(self, listener: ErrorListener) -> Callable[[], None]:
        """Register an error listener for storage failures."""
        self._error_listeners.append(listener)

        def unsubscribe():
            if listener in self._error_listeners:
                self._error_listeners.remove(listener)
        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.blocks
        for listener in list(self._listeners):
            listener(snapshot)

    def _report(self, error: StudyGridError) -> None:
        for listener in list(self._error_listeners):
            listener(error)

    # Locking (held by a drag gesture)

    @property
    def is_locked(self) -> bool:
        return self._locked

    def lock(self) -> None:
        if self._locked:
            raise StoreLocked("Block store is already locked")
        self._locked = True

    def unlock(self) -> None:
        self._locked = False

    @contextmanager
    def locked(self):
        self.lock()
        try:
            yield self
        finally:
            self.unlock()

    def _ensure_unlocked(self) -> None:
        if self._locked:
            raise StoreLocked("Block store is locked by an active drag gesture")

    # Reads

    def load(self) -> List[ScheduleBlock]:
        """Fetch blocks from storage and replace the snapshot.

        Raises:
            StorageUnavailable: storage unreachable; ``snapshot`` holds the stale list
        """
        self._ensure_unlocked()
        try:
            rows = self.storage.select(self.user_id)
        except STORAGE_ERRORS as e:
            error = StorageUnavailable(
                f"Could not load blocks for user {self.user_id}: {type(e).__name__}",
                snapshot=self._blocks,
            )
            logger.warning(f"{error}; serving {len(self._blocks)} cached blocks")
            self._report(error)
            raise error from e

        self._blocks = sorted(rows, key=lambda block: block.order_index)
        logger.debug(f"Loaded {len(self._blocks)} blocks for user {self.user_id}")
        self._notify()
        return list(self._blocks)

    def list_blocks(self, strict: bool = False) -> List[ScheduleBlock]:
        """Blocks ordered by order_index, refreshed from storage when possible.

        When storage is unreachable the last known snapshot is returned, unless
        ``strict`` is set, in which case StorageUnavailable is raised. While a
        drag gesture holds the lock, the snapshot is returned without a refresh.
        """
        if self._locked:
            return list(self._blocks)
        try:
            return self.load()
        except StorageUnavailable as e:
            if strict:
                raise
            return list(e.snapshot)

    def blocks_for_day(self, day_of_week: int) -> List[ScheduleBlock]:
        return [block for block in self._blocks if block.day_of_week == day_of_week]

    def day_summary(self, day_of_week: int) -> Dict[str, int]:
        return day_summary(self._blocks, day_of_week)

    # Mutations

    def add_block(self, data: BlockInput) -> ScheduleBlock:
        """Validate and append a new block.

        Raises:
            InvalidDuration, OutOfBounds, OverlapConflict: rejected, nothing changed
            InvalidStatusTransition: new blocks must start out scheduled
            StoreLocked: a drag gesture is active
            StorageUnavailable: insert failed, the append was rolled back
        """
        self._ensure_unlocked()
        requested = BlockStatus(data.status)
        if requested != BlockStatus.SCHEDULED:
            raise InvalidStatusTransition(BlockStatus.SCHEDULED.value, requested.value)
        block = ScheduleBlock(
            user_id=self.user_id,
            topic_id=data.topic_id,
            topic_name=data.topic_name,
            day_of_week=data.day_of_week,
            start_hour=data.start_hour,
            end_hour=data.end_hour,
            status=data.status,
            order_index=len(self._blocks),
        )
        validate_block(block, self._blocks, self.window_start, self.window_end)

        self._blocks.append(block)
        self._notify()

        try:
            self.storage.insert(block)
        except STORAGE_ERRORS as e:
            self._blocks = [b for b in self._blocks if b.id != block.id]
            self._notify()
            raise self._write_failed(f"add block {block.id}", e) from e

        logger.debug(f"Added block {block.id} ({block.topic_name}, day {block.day_of_week}, "
                     f"{block.start_hour}-{block.end_hour})")
        return block

    def update_block(self, block_id: str, update: BlockUpdate) -> ScheduleBlock:
        """Apply a partial update.

        Time or day changes are re-validated against the other blocks on the
        target day; status changes must follow the block lifecycle.

        Raises:
            BlockNotFound: unknown id
            InvalidDuration, OutOfBounds, OverlapConflict, InvalidStatusTransition
            StoreLocked: a drag gesture is active
            StorageUnavailable: update failed, the previous block was restored
        """
        self._ensure_unlocked()
        index = self._index_of(block_id)
        if index < 0:
            raise BlockNotFound(block_id)
        current = self._blocks[index]

        changes = {
            key: value for key, value in update.changes().items()
            if value is not None or key not in _REQUIRED_FIELDS
        }
        if "status" in changes:
            self._check_transition(current, changes["status"])
        if not changes:
            return current

        candidate = current.model_copy(update=changes)
        if update.moves_block():
            validate_block(candidate, self._blocks, self.window_start, self.window_end)

        self._blocks[index] = candidate
        self._notify()

        try:
            self.storage.update(self.user_id, block_id, changes)
        except STORAGE_ERRORS as e:
            index = self._index_of(block_id)
            if index >= 0:
                self._blocks[index] = current
            self._notify()
            raise self._write_failed(f"update block {block_id}", e) from e

        logger.debug(f"Updated block {block_id}: {sorted(changes)}")
        return candidate

    def set_status(self, block_id: str, status: BlockStatus) -> ScheduleBlock:
        return self.update_block(block_id, BlockUpdate(status=status))

    def delete_block(self, block_id: str) -> None:
        """Delete a block. Unknown ids are a no-op.

        Raises:
            StoreLocked: a drag gesture is active
            StorageUnavailable: delete failed, the block was restored
        """
        self._ensure_unlocked()
        index = self._index_of(block_id)
        if index < 0:
            logger.debug(f"Delete of unknown block {block_id} ignored")
            return

        removed = self._blocks.pop(index)
        self._notify()

        try:
            self.storage.delete(self.user_id, block_id)
        except STORAGE_ERRORS as e:
            self._blocks.insert(index, removed)
            self._notify()
            raise self._write_failed(f"delete block {block_id}", e) from e

        logger.debug(f"Deleted block {block_id}")

    def reorder_blocks(self, ordered: Sequence[ScheduleBlock]) -> List[ScheduleBlock]:
        """Replace the display order with ``ordered`` (a permutation of all blocks).

        order_index is reassigned 0..N-1. Memory is updated and subscribers are
        notified before any write. Writes are sequential, one per block; a
        failed write does not stop the remaining ones.

        Raises:
            ValueError: ``ordered`` is not a permutation of the current blocks
            StoreLocked: a drag gesture is active
            PartialReorderFailure: some order_index writes failed (memory keeps the new order)
        """
        self._ensure_unlocked()
        new_ids = [block.id for block in ordered]
        current_ids = [block.id for block in self._blocks]
        if len(new_ids) != len(current_ids) or set(new_ids) != set(current_ids):
            raise ValueError("Reorder must contain exactly the current blocks")

        by_id = {block.id: block for block in self._blocks}
        self._blocks = [
            by_id[block_id].model_copy(update={"order_index": index})
            for index, block_id in enumerate(new_ids)
        ]
        self._notify()

        succeeded: List[str] = []
        failed: List[str] = []
        for index, block_id in enumerate(new_ids):
            try:
                self.storage.update(self.user_id, block_id, {"order_index": index})
                succeeded.append(block_id)
            except STORAGE_ERRORS as e:
                logger.error(f"Failed to persist order_index={index} for block {block_id}: {type(e).__name__}")
                failed.append(block_id)

        if failed:
            error = PartialReorderFailure(succeeded, failed)
            logger.error(f"Reorder for user {self.user_id} left storage inconsistent: {error}")
            self._report(error)
            raise error

        logger.debug(f"Reordered {len(new_ids)} blocks for user {self.user_id}")
        return list(self._blocks)

    # Helpers

    def _index_of(self, block_id: str) -> int:
        for index, block in enumerate(self._blocks):
            if block.id == block_id:
                return index
        return -1

    @staticmethod
    def _check_transition(current: ScheduleBlock, requested) -> None:
        old = BlockStatus(current.status)
        new = BlockStatus(requested)
        if new != old and new not in STATUS_TRANSITIONS[old]:
            raise InvalidStatusTransition(old.value, new.value)

    def _write_failed(self, action: str, cause: Exception) -> StorageUnavailable:
        error = StorageUnavailable(f"Could not {action}: {type(cause).__name__}", snapshot=self._blocks)
        logger.error(str(error))
        self._report(error)
        return error
