"""Error taxonomy for studygrid.

Validation errors reject a single local mutation and are recoverable.
Storage and optimizer errors are degraded (stale reads, fallback schedules)
rather than propagated as fatal.
"""

from typing import List, Optional, Sequence


class StudyGridError(Exception):
    """Base class for all studygrid errors."""


class ValidationError(StudyGridError):
    """A local mutation was rejected; the store is unchanged."""


class InvalidDuration(ValidationError):
    """end_hour is not after start_hour."""

    def __init__(self, start_hour: int, end_hour: int):
        self.start_hour = start_hour
        self.end_hour = end_hour
        super().__init__(f"Block must end after it starts (start={start_hour}, end={end_hour})")


class OutOfBounds(ValidationError):
    """Block falls outside the grid window or the week."""


class OverlapConflict(ValidationError):
    """Block overlaps an existing block on the same day."""

    def __init__(self, conflicting_block):
        self.conflicting_block = conflicting_block
        super().__init__(
            f"Overlaps '{conflicting_block.topic_name}' on day {conflicting_block.day_of_week} "
            f"({conflicting_block.start_hour}-{conflicting_block.end_hour})"
        )


class InvalidStatusTransition(ValidationError):
    """Status change not allowed by the block lifecycle."""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move block from '{current}' to '{requested}'")


class BlockNotFound(StudyGridError):
    """No block with the given id."""

    def __init__(self, block_id: str):
        self.block_id = block_id
        super().__init__(f"Block {block_id} not found")


class StoreLocked(StudyGridError):
    """A drag gesture holds the store; programmatic mutations are refused."""


class StorageUnavailable(StudyGridError):
    """The persistence collaborator could not be reached.

    ``snapshot`` carries the last known in-memory block list for reads.
    """

    def __init__(self, message: str, snapshot: Optional[Sequence] = None):
        self.snapshot = list(snapshot) if snapshot is not None else None
        super().__init__(message)


class PartialReorderFailure(StudyGridError):
    """Some order_index writes failed; memory and storage disagree."""

    def __init__(self, succeeded_ids: List[str], failed_ids: List[str]):
        self.succeeded_ids = list(succeeded_ids)
        self.failed_ids = list(failed_ids)
        super().__init__(
            f"Reorder persisted {len(self.succeeded_ids)} of "
            f"{len(self.succeeded_ids) + len(self.failed_ids)} blocks; failed: {', '.join(self.failed_ids)}"
        )


class DragInProgress(StudyGridError):
    """Only one drag gesture may be active at a time."""


class OptimizerError(StudyGridError):
    """Generation collaborator failed."""

    kind = "generation_failed"
    user_message = "Schedule optimization failed. A default schedule was generated instead."


class RateLimited(OptimizerError):
    kind = "rate_limited"
    user_message = "Rate limit exceeded. Please try again later."


class QuotaExhausted(OptimizerError):
    kind = "quota_exhausted"
    user_message = "API credits exhausted. Please add credits."


class GenerationFailed(OptimizerError):
    pass


class OptimizationSuperseded(StudyGridError):
    """A newer optimize call replaced this one; its response was discarded."""
