"""ScheduleBlock data model for studygrid."""

import uuid
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class BlockStatus(str, Enum):
    """Block status enumeration."""
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    MISSED = "missed"


# Allowed lifecycle moves. Completed and missed are terminal.
STATUS_TRANSITIONS = {
    BlockStatus.SCHEDULED: {BlockStatus.IN_PROGRESS, BlockStatus.MISSED},
    BlockStatus.IN_PROGRESS: {BlockStatus.COMPLETED},
    BlockStatus.COMPLETED: set(),
    BlockStatus.MISSED: set(),
}

# Statuses that occupy their slot on the grid
OCCUPYING_STATUSES = {BlockStatus.SCHEDULED, BlockStatus.IN_PROGRESS, BlockStatus.COMPLETED}


def new_block_id() -> str:
    return str(uuid.uuid4())


class ScheduleBlock(BaseModel):
    """ScheduleBlock is one study session placed on the weekly grid."""

    id: str = Field(default_factory=new_block_id, description="Unique block identifier (UUID v4)")
    user_id: str = Field(..., description="User ID who owns this block")
    topic_id: Optional[str] = Field(None, description="Optional reference to a Topic entity")
    topic_name: str = Field(..., description="Display label, also used for style lookup")
    day_of_week: int = Field(..., description="Day of week (0=Sunday .. 6=Saturday)")
    start_hour: int = Field(..., description="Start hour (top-of-hour grid line)")
    end_hour: int = Field(..., description="End hour (exclusive)")
    status: BlockStatus = Field(BlockStatus.SCHEDULED, description="Block lifecycle status")
    order_index: int = Field(0, description="Display/drag order, independent of the time slot")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True

    @property
    def duration_hours(self) -> int:
        return self.end_hour - self.start_hour

    def occupies_grid(self) -> bool:
        """Whether this block counts for overlap checks (missed blocks free their slot)."""
        return BlockStatus(self.status) in OCCUPYING_STATUSES


class BlockInput(BaseModel):
    """Fields needed to create a block. The store assigns id and order_index.

    Only ``scheduled`` is accepted as a status; later states are reached
    through updates.
    """

    topic_id: Optional[str] = None
    topic_name: str = Field(..., min_length=1)
    day_of_week: int
    start_hour: int
    end_hour: int
    status: BlockStatus = BlockStatus.SCHEDULED

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


class BlockUpdate(BaseModel):
    """Partial update for a block. Unset fields are left untouched."""

    topic_id: Optional[str] = None
    topic_name: Optional[str] = Field(None, min_length=1)
    day_of_week: Optional[int] = None
    start_hour: Optional[int] = None
    end_hour: Optional[int] = None
    status: Optional[BlockStatus] = None

    class Config:
        """Pydantic configuration."""
        use_enum_values = True

    def changes(self) -> dict:
        """Return only the fields the caller explicitly set."""
        return self.model_dump(exclude_unset=True)

    def moves_block(self) -> bool:
        """Whether this update touches the block's time slot."""
        fields = self.model_fields_set
        return bool(fields & {"day_of_week", "start_hour", "end_hour"})
