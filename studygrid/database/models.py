"""SQLAlchemy database models for studygrid."""

import uuid
from datetime import datetime
from typing import Type, TypeVar, Union
from sqlalchemy import Column, DateTime, Index, Integer, String

from studygrid.database.database import Base
from studygrid.models.schedule_block import BlockStatus

T = TypeVar('T')


def enum_to_value(enum_obj: Union[str, T]) -> str:
    """Convert enum to string value (handles both enum and string)."""
    if hasattr(enum_obj, 'value'):
        return enum_obj.value
    return str(enum_obj)


def value_to_enum(value: str, enum_class: Type[T], default: T) -> T:
    """Convert string to enum with fallback to default.

    Args:
        value: String value to convert
        enum_class: Enum class to convert to
        default: Default enum value if conversion fails

    Returns:
        Enum instance, or default if conversion fails
    """
    if not value:
        return default
    try:
        return enum_class(value.lower())
    except (ValueError, AttributeError):
        return default


class ScheduleBlockDB(Base):
    """Database model for ScheduleBlock."""

    __tablename__ = "schedule_blocks"
    __table_args__ = (
        Index("ix_schedule_blocks_user_order", "user_id", "order_index"),
    )

    # Primary key
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    # User association (row-level isolation is the storage's job, not ours)
    user_id = Column(String, nullable=False, index=True)

    # Block details
    topic_id = Column(String, nullable=True)
    topic_name = Column(String, nullable=False)
    day_of_week = Column(Integer, nullable=False)
    start_hour = Column(Integer, nullable=False)
    end_hour = Column(Integer, nullable=False)
    status = Column(String, nullable=False, default=BlockStatus.SCHEDULED.value)
    order_index = Column(Integer, nullable=False, default=0)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from studygrid.models.schedule_block import ScheduleBlock
        return ScheduleBlock(
            id=self.id,
            user_id=self.user_id,
            topic_id=self.topic_id,
            topic_name=self.topic_name,
            day_of_week=self.day_of_week,
            start_hour=self.start_hour,
            end_hour=self.end_hour,
            status=value_to_enum(self.status, BlockStatus, BlockStatus.SCHEDULED),
            order_index=self.order_index,
        )

    @classmethod
    def from_pydantic(cls, block):
        """Create database model from Pydantic model."""
        return cls(
            id=block.id,
            user_id=block.user_id,
            topic_id=block.topic_id,
            topic_name=block.topic_name,
            day_of_week=block.day_of_week,
            start_hour=block.start_hour,
            end_hour=block.end_hour,
            status=enum_to_value(block.status),
            order_index=block.order_index,
        )
