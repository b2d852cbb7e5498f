"""Repository for ScheduleBlock database operations."""

import logging
from typing import Dict, List, Optional
from sqlalchemy.orm import Session

from studygrid.models.schedule_block import ScheduleBlock
from studygrid.database.models import ScheduleBlockDB, enum_to_value

logger = logging.getLogger(__name__)

# Columns a caller may change through update()
UPDATABLE_FIELDS = {"topic_id", "topic_name", "day_of_week", "start_hour", "end_hour", "status", "order_index"}


class ScheduleBlockRepository:
    """Repository for ScheduleBlock database operations.

    Every query is scoped to a user_id. Implements the block store's
    persistence protocol (select / insert / update / delete).
    """

    def __init__(self, db: Session):
        self.db = db

    def select(self, user_id: str) -> List[ScheduleBlock]:
        """Get all schedule blocks for a user sorted by order_index."""
        blocks_db = self.db.query(ScheduleBlockDB).filter(
            ScheduleBlockDB.user_id == user_id
        ).order_by(ScheduleBlockDB.order_index, ScheduleBlockDB.created_at).all()
        return [block_db.to_pydantic() for block_db in blocks_db]

    def get_by_id(self, user_id: str, block_id: str) -> Optional[ScheduleBlock]:
        """Get a schedule block by ID (user-scoped)."""
        row = (
            self.db.query(ScheduleBlockDB)
            .filter(ScheduleBlockDB.user_id == user_id, ScheduleBlockDB.id == block_id)
            .first()
        )
        return row.to_pydantic() if row else None

    def insert(self, block: ScheduleBlock) -> ScheduleBlock:
        """Create a new schedule block."""
        try:
            block_db = ScheduleBlockDB.from_pydantic(block)
            self.db.add(block_db)
            self.db.commit()
            self.db.refresh(block_db)
            logger.debug(f"Created schedule block {block.id}")
            return block_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create schedule block {block.id}: {type(e).__name__}: {str(e)}")
            raise

    def update(self, user_id: str, block_id: str, fields: Dict) -> None:
        """Update the given columns of a block (user-scoped). Missing rows are ignored."""
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        try:
            row = (
                self.db.query(ScheduleBlockDB)
                .filter(ScheduleBlockDB.user_id == user_id, ScheduleBlockDB.id == block_id)
                .first()
            )
            if row is None:
                logger.debug(f"Update skipped, schedule block {block_id} not found")
                return
            for key, value in fields.items():
                setattr(row, key, enum_to_value(value) if key == "status" else value)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update schedule block {block_id}: {type(e).__name__}: {str(e)}")
            raise

    def delete(self, user_id: str, block_id: str) -> None:
        """Delete a block (user-scoped). Deleting a missing block is a no-op."""
        try:
            deleted_count = (
                self.db.query(ScheduleBlockDB)
                .filter(ScheduleBlockDB.user_id == user_id, ScheduleBlockDB.id == block_id)
                .delete()
            )
            self.db.commit()
            logger.debug(f"Deleted {deleted_count} schedule block(s) with id {block_id}")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete schedule block {block_id}: {type(e).__name__}: {str(e)}")
            raise

