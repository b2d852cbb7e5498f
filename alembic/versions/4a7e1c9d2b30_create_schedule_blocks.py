"""Create schedule_blocks table

Revision ID: 4a7e1c9d2b30
Revises:
Create Date: 2026-10-18
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "4a7e1c9d2b30"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "schedule_blocks",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("topic_id", sa.String(), nullable=True),
        sa.Column("topic_name", sa.String(), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("start_hour", sa.Integer(), nullable=False),
        sa.Column("end_hour", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="scheduled"),
        sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index(op.f("ix_schedule_blocks_user_id"), "schedule_blocks", ["user_id"], unique=False)
    op.create_index("ix_schedule_blocks_user_order", "schedule_blocks", ["user_id", "order_index"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_schedule_blocks_user_order", table_name="schedule_blocks")
    op.drop_index(op.f("ix_schedule_blocks_user_id"), table_name="schedule_blocks")
    op.drop_table("schedule_blocks")
