"""add availability

Revision ID: 9e1f5b2c7a64
Revises: 4a7c2e91b3d0
Create Date: 2026-02-11 09:47:03.228114

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "9e1f5b2c7a64"
down_revision: Union[str, None] = "4a7c2e91b3d0"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "availability",
        sa.Column("id", sa.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id",
            sa.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("day_of_week", sa.SmallInteger(), nullable=False),
        sa.Column("start_minute", sa.Integer(), nullable=False),
        sa.Column("end_minute", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_availability_day_of_week"),
        sa.CheckConstraint(
            "start_minute >= 0 AND end_minute <= 1440 AND start_minute < end_minute",
            name="ck_availability_bounds",
        ),
    )
    op.create_index("ix_availability_user_id", "availability", ["user_id"])
    op.create_index("ix_availability_user_day", "availability", ["user_id", "day_of_week"])


def downgrade() -> None:
    op.drop_index("ix_availability_user_day", table_name="availability")
    op.drop_index("ix_availability_user_id", table_name="availability")
    op.drop_table("availability")
