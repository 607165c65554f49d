from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hangtime.db.base_class import Base


class AvailabilityInterval(Base):
    """Free time on one weekday, as minutes after midnight.

    ``start_minute`` is inclusive, ``end_minute`` exclusive. Overlap between
    rows of the same (user, day) is not enforced here; the toggle planner
    never produces it.
    """

    __tablename__ = "availability"

    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid(as_uuid=True),
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # 0 = Sunday ... 6 = Saturday
    day_of_week: Mapped[int] = mapped_column(sa.SmallInteger, nullable=False)
    start_minute: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    end_minute: Mapped[int] = mapped_column(sa.Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)

    __table_args__ = (
        sa.CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_availability_day_of_week"),
        sa.CheckConstraint(
            "start_minute >= 0 AND end_minute <= 1440 AND start_minute < end_minute",
            name="ck_availability_bounds",
        ),
        sa.Index("ix_availability_user_day", "user_id", "day_of_week"),
    )

    owner = relationship("User", back_populates="availability")
