from __future__ import annotations

import enum
import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from hangtime.db.base_class import Base


class FriendLinkStatus(str, enum.Enum):
    pending = "pending"
    accepted = "accepted"


class FriendLink(Base):
    """Directed friend edge (requester -> recipient).

    Once accepted the edge means friendship for both parties; use
    :meth:`other_party` instead of branching on the columns at call sites.
    """

    __tablename__ = "friends"

    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    requester_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid(as_uuid=True),
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    recipient_id: Mapped[uuid.UUID] = mapped_column(
        sa.Uuid(as_uuid=True),
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    status: Mapped[str] = mapped_column(
        sa.String(16),
        nullable=False,
        server_default=FriendLinkStatus.pending.value,
    )

    created_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)
    accepted_at: Mapped[datetime | None] = mapped_column(sa.DateTime(timezone=True), nullable=True)

    __table_args__ = (
        sa.UniqueConstraint("requester_id", "recipient_id", name="uq_friends_pair"),
        sa.CheckConstraint("requester_id <> recipient_id", name="ck_friends_not_self"),
        sa.CheckConstraint("status IN ('pending', 'accepted')", name="ck_friends_status"),
    )

    def other_party(self, user_id: uuid.UUID) -> uuid.UUID:
        return self.recipient_id if self.requester_id == user_id else self.requester_id
