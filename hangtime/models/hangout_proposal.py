from __future__ import annotations

import enum
import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hangtime.db.base_class import Base


class ProposalStatus(str, enum.Enum):
    pending = "pending"
    accepted = "accepted"
    declined = "declined"


TERMINAL_STATUSES = frozenset({ProposalStatus.accepted.value, ProposalStatus.declined.value})


class HangoutProposal(Base):
    __tablename__ = "hangout_suggestions"

    # ─────────────────────────────────────────────
    # Parties
    # ─────────────────────────────────────────────
    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    sender_id: Mapped[uuid.UUID] = mapped_column(
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

    # ─────────────────────────────────────────────
    # What / when / where
    # ─────────────────────────────────────────────
    interest_id: Mapped[uuid.UUID | None] = mapped_column(
        sa.Uuid(as_uuid=True),
        sa.ForeignKey("interests.id", ondelete="SET NULL"),
        nullable=True,
    )
    proposed_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False, index=True)

    message: Mapped[str | None] = mapped_column(sa.Text, nullable=True)
    location: Mapped[str | None] = mapped_column(sa.String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(sa.Text, nullable=True)

    # ─────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────
    status: Mapped[str] = mapped_column(
        sa.String(16),
        nullable=False,
        server_default=ProposalStatus.pending.value,
    )
    responded_at: Mapped[datetime | None] = mapped_column(sa.DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)

    __table_args__ = (
        sa.CheckConstraint(
            "status IN ('pending', 'accepted', 'declined')",
            name="ck_hangout_suggestions_status",
        ),
        sa.CheckConstraint("sender_id <> recipient_id", name="ck_hangout_suggestions_not_self"),
    )

    sender = relationship("User", foreign_keys=[sender_id])
    recipient = relationship("User", foreign_keys=[recipient_id])
    interest = relationship("Interest")
