import uuid
from datetime import datetime

from sqlalchemy import String, DateTime, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hangtime.db.base_class import Base


class User(Base):
    __tablename__ = "users"

    # Supplied by the identity provider at onboarding; never generated here.
    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)

    email: Mapped[str] = mapped_column(String(320), unique=True, index=True, nullable=False)
    username: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String(120), nullable=False)

    avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    interests = relationship(
        "Interest",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    availability = relationship(
        "AvailabilityInterval",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
