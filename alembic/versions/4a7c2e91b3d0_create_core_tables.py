"""create users, friends, interests, hangout_suggestions

Revision ID: 4a7c2e91b3d0
Revises:
Create Date: 2026-02-03 18:12:40.512903

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "4a7c2e91b3d0"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("display_name", sa.String(120), nullable=False),
        sa.Column("avatar_url", sa.String(500), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "friends",
        sa.Column("id", sa.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "requester_id",
            sa.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "recipient_id",
            sa.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("status", sa.String(16), server_default="pending", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("accepted_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("requester_id", "recipient_id", name="uq_friends_pair"),
        sa.CheckConstraint("requester_id <> recipient_id", name="ck_friends_not_self"),
        sa.CheckConstraint("status IN ('pending', 'accepted')", name="ck_friends_status"),
    )
    op.create_index("ix_friends_requester_id", "friends", ["requester_id"])
    op.create_index("ix_friends_recipient_id", "friends", ["recipient_id"])

    op.create_table(
        "interests",
        sa.Column("id", sa.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id",
            sa.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(80), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.UniqueConstraint("user_id", "title", name="uq_interests_owner_title"),
    )
    op.create_index("ix_interests_user_id", "interests", ["user_id"])

    op.create_table(
        "hangout_suggestions",
        sa.Column("id", sa.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "sender_id",
            sa.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "recipient_id",
            sa.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "interest_id",
            sa.UUID(as_uuid=True),
            sa.ForeignKey("interests.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("proposed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(16), server_default="pending", nullable=False),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint(
            "status IN ('pending', 'accepted', 'declined')",
            name="ck_hangout_suggestions_status",
        ),
        sa.CheckConstraint("sender_id <> recipient_id", name="ck_hangout_suggestions_not_self"),
    )
    op.create_index("ix_hangout_suggestions_sender_id", "hangout_suggestions", ["sender_id"])
    op.create_index("ix_hangout_suggestions_recipient_id", "hangout_suggestions", ["recipient_id"])
    op.create_index("ix_hangout_suggestions_proposed_at", "hangout_suggestions", ["proposed_at"])


def downgrade() -> None:
    op.drop_index("ix_hangout_suggestions_proposed_at", table_name="hangout_suggestions")
    op.drop_index("ix_hangout_suggestions_recipient_id", table_name="hangout_suggestions")
    op.drop_index("ix_hangout_suggestions_sender_id", table_name="hangout_suggestions")
    op.drop_table("hangout_suggestions")

    op.drop_index("ix_interests_user_id", table_name="interests")
    op.drop_table("interests")

    op.drop_index("ix_friends_recipient_id", table_name="friends")
    op.drop_index("ix_friends_requester_id", table_name="friends")
    op.drop_table("friends")

    op.drop_index("ix_users_username", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
