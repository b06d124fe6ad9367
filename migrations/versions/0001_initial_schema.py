"""initial schema

Revision ID: 0001
Revises:
Create Date: 2024-01-08 00:00:00.000000

users, entries, entry_activities, notifications.
Activities and notifications cascade away with their entry.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_ACTIVITY_TYPES = ("reaction", "comment", "reply")
_REACTION_KINDS = ("thumbs_up", "love", "smile", "cry", "side_eye", "kind")


def upgrade() -> None:
    # --- ENUM types ---
    activity_type_enum = sa.Enum(*_ACTIVITY_TYPES, name="activity_type_enum")
    activity_type_enum.create(op.get_bind(), checkfirst=True)

    reaction_kind_enum = sa.Enum(*_REACTION_KINDS, name="reaction_kind_enum")
    reaction_kind_enum.create(op.get_bind(), checkfirst=True)

    # --- users ---
    op.create_table(
        "users",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("love_name", sa.String(128), nullable=False),
        sa.Column("track", sa.String(64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    # --- entries ---
    op.create_table(
        "entries",
        sa.Column("id", sa.String(32), nullable=False),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("week_start", sa.DateTime(), nullable=False),
        sa.Column("count", sa.Integer(), nullable=False),
        sa.Column("note", sa.String(280), nullable=True),
        sa.Column("tags", sa.Text(), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("edited_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("count >= 1", name="ck_entries_count_positive"),
    )
    op.create_index("ix_entries_user_id", "entries", ["user_id"])
    op.create_index("ix_entries_date", "entries", ["date"])
    op.create_index("ix_entries_week_start", "entries", ["week_start"])

    # --- entry_activities ---
    op.create_table(
        "entry_activities",
        sa.Column("id", sa.String(32), nullable=False),
        sa.Column("seq", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "entry_id", sa.String(32),
            sa.ForeignKey("entries.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("actor_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("type", sa.Enum(
            *_ACTIVITY_TYPES, name="activity_type_enum", create_type=False,
        ), nullable=False),
        sa.Column("content", sa.String(280), nullable=True),
        sa.Column("reaction_kind", sa.Enum(
            *_REACTION_KINDS, name="reaction_kind_enum", create_type=False,
        ), nullable=True),
        sa.Column(
            "parent_id", sa.String(32),
            sa.ForeignKey("entry_activities.id", ondelete="CASCADE"), nullable=True,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_entry_activities_entry_id", "entry_activities", ["entry_id"])
    op.create_index(
        "ix_entry_activities_entry_created",
        "entry_activities",
        ["entry_id", "created_at", "seq"],
    )

    # --- notifications ---
    op.create_table(
        "notifications",
        sa.Column("id", sa.String(32), nullable=False),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("actor_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "entry_id", sa.String(32),
            sa.ForeignKey("entries.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "activity_id", sa.String(32),
            sa.ForeignKey("entry_activities.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("type", sa.Enum(
            *_ACTIVITY_TYPES, name="activity_type_enum", create_type=False,
        ), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notifications_entry_id", "notifications", ["entry_id"])
    op.create_index("ix_notifications_user_read", "notifications", ["user_id", "is_read"])


def downgrade() -> None:
    op.drop_index("ix_notifications_user_read", table_name="notifications")
    op.drop_index("ix_notifications_entry_id", table_name="notifications")
    op.drop_table("notifications")

    op.drop_index("ix_entry_activities_entry_created", table_name="entry_activities")
    op.drop_index("ix_entry_activities_entry_id", table_name="entry_activities")
    op.drop_table("entry_activities")

    op.drop_index("ix_entries_week_start", table_name="entries")
    op.drop_index("ix_entries_date", table_name="entries")
    op.drop_index("ix_entries_user_id", table_name="entries")
    op.drop_table("entries")

    op.drop_table("users")

    sa.Enum(name="reaction_kind_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="activity_type_enum").drop(op.get_bind(), checkfirst=True)
