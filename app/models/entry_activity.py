"""
EntryActivity - a reaction, comment or reply attached to an Entry.

Append-only. Rows go away only with their entry (ON DELETE CASCADE).
`seq` is a monotonically increasing tiebreaker so that activities created
within the same clock tick keep their insertion order.
"""
import enum
import uuid
from datetime import datetime, timezone
from sqlalchemy import Integer, String, DateTime, Enum, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


class ActivityType(str, enum.Enum):
    reaction = "reaction"
    comment = "comment"
    reply = "reply"


class ReactionKind(str, enum.Enum):
    thumbs_up = "thumbs_up"
    love = "love"
    smile = "smile"
    cry = "cry"
    side_eye = "side_eye"
    kind = "kind"


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class EntryActivity(Base):
    __tablename__ = "entry_activities"
    __table_args__ = (
        Index("ix_entry_activities_entry_created", "entry_id", "created_at", "seq"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    seq: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    entry_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("entries.id", ondelete="CASCADE"), nullable=False, index=True
    )
    actor_id: Mapped[str] = mapped_column(String(64), ForeignKey("users.id"), nullable=False)
    type: Mapped[str] = mapped_column(
        Enum(ActivityType, name="activity_type_enum"), nullable=False
    )
    content: Mapped[str | None] = mapped_column(String(280), nullable=True)
    reaction_kind: Mapped[str | None] = mapped_column(
        Enum(ReactionKind, name="reaction_kind_enum"), nullable=True
    )
    parent_id: Mapped[str | None] = mapped_column(
        String(32), ForeignKey("entry_activities.id", ondelete="CASCADE"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    entry = relationship("Entry", back_populates="activities")
    actor = relationship("User", lazy="joined")
