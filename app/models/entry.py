"""
Entry - one logged count-event for a user on a given day.

`date` and `week_start` are naive local datetimes. `week_start` is always
the Monday 00:00 of the week containing `date` and is recomputed by the
entries service whenever `date` changes.

`tags` is the comma-joined scalar produced by app/services/tags.py.
"""
import uuid
from datetime import datetime
from sqlalchemy import Integer, String, Text, DateTime, ForeignKey, CheckConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base


def _new_id() -> str:
    return uuid.uuid4().hex


class Entry(Base):
    __tablename__ = "entries"
    __table_args__ = (
        CheckConstraint("count >= 1", name="ck_entries_count_positive"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("users.id"), nullable=False, index=True
    )
    date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    week_start: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    count: Mapped[int] = mapped_column(Integer, nullable=False)
    note: Mapped[str | None] = mapped_column(String(280), nullable=True)
    tags: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
    edited_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    user = relationship("User", lazy="joined")
    activities = relationship(
        "EntryActivity",
        back_populates="entry",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    notifications = relationship(
        "Notification",
        back_populates="entry",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
