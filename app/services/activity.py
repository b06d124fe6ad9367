"""
Activity service: reactions / comments / replies and the notifications
they fan out to.

Fan-out rule
------------
Every recorded activity produces at most one Notification, addressed to
the entry owner, and none at all when the actor *is* the owner. The
activity and its notification are committed in the same transaction.

Ordering
--------
Activities of one entry are returned oldest first. `seq` breaks ties
between rows created within the same clock tick.

Public API
----------
record_activity(db, entry_id, actor_id, type, content, reaction_kind, parent_id) -> ActivityResult
list_activities(db, entry_id)     -> EntryActivities
unread_count(db, user_id)         -> int
mark_read(db, entry_id, user_id)  -> int   (rows flipped; 0 on repeat calls)
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import InvalidFieldError, NotFoundError
from app.core.logging import get_logger
from app.models.entry_activity import ActivityType, EntryActivity, ReactionKind
from app.models.notification import Notification
from app.models.user import User
from app.services.entries import get_entry

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class ActivityResult:
    activity: EntryActivity
    notification: Optional[Notification] = None


@dataclass
class EntryActivities:
    comments: list[EntryActivity] = field(default_factory=list)   # comments + replies
    reactions: list[EntryActivity] = field(default_factory=list)


def _ev(v) -> str:
    return v.value if hasattr(v, "value") else str(v)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _check_shape(
    activity_type: ActivityType,
    content: Optional[str],
    reaction_kind: Optional[str],
    parent_id: Optional[str],
) -> None:
    if activity_type == ActivityType.reaction:
        if reaction_kind is None:
            raise InvalidFieldError("reaction_kind", "reactions need a reaction_kind")
        if reaction_kind not in ReactionKind.__members__:
            raise InvalidFieldError("reaction_kind", f"unknown reaction_kind {reaction_kind!r}")
    elif reaction_kind is not None:
        raise InvalidFieldError("reaction_kind", "only reactions carry a reaction_kind")

    if activity_type in (ActivityType.comment, ActivityType.reply):
        if content is None or not content.strip():
            raise InvalidFieldError("content", f"a {activity_type.value} needs content")

    if activity_type == ActivityType.reply:
        if not parent_id:
            raise InvalidFieldError("parent_id", "a reply needs a parent_id")
    elif parent_id is not None:
        raise InvalidFieldError("parent_id", "only replies carry a parent_id")


def _get_parent_comment(db: Session, entry_id: str, parent_id: str) -> EntryActivity:
    parent = db.get(EntryActivity, parent_id)
    if (
        parent is None
        or parent.entry_id != entry_id
        or _ev(parent.type) != ActivityType.comment.value
    ):
        raise NotFoundError("comment", parent_id)
    return parent


def _next_seq(db: Session, entry_id: str) -> int:
    current = (
        db.query(func.max(EntryActivity.seq))
        .filter(EntryActivity.entry_id == entry_id)
        .scalar()
    )
    return (current or 0) + 1


# ---------------------------------------------------------------------------
# Public - record
# ---------------------------------------------------------------------------

def record_activity(
    db: Session,
    entry_id: str,
    actor_id: str,
    activity_type: ActivityType | str,
    content: Optional[str] = None,
    reaction_kind: Optional[str] = None,
    parent_id: Optional[str] = None,
) -> ActivityResult:
    entry = get_entry(db, entry_id)
    if db.get(User, actor_id) is None:
        raise NotFoundError("user", actor_id)

    try:
        activity_type = ActivityType(_ev(activity_type))
    except ValueError:
        raise InvalidFieldError("type", f"unknown activity type {activity_type!r}") from None
    reaction_kind = _ev(reaction_kind) if reaction_kind is not None else None
    _check_shape(activity_type, content, reaction_kind, parent_id)
    if parent_id is not None:
        _get_parent_comment(db, entry.id, parent_id)

    activity = EntryActivity(
        entry_id=entry.id,
        actor_id=actor_id,
        type=activity_type,
        content=content,
        reaction_kind=ReactionKind(reaction_kind) if reaction_kind else None,
        parent_id=parent_id,
        seq=_next_seq(db, entry.id),
    )
    db.add(activity)
    db.flush()  # activity.id for the notification

    notification = None
    if actor_id != entry.user_id:
        notification = Notification(
            user_id=entry.user_id,
            actor_id=actor_id,
            entry_id=entry.id,
            activity_id=activity.id,
            type=activity_type,
            is_read=False,
        )
        db.add(notification)

    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Could not record activity on entry %s", entry_id)
        raise

    db.refresh(activity)
    if notification is not None:
        db.refresh(notification)
        logger.info(
            "Recorded %s %s on entry %s; notified %s",
            activity_type.value, activity.id, entry.id, entry.user_id,
        )
    else:
        logger.info(
            "Recorded %s %s on entry %s (self-activity, no notification)",
            activity_type.value, activity.id, entry.id,
        )
    return ActivityResult(activity=activity, notification=notification)


# ---------------------------------------------------------------------------
# Public - queries
# ---------------------------------------------------------------------------

def list_activities(db: Session, entry_id: str) -> EntryActivities:
    get_entry(db, entry_id)
    rows = (
        db.query(EntryActivity)
        .filter(EntryActivity.entry_id == entry_id)
        .order_by(EntryActivity.created_at.asc(), EntryActivity.seq.asc())
        .all()
    )
    result = EntryActivities()
    for row in rows:
        if _ev(row.type) == ActivityType.reaction.value:
            result.reactions.append(row)
        else:
            result.comments.append(row)
    return result


def unread_count(db: Session, user_id: str) -> int:
    return (
        db.query(func.count(Notification.id))
        .filter(Notification.user_id == user_id, Notification.is_read == False)  # noqa: E712
        .scalar()
        or 0
    )


def mark_read(db: Session, entry_id: str, user_id: str) -> int:
    """Flip every unread notification of (entry, user) to read. Idempotent."""
    updated = (
        db.query(Notification)
        .filter(
            Notification.entry_id == entry_id,
            Notification.user_id == user_id,
            Notification.is_read == False,  # noqa: E712
        )
        .update({Notification.is_read: True}, synchronize_session=False)
    )
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Could not mark notifications read on entry %s", entry_id)
        raise
    if updated:
        logger.info("Marked %d notification(s) read on entry %s for %s", updated, entry_id, user_id)
    return updated
