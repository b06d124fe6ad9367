"""
Entry mutation service: create, tri-state update and delete of entries.

Ownership
---------
Only the owner (`entry.user_id`) may update or delete an entry. A missing
entry raises NotFoundError, a foreign requester raises ForbiddenError.

Tri-state updates
-----------------
`EntryPatch` carries one `FieldUpdate` per mutable field:

    FieldUpdate()            field absent   -> stored value untouched
    FieldUpdate.clear()      explicit null  -> stored value set to NULL
    FieldUpdate.set(value)   explicit value -> stored value replaced

Every accepted update stamps `edited_at`, even when nothing changed.

Images
------
Replacing or clearing `image_url`, and deleting the entry, hand the old URL
to `ImageStore.delete()`. The return value is ignored: blob cleanup never
decides whether the entry mutation succeeds. On delete the blob is only
touched after the row deletion has committed.

Public API
----------
get_entry(db, entry_id)                                   -> Entry
create_entry(db, user_id, date, count, note, tags, image_url) -> Entry
update_entry(db, entry_id, requester_id, patch, images)    -> Entry
delete_entry(db, entry_id, requester_id, images)           -> None
"""
from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime, timezone
from typing import Any, Generic, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import ForbiddenError, InvalidFieldError, NotFoundError
from app.core.logging import get_logger
from app.models.entry import Entry
from app.models.entry_activity import EntryActivity
from app.models.notification import Notification
from app.models.user import User
from app.services import tags as tag_codec
from app.services.images import ImageStore, get_image_store
from app.services.week import parse_datetime, week_start

logger = get_logger(__name__)

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Tri-state field wrapper
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FieldUpdate(Generic[T]):
    provided: bool = False
    value: Optional[T] = None

    @classmethod
    def set(cls, value: T) -> "FieldUpdate[T]":
        return cls(provided=True, value=value)

    @classmethod
    def clear(cls) -> "FieldUpdate[T]":
        return cls(provided=True, value=None)

    @property
    def clears(self) -> bool:
        return self.provided and self.value is None


UNCHANGED: FieldUpdate = FieldUpdate()


@dataclass
class EntryPatch:
    date: FieldUpdate = UNCHANGED
    count: FieldUpdate = UNCHANGED
    note: FieldUpdate = UNCHANGED
    tags: FieldUpdate = UNCHANGED
    image_url: FieldUpdate = UNCHANGED

    @classmethod
    def from_fields(cls, values: dict[str, Any]) -> "EntryPatch":
        """Build a patch from only the keys the caller actually sent."""
        known = {f.name for f in fields(cls)}
        return cls(**{
            name: FieldUpdate.set(value)
            for name, value in values.items()
            if name in known
        })


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


def _check_count(count: Any) -> int:
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise InvalidFieldError("count", "count must be a positive integer")
    return count


def _check_date(value: Any) -> datetime:
    moment = parse_datetime(value)
    if moment is None:
        raise InvalidFieldError("date", f"date {value!r} is not a valid ISO date")
    return moment


def _commit(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Entry transaction failed")
        raise


def get_entry(db: Session, entry_id: str) -> Entry:
    entry = db.get(Entry, entry_id)
    if entry is None:
        raise NotFoundError("entry", entry_id)
    return entry


def _get_owned_entry(db: Session, entry_id: str, requester_id: str) -> Entry:
    entry = get_entry(db, entry_id)
    if entry.user_id != requester_id:
        logger.warning(
            "User %s tried to modify entry %s owned by %s",
            requester_id, entry_id, entry.user_id,
        )
        raise ForbiddenError(entry_id=entry_id, user_id=requester_id)
    return entry


# ---------------------------------------------------------------------------
# Public - create
# ---------------------------------------------------------------------------

def create_entry(
    db: Session,
    user_id: str,
    date: Any,
    count: int,
    note: Optional[str] = None,
    tags: Optional[list[str]] = None,
    image_url: Optional[str] = None,
) -> Entry:
    if db.get(User, user_id) is None:
        raise NotFoundError("user", user_id)

    moment = _check_date(date)
    entry = Entry(
        user_id=user_id,
        date=moment,
        week_start=week_start(moment),
        count=_check_count(count),
        note=note,
        tags=tag_codec.encode(tags),
        image_url=image_url,
        edited_at=None,
    )
    db.add(entry)
    _commit(db)
    db.refresh(entry)
    logger.info("Created entry %s for %s (count=%d)", entry.id, user_id, entry.count)
    return entry


# ---------------------------------------------------------------------------
# Public - update
# ---------------------------------------------------------------------------

def update_entry(
    db: Session,
    entry_id: str,
    requester_id: str,
    patch: EntryPatch,
    images: Optional[ImageStore] = None,
) -> Entry:
    entry = _get_owned_entry(db, entry_id, requester_id)

    # Validate the non-nullable fields before touching the row.
    if patch.date.clears:
        raise InvalidFieldError("date", "date cannot be cleared")
    if patch.count.clears:
        raise InvalidFieldError("count", "count cannot be cleared")
    moment = _check_date(patch.date.value) if patch.date.provided else None
    count = _check_count(patch.count.value) if patch.count.provided else None

    if moment is not None:
        entry.date = moment
        entry.week_start = week_start(moment)

    if count is not None:
        entry.count = count

    if patch.note.provided:
        entry.note = patch.note.value

    if patch.tags.provided:
        entry.tags = tag_codec.encode(patch.tags.value)

    if patch.image_url.provided:
        old_url = entry.image_url
        new_url = patch.image_url.value
        if old_url and new_url != old_url:
            (images or get_image_store()).delete(old_url)
        entry.image_url = new_url

    entry.edited_at = _now()
    _commit(db)
    db.refresh(entry)
    logger.info("Updated entry %s", entry.id)
    return entry


# ---------------------------------------------------------------------------
# Public - delete
# ---------------------------------------------------------------------------

def delete_entry(
    db: Session,
    entry_id: str,
    requester_id: str,
    images: Optional[ImageStore] = None,
) -> None:
    """Remove the entry together with its activities and notifications."""
    entry = _get_owned_entry(db, entry_id, requester_id)
    old_url = entry.image_url

    db.query(Notification).filter(Notification.entry_id == entry.id).delete(
        synchronize_session=False
    )
    db.query(EntryActivity).filter(EntryActivity.entry_id == entry.id).delete(
        synchronize_session=False
    )
    db.expire(entry, ["activities", "notifications"])
    db.delete(entry)
    _commit(db)
    logger.info("Deleted entry %s", entry_id)

    # Blob goes only after the row is gone.
    if old_url:
        (images or get_image_store()).delete(old_url)
