"""
Entries router.

GET    /entries          - list entries with activity summaries
POST   /entries          - create an entry
PUT    /entries/{id}     - partial (tri-state) update by the owner
DELETE /entries/{id}     - delete by the owner
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.db.base import get_db
from app.models.entry import Entry
from app.schemas.common import ERROR_RESPONSES, iso
from app.schemas.entries import (
    ActivitySummaryOut,
    EntryCreateRequest,
    EntryOwnerRequest,
    EntryResponse,
    EntryUpdateRequest,
)
from app.schemas.users import UserResponse
from app.services import tags as tag_codec
from app.services.aggregation import EntryWithSummary, list_entries
from app.services.entries import EntryPatch, create_entry, delete_entry, update_entry
from app.services.images import ImageStore, get_image_store

router = APIRouter(prefix="/entries", tags=["entries"])


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------

def entry_to_response(
    entry: Entry,
    summary: Optional[dict[str, int]] = None,
    unread: Optional[int] = None,
) -> EntryResponse:
    return EntryResponse(
        id=entry.id,
        user_id=entry.user_id,
        date=entry.date.isoformat(),
        week_start=entry.week_start.isoformat(),
        count=entry.count,
        note=entry.note,
        tags=tag_codec.decode(entry.tags),
        image_url=entry.image_url,
        created_at=iso(entry.created_at),
        updated_at=iso(entry.updated_at),
        edited_at=iso(entry.edited_at),
        user=UserResponse.model_validate(entry.user) if entry.user else None,
        activity_summary=ActivitySummaryOut(**summary) if summary is not None else None,
        unread_activity_count=unread,
    )


def _summary_to_response(item: EntryWithSummary) -> EntryResponse:
    return entry_to_response(item.entry, item.activity_summary, item.unread_activity_count)


# ---------------------------------------------------------------------------
# GET /entries
# ---------------------------------------------------------------------------

@router.get(
    "",
    response_model=list[EntryResponse],
    summary="List entries, newest first",
)
def get_entries(
    week_start: Optional[str] = Query(
        default=None,
        description="Any ISO date or datetime in the wanted week; normalised to its Monday.",
        examples=["2024-01-08"],
    ),
    day: Optional[str] = Query(
        default=None,
        alias="date",
        description="ISO date (or datetime) of the calendar day to show.",
    ),
    user_id: Optional[str] = Query(
        default=None,
        description="Viewer id. Adds `unread_activity_count` for this user.",
    ),
    owner_id: Optional[str] = Query(
        default=None,
        description="Only entries owned by this user.",
    ),
    db: Session = Depends(get_db),
):
    """
    Return entries matching the filters, sorted by `date` descending.

    Each entry carries `activity_summary` = counts of reactions, comments
    and replies. When `user_id` is given, `unread_activity_count` holds the
    viewer's unread notifications for that entry.
    """
    items = list_entries(
        db=db, week_start=week_start, day=day, user_id=user_id, owner_id=owner_id
    )
    return [_summary_to_response(item) for item in items]


# ---------------------------------------------------------------------------
# POST /entries
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=EntryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an entry",
    responses=ERROR_RESPONSES,
)
def post_entry(payload: EntryCreateRequest, db: Session = Depends(get_db)):
    """`week_start` is derived from `date`; `edited_at` starts empty."""
    entry = create_entry(
        db=db,
        user_id=payload.user_id,
        date=payload.date,
        count=payload.count,
        note=payload.note,
        tags=payload.tags,
        image_url=payload.image_url,
    )
    return entry_to_response(entry)


# ---------------------------------------------------------------------------
# PUT /entries/{id}
# ---------------------------------------------------------------------------

@router.put(
    "/{entry_id}",
    response_model=EntryResponse,
    summary="Partially update an entry (owner only)",
    responses=ERROR_RESPONSES,
)
def put_entry(
    entry_id: str,
    payload: EntryUpdateRequest,
    db: Session = Depends(get_db),
    images: ImageStore = Depends(get_image_store),
):
    """
    Fields omitted from the body are left alone; `null` clears `note`,
    `tags` or `image_url`; a value replaces the stored one. Changing or
    clearing `image_url` also deletes the previous image (best-effort).
    """
    entry = update_entry(
        db=db,
        entry_id=entry_id,
        requester_id=payload.user_id,
        patch=EntryPatch.from_fields(payload.changes()),
        images=images,
    )
    return entry_to_response(entry)


# ---------------------------------------------------------------------------
# DELETE /entries/{id}
# ---------------------------------------------------------------------------

@router.delete(
    "/{entry_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an entry (owner only)",
    responses=ERROR_RESPONSES,
)
def remove_entry(
    entry_id: str,
    payload: EntryOwnerRequest,
    db: Session = Depends(get_db),
    images: ImageStore = Depends(get_image_store),
):
    """Tries to drop the image, then deletes the entry with its activities and notifications."""
    delete_entry(db=db, entry_id=entry_id, requester_id=payload.user_id, images=images)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
