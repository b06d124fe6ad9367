"""
Activity router.

GET  /entries/{id}/activities        - comments/replies and reactions, oldest first
POST /entries/{id}/activities        - record a reaction, comment or reply
POST /entries/{id}/activities/read   - mark the caller's notifications on an entry read
GET  /notifications/unread-count     - unread notifications for a user
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db.base import get_db
from app.models.entry_activity import EntryActivity
from app.schemas.activity import (
    ActivityCreateRequest,
    ActivityResponse,
    EntryActivitiesResponse,
    MarkReadRequest,
    MarkReadResponse,
    UnreadCountResponse,
)
from app.schemas.common import ERROR_RESPONSES, iso
from app.schemas.users import UserResponse
from app.services.activity import (
    list_activities,
    mark_read,
    record_activity,
    unread_count,
)

router = APIRouter(tags=["activity"])


# ---------------------------------------------------------------------------
# Serialization helper
# ---------------------------------------------------------------------------

def _ev(v) -> Optional[str]:
    if v is None:
        return None
    return v.value if hasattr(v, "value") else str(v)


def _activity_to_response(
    a: EntryActivity, notified_user_id: Optional[str] = None
) -> ActivityResponse:
    return ActivityResponse(
        id=a.id,
        entry_id=a.entry_id,
        actor_id=a.actor_id,
        type=_ev(a.type),
        content=a.content,
        reaction_kind=_ev(a.reaction_kind),
        parent_id=a.parent_id,
        created_at=iso(a.created_at) or "",
        actor=UserResponse.model_validate(a.actor) if a.actor else None,
        notified_user_id=notified_user_id,
    )


# ---------------------------------------------------------------------------
# GET /entries/{id}/activities
# ---------------------------------------------------------------------------

@router.get(
    "/entries/{entry_id}/activities",
    response_model=EntryActivitiesResponse,
    summary="Activities of an entry, oldest first",
    responses=ERROR_RESPONSES,
)
def get_activities(entry_id: str, db: Session = Depends(get_db)):
    result = list_activities(db=db, entry_id=entry_id)
    return EntryActivitiesResponse(
        comments=[_activity_to_response(a) for a in result.comments],
        reactions=[_activity_to_response(a) for a in result.reactions],
    )


# ---------------------------------------------------------------------------
# POST /entries/{id}/activities
# ---------------------------------------------------------------------------

@router.post(
    "/entries/{entry_id}/activities",
    response_model=ActivityResponse,
    status_code=status.HTTP_201_CREATED,
    summary="React to, comment on, or reply on an entry",
    responses=ERROR_RESPONSES,
)
def post_activity(
    entry_id: str,
    payload: ActivityCreateRequest,
    db: Session = Depends(get_db),
):
    """
    Records the activity and, unless the actor owns the entry, one
    notification for the owner. `notified_user_id` tells which.

    | type | needs |
    |---|---|
    | `reaction` | `reaction_kind` |
    | `comment`  | `content` |
    | `reply`    | `content` + `parent_id` of a comment on this entry |
    """
    result = record_activity(
        db=db,
        entry_id=entry_id,
        actor_id=payload.actor_id,
        activity_type=payload.type,
        content=payload.content,
        reaction_kind=payload.reaction_kind,
        parent_id=payload.parent_id,
    )
    notified = result.notification.user_id if result.notification else None
    return _activity_to_response(result.activity, notified_user_id=notified)


# ---------------------------------------------------------------------------
# POST /entries/{id}/activities/read
# ---------------------------------------------------------------------------

@router.post(
    "/entries/{entry_id}/activities/read",
    response_model=MarkReadResponse,
    summary="Mark a user's notifications on one entry as read",
)
def post_mark_read(
    entry_id: str,
    payload: MarkReadRequest,
    db: Session = Depends(get_db),
):
    """Idempotent: a second call reports `marked: 0`."""
    marked = mark_read(db=db, entry_id=entry_id, user_id=payload.user_id)
    return MarkReadResponse(entry_id=entry_id, user_id=payload.user_id, marked=marked)


# ---------------------------------------------------------------------------
# GET /notifications/unread-count
# ---------------------------------------------------------------------------

@router.get(
    "/notifications/unread-count",
    response_model=UnreadCountResponse,
    summary="Number of unread notifications for a user",
)
def get_unread_count(
    user_id: str = Query(description="Recipient user id.", examples=["tekta"]),
    db: Session = Depends(get_db),
):
    return UnreadCountResponse(user_id=user_id, unread=unread_count(db=db, user_id=user_id))
