"""
Users router.

GET  /users  - all participants
POST /users  - upsert a list of participants
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.base import get_db
from app.schemas.users import UserIn, UserResponse
from app.services.users import UserRecord, list_users, upsert_users

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserResponse], summary="List users")
def get_users(db: Session = Depends(get_db)):
    return [UserResponse.model_validate(u) for u in list_users(db)]


@router.post("", response_model=list[UserResponse], summary="Create or update users")
def post_users(payload: list[UserIn], db: Session = Depends(get_db)):
    """Existing ids get their name, love_name and track overwritten."""
    records = [
        UserRecord(id=u.id, name=u.name, love_name=u.love_name, track=u.track)
        for u in payload
    ]
    return [UserResponse.model_validate(u) for u in upsert_users(db, records)]
