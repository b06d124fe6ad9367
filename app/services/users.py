"""
User directory: list and upsert participants.
"""
from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.models.user import User

logger = get_logger(__name__)


@dataclass
class UserRecord:
    """Lightweight DTO so the service layer stays schema-agnostic."""
    id: str
    name: str
    love_name: str
    track: str


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.name.asc()).all()


def upsert_users(db: Session, records: list[UserRecord]) -> list[User]:
    """Insert new ids, overwrite name / love_name / track of existing ones."""
    by_id: dict[str, User] = {}
    users: list[User] = []
    for record in records:
        user = by_id.get(record.id) or db.get(User, record.id)
        if user is None:
            user = User(id=record.id)
            db.add(user)
        by_id[record.id] = user
        user.name = record.name
        user.love_name = record.love_name
        user.track = record.track
        users.append(user)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("User upsert failed")
        raise
    for user in users:
        db.refresh(user)
    logger.info("Upserted %d user(s)", len(users))
    return users
