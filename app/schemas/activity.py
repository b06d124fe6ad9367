"""
Activity & notification schemas.

GET  /entries/{id}/activities        → EntryActivitiesResponse
POST /entries/{id}/activities        → ActivityCreateRequest → ActivityResponse
POST /entries/{id}/activities/read   → MarkReadRequest → MarkReadResponse
GET  /notifications/unread-count     → UnreadCountResponse
"""
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.entry_activity import ActivityType, ReactionKind
from app.schemas.users import UserResponse


class ActivityCreateRequest(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    actor_id: Annotated[str, Field(min_length=1, examples=["yihun"])]
    type: ActivityType = Field(description='"reaction" | "comment" | "reply"')
    content: Optional[str] = Field(
        default=None,
        max_length=280,
        description="Required for comments and replies.",
    )
    reaction_kind: Optional[ReactionKind] = Field(
        default=None,
        description="Required for reactions, rejected otherwise.",
    )
    parent_id: Optional[str] = Field(
        default=None,
        description="Comment being replied to. Required for replies, rejected otherwise.",
    )


class ActivityResponse(BaseModel):
    id: str
    entry_id: str
    actor_id: str
    type: str
    content: Optional[str] = None
    reaction_kind: Optional[str] = None
    parent_id: Optional[str] = None
    created_at: str
    actor: Optional[UserResponse] = None
    notified_user_id: Optional[str] = Field(
        default=None,
        description="Recipient of the notification this activity produced, if any.",
    )


class EntryActivitiesResponse(BaseModel):
    comments: list[ActivityResponse] = Field(description="Comments and replies, oldest first.")
    reactions: list[ActivityResponse] = Field(description="Reactions, oldest first.")


class MarkReadRequest(BaseModel):
    user_id: Annotated[str, Field(min_length=1)]


class MarkReadResponse(BaseModel):
    entry_id: str
    user_id: str
    marked: int = Field(description="Notifications flipped to read by this call.")


class UnreadCountResponse(BaseModel):
    user_id: str
    unread: int
