"""
Entry request / response schemas.

Create:  POST   /entries       → EntryCreateRequest → EntryResponse
Update:  PUT    /entries/{id}  → EntryUpdateRequest → EntryResponse
Delete:  DELETE /entries/{id}  → EntryOwnerRequest
List:    GET    /entries       → list[EntryResponse]

`date` is accepted as an ISO string and parsed by the entries service, so
malformed values come back as VALIDATION_ERROR from the core rather than
from pydantic.
"""
from __future__ import annotations

from typing import Annotated, Optional

from pydantic import BaseModel, Field, field_validator

from app.schemas.users import UserResponse

MAX_TAGS = 6
NOTE_MAX_LENGTH = 280


def _clean_tags(v: Optional[list[str]]) -> Optional[list[str]]:
    if v is None:
        return None
    cleaned = []
    for tag in v:
        if "," in tag:
            raise ValueError("tags must not contain commas")
        if tag.strip():
            cleaned.append(tag.strip())
    return cleaned


class EntryCreateRequest(BaseModel):
    user_id: Annotated[str, Field(min_length=1, examples=["tekta"])]
    date: Annotated[str, Field(
        min_length=1,
        description="ISO date or datetime the entry is attributed to.",
        examples=["2024-01-08", "2024-01-08T18:30:00.000Z"],
    )]
    count: Annotated[int, Field(ge=1, examples=[2])]
    note: Optional[str] = Field(default=None, max_length=NOTE_MAX_LENGTH)
    tags: Optional[list[str]] = Field(default=None, max_length=MAX_TAGS)
    image_url: Optional[str] = None

    @field_validator("tags")
    @classmethod
    def check_tags(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        return _clean_tags(v)


class EntryUpdateRequest(BaseModel):
    """
    Partial update. Omitted fields stay as they are, `null` clears a
    nullable field, a value replaces it. The router forwards only the
    fields present in the request body (`model_fields_set`).
    """
    user_id: Annotated[str, Field(min_length=1, description="Requester; must own the entry.")]
    date: Optional[str] = Field(default=None, min_length=1)
    count: Optional[int] = Field(default=None, ge=1)
    note: Optional[str] = Field(default=None, max_length=NOTE_MAX_LENGTH)
    tags: Optional[list[str]] = Field(default=None, max_length=MAX_TAGS)
    image_url: Optional[str] = None

    @field_validator("tags")
    @classmethod
    def check_tags(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        return _clean_tags(v)

    def changes(self) -> dict:
        sent = self.model_fields_set - {"user_id"}
        return {name: getattr(self, name) for name in sent}


class EntryOwnerRequest(BaseModel):
    user_id: Annotated[str, Field(min_length=1)]


class ActivitySummaryOut(BaseModel):
    reaction: int = 0
    comment: int = 0
    reply: int = 0
    reactions: dict[str, int] = Field(
        default_factory=dict,
        description="Reaction count per reaction_kind; every kind is present.",
        examples=[{"thumbs_up": 1, "love": 2, "smile": 0, "cry": 0, "side_eye": 0, "kind": 0}],
    )


class EntryResponse(BaseModel):
    id: str
    user_id: str
    date: str
    week_start: str
    count: int
    note: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    image_url: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    edited_at: Optional[str] = None
    user: Optional[UserResponse] = None
    activity_summary: Optional[ActivitySummaryOut] = None
    unread_activity_count: Optional[int] = None
