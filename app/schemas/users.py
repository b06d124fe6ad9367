"""
User directory schemas.

GET  /users  → list[UserResponse]
POST /users  → list[UserIn] → list[UserResponse]
"""
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

_Name = Annotated[str, Field(min_length=1, max_length=128)]


class UserIn(BaseModel):
    id: Annotated[str, Field(min_length=1, max_length=64, examples=["tekta"])]
    name: _Name
    love_name: _Name
    track: Annotated[str, Field(min_length=1, max_length=64, examples=["males"])]


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    love_name: str
    track: str
