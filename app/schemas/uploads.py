"""
POST /uploads → UploadRequest → UploadResponse
"""
from typing import Annotated

from pydantic import BaseModel, Field


class UploadRequest(BaseModel):
    image_data: Annotated[str, Field(
        min_length=1,
        description="Image as a data URL (data:image/png;base64,...) or a remote URL.",
    )]


class UploadResponse(BaseModel):
    url: str
    public_id: str
