"""
Uploads router.

POST /uploads  - push an image to remote storage, returns its url
"""
from fastapi import APIRouter, Depends, status

from app.schemas.common import ErrorResponse
from app.schemas.uploads import UploadRequest, UploadResponse
from app.services.images import ImageStore, get_image_store

router = APIRouter(prefix="/uploads", tags=["uploads"])


@router.post(
    "",
    response_model=UploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload an entry image",
    responses={
        502: {"model": ErrorResponse, "description": "Image provider rejected the upload."},
        503: {"model": ErrorResponse, "description": "Image storage is not configured."},
    },
)
def post_upload(
    payload: UploadRequest,
    images: ImageStore = Depends(get_image_store),
):
    """
    Upload is separate from entry creation: the client uploads first and
    sends the returned `url` as `image_url` when creating or updating.
    """
    uploaded = images.upload(payload.image_data)
    return UploadResponse(url=uploaded.url, public_id=uploaded.public_id)
