"""
Image store: uploads and deletes entry images on Cloudinary.

Uploads are an explicit, client-orchestrated step (POST /uploads) and may
fail loudly. Deletes are best-effort: `delete()` never raises, it returns
False when storage is unconfigured, the URL carries no recognisable public
id, or the provider call fails. Entry mutations call `delete()` and ignore
the result, so a stale blob can be left behind but an entry never points
at a blob that was removed under it.

Public API
----------
ImageStore.from_settings()            -> ImageStore
ImageStore.upload(image_data)         -> UploadedImage
ImageStore.delete(image_url)          -> bool
extract_public_id(image_url)          -> str | None
get_image_store()                     -> ImageStore   (FastAPI dependency)
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlsplit

import cloudinary.uploader

from app.core.config import settings
from app.core.errors import DeleteError, ServiceUnavailableError, UploadError
from app.core.logging import get_logger

logger = get_logger(__name__)

SERVICE_NAME = "Image storage"

# .../image/upload/v1712345678/weekly-tally/abc123.jpg -> weekly-tally/abc123
_PUBLIC_ID_RE = re.compile(r"/upload/(?:v\d+/)?(?P<public_id>.+?)\.[A-Za-z0-9]+$")


@dataclass
class UploadedImage:
    url: str
    public_id: str


def extract_public_id(image_url: Optional[str]) -> Optional[str]:
    if not image_url:
        return None
    path = urlsplit(image_url).path
    match = _PUBLIC_ID_RE.search(path)
    if match is None:
        return None
    return match.group("public_id")


class ImageStore:
    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        folder: str,
        timeout: float,
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.folder = folder
        self.timeout = timeout

    @classmethod
    def from_settings(cls) -> "ImageStore":
        return cls(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
            folder=settings.IMAGE_FOLDER,
            timeout=settings.IMAGE_TIMEOUT_SECONDS,
        )

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def _credentials(self) -> dict[str, Any]:
        return {
            "cloud_name": self.cloud_name,
            "api_key": self.api_key,
            "api_secret": self.api_secret,
            "secure": True,
            "timeout": self.timeout,
        }

    # -----------------------------------------------------------------------
    # Upload
    # -----------------------------------------------------------------------

    def upload(self, image_data: str) -> UploadedImage:
        """
        Upload a data URL (or remote URL) into the configured folder.

        Raises ServiceUnavailableError when credentials are missing and
        UploadError on any provider or transport failure.
        """
        if not self.configured:
            raise ServiceUnavailableError(SERVICE_NAME)

        try:
            result = cloudinary.uploader.upload(
                image_data,
                folder=self.folder,
                resource_type="image",
                **self._credentials(),
            )
        except Exception as exc:
            logger.error("Image upload failed: %s", exc)
            raise UploadError(f"Image upload failed: {exc}") from exc

        url = result.get("secure_url") or result.get("url")
        public_id = result.get("public_id")
        if not url or not public_id:
            logger.error("Image upload returned an incomplete response: %r", result)
            raise UploadError("Image upload returned no url.")

        logger.info("Uploaded image %s", public_id)
        return UploadedImage(url=url, public_id=public_id)

    # -----------------------------------------------------------------------
    # Delete (best-effort)
    # -----------------------------------------------------------------------

    def _destroy(self, public_id: str) -> None:
        try:
            result = cloudinary.uploader.destroy(public_id, **self._credentials())
        except Exception as exc:
            raise DeleteError(public_id, str(exc)) from exc
        outcome = result.get("result") if isinstance(result, dict) else result
        if outcome != "ok":
            raise DeleteError(public_id, f"provider answered {outcome!r}")

    def delete(self, image_url: Optional[str]) -> bool:
        if not self.configured:
            logger.warning("Image storage not configured; leaving %s in place", image_url)
            return False

        public_id = extract_public_id(image_url)
        if public_id is None:
            logger.warning("No public id in image url %r; nothing deleted", image_url)
            return False

        try:
            self._destroy(public_id)
        except DeleteError as exc:
            logger.warning(exc.message)
            return False

        logger.info("Deleted image %s", public_id)
        return True


def get_image_store() -> ImageStore:
    return ImageStore.from_settings()
