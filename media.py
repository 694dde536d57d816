"""Image hosting on Cloudinary through the official SDK."""
from __future__ import annotations

from typing import Optional

import cloudinary
import cloudinary.exceptions
import cloudinary.uploader
import structlog
from pydantic import BaseModel

from settings import get_settings

logger = structlog.get_logger(__name__)

DEFAULT_FOLDER = "company_registration"

LOGO_TRANSFORMATION = {"width": 200, "height": 200, "crop": "fill"}
BANNER_TRANSFORMATION = {"width": 800, "height": 300, "crop": "fill"}


class MediaError(Exception):
    """Raised when the image host rejects or cannot be reached for a request."""


class UploadedAsset(BaseModel):
    secure_url: str
    public_id: str


def _configure() -> None:
    settings = get_settings()
    if not (
        settings.cloudinary_cloud_name
        and settings.cloudinary_api_key
        and settings.cloudinary_api_secret
    ):
        raise MediaError("Cloudinary credentials are not configured")
    cloudinary.config(
        cloud_name=settings.cloudinary_cloud_name,
        api_key=settings.cloudinary_api_key,
        api_secret=settings.cloudinary_api_secret,
        secure=True,
    )


def upload_image(
    image: str,
    folder: str = DEFAULT_FOLDER,
    transformation: Optional[dict] = None,
) -> UploadedAsset:
    """Upload an image (data URI, remote URL or base64 payload) and return its URL and public id."""
    _configure()
    options = {
        "folder": folder,
        "use_filename": True,
        "unique_filename": False,
        "overwrite": True,
    }
    if transformation:
        options["transformation"] = [transformation]

    try:
        result = cloudinary.uploader.upload(image, **options)
    except cloudinary.exceptions.Error as exc:
        raise MediaError(f"Error uploading image to Cloudinary: {exc}") from exc

    logger.info("Image uploaded", folder=folder, public_id=result.get("public_id"))
    return UploadedAsset(secure_url=result["secure_url"], public_id=result["public_id"])


def delete_image(public_id: str) -> dict:
    _configure()
    try:
        result = cloudinary.uploader.destroy(public_id)
    except cloudinary.exceptions.Error as exc:
        raise MediaError(f"Error deleting image from Cloudinary: {exc}") from exc
    logger.info("Image deleted", public_id=public_id, result=result.get("result"))
    return result


def delete_image_quietly(public_id: Optional[str]) -> None:
    """Delete an asset, logging instead of raising on failure."""
    if not public_id:
        return
    try:
        delete_image(public_id)
    except MediaError as exc:
        logger.error("Image deletion error", public_id=public_id, exc=str(exc))
