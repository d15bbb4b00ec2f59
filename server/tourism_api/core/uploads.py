"""Image upload storage under the configured upload directory."""

import logging
from pathlib import Path
from typing import Optional
from uuid import uuid4

from fastapi import UploadFile

from .config import settings
from .exceptions import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}
UPLOAD_URL_PREFIX = "/uploads"


def ensure_upload_dirs() -> Path:
    """Create the upload root; returns it for mounting."""
    root = settings.upload_path
    root.mkdir(parents=True, exist_ok=True)
    return root


async def save_image(upload: UploadFile, kind: str) -> str:
    """
    Store an uploaded image and return its public URL path.

    Args:
        upload: Multipart file from the request
        kind: Sub-directory grouping, e.g. ``equipment`` or ``tours``

    Returns:
        str: URL path such as ``/uploads/equipment/<uuid>.jpg``

    Raises:
        ValidationError: If the file is not an image or is too large
    """
    extension = Path(upload.filename or "").suffix.lower()
    if not (upload.content_type or "").startswith("image/") or extension not in ALLOWED_IMAGE_EXTENSIONS:
        raise ValidationError(detail="Only image files are allowed")

    content = await upload.read()
    if len(content) > settings.max_upload_bytes:
        raise ValidationError(
            detail=f"Image exceeds the maximum size of {settings.max_upload_bytes} bytes"
        )
    if not content:
        raise ValidationError(detail="Uploaded image is empty")

    directory = settings.upload_path / kind
    directory.mkdir(parents=True, exist_ok=True)
    filename = f"{uuid4().hex}{extension}"
    (directory / filename).write_bytes(content)

    url = f"{UPLOAD_URL_PREFIX}/{kind}/{filename}"
    logger.info("Stored uploaded image", extra={"path": url, "size_bytes": len(content)})
    return url


def delete_image(url: Optional[str]) -> bool:
    """
    Remove a previously stored image given its URL path.

    Paths outside the upload directory (such as bundled default images)
    are left alone. Returns True if a file was removed.
    """
    if not url or not url.startswith(f"{UPLOAD_URL_PREFIX}/"):
        return False

    root = settings.upload_path.resolve()
    target = (root / url[len(UPLOAD_URL_PREFIX) + 1:]).resolve()
    if root not in target.parents:
        logger.warning("Refusing to delete file outside upload directory", extra={"path": url})
        return False

    try:
        target.unlink()
    except FileNotFoundError:
        logger.warning("Uploaded image already missing", extra={"path": url})
        return False
    logger.info("Deleted uploaded image", extra={"path": url})
    return True
