import asyncio
import logging
import secrets
import time
from pathlib import Path

from fastapi import UploadFile

from blog.config import settings
from blog.exceptions import BadRequestError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES: dict[str, str] = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


async def save_image(upload: UploadFile) -> str:
    """
    Store an uploaded article image and return its public path
    (``<UPLOAD_URL_PREFIX>/<filename>``).

    Raises BadRequestError for non-image content types and for files
    larger than ``MAX_UPLOAD_BYTES``.
    """
    extension = ALLOWED_IMAGE_TYPES.get(upload.content_type or "")
    if extension is None:
        raise BadRequestError("Only JPEG, PNG, GIF or WEBP images are allowed")

    data = await upload.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(data) > settings.MAX_UPLOAD_BYTES:
        raise BadRequestError(
            f"Image exceeds the maximum size of {settings.MAX_UPLOAD_BYTES // (1024 * 1024)} MB"
        )

    directory = Path(settings.UPLOAD_DIR)
    directory.mkdir(parents=True, exist_ok=True)
    filename = f"imagen-{int(time.time() * 1000)}-{secrets.token_hex(4)}{extension}"
    await asyncio.to_thread((directory / filename).write_bytes, data)

    logger.info("Stored upload %r as %s (%d bytes)", upload.filename, filename, len(data))
    return f"{settings.UPLOAD_URL_PREFIX.rstrip('/')}/{filename}"
