import logging
import os
import shutil
import uuid
from typing import List, Sequence

from fastapi import UploadFile

from app.core.config import settings
from ..utils.errors import ReferenceImageError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp"}
CHUNK_SIZE = 64 * 1024


def inquiry_upload_dir(inquiry_id: str) -> str:
    return os.path.join(settings.UPLOADS_DIR, "inquiries", inquiry_id)


def _extension(filename: str) -> str:
    _, ext = os.path.splitext(filename or "")
    return ext.lower().lstrip(".")


def _copy_limited(upload: UploadFile, path: str) -> None:
    written = 0
    with open(path, "wb") as buffer:
        while True:
            chunk = upload.file.read(CHUNK_SIZE)
            if not chunk:
                break
            written += len(chunk)
            if written > settings.MAX_REFERENCE_IMAGE_BYTES:
                raise ReferenceImageError(f"{upload.filename} is larger than 5 MB")
            buffer.write(chunk)


def store_reference_images(inquiry_id: str, existing: Sequence[str], files: Sequence[UploadFile]) -> List[str]:
    """Validate and write uploads for an inquiry, returning relative paths.

    Nothing is kept on disk when any file is rejected.
    """
    if not files:
        raise ReferenceImageError("No file uploaded")
    if len(existing) + len(files) > settings.MAX_REFERENCE_IMAGES:
        raise ReferenceImageError(
            f"At most {settings.MAX_REFERENCE_IMAGES} reference images per inquiry"
        )
    for upload in files:
        if _extension(upload.filename) not in ALLOWED_EXTENSIONS:
            raise ReferenceImageError(f"Unsupported file type: {upload.filename}")

    target = inquiry_upload_dir(inquiry_id)
    os.makedirs(target, exist_ok=True)
    written: List[str] = []
    try:
        for upload in files:
            name = f"{uuid.uuid4().hex}.{_extension(upload.filename)}"
            path = os.path.join(target, name)
            written.append(path)
            _copy_limited(upload, path)
    except (ReferenceImageError, OSError) as exc:
        for path in written:
            if os.path.exists(path):
                os.remove(path)
        if not os.listdir(target):
            shutil.rmtree(target, ignore_errors=True)
        if isinstance(exc, OSError):
            logger.error("Could not store reference image for %s: %s", inquiry_id, exc)
            raise ReferenceImageError() from exc
        raise
    logger.info("Stored %d reference images for inquiry %s", len(written), inquiry_id)
    return [f"uploads/inquiries/{inquiry_id}/{os.path.basename(p)}" for p in written]
