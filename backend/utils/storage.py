# utils/storage.py
import logging
import shutil
import uuid
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from config import settings
from services.errors import ValidationFailure, StoreFailure

logger = logging.getLogger(__name__)

ALLOWED_TYPES = {"image/jpeg": "jpg", "image/png": "png", "image/webp": "webp"}
FOLDERS = {"products", "photos", "signatures"}
URL_PREFIX = "/uploads/"


def upload_root() -> Path:
    return Path(settings.UPLOAD_DIR)


def save_upload(file: UploadFile, folder: str) -> str:
    """Store an image under UPLOAD_DIR/<folder>/ and return its public URL."""
    if folder not in FOLDERS:
        raise ValidationFailure(f"Unknown upload folder: {folder}")
    if file.content_type not in ALLOWED_TYPES:
        raise ValidationFailure("Invalid file type")

    # Measure without trusting the client's Content-Length
    file.file.seek(0, 2)
    size = file.file.tell()
    file.file.seek(0)
    if size > settings.MAX_UPLOAD_BYTES:
        raise ValidationFailure(f"File too large (max {settings.MAX_UPLOAD_BYTES // (1024 * 1024)} MB)")

    target_dir = upload_root() / folder
    target_dir.mkdir(parents=True, exist_ok=True)
    unique_filename = f"{uuid.uuid4()}.{ALLOWED_TYPES[file.content_type]}"
    save_path = target_dir / unique_filename

    try:
        with open(save_path, "wb") as buffer:
            shutil.copyfileobj(file.file, buffer)
    except OSError as e:
        logger.exception("Could not save upload %s", save_path)
        raise StoreFailure(f"File save error: {e}") from e
    finally:
        file.file.close()

    return f"{URL_PREFIX}{folder}/{unique_filename}"


def _path_for(url: str) -> Optional[Path]:
    if not url or not url.startswith(URL_PREFIX):
        return None
    relative = Path(url[len(URL_PREFIX):])
    if ".." in relative.parts:
        return None
    return upload_root() / relative


def delete_upload(url: str) -> bool:
    """Best-effort removal of a stored image; failures are only logged."""
    path = _path_for(url)
    if path is None:
        logger.info("Not a local upload, skipping delete: %s", url)
        return False
    try:
        path.unlink()
        return True
    except OSError as e:
        logger.warning("Could not delete upload %s: %s", path, e)
        return False
