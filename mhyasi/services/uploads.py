import logging
import shutil
import uuid
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from mhyasi.core import config
from mhyasi.core.errors import ValidationError

logger = logging.getLogger(__name__)

LOGO_URL_PREFIX = "/uploads/"


def save_logo_upload(logo_file: Optional[UploadFile]) -> str:
    if not logo_file or not logo_file.filename:
        raise ValidationError("No file")
    if logo_file.content_type and not logo_file.content_type.startswith(
        "image/"
    ):
        raise ValidationError("Logo must be an image (image/*)")
    ext = Path(logo_file.filename).suffix.lower()
    if not ext or ext not in config.ALLOWED_IMAGE_EXTS:
        raise ValidationError("Logo format: JPG, PNG, WebP, GIF, AVIF")
    config.UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
    filename = f"{uuid.uuid4().hex}{ext}"
    destination = config.UPLOAD_DIR / filename
    with destination.open("wb") as buffer:
        shutil.copyfileobj(logo_file.file, buffer)
    return f"{LOGO_URL_PREFIX}{filename}"


def delete_logo_file(logo_path: Optional[str]) -> None:
    if not logo_path or not logo_path.startswith(LOGO_URL_PREFIX):
        return
    filename = Path(logo_path).name
    if not filename:
        return
    try:
        (config.UPLOAD_DIR / filename).unlink(missing_ok=True)
    except OSError:
        logger.warning("Could not remove old logo %s", logo_path)
