# backend/fleetdb/apps/units/storage.py
"""
On-disk storage for unit photos.

Override the location per environment:
    UNIT_IMAGE_UPLOAD_DIR=/var/lib/fleetdb/uploads/units
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from fastapi import HTTPException, UploadFile, status
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTS = {".png", ".jpg", ".jpeg", ".webp"}

_CHUNK_SIZE = 1024 * 1024


def upload_dir() -> Path:
    folder = Path(os.getenv("UNIT_IMAGE_UPLOAD_DIR", "uploads/units")).resolve()
    folder.mkdir(parents=True, exist_ok=True)
    return folder


def max_upload_bytes() -> int:
    return int(os.getenv("UNIT_IMAGE_MAX_UPLOAD_BYTES", "0") or "0")


def ensure_safe_path(path: Path) -> Path:
    resolved = path.resolve()
    root = upload_dir()
    if resolved != root and root not in resolved.parents:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid image path.",
        )
    return resolved


def image_extension(filename: Optional[str]) -> str:
    ext = Path(filename or "").suffix.lower()
    if ext not in ALLOWED_IMAGE_EXTS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                "Unsupported image type. Upload one of: "
                + ", ".join(sorted(ALLOWED_IMAGE_EXTS))
            ),
        )
    return ext


def save_upload(*, file: UploadFile, dest_path: Path) -> None:
    limit = max_upload_bytes()
    total = 0
    try:
        with dest_path.open("wb") as out:
            while True:
                chunk = file.file.read(_CHUNK_SIZE)
                if not chunk:
                    break
                total += len(chunk)
                if limit and total > limit:
                    raise HTTPException(
                        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                        detail="Upload exceeds maximum file size.",
                    )
                out.write(chunk)
    except HTTPException:
        dest_path.unlink(missing_ok=True)
        raise


def delete_if_exists(path: Optional[str]) -> None:
    if not path:
        return
    try:
        target = ensure_safe_path(Path(path))
    except HTTPException:
        logger.warning("Refusing to delete image outside upload dir: %s", path)
        return
    target.unlink(missing_ok=True)


def verify_image(path: Path) -> None:
    """Reject files whose content is not a decodable image."""
    try:
        with Image.open(path) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError):
        path.unlink(missing_ok=True)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file is not a valid image.",
        )
