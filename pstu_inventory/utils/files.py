from __future__ import annotations

import re
import shutil
from datetime import datetime
from pathlib import Path
from uuid import uuid4

from fastapi import UploadFile, HTTPException

from pstu_inventory.core.config import settings

_safe_module = re.compile(r"^[a-zA-Z0-9_\-]+$")

_ALLOWED_IMAGE_EXT = {".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp"}


def save_upload(file: UploadFile, module: str) -> str:
    """
    Saves file inside: {STORAGE_DIR}/{module}/YYYY/MM/DD/<uuid>.<ext>
    Returns the stored image_url like: uploads/{module}/YYYY/MM/DD/<uuid>.<ext>
    (served back through the MEDIA_URL static mount)
    """
    if not file or not file.filename:
        raise HTTPException(status_code=400, detail="Invalid file")

    module = (module or "").strip().lower()
    if not _safe_module.match(module):
        raise HTTPException(status_code=400, detail="Invalid module path")

    ext = Path(file.filename).suffix.lower()
    if ext not in _ALLOWED_IMAGE_EXT:
        raise HTTPException(status_code=400, detail="Unsupported image type")

    now = datetime.utcnow()
    y, m, d = now.strftime("%Y"), now.strftime("%m"), now.strftime("%d")

    fname = f"{uuid4().hex}{ext}"  # keep extension

    rel_dir = Path(module) / y / m / d
    disk_dir = Path(settings.STORAGE_DIR).resolve() / rel_dir
    disk_dir.mkdir(parents=True, exist_ok=True)

    disk_path = disk_dir / fname

    try:
        with disk_path.open("wb") as out:
            shutil.copyfileobj(file.file, out)
    finally:
        file.file.close()

    media_prefix = settings.MEDIA_URL.strip("/")
    return f"{media_prefix}/{rel_dir.as_posix()}/{fname}"
