"""Image upload endpoint. Stored files are served back under /uploads."""
from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, BinaryIO, Dict

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.concurrency import run_in_threadpool

from api.auth_deps import get_current_admin
from api.deps import get_app_settings
from core.config import Settings
from core.exceptions import StorageError, UploadError
from core.logging_config import get_logger
from core.utils import generate_unique_key

router = APIRouter(dependencies=[Depends(get_current_admin)])
LOGGER = get_logger(__name__)

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}
UPLOAD_CHUNK_SIZE = 1024 * 1024


def sanitize_filename(filename: str) -> str:
    """Removes path components and dangerous characters from a filename."""
    filename = os.path.basename(filename.replace("\\", "/"))
    filename = re.sub(r'[<>:"/\\|?*\x00-\x1f]', "_", filename)
    return filename.strip(". ")


def _store(source: BinaryIO, destination: Path) -> int:
    """Copy an upload to disk in chunks. Runs in the threadpool."""
    size = 0
    with destination.open("wb") as out:
        while True:
            chunk = source.read(UPLOAD_CHUNK_SIZE)
            if not chunk:
                break
            size += len(chunk)
            out.write(chunk)
    return size


@router.post("")
async def upload_file(
    file: UploadFile = File(...),
    settings: Settings = Depends(get_app_settings),
) -> Dict[str, Any]:
    """
    Store an uploaded image under a random name.

    Returns:
        The stored file name and its public URL.
    """
    original = sanitize_filename(file.filename or "")
    ext = Path(original).suffix.lower()
    if not original or ext not in ALLOWED_EXTENSIONS:
        raise UploadError(
            f"Tipo de archivo no permitido. Permitidos: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
        )

    stored_name = f"{generate_unique_key()}{ext}"
    destination = Path(settings.uploads_dir) / stored_name

    try:
        size = await run_in_threadpool(_store, file.file, destination)
    except OSError as e:
        LOGGER.error(f"Could not write upload to {destination}: {e}")
        raise StorageError() from e

    LOGGER.info(
        f"Stored upload {original} as {stored_name}",
        extra={"extra_data": {"bytes": size}},
    )

    return {
        "success": True,
        "mensaje": "Archivo subido correctamente",
        "archivo": stored_name,
        "url": f"/uploads/{stored_name}",
    }
