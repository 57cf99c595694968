"""Static file serving for uploaded images."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

from starlette.responses import Response
from starlette.staticfiles import StaticFiles

from core.logging_config import get_logger

LOGGER = get_logger(__name__)

UPLOADS_PATH = "/uploads"

UPLOAD_RESPONSE_HEADERS: Dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Cache-Control": "public, max-age=3600",
    "X-Content-Type-Options": "nosniff",
}


class UploadsStaticFiles(StaticFiles):
    """StaticFiles with fixed cross-origin and caching headers. Never lists directories."""

    def __init__(self, directory: Path) -> None:
        super().__init__(directory=directory, html=False, check_dir=False)

    def file_response(self, *args: Any, **kwargs: Any) -> Response:
        response = super().file_response(*args, **kwargs)
        response.headers.update(UPLOAD_RESPONSE_HEADERS)
        return response


def prepare_uploads_dir(directory: Path) -> bool:
    """
    Make sure the uploads directory exists.

    Returns:
        False when it cannot be created; requests under /uploads then get 404s.
    """
    try:
        directory.mkdir(parents=True, exist_ok=True)
        return True
    except OSError as e:
        LOGGER.warning(f"Uploads directory unavailable at {directory}: {e}")
        return False


__all__ = ["UPLOADS_PATH", "UPLOAD_RESPONSE_HEADERS", "UploadsStaticFiles", "prepare_uploads_dir"]
