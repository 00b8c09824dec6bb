"""Helpers for storing portfolio media files on disk."""

from __future__ import annotations

import os
import uuid
from pathlib import Path

from talent_portfolio.constants.portfolio_constants import MAX_UPLOAD_BYTES, MAX_UPLOAD_MB

ALLOWED_MEDIA_PREFIXES = ("image/", "video/")

CONTENT_TYPE_ALIASES = {
    "image/jpg": "image/jpeg",
    "image/pjpeg": "image/jpeg",
}
CONTENT_TYPE_TO_EXTENSION = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "video/mp4": ".mp4",
    "video/quicktime": ".mov",
    "video/webm": ".webm",
}
EXTENSION_TO_MIME = {ext: mime for mime, ext in CONTENT_TYPE_TO_EXTENSION.items()} | {
    ".jpeg": "image/jpeg",
}


def get_media_storage_root() -> Path:
    """Return the root directory for stored portfolio media."""
    env_root = os.getenv("PORTFOLIO_MEDIA_DIR")
    if env_root:
        return Path(env_root).expanduser().resolve()

    project_root = Path(__file__).resolve().parents[3]
    return project_root / ".portfolio_media"


def normalize_content_type(content_type: str | None) -> str:
    value = (content_type or "").split(";", 1)[0].strip().lower()
    return CONTENT_TYPE_ALIASES.get(value, value)


def validate_media_upload(content_type: str | None, size_bytes: int) -> str | None:
    """Check that an upload is an image or video within the size limit.

    Returns:
        Error message if validation fails, None if valid
    """
    normalized = normalize_content_type(content_type)
    if not normalized.startswith(ALLOWED_MEDIA_PREFIXES):
        return "The file must be an image or a video."
    if size_bytes > MAX_UPLOAD_BYTES:
        return f"The file may not be greater than {MAX_UPLOAD_MB}MB."
    return None


def store_media(
    profile_id: int, filename: str | None, content_type: str | None, data: bytes
) -> str:
    """Write media bytes under the profile's directory.

    Returns:
        The stored path relative to the media root.
    """
    normalized = normalize_content_type(content_type)
    extension = CONTENT_TYPE_TO_EXTENSION.get(normalized) or Path(filename or "").suffix.lower()
    relative = Path(str(profile_id)) / f"{uuid.uuid4().hex}{extension}"
    target = get_media_storage_root() / relative
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)
    return relative.as_posix()


def resolve_media_path(relative_path: str) -> Path | None:
    """Return the absolute path of a stored file, or None if it is missing."""
    root = get_media_storage_root()
    candidate = (root / relative_path).resolve()
    if root not in candidate.parents or not candidate.is_file():
        return None
    return candidate


def delete_media(relative_path: str) -> bool:
    path = resolve_media_path(relative_path)
    if path is None:
        return False
    path.unlink(missing_ok=True)
    return True


def get_media_content_type(path: Path) -> str | None:
    """Return the MIME type for a stored media path."""
    return EXTENSION_TO_MIME.get(path.suffix.lower())
