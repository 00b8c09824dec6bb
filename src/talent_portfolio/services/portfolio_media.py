"""Portfolio media service backing the list and bulk sync endpoints.

The sync endpoint receives the complete ordered portfolio. Media rows that
are not referenced are deleted, referenced rows get their new order and
featured flag, and entries carrying a file are stored (new items) or replace
the existing file (approval goes back to ``pending``). The whole request is
validated before anything is written and applied in one transaction.
"""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from collections.abc import Mapping
from dataclasses import dataclass, field

from talent_portfolio.constants.portfolio_constants import SYNC_SUCCESS_MESSAGE
from talent_portfolio.data.db import get_session
from talent_portfolio.data.models import PortfolioMedia, Profile
from talent_portfolio.models import ApprovalStatus, MediaType
from talent_portfolio.services.media_storage import (
    delete_media,
    normalize_content_type,
    store_media,
    validate_media_upload,
)

logger = logging.getLogger(__name__)

__all__ = [
    "SyncEntry",
    "SyncOutcome",
    "UploadedMedia",
    "apply_portfolio_sync",
    "list_portfolio_media",
    "parse_sync_entries",
]

_ENTRY_KEY = re.compile(r"^portfolio\[(\d+)\]\[(\w+)\]$")
_ENTRY_FIELDS = ("id", "priority", "featured_image", "file")
_TRUE_VALUES = {"1", "true", "on", "yes"}
_FALSE_VALUES = {"0", "false", "off", "no", ""}


@dataclass(frozen=True, slots=True)
class UploadedMedia:
    filename: str | None
    content_type: str | None
    data: bytes = field(repr=False)


@dataclass(slots=True)
class SyncEntry:
    """One position in a bulk sync request."""

    index: int
    id: int | None = None
    priority: int = 0
    featured_image: bool = False
    file: UploadedMedia | None = None


@dataclass(slots=True)
class SyncOutcome:
    """Result of applying a bulk sync.

    Attributes:
        success: Whether the portfolio was rewritten.
        message: Summary for the client.
        errors: Field path to messages (``portfolio.0.file``).
        status_code: HTTP status the route should answer with.
    """

    success: bool
    message: str
    errors: dict[str, list[str]] = field(default_factory=dict)
    status_code: int = 200


def _media_to_dict(media: PortfolioMedia) -> dict:
    return {
        "id": media.id,
        "profile_id": media.profile_id,
        "media_type": media.media_type,
        "file_path": media.file_path,
        "approval_status": media.approval_status,
        "featured_image": media.featured_image,
        "priority": media.priority,
        "title": media.title,
        "description": media.description,
        "created_at": media.created_at,
        "updated_at": media.updated_at,
    }


def list_portfolio_media(profile_id: int) -> list[dict] | None:
    """Get all media for a profile, ordered by priority.

    Returns:
        List of media dictionaries, or None if the profile does not exist
    """
    with get_session() as session:
        profile = session.get(Profile, profile_id)
        if profile is None:
            return None
        media = (
            session.query(PortfolioMedia)
            .filter(PortfolioMedia.profile_id == profile_id)
            .order_by(PortfolioMedia.priority, PortfolioMedia.id)
            .all()
        )
        return [_media_to_dict(item) for item in media]


def get_media_file_path(media_id: int) -> str | None:
    with get_session() as session:
        media = session.get(PortfolioMedia, media_id)
        return media.file_path if media is not None else None


def _parse_bool(value: str) -> bool | None:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return None


def parse_sync_entries(
    fields: Mapping[str, str], files: Mapping[str, UploadedMedia]
) -> tuple[list[SyncEntry], dict[str, list[str]]]:
    """Group ``portfolio[i][name]`` form keys into entries ordered by index.

    Returns:
        The parsed entries and any field errors found while parsing.
    """
    entries: dict[int, SyncEntry] = {}
    errors: dict[str, list[str]] = defaultdict(list)

    def entry_for(index: int) -> SyncEntry:
        return entries.setdefault(index, SyncEntry(index=index, priority=index))

    for key, value in fields.items():
        match = _ENTRY_KEY.match(key)
        if match is None:
            continue
        index, name = int(match.group(1)), match.group(2)
        if name not in _ENTRY_FIELDS:
            continue
        entry = entry_for(index)
        error_key = f"portfolio.{index}.{name}"

        if name == "id":
            try:
                entry.id = int(value)
            except ValueError:
                errors[error_key].append("The id must be an integer.")
        elif name == "priority":
            try:
                entry.priority = int(value)
            except ValueError:
                errors[error_key].append("The priority must be an integer.")
        elif name == "featured_image":
            parsed = _parse_bool(value)
            if parsed is None:
                errors[error_key].append("The featured image field must be true or false.")
            else:
                entry.featured_image = parsed

    for key, upload in files.items():
        match = _ENTRY_KEY.match(key)
        if match is None or match.group(2) != "file":
            continue
        entry_for(int(match.group(1))).file = upload

    ordered = [entries[index] for index in sorted(entries)]
    return ordered, dict(errors)


def _validate_entries(
    entries: list[SyncEntry], existing: Mapping[int, PortfolioMedia]
) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = defaultdict(list)
    seen_ids: set[int] = set()
    featured_count = 0

    for entry in entries:
        prefix = f"portfolio.{entry.index}"
        if entry.id is not None:
            if entry.id not in existing:
                errors[f"{prefix}.id"].append("The selected portfolio item is invalid.")
            elif entry.id in seen_ids:
                errors[f"{prefix}.id"].append("The portfolio item appears more than once.")
            seen_ids.add(entry.id)
        elif entry.file is None:
            errors[f"{prefix}.file"].append("A file is required for new portfolio items.")

        if entry.file is not None:
            upload_error = validate_media_upload(entry.file.content_type, len(entry.file.data))
            if upload_error:
                errors[f"{prefix}.file"].append(upload_error)

        if entry.featured_image:
            featured_count += 1

    if entries and featured_count != 1:
        errors["portfolio"].append("Exactly one portfolio item must be featured.")

    return dict(errors)


def _apply_file(profile_id: int, media: PortfolioMedia, upload: UploadedMedia) -> str:
    content_type = normalize_content_type(upload.content_type)
    stored_path = store_media(profile_id, upload.filename, content_type, upload.data)
    media.file_path = stored_path
    media.content_type = content_type
    media.media_type = MediaType.from_content_type(content_type).value
    media.approval_status = ApprovalStatus.PENDING.value
    return stored_path


def apply_portfolio_sync(profile_id: int, entries: list[SyncEntry]) -> SyncOutcome:
    """Reconcile a profile's stored portfolio with the submitted list.

    Args:
        profile_id: Profile being synced
        entries: Submitted entries in display order

    Returns:
        SyncOutcome describing what happened; nothing is written unless
        every entry is valid.
    """
    written: list[str] = []
    stale: list[str] = []

    try:
        with get_session() as session:
            profile = session.get(Profile, profile_id)
            if profile is None:
                return SyncOutcome(False, "Profile not found.", status_code=404)

            existing = {media.id: media for media in profile.portfolio_media}
            errors = _validate_entries(entries, existing)
            if errors:
                logger.warning("Portfolio sync rejected for profile %s: %s", profile_id, errors)
                return SyncOutcome(
                    False,
                    "The given data was invalid.",
                    errors=errors,
                    status_code=422,
                )

            referenced = {entry.id for entry in entries if entry.id is not None}
            for media_id, media in existing.items():
                if media_id not in referenced:
                    stale.append(media.file_path)
                    session.delete(media)

            for entry in entries:
                if entry.id is not None:
                    media = existing[entry.id]
                    if entry.file is not None:
                        stale.append(media.file_path)
                        written.append(_apply_file(profile_id, media, entry.file))
                else:
                    media = PortfolioMedia(profile_id=profile_id, file_path="")
                    written.append(_apply_file(profile_id, media, entry.file))
                    session.add(media)
                media.priority = entry.priority
                media.featured_image = entry.featured_image

            session.flush()
    except Exception:
        logger.exception("Failed to sync portfolio for profile %s", profile_id)
        for path in written:
            delete_media(path)
        return SyncOutcome(False, "Failed to sync portfolio.", status_code=500)

    for path in stale:
        delete_media(path)

    logger.info("Portfolio for profile %s synced with %d items", profile_id, len(entries))
    return SyncOutcome(True, SYNC_SUCCESS_MESSAGE)
