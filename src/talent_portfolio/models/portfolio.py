"""Client-side data model for portfolio editing.

A portfolio item is addressed by exactly one of two identities:

- ``PersistedId``: the positive integer the server assigned once the item
  was stored.
- ``TempKey``: an opaque string minted locally for an item that has not been
  synced yet.

Items are frozen; every change produces a new item via ``dataclasses.replace``.
"""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from pathlib import Path
from typing import Any


class PortfolioError(Exception):
    """Base class for portfolio client errors."""


class MissingProfileError(PortfolioError):
    """Raised when an operation needs an active profile and none was given."""


class SyncInProgressError(PortfolioError):
    """Raised when the collection is touched while a sync is outstanding."""


class StaleCollectionError(PortfolioError):
    """Raised when saving a collection whose post-sync reload never completed."""


class MediaType(StrEnum):
    IMAGE = "image"
    VIDEO = "video"

    @classmethod
    def from_content_type(cls, content_type: str | None) -> MediaType:
        """Classify a MIME type; anything that is not video is treated as an image."""
        if content_type and content_type.lower().startswith("video"):
            return cls.VIDEO
        return cls.IMAGE


class ApprovalStatus(StrEnum):
    """Moderation state owned by the server. The client only displays it."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @classmethod
    def parse(cls, value: str | None) -> ApprovalStatus:
        try:
            return cls(value)
        except ValueError:
            return cls.PENDING


@dataclass(frozen=True, slots=True)
class PersistedId:
    """Server-assigned identity."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int) or self.value <= 0:
            raise ValueError(f"persisted id must be a positive integer, got {self.value!r}")


@dataclass(frozen=True, slots=True)
class TempKey:
    """Client-assigned identity for an item that has not been synced."""

    value: str

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("temp key must be a non-empty string")


Identity = PersistedId | TempKey


@dataclass(frozen=True, slots=True)
class PendingUpload:
    """A selected file waiting to be uploaded.

    Attributes:
        filename: Name sent with the multipart file part.
        content_type: MIME type of the payload.
        data: Raw file bytes.
    """

    filename: str
    content_type: str
    data: bytes = field(repr=False)

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def media_type(self) -> MediaType:
        return MediaType.from_content_type(self.content_type)

    @classmethod
    def from_path(cls, path: Path | str, content_type: str | None = None) -> PendingUpload:
        """Read a file from disk, guessing its MIME type from the extension."""
        file_path = Path(path)
        guessed, _ = mimetypes.guess_type(file_path.name)
        return cls(
            filename=file_path.name,
            content_type=content_type or guessed or "application/octet-stream",
            data=file_path.read_bytes(),
        )


@dataclass(frozen=True, slots=True)
class PortfolioItem:
    """One photo or video in a profile's portfolio.

    Attributes:
        identity: Either the server id or the local temp key, never both.
        media_type: Image or video.
        preview_url: URL used for display (server URL or local preview).
        featured_image: Whether this item is the public profile picture.
        priority: Stored order; only dense right before a sync.
        pending_upload: File to upload for new or replaced items.
        approval_status: Server moderation state, read-only here.
        title: Free text carried through unchanged.
        description: Free text carried through unchanged.
    """

    identity: Identity
    media_type: MediaType = MediaType.IMAGE
    preview_url: str | None = None
    featured_image: bool = False
    priority: int = 0
    pending_upload: PendingUpload | None = None
    approval_status: ApprovalStatus = ApprovalStatus.PENDING
    title: str = ""
    description: str = ""
    thumbnail_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def id(self) -> int | None:
        if isinstance(self.identity, PersistedId):
            return self.identity.value
        return None

    @property
    def temp_key(self) -> str | None:
        if isinstance(self.identity, TempKey):
            return self.identity.value
        return None

    @property
    def key(self) -> int | str:
        """Opaque key handed to the UI layer (``id`` when present, else ``temp_key``)."""
        return self.identity.value

    @property
    def is_persisted(self) -> bool:
        return isinstance(self.identity, PersistedId)

    @classmethod
    def from_server(cls, payload: dict[str, Any], index: int = 0) -> PortfolioItem:
        """Build an item from one entry of the portfolio list endpoint.

        Legacy responses may omit ``priority``; the entry's position in the
        response is used instead.
        """
        priority = payload.get("priority")
        if isinstance(priority, bool) or not isinstance(priority, int):
            priority = index
        return cls(
            identity=PersistedId(int(payload["id"])),
            media_type=MediaType.from_content_type(payload.get("media_type")),
            preview_url=payload.get("file_url"),
            featured_image=bool(payload.get("featured_image")),
            priority=priority,
            approval_status=ApprovalStatus.parse(payload.get("approval_status")),
            title=payload.get("title") or "",
            description=payload.get("description") or "",
            thumbnail_url=payload.get("thumbnail_url"),
            created_at=_parse_timestamp(payload.get("created_at")),
            updated_at=_parse_timestamp(payload.get("updated_at")),
        )


@dataclass(slots=True)
class SyncResult:
    """Outcome of one sync attempt.

    Attributes:
        success: Whether the server accepted the bulk request.
        message: Server message, or a local summary.
        errors: Field path to messages, when any were reported.
        items: Reloaded collection after a successful sync, if the reload worked.
    """

    success: bool
    message: str
    errors: dict[str, list[str]] | None = None
    items: list[PortfolioItem] | None = None

    def error_messages(self) -> list[str]:
        """Flatten field errors into one list, falling back to the message."""
        if self.success:
            return []
        flattened = [msg for messages in (self.errors or {}).values() for msg in messages]
        return flattened or [self.message]


def _parse_timestamp(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
