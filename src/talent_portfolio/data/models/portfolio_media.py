"""ORM model for photos and videos in a profile's portfolio.

Rows are rewritten in bulk by the sync endpoint: the client sends the whole
ordered list and the table is reconciled to match it.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from talent_portfolio.data.db import Base

if TYPE_CHECKING:
    from talent_portfolio.data.models.profile import Profile


class PortfolioMedia(Base):
    """Persisted portfolio media item.

    Attributes:
        id: Auto-incrementing primary key.
        profile_id: Owning profile (CASCADE on delete).
        media_type: ``image`` or ``video``.
        file_path: Location of the stored file, relative to the media root.
        content_type: MIME type recorded at upload.
        approval_status: ``pending``, ``approved`` or ``rejected``; new and
            replaced files start as ``pending``.
        featured_image: Whether this is the profile picture.
        priority: Zero-based display order.
        title: Optional caption.
        description: Optional longer text.
        created_at: UTC timestamp of creation.
        updated_at: UTC timestamp of the last change.
    """

    __tablename__ = "portfolio_media"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    profile_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    media_type: Mapped[str] = mapped_column(String(16), nullable=False, default="image")
    file_path: Mapped[str] = mapped_column(String(512), nullable=False)
    content_type: Mapped[str | None] = mapped_column(String(128), nullable=True)
    approval_status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    featured_image: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    profile: Mapped[Profile] = relationship("Profile", back_populates="portfolio_media")
