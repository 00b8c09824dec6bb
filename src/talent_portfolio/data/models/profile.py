"""Profile model: the owner of a portfolio.

Profiles are created by the account flows outside this service; the
portfolio API only looks them up.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from talent_portfolio.data.db import Base

if TYPE_CHECKING:
    from talent_portfolio.data.models.portfolio_media import PortfolioMedia


class Profile(Base):
    """Talent profile.

    Attributes:
        id: Auto-incrementing primary key.
        display_name: Public name shown on the profile.
        created_at: UTC timestamp when the profile was created.
    """

    __tablename__ = "profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    display_name: Mapped[str] = mapped_column(String(128), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )

    portfolio_media: Mapped[list[PortfolioMedia]] = relationship(
        "PortfolioMedia",
        back_populates="profile",
        cascade="all, delete-orphan",
        order_by="PortfolioMedia.priority",
    )
