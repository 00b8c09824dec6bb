"""ORM models package for database tables.

This package provides SQLAlchemy ORM models representing database tables:
- Profile: A talent profile that owns a portfolio
- PortfolioMedia: One stored photo or video in a profile's portfolio

All models inherit from the shared Base declarative class defined in data.db.
"""

from talent_portfolio.data.db import Base
from talent_portfolio.data.models.portfolio_media import PortfolioMedia
from talent_portfolio.data.models.profile import Profile

__all__ = ["Base", "PortfolioMedia", "Profile"]
