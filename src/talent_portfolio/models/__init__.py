"""Data models and type definitions"""

from talent_portfolio.models.portfolio import (
    ApprovalStatus,
    Identity,
    MediaType,
    MissingProfileError,
    PendingUpload,
    PersistedId,
    PortfolioError,
    PortfolioItem,
    StaleCollectionError,
    SyncInProgressError,
    SyncResult,
    TempKey,
)

__all__ = [
    "ApprovalStatus",
    "Identity",
    "MediaType",
    "MissingProfileError",
    "PendingUpload",
    "PersistedId",
    "PortfolioError",
    "PortfolioItem",
    "StaleCollectionError",
    "SyncInProgressError",
    "SyncResult",
    "TempKey",
]
