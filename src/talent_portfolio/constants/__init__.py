from __future__ import annotations

from talent_portfolio.constants.portfolio_constants import (
    GENERIC_SYNC_FAILURE,
    MAX_UPLOAD_BYTES,
    MAX_UPLOAD_MB,
    SYNC_SUCCESS_MESSAGE,
    VALIDATION_FAILED_MESSAGE,
)

__all__ = [
    "GENERIC_SYNC_FAILURE",
    "MAX_UPLOAD_BYTES",
    "MAX_UPLOAD_MB",
    "SYNC_SUCCESS_MESSAGE",
    "VALIDATION_FAILED_MESSAGE",
]
