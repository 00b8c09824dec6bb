"""Pydantic schemas for portfolio endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class PortfolioMediaResponse(BaseModel):
    """Response model for one portfolio media item."""

    id: int
    profile_id: int
    media_type: str
    file_path: str
    file_url: str
    thumbnail_url: str | None = None
    approval_status: str
    featured_image: bool
    priority: int
    title: str | None = None
    description: str | None = None
    created_at: datetime
    updated_at: datetime


class PortfolioListResponse(BaseModel):
    """Envelope for the portfolio list endpoint."""

    success: bool = True
    data: list[PortfolioMediaResponse]


class SyncPortfolioResponse(BaseModel):
    """Body returned by the bulk sync endpoint."""

    message: str
    errors: dict[str, list[str]] | None = Field(
        default=None, description="Field path to validation messages"
    )
