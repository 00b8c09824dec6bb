"""Shared dependencies for API routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import Header, HTTPException, status


def get_optional_profile_id(
    x_profile_id: Annotated[
        int | None,
        Header(
            description=(
                "Active profile ID. In production, this should be resolved "
                "from the authenticated session."
            )
        ),
    ] = None,
) -> int | None:
    """Get the active profile ID if the client sent one.

    Args:
        x_profile_id: Profile ID from the X-Profile-Id header.

    Returns:
        int | None: Active profile ID, or None when the header is absent.
    """
    return x_profile_id


def require_profile_id(profile_id: int | None) -> int:
    """Return ``profile_id`` or fail the request with 400.

    Raises:
        HTTPException: If no profile ID could be resolved (400).
    """
    if profile_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Profile ID is required.",
        )
    return profile_id
