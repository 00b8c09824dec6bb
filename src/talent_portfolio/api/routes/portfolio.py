"""Portfolio list, bulk sync and media file routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import FileResponse, JSONResponse

from talent_portfolio.api.dependencies import get_optional_profile_id, require_profile_id
from talent_portfolio.api.schemas.portfolio import (
    PortfolioListResponse,
    PortfolioMediaResponse,
    SyncPortfolioResponse,
)
from talent_portfolio.services.media_storage import get_media_content_type, resolve_media_path
from talent_portfolio.services.portfolio_media import (
    UploadedMedia,
    apply_portfolio_sync,
    get_media_file_path,
    list_portfolio_media,
    parse_sync_entries,
)

router = APIRouter(prefix="/profile", tags=["portfolio"])
media_router = APIRouter(prefix="/media", tags=["portfolio"])

INVALID_DATA_MESSAGE = "The given data was invalid."


def _invalid(errors: dict[str, list[str]]) -> JSONResponse:
    body = SyncPortfolioResponse(message=INVALID_DATA_MESSAGE, errors=errors)
    return JSONResponse(
        status_code=422,
        content=body.model_dump(),
    )


@router.get(
    "/{profile_id}/portfolio",
    response_model=PortfolioListResponse,
    summary="List portfolio media",
    description=(
        "Return every photo and video in the profile's portfolio. Items are ordered "
        "by priority, but clients should not rely on it and sort themselves."
    ),
    responses={404: {"description": "Profile not found"}},
)
def get_portfolio(profile_id: int, request: Request) -> PortfolioListResponse:
    media = list_portfolio_media(profile_id)
    if media is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found.",
        )

    return PortfolioListResponse(
        data=[
            PortfolioMediaResponse(
                **item,
                file_url=str(request.url_for("get_portfolio_media_file", media_id=item["id"])),
            )
            for item in media
        ]
    )


@router.post(
    "/sync-portfolio",
    response_model=SyncPortfolioResponse,
    summary="Sync the whole portfolio",
    description=(
        "Replace the profile's portfolio with the submitted ordered list. Send "
        "multipart fields portfolio[i][id], portfolio[i][priority], "
        "portfolio[i][featured_image] and, for new or replaced media, "
        "portfolio[i][file]. Items that are not listed are deleted."
    ),
    responses={
        400: {"description": "Profile ID missing"},
        404: {"description": "Profile not found"},
        422: {"description": "Invalid portfolio entries"},
    },
)
async def sync_portfolio(
    request: Request,
    header_profile_id: Annotated[int | None, Depends(get_optional_profile_id)],
) -> SyncPortfolioResponse | JSONResponse:
    form = await request.form()
    fields: dict[str, str] = {}
    files: dict[str, UploadedMedia] = {}
    for key, value in form.multi_items():
        if isinstance(value, str):
            fields[key] = value
        else:
            files[key] = UploadedMedia(
                filename=value.filename,
                content_type=value.content_type,
                data=await value.read(),
            )

    raw_profile_id = fields.get("profile_id")
    if raw_profile_id:
        try:
            profile_id = int(raw_profile_id)
        except ValueError:
            return _invalid({"profile_id": ["The profile id must be an integer."]})
    else:
        profile_id = require_profile_id(header_profile_id)

    entries, errors = parse_sync_entries(fields, files)
    if errors:
        return _invalid(errors)

    outcome = apply_portfolio_sync(profile_id, entries)
    if outcome.status_code == status.HTTP_404_NOT_FOUND:
        raise HTTPException(status_code=outcome.status_code, detail=outcome.message)
    if not outcome.success:
        body = SyncPortfolioResponse(message=outcome.message, errors=outcome.errors or None)
        return JSONResponse(status_code=outcome.status_code, content=body.model_dump())
    return SyncPortfolioResponse(message=outcome.message)


@media_router.get(
    "/{media_id}",
    name="get_portfolio_media_file",
    summary="Get a portfolio media file",
    description="Return the stored photo or video for a portfolio item.",
    responses={
        200: {"description": "Media file"},
        404: {"description": "Media not found"},
    },
)
def get_portfolio_media_file(media_id: int) -> FileResponse:
    relative_path = get_media_file_path(media_id)
    path = resolve_media_path(relative_path) if relative_path else None
    if path is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Media not found.",
        )
    media_type = get_media_content_type(path) or "application/octet-stream"
    return FileResponse(path, media_type=media_type)
