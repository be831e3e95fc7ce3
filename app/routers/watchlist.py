"""
Watchlist API Router

Track, rate and untrack releases for the authenticated user.
"""

from typing import List

from fastapi import APIRouter, Depends

from ..core.logging import get_logger
from ..core.security import get_current_user
from ..models.watchlist import (
    WatchlistCreateRequest,
    WatchlistEntry,
    WatchlistItem,
    WatchlistUpdateRequest,
)
from ..services.watchlist_service import WatchlistService
from .dependencies import get_watchlist_service

logger = get_logger(__name__)

router = APIRouter(prefix="/watchlist", tags=["watchlist"])


@router.get("", response_model=List[WatchlistItem])
async def get_watchlist(
    current_user: dict = Depends(get_current_user),
    service: WatchlistService = Depends(get_watchlist_service),
):
    """The caller's tracked releases, newest first."""
    return await service.list_entries(current_user["uid"])


@router.post("", response_model=WatchlistEntry)
async def add_to_watchlist(
    body: WatchlistCreateRequest,
    current_user: dict = Depends(get_current_user),
    service: WatchlistService = Depends(get_watchlist_service),
):
    """Start tracking a release."""
    return await service.add_entry(
        current_user["uid"],
        body.release_id,
        watched=body.watched,
        rating=body.rating,
    )


@router.patch("/{release_id}", response_model=WatchlistEntry)
async def update_watchlist_entry(
    release_id: int,
    body: WatchlistUpdateRequest,
    current_user: dict = Depends(get_current_user),
    service: WatchlistService = Depends(get_watchlist_service),
):
    """
    Update watched and/or rating.

    Only fields sent in the body change; `"rating": null` clears the rating.
    """
    changes = body.model_dump(include=body.model_fields_set)
    return await service.update_entry(current_user["uid"], release_id, changes)


@router.delete("/{release_id}")
async def remove_from_watchlist(
    release_id: int,
    current_user: dict = Depends(get_current_user),
    service: WatchlistService = Depends(get_watchlist_service),
):
    """Stop tracking a release."""
    await service.remove_entry(current_user["uid"], release_id)
    return {"success": True, "releaseId": release_id}
