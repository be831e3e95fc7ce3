"""
Genres API Router

Genre list (cached) and genre-to-release links.
"""

from typing import List

from fastapi import APIRouter, Depends, Query

from ..config import get_settings
from ..core.logging import get_logger
from ..models.genre import Genre
from ..models.release import ReleaseGenreLink
from ..services.cache_service import GENRES_KEY, CacheService, get_cache_service
from ..services.release_service import ReleaseService
from .dependencies import get_release_service

logger = get_logger(__name__)
settings = get_settings()

router = APIRouter(tags=["genres"])


@router.get("/genres", response_model=List[Genre])
async def list_genres(
    service: ReleaseService = Depends(get_release_service),
    cache: CacheService = Depends(get_cache_service),
):
    """All genres, alphabetically. Cached until the next catalog refresh."""
    cached = await cache.get_json(GENRES_KEY)
    if cached is not None:
        return cached

    genres = await service.list_genres()
    await cache.set_json(
        GENRES_KEY,
        [g.model_dump(by_alias=True) for g in genres],
        ttl=settings.genre_cache_ttl_seconds,
    )
    logger.debug("genres_cache_filled", count=len(genres))
    return genres


@router.get("/releaseGenre", response_model=List[ReleaseGenreLink])
async def releases_for_genre(
    genre_id: int = Query(..., alias="genreId"),
    service: ReleaseService = Depends(get_release_service),
):
    """Releases linked to one genre, each with the release and genre embedded."""
    return await service.releases_for_genre(genre_id)
