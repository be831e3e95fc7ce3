"""
Releases API Router

Calendar listings, release details, popularity ranking and
genre-overlap recommendations.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from ..config import get_settings
from ..core.exceptions import ValidationError
from ..core.logging import get_logger
from ..core.security import get_current_user, get_current_user_optional
from ..models.release import MediaType, Release, ReleaseDetails, ReleaseSummary
from ..models.response import ErrorResponse, RecommendationResponse
from ..services.popularity import PopularityScorer
from ..services.recommendation import RecommendationEngine
from ..services.release_service import ReleaseService, parse_iso_date, partial_date_window
from ..services.supabase_db import ReleaseFilter
from .dependencies import get_popularity_scorer, get_recommendation_engine, get_release_service

logger = get_logger(__name__)
settings = get_settings()

router = APIRouter(prefix="/releases", tags=["releases"])
limiter = Limiter(key_func=get_remote_address)


@router.get("", response_model=List[Release])
async def list_releases(
    type: Optional[MediaType] = Query(None, description="movie or tv"),
    date: Optional[str] = Query(None, description="YYYY, YYYY-MM or YYYY-MM-DD"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    service: ReleaseService = Depends(get_release_service),
):
    """
    List releases for the calendar, ordered by release date.

    `date` selects a whole year, month or day; `startDate`/`endDate`
    select an explicit half-open range. Without either, all releases
    are returned.
    """
    release_filter = ReleaseFilter(media_type=type.value if type else None)

    if date:
        release_filter.date_from, release_filter.date_before = partial_date_window(date)
    else:
        if start_date:
            release_filter.date_from = parse_iso_date(start_date, "startDate")
        if end_date:
            release_filter.date_before = parse_iso_date(end_date, "endDate")

    return await service.list_releases(release_filter)


@router.get(
    "/popular",
    response_model=List[ReleaseSummary],
    responses={400: {"model": ErrorResponse, "description": "Missing or malformed date range"}},
)
@limiter.limit(f"{settings.rate_limit_per_minute}/minute")
async def popular_releases(
    request: Request,
    start_date: Optional[str] = Query(None, alias="startDate", description="Inclusive, YYYY-MM-DD"),
    end_date: Optional[str] = Query(None, alias="endDate", description="Exclusive, YYYY-MM-DD"),
    limit: Optional[str] = Query(None, description="Max results (default 20)"),
    scorer: PopularityScorer = Depends(get_popularity_scorer),
):
    """
    Most liked releases in a date window.

    Score = LIKE count - DISLIKE count across all users' watchlists.
    """
    if not start_date or not end_date:
        raise ValidationError("startDate and endDate are required")
    start = parse_iso_date(start_date, "startDate")
    end = parse_iso_date(end_date, "endDate")

    logger.info("popular_request", start_date=start_date, end_date=end_date, limit=limit)
    return await scorer.score(start, end, limit)


@router.get(
    "/recommended",
    response_model=RecommendationResponse,
    responses={404: {"model": ErrorResponse, "description": "Seed release not found"}},
)
@limiter.limit(f"{settings.rate_limit_per_minute}/minute")
async def recommended_releases(
    request: Request,
    release_id: Optional[int] = Query(None, alias="releaseId", description="Seed release"),
    limit: Optional[str] = Query(None, description="Max results (default 20)"),
    current_user: dict = Depends(get_current_user),
    engine: RecommendationEngine = Depends(get_recommendation_engine),
):
    """
    Releases sharing the most genres with a seed.

    The seed is `releaseId` when given, otherwise the caller's most
    recently liked release.
    """
    logger.info("recommended_request", uid=current_user["uid"], release_id=release_id, limit=limit)
    return await engine.recommend(current_user["uid"], release_id, limit)


@router.get(
    "/{release_id}",
    response_model=ReleaseDetails,
    responses={404: {"model": ErrorResponse}},
)
async def release_details(
    release_id: int,
    current_user: Optional[dict] = Depends(get_current_user_optional),
    service: ReleaseService = Depends(get_release_service),
):
    """Release with genres; includes the caller's watchlist entry when authenticated."""
    uid = current_user["uid"] if current_user else None
    return await service.get_release(release_id, uid)
