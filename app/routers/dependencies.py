"""
Router Dependencies

Service providers injected with FastAPI `Depends`. Tests swap the store
by overriding `get_database`.
"""

from fastapi import Depends

from ..services.supabase_db import SupabaseDatabase, get_database
from ..services.popularity import PopularityScorer
from ..services.recommendation import RecommendationEngine
from ..services.release_service import ReleaseService
from ..services.watchlist_service import WatchlistService
from ..services.preference_service import PreferenceService


def get_popularity_scorer(db: SupabaseDatabase = Depends(get_database)) -> PopularityScorer:
    return PopularityScorer(db)


def get_recommendation_engine(db: SupabaseDatabase = Depends(get_database)) -> RecommendationEngine:
    return RecommendationEngine(db)


def get_release_service(db: SupabaseDatabase = Depends(get_database)) -> ReleaseService:
    return ReleaseService(db)


def get_watchlist_service(db: SupabaseDatabase = Depends(get_database)) -> WatchlistService:
    return WatchlistService(db)


def get_preference_service(db: SupabaseDatabase = Depends(get_database)) -> PreferenceService:
    return PreferenceService(db)
