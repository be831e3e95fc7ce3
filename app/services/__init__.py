"""Services for catalog ingestion, ranking and user data."""

from .supabase_db import SupabaseDatabase, get_database
from .catalog_client import CatalogClient
from .daily_selector import select_top_per_day
from .genre_resolver import GenreAssociationResolver
from .popularity import PopularityScorer
from .recommendation import RecommendationEngine
from .release_service import ReleaseService
from .watchlist_service import WatchlistService
from .preference_service import PreferenceService
from .cache_service import CacheService, get_cache_service
from .scheduler import SchedulerService, get_scheduler_service

__all__ = [
    "SupabaseDatabase",
    "get_database",
    "CatalogClient",
    "select_top_per_day",
    "GenreAssociationResolver",
    "PopularityScorer",
    "RecommendationEngine",
    "ReleaseService",
    "WatchlistService",
    "PreferenceService",
    "CacheService",
    "get_cache_service",
    "SchedulerService",
    "get_scheduler_service",
]
