"""Pydantic models for the Release Calendar backend."""

from .genre import Genre
from .release import (
    CatalogItem,
    MediaType,
    Release,
    ReleaseDetails,
    ReleaseGenreLink,
    ReleaseSummary,
)
from .watchlist import (
    Rating,
    WatchlistEntry,
    WatchlistItem,
    WatchlistCreateRequest,
    WatchlistUpdateRequest,
)
from .user import UserPreferences, PreferencesUpdateRequest
from .response import RecommendationResponse, IngestionSummary, BatchResult, ErrorResponse

__all__ = [
    "CatalogItem",
    "Genre",
    "MediaType",
    "Release",
    "ReleaseDetails",
    "ReleaseGenreLink",
    "ReleaseSummary",
    "Rating",
    "WatchlistEntry",
    "WatchlistItem",
    "WatchlistCreateRequest",
    "WatchlistUpdateRequest",
    "UserPreferences",
    "PreferencesUpdateRequest",
    "RecommendationResponse",
    "IngestionSummary",
    "BatchResult",
    "ErrorResponse",
]
