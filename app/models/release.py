"""
Release Models

Catalog items produced by ingestion and the release/genre records
served by the API.
"""

from datetime import date
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict

from .genre import Genre
from .watchlist import WatchlistEntry


class MediaType(str, Enum):
    """Release type."""
    MOVIE = "movie"
    TV = "tv"


class CatalogItem(BaseModel):
    """
    Normalized catalog entry.

    Movies and TV shows share this shape once the catalog client has
    picked the right title and date fields.
    """
    source_id: int = Field(..., alias="sourceId", description="TMDB ID")
    title: str
    media_type: MediaType = Field(..., alias="type")
    release_date: date = Field(..., alias="releaseDate")
    overview: Optional[str] = None
    poster_path: Optional[str] = Field(None, alias="posterPath")
    popularity: float = Field(default=0.0)
    genre_source_ids: List[int] = Field(default_factory=list, alias="genreSourceIds")

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)


class ReleaseSummary(BaseModel):
    """Display record used by ranked lists."""
    id: int
    title: str
    poster_path: Optional[str] = Field(None, alias="posterPath")

    model_config = ConfigDict(populate_by_name=True)


class Release(BaseModel):
    """Full release record."""
    id: int
    source_id: int = Field(..., alias="sourceId")
    title: str
    media_type: MediaType = Field(..., alias="type")
    release_date: date = Field(..., alias="releaseDate")
    overview: Optional[str] = None
    poster_path: Optional[str] = Field(None, alias="posterPath")

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)


class ReleaseDetails(Release):
    """Release with its genres and the caller's watchlist state."""
    genres: List[Genre] = Field(default_factory=list)
    watchlist: Optional[WatchlistEntry] = None


class ReleaseGenreLink(BaseModel):
    """Association row with both sides embedded."""
    release_id: int = Field(..., alias="releaseId")
    genre_id: int = Field(..., alias="genreId")
    release: Release
    genre: Genre

    model_config = ConfigDict(populate_by_name=True)


def release_from_row(row: dict) -> Release:
    """Build a Release from a `releases` table row."""
    return Release(
        id=row["id"],
        source_id=row["source_id"],
        title=row["title"],
        media_type=row["type"],
        release_date=row["release_date"],
        overview=row.get("overview"),
        poster_path=row.get("poster_path"),
    )


def summary_from_row(row: dict) -> ReleaseSummary:
    """Build a ReleaseSummary from a `releases` table row."""
    return ReleaseSummary(
        id=row["id"],
        title=row["title"],
        poster_path=row.get("poster_path"),
    )

