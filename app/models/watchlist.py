"""
Watchlist Models

A user's tracking record for one release: watched flag plus an
optional LIKE/DISLIKE rating.
"""

from datetime import date
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict

from .genre import Genre


class Rating(str, Enum):
    """Tri-state rating; absence is represented by None."""
    LIKE = "LIKE"
    DISLIKE = "DISLIKE"


class WatchlistEntry(BaseModel):
    """Stored watchlist state for one (user, release) pair."""
    release_id: int = Field(..., alias="releaseId")
    watched: bool = False
    rating: Optional[Rating] = None

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)


class WatchlistItem(BaseModel):
    """Watchlist entry joined with its release's display fields."""
    id: int = Field(..., description="Release ID")
    title: str
    media_type: str = Field(..., alias="type")
    release_date: date = Field(..., alias="releaseDate")
    poster_path: Optional[str] = Field(None, alias="posterPath")
    overview: Optional[str] = None
    genres: List[Genre] = Field(default_factory=list)
    watched: bool = False
    rating: Optional[Rating] = None

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)


class WatchlistCreateRequest(BaseModel):
    """Body for POST /watchlist."""
    release_id: int = Field(..., alias="releaseId")
    watched: bool = False
    rating: Optional[Rating] = None

    model_config = ConfigDict(populate_by_name=True)


class WatchlistUpdateRequest(BaseModel):
    """
    Body for PATCH /watchlist/{releaseId}.

    Only fields present in the request are applied; an explicit
    `"rating": null` clears the rating.
    """
    watched: Optional[bool] = None
    rating: Optional[Rating] = None

    model_config = ConfigDict(populate_by_name=True)


def entry_from_row(row: dict) -> WatchlistEntry:
    return WatchlistEntry(
        release_id=row["release_id"],
        watched=bool(row.get("watched")),
        rating=row.get("rating"),
    )
