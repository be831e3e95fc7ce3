"""
Release Service

Calendar browsing: release listings by type and date window, release
details, genre listings and genre-to-release links.
"""

import re
from datetime import date, timedelta
from typing import List, Optional, Tuple

from ..core.exceptions import NotFoundError, ValidationError
from ..core.logging import get_logger
from ..models.genre import Genre, genre_from_row
from ..models.release import Release, ReleaseDetails, ReleaseGenreLink, release_from_row
from ..models.watchlist import entry_from_row
from .supabase_db import Order, ReleaseFilter, SupabaseDatabase, eq, in_

logger = get_logger(__name__)

_PARTIAL_DATE = re.compile(r"^(\d{4})(?:-(\d{2})(?:-(\d{2}))?)?$")


def parse_iso_date(value: Optional[str], name: str) -> date:
    """Parse a required `YYYY-MM-DD` query parameter."""
    if not value:
        raise ValidationError(f"{name} is required (YYYY-MM-DD)")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"{name} must be an ISO date (YYYY-MM-DD), got '{value}'")


def _first_of_next_month(year: int, month: int) -> date:
    if month == 12:
        return date(year + 1, 1, 1)
    return date(year, month + 1, 1)


def partial_date_window(value: str) -> Tuple[date, date]:
    """
    Half-open [start, end) window covering a partial date.

    "2024"       -> [2024-01-01, 2025-01-01)
    "2024-12"    -> [2024-12-01, 2025-01-01)
    "2024-02-29" -> [2024-02-29, 2024-03-01)
    """
    match = _PARTIAL_DATE.match(value or "")
    if not match:
        raise ValidationError(f"date must be YYYY, YYYY-MM or YYYY-MM-DD, got '{value}'")

    year, month, day = match.groups()
    try:
        if month is None:
            return date(int(year), 1, 1), date(int(year) + 1, 1, 1)
        if day is None:
            start = date(int(year), int(month), 1)
            return start, _first_of_next_month(start.year, start.month)
        start = date(int(year), int(month), int(day))
        return start, start + timedelta(days=1)
    except ValueError:
        raise ValidationError(f"date is not a valid calendar date: '{value}'")


class ReleaseService:
    """Read-side queries over the catalog tables."""

    def __init__(self, db: SupabaseDatabase):
        self.db = db

    async def list_releases(self, release_filter: ReleaseFilter) -> List[Release]:
        """Releases matching the filter, ordered by release date then id."""
        rows = await self.db.find_many(
            "releases",
            where=release_filter.to_conditions(),
            order=[Order(column="release_date"), Order(column="id")],
        )
        return [release_from_row(row) for row in rows]

    async def get_release(self, release_id: int, user_id: Optional[str] = None) -> ReleaseDetails:
        """
        One release with its genres, plus the caller's watchlist entry
        when a user id is given.

        Raises:
            NotFoundError: unknown release id
        """
        row = await self.db.find_unique("releases", where=[eq("id", release_id)])
        if row is None:
            raise NotFoundError("Release", release_id)

        links = await self.db.find_many(
            "release_genres",
            where=[eq("release_id", release_id)],
            select="genre_id",
        )
        genres: List[Genre] = []
        genre_ids = [link["genre_id"] for link in links]
        if genre_ids:
            genre_rows = await self.db.find_many(
                "genres",
                where=[in_("id", genre_ids)],
                order=[Order(column="name")],
            )
            genres = [genre_from_row(g) for g in genre_rows]

        entry = None
        if user_id:
            entry_row = await self.db.find_unique(
                "watchlist_entries",
                where=[eq("user_id", user_id), eq("release_id", release_id)],
            )
            entry = entry_from_row(entry_row) if entry_row else None

        return ReleaseDetails(
            **release_from_row(row).model_dump(),
            genres=genres,
            watchlist=entry,
        )

    async def list_genres(self) -> List[Genre]:
        rows = await self.db.find_many("genres", order=[Order(column="name")])
        return [genre_from_row(row) for row in rows]

    async def releases_for_genre(self, genre_id: int) -> List[ReleaseGenreLink]:
        """Association rows for one genre with both records embedded."""
        genre = await self.db.find_unique("genres", where=[eq("id", genre_id)])
        if genre is None:
            raise NotFoundError("Genre", genre_id)

        links = await self.db.find_many(
            "release_genres",
            where=[eq("genre_id", genre_id)],
            select="release_id,genre_id",
        )
        release_ids = [link["release_id"] for link in links]
        if not release_ids:
            return []

        releases = await self.list_releases(ReleaseFilter(ids=release_ids))
        genre_record = genre_from_row(genre)
        return [
            ReleaseGenreLink(
                release_id=release.id,
                genre_id=genre_id,
                release=release,
                genre=genre_record,
            )
            for release in releases
        ]
