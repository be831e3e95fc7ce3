"""
Watchlist Service

Per-user tracking of releases: add, toggle watched, rate, untrack.
At most one entry exists per (user, release).
"""

from collections import defaultdict
from typing import Any, Dict, List, Optional

from ..core.exceptions import NotFoundError
from ..core.logging import get_logger
from ..models.genre import Genre, genre_from_row
from ..models.watchlist import (
    Rating,
    WatchlistEntry,
    WatchlistItem,
    entry_from_row,
)
from .supabase_db import Order, ReleaseFilter, SupabaseDatabase, eq, in_

logger = get_logger(__name__)


def _rating_value(rating: Optional[Rating]) -> Optional[str]:
    if rating is None:
        return None
    return Rating(rating).value


class WatchlistService:
    """Watchlist CRUD over the watchlist_entries table."""

    def __init__(self, db: SupabaseDatabase):
        self.db = db

    async def _require_entry(self, user_id: str, release_id: int) -> Dict[str, Any]:
        row = await self.db.find_unique(
            "watchlist_entries",
            where=[eq("user_id", user_id), eq("release_id", release_id)],
        )
        if row is None:
            raise NotFoundError("Watchlist entry", release_id)
        return row

    async def _genres_by_release(self, release_ids: List[int]) -> Dict[int, List[Genre]]:
        """Genres of every release in one batched lookup, each list sorted by name."""
        links = await self.db.find_many(
            "release_genres",
            where=[in_("release_id", release_ids)],
            select="release_id,genre_id",
        )
        genre_ids = sorted({link["genre_id"] for link in links})
        if not genre_ids:
            return {}

        genre_rows = await self.db.find_many("genres", where=[in_("id", genre_ids)])
        genres = {row["id"]: genre_from_row(row) for row in genre_rows}

        by_release: Dict[int, List[Genre]] = defaultdict(list)
        for link in links:
            genre = genres.get(link["genre_id"])
            if genre is not None:
                by_release[link["release_id"]].append(genre)
        for release_genres in by_release.values():
            release_genres.sort(key=lambda g: (g.name, g.id))
        return by_release

    async def list_entries(self, user_id: str) -> List[WatchlistItem]:
        """The user's entries, newest first, joined with release display fields and genres."""
        rows = await self.db.find_many(
            "watchlist_entries",
            where=[eq("user_id", user_id)],
            order=[Order(column="created_at", descending=True)],
        )
        if not rows:
            return []

        release_ids = [r["release_id"] for r in rows]
        releases = await self.db.find_many(
            "releases",
            where=ReleaseFilter(ids=release_ids).to_conditions(),
        )
        by_id = {release["id"]: release for release in releases}
        genres = await self._genres_by_release(release_ids)

        items = []
        for row in rows:
            release = by_id.get(row["release_id"])
            if release is None:
                continue
            items.append(WatchlistItem(
                id=release["id"],
                title=release["title"],
                media_type=release["type"],
                release_date=release["release_date"],
                poster_path=release.get("poster_path"),
                overview=release.get("overview"),
                genres=genres.get(release["id"], []),
                watched=bool(row.get("watched")),
                rating=row.get("rating"),
            ))
        return items

    async def add_entry(
        self,
        user_id: str,
        release_id: int,
        watched: bool = False,
        rating: Optional[Rating] = None,
    ) -> WatchlistEntry:
        """
        Track a release. Tracking an already-tracked release overwrites
        its watched flag and rating.

        Raises:
            NotFoundError: unknown release id
        """
        release = await self.db.find_unique("releases", where=[eq("id", release_id)], select="id")
        if release is None:
            raise NotFoundError("Release", release_id)

        # Entries reference users(id); clients may not have synced a profile yet
        await self.db.upsert("users", {"id": user_id}, on_conflict="id")

        row = await self.db.upsert(
            "watchlist_entries",
            {
                "user_id": user_id,
                "release_id": release_id,
                "watched": watched,
                "rating": _rating_value(rating),
            },
            on_conflict="user_id,release_id",
        )
        logger.info("watchlist_entry_added", uid=user_id, release_id=release_id)
        return entry_from_row(row)

    async def update_entry(self, user_id: str, release_id: int, changes: Dict[str, Any]) -> WatchlistEntry:
        """
        Apply a partial update. Only keys present in `changes`
        ("watched", "rating") are written; rating None clears it.

        Raises:
            NotFoundError: the user does not track this release
        """
        await self._require_entry(user_id, release_id)

        record: Dict[str, Any] = {"user_id": user_id, "release_id": release_id}
        if "watched" in changes and changes["watched"] is not None:
            record["watched"] = bool(changes["watched"])
        if "rating" in changes:
            record["rating"] = _rating_value(changes["rating"])

        row = await self.db.upsert("watchlist_entries", record, on_conflict="user_id,release_id")
        logger.info(
            "watchlist_entry_updated",
            uid=user_id,
            release_id=release_id,
            fields=sorted(k for k in record if k not in ("user_id", "release_id")),
        )
        return entry_from_row(row)

    async def remove_entry(self, user_id: str, release_id: int) -> None:
        """Untrack a release. Removing an untracked release is a no-op."""
        await self.db.delete_many(
            "watchlist_entries",
            [eq("user_id", user_id), eq("release_id", release_id)],
        )
        logger.info("watchlist_entry_removed", uid=user_id, release_id=release_id)
