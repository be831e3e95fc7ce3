"""
Genre Association Resolver

Maps TMDB genre ids to internal genre rows and writes releases together
with their release_genres links. Re-running for the same release leaves
exactly one link per resolved genre and no links from an older genre set.
"""

from typing import Any, Dict, Iterable, List, Optional

from ..core.logging import get_logger
from ..models.release import CatalogItem
from .supabase_db import SupabaseDatabase, eq

logger = get_logger(__name__)


class GenreAssociationResolver:
    """
    Persists catalog items and their genre links.

    Genre rows must already exist (see `sync_genres`); unknown TMDB genre
    ids are dropped silently.
    """

    def __init__(self, db: SupabaseDatabase):
        self.db = db
        self._genre_map: Optional[Dict[int, int]] = None

    async def sync_genres(self, genres: Iterable[Dict[str, Any]]) -> int:
        """Upsert TMDB genres (`{id, name}`) keyed by source id."""
        count = 0
        for genre in genres:
            await self.db.upsert(
                "genres",
                {"source_id": genre["id"], "name": genre["name"]},
                on_conflict="source_id",
            )
            count += 1
        self._genre_map = None
        logger.info("genres_synced", count=count)
        return count

    async def load_genre_map(self) -> Dict[int, int]:
        """source_id -> internal id for every known genre."""
        rows = await self.db.find_many("genres", select="id,source_id")
        self._genre_map = {row["source_id"]: row["id"] for row in rows}
        return self._genre_map

    async def resolve(self, genre_source_ids: Iterable[int]) -> List[int]:
        """Internal genre ids for the given TMDB ids, in input order, without duplicates."""
        genre_map = self._genre_map if self._genre_map is not None else await self.load_genre_map()

        resolved: List[int] = []
        for source_id in genre_source_ids:
            genre_id = genre_map.get(source_id)
            if genre_id is not None and genre_id not in resolved:
                resolved.append(genre_id)
        return resolved

    async def persist(self, item: CatalogItem, generation: Optional[str] = None) -> int:
        """
        Upsert one release and rewrite its genre links.

        Returns:
            Internal release id
        """
        row = {
            "source_id": item.source_id,
            "title": item.title,
            "type": item.media_type,
            "release_date": item.release_date.isoformat(),
            "overview": item.overview,
            "poster_path": item.poster_path,
        }
        if generation is not None:
            row["generation"] = generation

        release = await self.db.upsert("releases", row, on_conflict="source_id")
        release_id = release["id"]

        genre_ids = await self.resolve(item.genre_source_ids)

        await self.db.delete_many("release_genres", [eq("release_id", release_id)])
        await self.db.create_many(
            "release_genres",
            [{"release_id": release_id, "genre_id": gid} for gid in genre_ids],
        )

        logger.debug(
            "release_persisted",
            release_id=release_id,
            tmdb_id=item.source_id,
            genres=len(genre_ids),
        )
        return release_id

