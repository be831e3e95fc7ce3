"""
Catalog Ingestion Job

Refreshes the release catalog from TMDB.
Runs nightly via APScheduler, or manually:

    python -m app.jobs.ingestion

Refresh model: every run stamps the releases it writes with a new
generation tag. Older generations are pruned only after all batches
succeed, so readers never see an empty catalog mid-refresh. Releases
that are on someone's watchlist survive pruning.
"""

import asyncio
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from ..config import get_settings
from ..core.exceptions import UpstreamError
from ..core.logging import get_logger, job_context, setup_logging
from ..models.release import MediaType
from ..models.response import BatchResult, IngestionSummary
from ..services.cache_service import GENRES_KEY, CacheService, get_cache_service
from ..services.catalog_client import CatalogClient
from ..services.daily_selector import select_top_per_day
from ..services.genre_resolver import GenreAssociationResolver
from ..services.supabase_db import SupabaseDatabase, get_database, in_, neq

logger = get_logger(__name__)
settings = get_settings()


def default_batches(today: Optional[date] = None) -> List[Tuple[str, Dict[str, Any]]]:
    """Query types and filters fetched on every refresh."""
    today = today or datetime.now(timezone.utc).date()
    language = settings.tmdb_language
    return [
        ("discover/movie", {
            "include_adult": "false",
            "include_video": "false",
            "language": language,
            "primary_release_date.gte": settings.discover_start_date,
            "primary_release_date.lte": today.isoformat(),
            "sort_by": "primary_release_date.asc",
            "vote_average.gte": 2,
            "vote_count.gte": 100,
            "with_original_language": language.split("-")[0],
        }),
        ("movie/upcoming", {"language": language}),
        ("tv/airing_today", {"language": language}),
    ]


class IngestionJob:
    """
    Catalog refresh pipeline.

    Per batch: CatalogClient.fetch_all -> select_top_per_day ->
    GenreAssociationResolver.persist.
    """

    def __init__(
        self,
        db: Optional[SupabaseDatabase] = None,
        catalog: Optional[CatalogClient] = None,
        cache: Optional[CacheService] = None,
        batches: Optional[List[Tuple[str, Dict[str, Any]]]] = None,
        top_k: Optional[int] = None,
    ):
        self.db = db or get_database()
        self.catalog = catalog or CatalogClient()
        self.cache = cache
        self.batches = batches
        self.top_k = top_k or settings.daily_top_k
        self.resolver = GenreAssociationResolver(self.db)

    async def sync_genres(self) -> int:
        """Upsert movie and TV genre lists; drop the cached genre list."""
        total = 0
        for media_type in (MediaType.MOVIE, MediaType.TV):
            genres = await self.catalog.fetch_genres(media_type)
            total += await self.resolver.sync_genres(genres)

        cache = self.cache or get_cache_service()
        await cache.delete(GENRES_KEY)
        return total

    async def run_batch(self, query_type: str, params: Dict[str, Any], generation: str) -> BatchResult:
        """
        Fetch, select and persist one query type.

        An upstream failure aborts this batch only; rows already written
        stay in place. Store failures propagate.
        """
        result = BatchResult(query_type=query_type)
        try:
            items = await self.catalog.fetch_all(query_type, params)
        except UpstreamError as e:
            logger.error("ingestion_batch_failed", query_type=query_type, error=e.message)
            result.error = e.message
            return result

        result.fetched = len(items)
        selected = select_top_per_day(items, self.top_k)
        result.kept = len(selected)

        for item in selected:
            await self.resolver.persist(item, generation)
            result.persisted += 1

        logger.info(
            "ingestion_batch_completed",
            query_type=query_type,
            fetched=result.fetched,
            kept=result.kept,
            persisted=result.persisted,
        )
        return result

    async def prune_stale(self, generation: str) -> int:
        """
        Delete releases from older generations (and their genre links)
        unless a watchlist entry still references them.
        """
        stale = await self.db.find_many(
            "releases",
            where=[neq("generation", generation)],
            select="id",
        )
        stale_ids = {row["id"] for row in stale}
        if not stale_ids:
            return 0

        tracked = await self.db.find_many(
            "watchlist_entries",
            where=[in_("release_id", sorted(stale_ids))],
            select="release_id",
        )
        removable = sorted(stale_ids - {row["release_id"] for row in tracked})
        if not removable:
            return 0

        await self.db.delete_many("release_genres", [in_("release_id", removable)])
        await self.db.delete_many("releases", [in_("id", removable)])

        logger.info("stale_releases_pruned", count=len(removable), kept_tracked=len(stale_ids) - len(removable))
        return len(removable)

    async def run(self) -> IngestionSummary:
        """Execute a full catalog refresh."""
        started = datetime.now(timezone.utc)
        generation = started.strftime("%Y%m%dT%H%M%S%fZ")
        summary = IngestionSummary(generation=generation, started_at=started)

        with job_context(generation=generation):
            logger.info("ingestion_job_started")

            try:
                summary.genres = await self.sync_genres()
            except UpstreamError as e:
                # Existing genre rows are still usable for resolution
                logger.error("genre_sync_failed", error=e.message)

            for query_type, params in self.batches or default_batches(started.date()):
                summary.batches.append(await self.run_batch(query_type, params, generation))

            if summary.failed_batches:
                summary.pruning_skipped = True
                logger.warning("stale_prune_skipped", failed_batches=summary.failed_batches)
            else:
                summary.pruned = await self.prune_stale(generation)

            summary.duration_seconds = (datetime.now(timezone.utc) - started).total_seconds()
            logger.info(
                "ingestion_job_completed",
                persisted=sum(b.persisted for b in summary.batches),
                pruned=summary.pruned,
                duration_seconds=summary.duration_seconds,
            )
        return summary


async def run_ingestion_job() -> IngestionSummary:
    """Entry point for scheduled job."""
    job = IngestionJob()
    return await job.run()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(run_ingestion_job())
