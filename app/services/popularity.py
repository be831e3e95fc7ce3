"""
Popularity Scorer

Ranks releases inside a date window by community like/dislike signals
from every user's watchlist.
"""

from collections import defaultdict
from datetime import date
from typing import Any, Dict, List, Optional

from ..config import get_settings
from ..core.logging import get_logger
from ..models.release import ReleaseSummary, summary_from_row
from ..models.watchlist import Rating
from .supabase_db import ReleaseFilter, SupabaseDatabase, in_

logger = get_logger(__name__)

RATING_DELTAS = {
    Rating.LIKE.value: 1,
    Rating.DISLIKE.value: -1,
}


def resolve_limit(raw: Any, default: Optional[int] = None) -> int:
    """Positive integer limit, or the default for missing/invalid/non-positive input."""
    if default is None:
        default = get_settings().default_result_limit
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        return default
    return limit if limit > 0 else default


def rank_by_score(scores: Dict[int, int], limit: int) -> List[int]:
    """Release ids by score descending, then id ascending, truncated to `limit`."""
    return [rid for rid, _ in sorted(scores.items(), key=lambda kv: (-kv[1], kv[0]))[:limit]]


async def fetch_summaries_in_order(db: SupabaseDatabase, release_ids: List[int]) -> List[ReleaseSummary]:
    """Display records for `release_ids`, in that order. Missing ids are skipped."""
    if not release_ids:
        return []
    rows = await db.find_many(
        "releases",
        where=ReleaseFilter(ids=release_ids).to_conditions(),
        select="id,title,poster_path",
    )
    by_id = {row["id"]: row for row in rows}
    return [summary_from_row(by_id[rid]) for rid in release_ids if rid in by_id]


class PopularityScorer:
    """
    Engagement score per release: +1 per LIKE, -1 per DISLIKE, 0 otherwise.

    Only releases with a release date in [start_date, end_date) and at
    least one watchlist entry are ranked.
    """

    def __init__(self, db: SupabaseDatabase):
        self.db = db

    async def compute_scores(self, start_date: date, end_date: date) -> Dict[int, int]:
        """release_id -> aggregated like/dislike delta within the window."""
        in_window = await self.db.find_many(
            "releases",
            where=ReleaseFilter(date_from=start_date, date_before=end_date).to_conditions(),
            select="id",
        )
        release_ids = [row["id"] for row in in_window]
        if not release_ids:
            return {}

        entries = await self.db.find_many(
            "watchlist_entries",
            where=[in_("release_id", release_ids)],
            select="release_id,rating",
        )

        scores: Dict[int, int] = defaultdict(int)
        for entry in entries:
            scores[entry["release_id"]] += RATING_DELTAS.get(entry.get("rating"), 0)
        return dict(scores)

    async def score(self, start_date: date, end_date: date, limit: Any = None) -> List[ReleaseSummary]:
        """
        Top releases by popularity score within a half-open date window.

        Args:
            start_date: Inclusive lower bound on release date
            end_date: Exclusive upper bound on release date
            limit: Max results; non-positive or non-numeric falls back to the default

        Returns:
            Display records in rank order (empty when nothing was rated)
        """
        limit = resolve_limit(limit)
        scores = await self.compute_scores(start_date, end_date)
        ranked = rank_by_score(scores, limit)

        logger.info(
            "popularity_scored",
            start_date=start_date.isoformat(),
            end_date=end_date.isoformat(),
            candidates=len(scores),
            returned=len(ranked),
        )
        return await fetch_summaries_in_order(self.db, ranked)
