"""
Recommendation Engine

Genre-overlap recommendations: releases sharing the most genres with a
seed release rank first. The seed is either given explicitly or taken
from the user's most recently created LIKE entry.
"""

from collections import Counter
from typing import Any, Optional

from ..core.exceptions import NotFoundError
from ..core.logging import get_logger
from ..models.release import summary_from_row
from ..models.response import RecommendationResponse
from ..models.watchlist import Rating
from .popularity import fetch_summaries_in_order, rank_by_score, resolve_limit
from .supabase_db import Order, SupabaseDatabase, eq, in_, neq

logger = get_logger(__name__)


class RecommendationEngine:
    """Stateless; every call reads the current store contents."""

    def __init__(self, db: SupabaseDatabase):
        self.db = db

    async def latest_liked_release_id(self, user_id: str) -> Optional[int]:
        """Release of the user's most recently created LIKE entry."""
        rows = await self.db.find_many(
            "watchlist_entries",
            where=[eq("user_id", user_id), eq("rating", Rating.LIKE.value)],
            order=[Order(column="created_at", descending=True)],
            select="release_id",
            limit=1,
        )
        return rows[0]["release_id"] if rows else None

    async def recommend(
        self,
        user_id: str,
        release_id: Optional[int] = None,
        limit: Any = None,
    ) -> RecommendationResponse:
        """
        Rank releases by the number of genres shared with the seed.

        Returns:
            {base: None, items: []} when no seed can be determined

        Raises:
            NotFoundError: the seed release does not exist
        """
        limit = resolve_limit(limit)

        seed_id = release_id if release_id is not None else await self.latest_liked_release_id(user_id)
        if seed_id is None:
            logger.info("recommendation_no_seed", uid=user_id)
            return RecommendationResponse(base=None, items=[])

        seed = await self.db.find_unique(
            "releases",
            where=[eq("id", seed_id)],
            select="id,title,poster_path",
        )
        if seed is None:
            raise NotFoundError("Release", seed_id)
        base = summary_from_row(seed)

        seed_links = await self.db.find_many(
            "release_genres",
            where=[eq("release_id", seed_id)],
            select="genre_id",
        )
        genre_ids = sorted({row["genre_id"] for row in seed_links})
        if not genre_ids:
            return RecommendationResponse(base=base, items=[])

        candidate_links = await self.db.find_many(
            "release_genres",
            where=[in_("genre_id", genre_ids), neq("release_id", seed_id)],
            select="release_id,genre_id",
        )
        matches = Counter(row["release_id"] for row in candidate_links)
        ranked = rank_by_score(matches, limit)

        logger.info(
            "recommendation_ranked",
            uid=user_id,
            seed_id=seed_id,
            explicit_seed=release_id is not None,
            genres=len(genre_ids),
            candidates=len(matches),
            returned=len(ranked),
        )
        items = await fetch_summaries_in_order(self.db, ranked)
        return RecommendationResponse(base=base, items=items)
