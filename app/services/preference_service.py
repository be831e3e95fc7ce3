"""
Preference Service

User profile mirror and preferred-genre selections.
"""

from typing import List, Optional

from ..core.logging import get_logger
from ..models.user import UserPreferences
from .supabase_db import SupabaseDatabase, eq

logger = get_logger(__name__)


class PreferenceService:
    def __init__(self, db: SupabaseDatabase):
        self.db = db

    async def sync_profile(self, user_id: str, email: Optional[str]) -> None:
        """Upsert the users row for a verified Firebase user."""
        record = {"id": user_id}
        if email:
            record["email"] = email
        await self.db.upsert("users", record, on_conflict="id")
        logger.info("profile_synced", uid=user_id)

    async def get_preferences(self, user_id: str) -> UserPreferences:
        user = await self.db.find_unique(
            "users",
            where=[eq("id", user_id)],
            select="id,preferences_completed",
        )
        rows = await self.db.find_many(
            "user_genre_preferences",
            where=[eq("user_id", user_id)],
            select="genre_id",
        )
        return UserPreferences(
            preferences_completed=bool(user and user.get("preferences_completed")),
            genre_ids=sorted(row["genre_id"] for row in rows),
        )

    async def set_genre_preferences(
        self,
        user_id: str,
        genre_ids: List[int],
        email: Optional[str] = None,
    ) -> UserPreferences:
        """
        Replace the user's preferred genres.

        Strategy:
        1. Upsert the user row and mark preferences completed.
        2. Delete every existing selection.
        3. Insert the new set (duplicates dropped).
        """
        unique_ids = list(dict.fromkeys(genre_ids))

        user = {"id": user_id, "preferences_completed": True}
        if email:
            user["email"] = email
        await self.db.upsert("users", user, on_conflict="id")

        await self.db.delete_many("user_genre_preferences", [eq("user_id", user_id)])
        await self.db.create_many(
            "user_genre_preferences",
            [{"user_id": user_id, "genre_id": gid} for gid in unique_ids],
        )

        logger.info("synced_genres", uid=user_id, count=len(unique_ids))
        return UserPreferences(preferences_completed=True, genre_ids=sorted(unique_ids))
