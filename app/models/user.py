"""
User Models

Profile mirror and genre preferences.
"""

from typing import List
from pydantic import BaseModel, Field, ConfigDict


class UserPreferences(BaseModel):
    """
    Preferred genres as stored in user_genre_preferences.

    The set is replaced wholesale on every update.
    """
    preferences_completed: bool = Field(
        default=False,
        alias="preferencesCompleted",
        description="Whether onboarding genre selection was saved"
    )
    genre_ids: List[int] = Field(
        default_factory=list,
        alias="genreIds",
        description="Internal genre IDs"
    )

    model_config = ConfigDict(populate_by_name=True)


class PreferencesUpdateRequest(BaseModel):
    """Body for POST /user/preferences."""
    genre_ids: List[int] = Field(default_factory=list, alias="genreIds")

    model_config = ConfigDict(populate_by_name=True)
