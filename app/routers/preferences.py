"""
Preference Router

Endpoints for reading and replacing a user's preferred genres.
"""

from fastapi import APIRouter, Depends

from ..core.security import get_current_user
from ..core.logging import get_logger
from ..models.user import PreferencesUpdateRequest, UserPreferences
from ..services.preference_service import PreferenceService
from .dependencies import get_preference_service

router = APIRouter(prefix="/user/preferences", tags=["preferences"])
logger = get_logger(__name__)


@router.get("", response_model=UserPreferences)
async def get_preferences(
    current_user: dict = Depends(get_current_user),
    service: PreferenceService = Depends(get_preference_service),
):
    return await service.get_preferences(current_user["uid"])


@router.post("", response_model=UserPreferences)
async def set_preferences(
    request: PreferencesUpdateRequest,
    current_user: dict = Depends(get_current_user),
    service: PreferenceService = Depends(get_preference_service),
):
    """
    Replace the preferred-genre set.

    The previous selection is discarded, not merged.
    """
    return await service.set_genre_preferences(
        current_user["uid"],
        request.genre_ids,
        email=current_user.get("email"),
    )
