"""
Auth Sync Router

Mirrors Firebase users into the Supabase users table.

Security Model:
- Client sends Firebase ID token
- Backend verifies token (extracts uid, email)
- Backend upserts the users row with the service role key
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..core.logging import get_logger
from ..core.security import get_current_user
from ..services.preference_service import PreferenceService
from .dependencies import get_preference_service

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


class ProfileSyncResponse(BaseModel):
    """Response from profile sync."""
    success: bool
    uid: str
    message: str


@router.post("/sync-profile", response_model=ProfileSyncResponse)
async def sync_profile(
    current_user: dict = Depends(get_current_user),
    service: PreferenceService = Depends(get_preference_service),
):
    """
    Create or update the caller's users row.

    Called by the client after sign-in, before any watchlist or
    preference writes reference the user.
    """
    uid = current_user.get("uid")
    if not uid:
        raise HTTPException(status_code=400, detail="Invalid token: missing uid")

    logger.info("profile_sync_request", uid=uid)
    await service.sync_profile(uid, current_user.get("email"))

    return ProfileSyncResponse(
        success=True,
        uid=uid,
        message="Profile synced successfully",
    )
