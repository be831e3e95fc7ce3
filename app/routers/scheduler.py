"""
Scheduler API Router

Endpoints for monitoring and manually triggering the catalog refresh.
Accepts Firebase auth or the admin API key.
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Header

from ..config import get_settings
from ..core.exceptions import UnauthorizedError
from ..core.logging import get_logger
from ..core.security import get_current_user_optional
from ..services.scheduler import SchedulerService, get_scheduler_service

logger = get_logger(__name__)
settings = get_settings()

router = APIRouter(prefix="/scheduler", tags=["scheduler"])


async def verify_admin_access(
    current_user: Optional[dict] = Depends(get_current_user_optional),
    x_api_key: Optional[str] = Header(None),
):
    """
    Verify admin access via Firebase auth OR API key.

    Accepts:
    - Firebase auth token: Authorization: Bearer <token>
    - API key: X-API-Key: <admin_key> (only when ADMIN_API_KEY is set)
    """
    if current_user is not None:
        logger.info("admin_access_firebase", uid=current_user.get("uid"))
        return {"method": "firebase", "uid": current_user.get("uid")}

    if settings.admin_api_key and x_api_key == settings.admin_api_key:
        logger.info("admin_access_api_key")
        return {"method": "api_key", "uid": "admin"}

    raise UnauthorizedError("Missing or invalid authentication. Use Firebase token or X-API-Key header.")


@router.get("/status")
async def get_scheduler_status(
    admin: dict = Depends(verify_admin_access),
    scheduler: SchedulerService = Depends(get_scheduler_service),
):
    """Whether the scheduler runs, when the next refresh is due and how the last one went."""
    return scheduler.get_job_status()


@router.post("/trigger/ingestion")
async def trigger_ingestion(
    admin: dict = Depends(verify_admin_access),
    scheduler: SchedulerService = Depends(get_scheduler_service),
):
    """
    Run the catalog refresh now and wait for it to finish.

    Returns the per-batch summary, or success=false if the job crashed.
    """
    logger.info("manual_ingestion_trigger", admin=admin)

    summary = await scheduler.trigger_ingestion_now()

    return {
        "success": summary is not None and not summary.failed_batches,
        "summary": summary.model_dump(by_alias=True, mode="json") if summary else None,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@router.post("/start")
async def start_scheduler(
    admin: dict = Depends(verify_admin_access),
    scheduler: SchedulerService = Depends(get_scheduler_service),
):
    """Start the background scheduler."""
    scheduler.start()
    return {"success": True, "message": "Scheduler started"}


@router.post("/stop")
async def stop_scheduler(
    admin: dict = Depends(verify_admin_access),
    scheduler: SchedulerService = Depends(get_scheduler_service),
):
    """Stop the background scheduler."""
    scheduler.stop()
    return {"success": True, "message": "Scheduler stopped"}
