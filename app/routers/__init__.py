"""API Routers."""

from .releases import router as releases_router
from .genres import router as genres_router
from .watchlist import router as watchlist_router
from .preferences import router as preferences_router
from .auth_sync import router as auth_sync_router
from .scheduler import router as scheduler_router

__all__ = [
    "releases_router",
    "genres_router",
    "watchlist_router",
    "preferences_router",
    "auth_sync_router",
    "scheduler_router",
]
