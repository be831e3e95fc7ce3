"""
Release Calendar Backend

FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from .config import get_settings
from .core.logging import setup_logging, get_logger
from .core.exceptions import register_exception_handlers
from .routers import (
    releases_router,
    genres_router,
    watchlist_router,
    preferences_router,
    auth_sync_router,
    scheduler_router,
)
from .routers.releases import limiter
from .services.scheduler import get_scheduler_service

# Initialize
settings = get_settings()
setup_logging()
logger = get_logger(__name__)


def _scheduler_enabled() -> bool:
    return settings.environment == "production" and not settings.disable_scheduler


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info(
        "app_startup",
        environment=settings.environment,
        debug=settings.debug
    )

    # Serverless deployments trigger the refresh externally
    if _scheduler_enabled():
        get_scheduler_service().start()
        logger.info("scheduler_auto_started")
    elif settings.disable_scheduler:
        logger.info("scheduler_disabled_serverless_mode")

    yield

    if _scheduler_enabled():
        get_scheduler_service().stop()

    logger.info("app_shutdown")


# Create FastAPI app
app = FastAPI(
    title="Release Calendar Backend",
    description="Movie and TV release calendar with watchlists, popularity and recommendations",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register exception handlers
register_exception_handlers(app)

# Include routers
app.include_router(releases_router)
app.include_router(genres_router)
app.include_router(watchlist_router)
app.include_router(preferences_router)
app.include_router(auth_sync_router)
app.include_router(scheduler_router)


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "service": "Release Calendar Backend",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs" if settings.debug else "disabled",
        "scheduler": "enabled" if _scheduler_enabled() else "manual",
    }


@app.get("/health")
async def health():
    """Health check for load balancers."""
    return {"status": "healthy"}
