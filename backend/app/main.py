"""
Gym Member Sync - FastAPI Application Entry Point

Pulls members and attendance from gym management platforms (Mindbody,
Glofox) into the canonical member store.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.endpoints import health, sync
from app.core.config import get_settings
from app.db.base import Base
from app.db.session import async_engine
from app.services.adapter_factory import close_gym_adapters

settings = get_settings()


async def init_database():
    """Initialize database tables."""
    # Import all models to ensure they're registered with Base
    from app.models import member  # noqa: F401

    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    print("   ✓ Database tables initialized")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Runs startup and shutdown logic.
    """
    logger = logging.getLogger(__name__)

    # Startup
    print("🚀 Starting Gym Member Sync...")
    logger.info("🚀 Starting Gym Member Sync...")
    print(f"   Environment: {settings.app_env}")
    logger.info(f"Environment: {settings.app_env}")
    print(f"   Integrations offline mode: {settings.integrations_offline_mode}")
    logger.info(f"Integrations offline mode: {settings.integrations_offline_mode}")

    await init_database()
    logger.info("✅ Database tables initialized")

    print("✅ Startup complete!")
    logger.info("✅ Startup complete! Ready to accept requests.")

    yield

    # Shutdown
    print("👋 Shutting down Gym Member Sync...")
    logger.info("👋 Shutting down Gym Member Sync...")

    await close_gym_adapters()
    await async_engine.dispose()
    logger.info("✅ Shutdown complete")


app = FastAPI(
    title="Gym Member Sync",
    description="Read-only member and attendance sync from gym management platforms",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(health.router, prefix="/api/v1", tags=["Health"])
app.include_router(sync.router, prefix="/api/v1", tags=["Sync"])


@app.get("/", tags=["Health"])
async def root():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "Gym Member Sync",
        "version": "0.1.0",
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Liveness endpoint (no database round trip)."""
    return {
        "status": "healthy",
        "environment": settings.app_env,
        "offline_mode": settings.integrations_offline_mode,
        "components": {
            "api": "ok",
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_debug,
    )
