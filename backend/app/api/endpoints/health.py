"""
Health and Status Endpoints for monitoring.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.db.session import get_async_session
from app.services.adapter_factory import SUPPORTED_PROVIDERS

router = APIRouter()
logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database_connected: bool
    offline_mode: bool
    providers: list[str]


@router.get("/health", response_model=HealthResponse)
async def health_check(
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> HealthResponse:
    """
    Health check including a database round trip.

    Returns:
        Health status with database connectivity
    """
    settings = get_settings()
    try:
        await session.execute(text("SELECT 1"))
        connected = True
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        connected = False

    return HealthResponse(
        status="healthy" if connected else "unhealthy",
        database_connected=connected,
        offline_mode=settings.integrations_offline_mode,
        providers=list(SUPPORTED_PROVIDERS),
    )
