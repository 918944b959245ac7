"""
Member Sync API Endpoints.

Triggers a pull of members and visits from a gym platform and exposes the
progress of recent runs per gym and provider.
"""

import logging
from datetime import datetime
from typing import Annotated, Any, Callable, Dict

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.interfaces.gym_software import GymSoftwareAdapter
from app.db.session import get_async_session
from app.integrations.base import AdapterConfigError
from app.services.adapter_factory import UnknownProviderError, get_gym_adapter
from app.services.member_sync import (
    MemberStore,
    MemberSyncOrchestrator,
    SqlAlchemyMemberStore,
    SyncConnectionError,
    SyncOptions,
)
from app.services.sync_status import sync_status

router = APIRouter()
logger = logging.getLogger(__name__)

AdapterFactory = Callable[[str], GymSoftwareAdapter]


async def get_member_store(
    session: Annotated[AsyncSession, Depends(get_async_session)],
) -> MemberStore:
    """Dependency that provides the database-backed member store."""
    return SqlAlchemyMemberStore(session)


def get_adapter_factory() -> AdapterFactory:
    """Dependency that provides the provider-name -> adapter factory."""
    return get_gym_adapter


class SyncMembersRequest(BaseModel):
    """Request model for member sync."""

    provider: str = Field(..., min_length=1, description="mindbody or glofox")
    gym_id: str = Field(..., min_length=1)
    sync_visits: bool = True
    calculate_risk_scores: bool = True
    since: datetime | None = None
    dry_run: bool = False
    limit: int | None = Field(default=None, ge=1, description="Maximum number of members to fetch")


class SyncMembersResponse(BaseModel):
    """Response model for member sync."""

    success: bool
    provider: str
    dry_run: bool
    members: Dict[str, Any]
    visits: Dict[str, Any] | None = None
    risk: Dict[str, Any] | None = None
    message: str
    errors: list[str] = []


class SyncStatusResponse(BaseModel):
    """Sync status response."""

    phase: str
    provider: str | None
    gym_id: str | None
    dry_run: bool
    started_at: str | None
    current_step: str
    progress: Dict[str, Any]
    errors: list
    completed_at: str | None
    duration_seconds: float
    is_running: bool


@router.post("/sync/members", response_model=SyncMembersResponse)
async def sync_members(
    request: SyncMembersRequest,
    store: Annotated[MemberStore, Depends(get_member_store)],
    adapter_factory: Annotated[AdapterFactory, Depends(get_adapter_factory)],
) -> SyncMembersResponse:
    """
    Syncs members (and optionally visits and risk) from a gym platform.

    Strictly read-only towards the platform.

    Example:
        POST /api/v1/sync/members
        {
            "provider": "mindbody",
            "gym_id": "gym-1",
            "dry_run": true
        }
    """
    logger.info(f"🔄 Sync request: {request.provider} for gym {request.gym_id}")

    try:
        adapter = adapter_factory(request.provider)
    except UnknownProviderError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except AdapterConfigError as e:
        logger.error(f"❌ {request.provider} not configured: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    orchestrator = MemberSyncOrchestrator(
        adapter,
        store,
        request.gym_id,
        recent_window_days=get_settings().risk_recent_window_days,
    )
    options = SyncOptions(
        since=request.since,
        dry_run=request.dry_run,
        sync_visits=request.sync_visits,
        calculate_risk_scores=request.calculate_risk_scores,
        limit=request.limit,
    )

    try:
        result = await orchestrator.run(options)
    except SyncConnectionError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    except Exception as e:
        logger.error(f"❌ Member sync failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Sync failed: {str(e)}",
        )

    payload = result.to_dict()
    return SyncMembersResponse(success=True, **payload)


@router.get("/sync/status", response_model=SyncStatusResponse)
async def get_sync_status(
    gym_id: str | None = None,
    provider: str | None = None,
) -> SyncStatusResponse:
    """
    Get current sync status.

    Poll during a long sync to follow its phases. Runs are tracked per
    gym and provider; without filters the most recently started run is
    returned.
    """
    if provider is not None:
        provider = provider.strip().lower()
    current = sync_status.get_status(gym_id=gym_id, provider=provider)
    return SyncStatusResponse(
        phase=current["phase"].value,
        provider=current["provider"],
        gym_id=current["gym_id"],
        dry_run=current["dry_run"],
        started_at=current["started_at"],
        current_step=current["current_step"],
        progress=current["progress"],
        errors=current["errors"],
        completed_at=current["completed_at"],
        duration_seconds=current["duration_seconds"],
        is_running=sync_status.is_running(gym_id=gym_id, provider=provider),
    )
