"""Dashboard router - admin and friend statistics panels"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from ...auth import SessionContext, require_role
from ...database import SessionLocal
from .aggregator import DashboardUnavailable
from .schemas import AdminStatsResponse, FriendStatsResponse
from .service import DashboardService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboards", tags=["Dashboards"])


def get_dashboard_service() -> DashboardService:
    """Dependency injection for DashboardService"""
    return DashboardService(SessionLocal)


@router.get("/admin", response_model=AdminStatsResponse)
async def get_admin_dashboard(
    context: SessionContext = Depends(require_role("admin")),
    service: DashboardService = Depends(get_dashboard_service),
):
    """Platform-wide statistics for the admin control center"""
    try:
        return await service.get_admin_stats()
    except DashboardUnavailable as e:
        logger.error(f"Error fetching admin stats: {e}")
        raise HTTPException(status_code=503, detail="Failed to load dashboard statistics") from e


@router.get("/friend", response_model=FriendStatsResponse)
async def get_friend_dashboard(
    context: SessionContext = Depends(require_role("friend", "therapist")),
    service: DashboardService = Depends(get_dashboard_service),
):
    """Client, message, note and session counts for a provider"""
    try:
        return await service.get_friend_stats(context)
    except DashboardUnavailable as e:
        logger.error(f"Error fetching friend stats for {context.profile_id}: {e}")
        raise HTTPException(status_code=503, detail="Failed to load dashboard statistics") from e
