"""
Analytics API endpoints for the caller's projects
"""
from typing import Dict, Any, List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from api.errors import server_error
from core.database import get_db
from core.security import get_current_user
from models.tracker import User
from services.reporting import ReportingService
from utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


@router.get("/overview", response_model=Dict[str, Any])
async def get_overview(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get overall statistics"""
    try:
        return await ReportingService(db).overview(current_user.id)

    except Exception as e:
        logger.error("Failed to get overview", user_id=str(current_user.id), error=str(e))
        raise server_error("get overview", e)


@router.get("/projects", response_model=List[Dict[str, Any]])
async def get_project_stats(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get per-project ticket statistics"""
    try:
        return await ReportingService(db).project_stats(current_user.id)

    except Exception as e:
        logger.error("Failed to get project stats", user_id=str(current_user.id), error=str(e))
        raise server_error("get project stats", e)


@router.get("/trends", response_model=List[Dict[str, Any]])
async def get_ticket_trends(
    days_back: int = Query(30, ge=1, le=90),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get tickets created and resolved per day"""
    try:
        return await ReportingService(db).ticket_trends(current_user.id, days=days_back)

    except Exception as e:
        logger.error("Failed to get ticket trends", user_id=str(current_user.id), error=str(e))
        raise server_error("get ticket trends", e)


@router.get("/user-activity", response_model=Dict[str, Any])
async def get_user_activity(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get the caller's own activity counts"""
    try:
        return await ReportingService(db).user_activity(current_user.id)

    except Exception as e:
        logger.error("Failed to get user activity", user_id=str(current_user.id), error=str(e))
        raise server_error("get user activity", e)


@router.get("/team", response_model=List[Dict[str, Any]])
async def get_team_performance(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get performance of the members of the caller's projects"""
    try:
        return await ReportingService(db).team_performance(current_user.id)

    except Exception as e:
        logger.error("Failed to get team performance", user_id=str(current_user.id), error=str(e))
        raise server_error("get team performance", e)
