"""
AI analytics API endpoints: dashboard insights, chat assistant and cache refresh
"""
from typing import Dict, Any
from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from api.errors import server_error
from config import settings
from core.security import get_current_user
from models.tracker import User
from services.analytics_engine import AIAnalyticsEngine
from services.assistant import build_chat_response, build_dashboard_payload
from utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


class ChatRequest(BaseModel):
    """Chat message from the assistant widget"""
    message: str = Field(..., min_length=1, max_length=2000)


def get_analytics_engine(request: Request) -> AIAnalyticsEngine:
    """The engine created at application startup"""
    engine = getattr(request.app.state, "analytics_engine", None)
    if engine is None:
        raise HTTPException(status_code=503, detail="Analytics engine is not ready")
    return engine


@router.get("/analytics", response_model=Dict[str, Any])
async def get_ai_analytics(
    engine: AIAnalyticsEngine = Depends(get_analytics_engine),
    current_user: User = Depends(get_current_user),
):
    """Get insights, predictions and recommendations for the dashboard cards"""
    try:
        analysis = await engine.get_comprehensive_analysis()
        return build_dashboard_payload(analysis, settings.analytics.analytics_model_version)

    except Exception as e:
        logger.error("AI analytics failed", user_id=str(current_user.id), error=str(e))
        raise server_error("compute analytics", e)


@router.post("/chat", response_model=Dict[str, Any])
async def chat_with_assistant(
    request: ChatRequest,
    engine: AIAnalyticsEngine = Depends(get_analytics_engine),
    current_user: User = Depends(get_current_user),
):
    """Answer a chat message using live metrics"""
    try:
        analysis = await engine.get_comprehensive_analysis()
        return build_chat_response(request.message, analysis)

    except Exception as e:
        logger.error("AI chat failed", user_id=str(current_user.id), error=str(e))
        raise server_error("answer chat message", e)


@router.post("/refresh", response_model=Dict[str, Any])
async def refresh_analytics(
    engine: AIAnalyticsEngine = Depends(get_analytics_engine),
    current_user: User = Depends(get_current_user),
):
    """Invalidate the analytics cache and recompute"""
    try:
        analysis = await engine.refresh()
        logger.info("Analytics cache refreshed", user_id=str(current_user.id))
        return {
            "message": "Analytics cache refreshed successfully",
            "timestamp": analysis["timestamp"],
        }

    except Exception as e:
        logger.error("Analytics refresh failed", error=str(e))
        raise server_error("refresh analytics", e)
