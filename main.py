"""
Bug Tracker Analytics Backend
Serves AI-style insights, predictions and recommendations computed from live ticket data
"""
import uvicorn
from datetime import datetime
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.errors import GENERIC_ERROR
from api.routes import api_router
from config import settings
from core.cache import TTLCache
from core.database import check_connection, dispose_engine, get_session_factory, init_db
from services.analytics_engine import AIAnalyticsEngine
from utils.logging import get_logger, set_log_level

logger = get_logger(__name__)

app = FastAPI(
    title=settings.app.app_name,
    description="Analytics engine for the issue tracker",
    version="1.0.0",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.app.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    """Create tables and the shared analytics engine"""
    set_log_level(settings.app.log_level)
    logger.info("Starting analytics service", environment=settings.app.environment)

    await init_db()
    app.state.analytics_engine = AIAnalyticsEngine(
        get_session_factory(),
        cache=TTLCache(ttl_seconds=settings.analytics.analytics_cache_ttl_seconds),
    )
    logger.info("Analytics engine ready", cache_ttl=settings.analytics.analytics_cache_ttl_seconds)


@app.on_event("shutdown")
async def shutdown_event():
    """Close database connections on shutdown"""
    await dispose_engine()


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled error", path=request.url.path, error=str(exc), exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "message": GENERIC_ERROR,
            "error": None if settings.app.is_production else str(exc),
        },
    )


@app.get("/")
async def root():
    """Health check endpoint"""
    return {"message": "Bug Tracker Analytics API", "status": "healthy"}


@app.get("/api/health")
async def health_check():
    """Detailed health check with database status"""
    database_ok = await check_connection()
    return {
        "status": "healthy" if database_ok else "degraded",
        "app_name": settings.app.app_name,
        "version": "1.0.0",
        "environment": settings.app.environment,
        "database": database_ok,
        "timestamp": datetime.utcnow().isoformat(),
    }


app.include_router(api_router, prefix="/api")


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.app.host,
        port=settings.app.port,
        reload=settings.app.debug,
        log_level="info"
    )
