"""
Solar Rank Intelligence API

FastAPI application that:
1. Discovers and scores keywords per service area
2. Tracks the operator's rankings (simulated or live SERP)
3. Discovers, ranks and summarizes competitors
4. Serves ranking and competitor summaries to the dashboard
"""

import logging
import sys
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from solar_rank import __version__
from solar_rank.auth import TokenStoreError
from solar_rank.business import ConfigurationError
from solar_rank.database import check_db_connection, get_db_info, init_db
from solar_rank.utils.config import get_settings

from . import business_config, competitor_tracking, integrations, keywords, locations, rankings

settings = get_settings()

# Configure logging to stdout
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
    force=True,
)
logger = logging.getLogger(__name__)

# Quiet down chatty loggers
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

app = FastAPI(
    title="Solar Rank Intelligence",
    description="Keyword discovery, rank tracking and competitor intelligence for solar installers",
    version=__version__,
)

app.include_router(competitor_tracking.router)
app.include_router(keywords.router)
app.include_router(rankings.router)
app.include_router(business_config.router)
app.include_router(locations.router)
app.include_router(integrations.router)


# ============================================================================
# STARTUP - Initialize Database
# ============================================================================

@app.on_event("startup")
async def startup_event():
    """Initialize database on startup."""
    logger.info("Initializing database...")
    try:
        init_db()
        if check_db_connection():
            logger.info("Database connection verified")
        else:
            logger.warning("Database connection check failed - continuing anyway")
    except SQLAlchemyError as e:
        logger.error(f"Database initialization failed: {e}")


# ============================================================================
# ERROR HANDLING
# ============================================================================

@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.warning(f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(TokenStoreError)
async def token_error_handler(request: Request, exc: TokenStoreError):
    logger.error(f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=502, content={"error": "Token refresh failed", "details": str(exc)})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"{request.method} {request.url.path} database error: {exc}")
    return JSONResponse(status_code=500, content={"error": "Database error", "details": str(exc)})


# ============================================================================
# HEALTH
# ============================================================================

@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "Solar Rank Intelligence"}


@app.get("/api/health")
async def health():
    """Detailed health check including database status."""
    db_info = get_db_info()
    return {
        "status": "healthy" if db_info["connected"] else "degraded",
        "timestamp": datetime.now().isoformat(),
        "version": __version__,
        "serpMode": "live" if settings.LIVE_SCRAPER_ENABLED else "simulation",
        "database": "connected" if db_info["connected"] else "disconnected",
        "databaseType": db_info["database_type"],
        "tables": db_info["tables"],
    }


# ============================================================================
# MAIN
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
