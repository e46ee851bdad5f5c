"""
API Endpoints for Keyword Rankings

Handles:
1. Ranking summaries (overall, per area, freshness)
2. Ad-hoc ranking checks (auto-ranking)
3. Live ranking checks for configured areas
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from solar_rank.business import BusinessConfig, require_config
from solar_rank.database import get_db
from solar_rank.database import repository
from solar_rank.serp import SerpSource
from solar_rank.services import (
    check_live_area,
    live_preview,
    run_auto_ranking,
    run_live_rankings,
)
from solar_rank.utils.config import Settings, get_settings

from .dependencies import get_config, get_serp

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["Rankings"],
)


# =============================================================================
# REQUEST MODELS
# =============================================================================

class AutoRankingRequest(BaseModel):
    keywords: List[str] = Field(..., min_length=1)
    locations: List[str] = Field(..., min_length=1)
    domain: str = Field(..., min_length=3)


class LiveRankingsRequest(BaseModel):
    areas: Optional[List[str]] = None


def _mode(settings: Settings) -> str:
    return "live" if settings.LIVE_SCRAPER_ENABLED else "simulation"


# =============================================================================
# SUMMARIES
# =============================================================================

@router.get("/rankings")
async def get_rankings(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Top 10 keywords over the ranking window."""
    return {"top": repository.get_keyword_summary(db, days=settings.RANKING_WINDOW_DAYS)}


@router.get("/rankings/by-area")
async def get_rankings_by_area(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Top 10 keywords per service area over the ranking window."""
    return {"areas": repository.get_rankings_by_area(db, days=settings.RANKING_WINDOW_DAYS)}


@router.get("/rankings/status")
async def get_rankings_status(
    area: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Last ranking update per area."""
    return {"status": repository.get_ranking_status(db, area, mode=_mode(settings))}


# =============================================================================
# AUTO RANKING
# =============================================================================

@router.post("/auto-ranking")
async def post_auto_ranking(
    request: AutoRankingRequest,
    db: Session = Depends(get_db),
    serp: SerpSource = Depends(get_serp),
    settings: Settings = Depends(get_settings),
):
    """Check each keyword in each location for a domain."""
    return await run_auto_ranking(
        db, serp, request.keywords, request.locations, request.domain,
        request_delay=settings.SERP_REQUEST_DELAY,
    )


@router.get("/auto-ranking")
async def get_auto_ranking(db: Session = Depends(get_db)):
    """Ranking observations from the last 7 days (newest 50)."""
    return {"rankings": repository.get_recent_rankings(db, days=7, limit=50)}


# =============================================================================
# LIVE RANKINGS
# =============================================================================

@router.get("/live-rankings")
async def get_live_rankings(
    area: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
    serp: SerpSource = Depends(get_serp),
    config: Optional[BusinessConfig] = Depends(get_config),
    settings: Settings = Depends(get_settings),
):
    """Live check of one area; a preview when the scraper is disabled."""
    if not settings.LIVE_SCRAPER_ENABLED:
        return live_preview(config, area)

    config = require_config(config)
    target_area = area or config.primary_area
    return await check_live_area(
        db, serp, config, target_area,
        request_delay=settings.SERP_REQUEST_DELAY,
    )


@router.post("/live-rankings")
async def post_live_rankings(
    request: Optional[LiveRankingsRequest] = None,
    db: Session = Depends(get_db),
    serp: SerpSource = Depends(get_serp),
    config: Optional[BusinessConfig] = Depends(get_config),
    settings: Settings = Depends(get_settings),
):
    """Live pass over the requested (or all configured) areas."""
    areas = request.areas if request else None
    return await run_live_rankings(
        db, serp, config, areas,
        live_enabled=settings.LIVE_SCRAPER_ENABLED,
        request_delay=settings.SERP_REQUEST_DELAY,
        area_delay=settings.SERP_AREA_DELAY,
    )
