"""
API Endpoints for Competitor Tracking

Handles:
1. Competitor overview (cached for COMPETITOR_CACHE_HOURS)
2. Refresh / remove actions
3. Scheduled tracking across all service areas
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from solar_rank.business import BusinessConfig
from solar_rank.database import get_db
from solar_rank.database import repository
from solar_rank.serp import SerpSource
from solar_rank.services import (
    get_schedule_status,
    run_competitor_tracking,
    run_scheduled_tracking,
)
from solar_rank.utils.config import Settings, get_settings

from .dependencies import get_config, get_serp

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/competitor-tracking",
    tags=["Competitor Tracking"],
)


# =============================================================================
# REQUEST MODELS
# =============================================================================

class CompetitorActionRequest(BaseModel):
    """Refresh all competitor data or remove one competitor."""
    action: str
    competitor_id: Optional[str] = Field(default=None, alias="competitorId")

    class Config:
        populate_by_name = True


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("")
async def get_competitor_tracking(
    db: Session = Depends(get_db),
    serp: SerpSource = Depends(get_serp),
    config: Optional[BusinessConfig] = Depends(get_config),
    settings: Settings = Depends(get_settings),
):
    """Competitor analyses, market summary and insights."""
    return await run_competitor_tracking(db, serp, config, settings)


@router.post("")
async def competitor_action(
    request: CompetitorActionRequest,
    db: Session = Depends(get_db),
):
    """
    - refresh: clear all competitor data; the next read runs a fresh pass
    - remove: delete one competitor by id
    """
    if request.action == "refresh":
        cleared = repository.clear_competitor_data(db)
        return {
            "success": True,
            "message": "Competitor data cleared. Fresh data will be fetched on next request.",
            "cleared": cleared,
        }

    if request.action != "remove":
        raise HTTPException(status_code=400, detail=f"Unknown action: {request.action}")

    if not request.competitor_id:
        raise HTTPException(status_code=400, detail="competitorId is required for remove")

    if not repository.remove_competitor(db, request.competitor_id):
        raise HTTPException(status_code=404, detail="Competitor not found")

    return {"success": True, "message": f"Competitor {request.competitor_id} removed"}


@router.get("/schedule")
async def get_schedule(db: Session = Depends(get_db)):
    """Counts and freshness of tracked competitor data."""
    return get_schedule_status(db)


@router.post("/schedule")
async def run_schedule(
    db: Session = Depends(get_db),
    serp: SerpSource = Depends(get_serp),
    config: Optional[BusinessConfig] = Depends(get_config),
    settings: Settings = Depends(get_settings),
):
    """Fresh tracking pass for every service area."""
    return await run_scheduled_tracking(db, serp, config, settings)
