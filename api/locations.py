"""
API Endpoints for Service Area Performance
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from solar_rank.database import get_db
from solar_rank.database import repository
from solar_rank.utils.config import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/locations",
    tags=["Locations"],
)


@router.get("")
async def list_locations(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Every service area with its ranking aggregate over the ranking window."""
    return {"locations": repository.get_location_performance(db, days=settings.RANKING_WINDOW_DAYS)}
