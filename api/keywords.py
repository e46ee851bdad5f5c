"""
API Endpoints for Keyword Discovery

Handles:
1. Scored keyword suggestions per service area
2. Applying chosen keywords to the business configuration
3. Bootstrapping an area with ranking facts
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from solar_rank.business import BusinessConfig, ConfigurationError, TargetKeywords
from solar_rank.database import get_db
from solar_rank.database import repository
from solar_rank.discovery import DEFAULT_LIMIT, discover_for_areas
from solar_rank.serp import SerpSource
from solar_rank.services import bootstrap_area_keywords
from solar_rank.utils.config import Settings, get_settings

from .dependencies import get_config, get_serp

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["Keywords"],
)

MAX_GLOBAL_KEYWORDS = 20


# =============================================================================
# REQUEST MODELS
# =============================================================================

class ApplyKeywordsRequest(BaseModel):
    """Keywords chosen per area: {"Austin, TX": ["solar panels austin, tx", ...]}."""
    apply: Dict[str, List[str]]


class BootstrapRequest(BaseModel):
    area: str = Field(..., min_length=1)
    limit: int = Field(default=DEFAULT_LIMIT, ge=1, le=50)


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("/keyword-discovery")
async def keyword_discovery(
    area: Optional[str] = Query(default=None),
    limit: int = Query(default=DEFAULT_LIMIT, ge=1, le=50),
    config: Optional[BusinessConfig] = Depends(get_config),
):
    """Top keyword opportunities for one area or every configured area."""
    if area:
        areas = [area]
    elif config is not None:
        areas = config.require_service_areas()
    else:
        raise ConfigurationError("No service areas configured. Please complete setup first.")

    suggestions = discover_for_areas(areas, limit)
    return {
        "areas": {name: [s.to_dict() for s in items] for name, items in suggestions.items()},
        "generatedAt": datetime.utcnow().isoformat(),
    }


@router.post("/keyword-discovery")
async def apply_keywords(
    request: ApplyKeywordsRequest,
    db: Session = Depends(get_db),
    config: Optional[BusinessConfig] = Depends(get_config),
):
    """
    Merge chosen keywords into a new configuration version.

    Applied areas replace their keyword lists; global keywords gain the
    applied keywords (capped); name, website, other areas and manual
    competitors carry over.
    """
    if not request.apply:
        raise HTTPException(status_code=400, detail="Invalid payload")

    current = config or BusinessConfig()
    targets = current.target_keywords

    applied = {area: list(dict.fromkeys(k.strip() for k in kws if k.strip())) for area, kws in request.apply.items()}
    flattened = [k for kws in applied.values() for k in kws]
    global_keywords = list(dict.fromkeys(targets.global_keywords + flattened))[:MAX_GLOBAL_KEYWORDS]

    service_areas = list(current.service_areas)
    service_areas.extend(area for area in applied if area not in service_areas)

    updated = BusinessConfig(
        business_name=current.business_name,
        website=current.website,
        service_areas=service_areas,
        target_keywords=TargetKeywords(
            global_keywords=global_keywords,
            areas={**targets.areas, **applied},
            competitors=dict(targets.competitors),
        ),
    )
    repository.save_business_config(db, updated)

    logger.info(f"Applied {len(flattened)} keywords across {len(applied)} areas")
    return {"ok": True, "targetKeywords": updated.target_keywords.to_dict()}


@router.post("/keywords/bootstrap")
async def bootstrap_keywords(
    request: BootstrapRequest,
    db: Session = Depends(get_db),
    serp: SerpSource = Depends(get_serp),
    config: Optional[BusinessConfig] = Depends(get_config),
    settings: Settings = Depends(get_settings),
):
    """Seed an area with ranking facts for its candidate keywords."""
    return await bootstrap_area_keywords(
        db, serp, config, request.area,
        limit=request.limit,
        request_delay=settings.SERP_REQUEST_DELAY,
    )
