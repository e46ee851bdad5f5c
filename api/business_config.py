"""
API Endpoints for Business Configuration

The latest saved row is the current configuration; every save inserts a
new row so history is kept.
"""

import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from solar_rank.business import BusinessConfig, TargetKeywords
from solar_rank.database import get_db
from solar_rank.database import repository

from .dependencies import get_config

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/business-config",
    tags=["Business Config"],
)


class BusinessConfigRequest(BaseModel):
    """Business profile; targetKeywords may be a list or {global, areas, competitors}."""
    business_name: str = Field(default="", alias="businessName")
    website_url: str = Field(default="", alias="websiteUrl")
    service_areas: List[str] = Field(default_factory=list, alias="serviceAreas")
    target_keywords: Optional[Any] = Field(default=None, alias="targetKeywords")

    class Config:
        populate_by_name = True


@router.get("")
async def get_business_config(config: Optional[BusinessConfig] = Depends(get_config)):
    """Current configuration; empty defaults before setup."""
    return (config or BusinessConfig()).to_dict()


@router.post("")
async def save_business_config(
    request: BusinessConfigRequest,
    db: Session = Depends(get_db),
):
    config = BusinessConfig(
        business_name=request.business_name.strip(),
        website=request.website_url.strip(),
        service_areas=[a.strip() for a in request.service_areas if a and a.strip()],
        target_keywords=TargetKeywords.parse(request.target_keywords),
    )
    repository.save_business_config(db, config)
    return {"ok": True, "config": config.to_dict()}
