"""
Shared FastAPI dependencies.

Routers take settings, the SERP source and the business configuration
through these so tests can override them on the app.
"""

from typing import AsyncGenerator, Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from solar_rank.auth import TokenStore
from solar_rank.business import BusinessConfig
from solar_rank.database import get_db
from solar_rank.database.repository import get_business_config
from solar_rank.serp import SerpSource, get_serp_source
from solar_rank.utils.config import Settings, get_settings


async def get_serp(settings: Settings = Depends(get_settings)) -> AsyncGenerator[SerpSource, None]:
    """SERP source for one request, closed afterwards."""
    serp = get_serp_source(settings)
    try:
        yield serp
    finally:
        await serp.close()


def get_config(db: Session = Depends(get_db)) -> Optional[BusinessConfig]:
    """Latest business configuration (None before setup)."""
    return get_business_config(db)


def get_token_store(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> TokenStore:
    return TokenStore(db, settings)
