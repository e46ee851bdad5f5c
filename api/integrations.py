"""
API Endpoints for External Integrations

Stores OAuth credentials (e.g. Google Search Console) in the database and
refreshes them on demand. Token values are never returned.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from solar_rank.auth import TokenStore

from .dependencies import get_token_store

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/integrations",
    tags=["Integrations"],
)


class TokenRequest(BaseModel):
    """OAuth token response as issued by the provider."""
    access_token: str = Field(..., min_length=1)
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = Field(default=None, ge=0)
    token_type: Optional[str] = None
    scope: Optional[str] = None


@router.get("/{provider}")
async def integration_status(provider: str, store: TokenStore = Depends(get_token_store)):
    return store.status(provider)


@router.post("/{provider}/token")
async def save_token(
    provider: str,
    request: TokenRequest,
    store: TokenStore = Depends(get_token_store),
):
    """Store credentials for a provider; an omitted refresh_token keeps the old one."""
    store.save_token(provider, request.model_dump(exclude_none=True))
    return {"ok": True, **store.status(provider)}


@router.post("/{provider}/refresh")
async def refresh_token(provider: str, store: TokenStore = Depends(get_token_store)):
    """
    Force a refresh with the stored refresh token.

    Provider rejections surface as 502 through the TokenStoreError handler.
    """
    await store.refresh_token(provider)
    logger.info(f"Refreshed {provider} credentials")
    return {"ok": True, **store.status(provider)}
