"""
OAuth Token Store

Keeps provider credentials in the oauth_tokens table instead of process
environment variables. Access tokens are refreshed with the stored refresh
token when they are about to expire.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import httpx
from sqlalchemy.orm import Session

from solar_rank.database.models import OAuthToken
from solar_rank.database.session import transaction
from solar_rank.utils.config import Settings

logger = logging.getLogger(__name__)

# Refresh this long before the provider's expiry
EXPIRY_SKEW = timedelta(seconds=60)


class TokenStoreError(Exception):
    """Token missing or refresh rejected by the provider."""
    def __init__(self, message: str, provider: str = None, status_code: int = None):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


def is_expired(token: OAuthToken, now: Optional[datetime] = None) -> bool:
    if token.expires_at is None:
        return False
    now = now or datetime.utcnow()
    return token.expires_at - EXPIRY_SKEW <= now


class TokenStore:
    """
    Persistent OAuth credentials per provider.

    Usage:
        store = TokenStore(db, settings)
        store.save_token("google", {"access_token": "...", "refresh_token": "...", "expires_in": 3600})
        access_token = await store.get_token("google")
    """

    def __init__(
        self,
        db: Session,
        settings: Settings,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.db = db
        self.settings = settings
        self._client = client

    def _load(self, provider: str) -> Optional[OAuthToken]:
        return self.db.get(OAuthToken, provider)

    def save_token(self, provider: str, tokens: Dict[str, Any]) -> OAuthToken:
        """
        Store a token response.

        A missing refresh_token keeps the previously stored one (refresh
        responses usually omit it).
        """
        if not tokens.get("access_token"):
            raise TokenStoreError("Token response has no access_token", provider=provider)

        expires_at = None
        if tokens.get("expires_in"):
            expires_at = datetime.utcnow() + timedelta(seconds=int(tokens["expires_in"]))

        with transaction(self.db):
            token = self._load(provider)
            if token is None:
                token = OAuthToken(provider=provider)
                self.db.add(token)
            token.access_token = tokens["access_token"]
            if tokens.get("refresh_token"):
                token.refresh_token = tokens["refresh_token"]
            token.token_type = tokens.get("token_type") or token.token_type or "Bearer"
            if tokens.get("scope"):
                token.scope = tokens["scope"]
            token.expires_at = expires_at
            token.updated_at = datetime.utcnow()

        logger.info(f"Stored {provider} token (expires {expires_at.isoformat() if expires_at else 'never'})")
        return token

    def status(self, provider: str) -> Dict[str, Any]:
        """Connection state for a provider, without secrets."""
        token = self._load(provider)
        if token is None:
            return {"provider": provider, "connected": False}
        return {
            "provider": provider,
            "connected": True,
            "expired": is_expired(token),
            "expiresAt": token.expires_at.isoformat() if token.expires_at else None,
            "hasRefreshToken": bool(token.refresh_token),
            "scope": token.scope,
            "updatedAt": token.updated_at.isoformat() if token.updated_at else None,
        }

    async def get_token(self, provider: str) -> Optional[str]:
        """Valid access token for a provider, refreshed if expired. None when never stored."""
        token = self._load(provider)
        if token is None:
            return None
        if is_expired(token):
            logger.info(f"{provider} token expired, refreshing")
            token = await self.refresh_token(provider)
        return token.access_token

    async def refresh_token(self, provider: str) -> OAuthToken:
        """
        Exchange the stored refresh token for a new access token.

        Raises:
            TokenStoreError: No refresh token, or the provider rejected it
        """
        token = self._load(provider)
        if token is None or not token.refresh_token:
            raise TokenStoreError(f"No refresh token stored for {provider}", provider=provider)

        data = {
            "grant_type": "refresh_token",
            "refresh_token": token.refresh_token,
            "client_id": self.settings.GOOGLE_CLIENT_ID or "",
            "client_secret": self.settings.GOOGLE_CLIENT_SECRET or "",
        }

        client = self._client or httpx.AsyncClient(timeout=httpx.Timeout(30.0))
        try:
            response = await client.post(self.settings.GOOGLE_TOKEN_URL, data=data)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"{provider} token refresh rejected: HTTP {e.response.status_code}")
            raise TokenStoreError(
                f"Token refresh failed: HTTP {e.response.status_code}",
                provider=provider,
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"{provider} token refresh error: {e}")
            raise TokenStoreError(f"Token refresh failed: {e}", provider=provider) from e
        finally:
            if self._client is None:
                await client.aclose()

        return self.save_token(provider, payload)
