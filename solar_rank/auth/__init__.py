"""OAuth credential storage."""

from .token_store import TokenStore, TokenStoreError, is_expired

__all__ = ["TokenStore", "TokenStoreError", "is_expired"]
