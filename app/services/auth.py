"""API key authentication."""
import hashlib
import logging
from dataclasses import dataclass
from typing import Optional

from app.exceptions import AuthError
from app.store.base import Store
from postgrest_adapter.filters import eq

logger = logging.getLogger(__name__)

MIN_API_KEY_LENGTH = 16


def hash_api_key(api_key: str) -> str:
    """SHA-256 hex digest of a raw API key, as stored in ``api_keys.key_hash``."""
    return hashlib.sha256(api_key.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class AuthContext:
    """Caller identity resolved from an API key."""
    wallet_address: str
    api_key_id: str


class AuthService:
    """Service for resolving API keys to wallets."""

    def __init__(self, store: Store):
        self.store = store

    async def authenticate(self, api_key: Optional[str]) -> AuthContext:
        """
        Resolve a raw API key.

        Raises:
            AuthError: key missing, too short, unknown or revoked.
        """
        if not api_key:
            raise AuthError("Missing X-API-Key header")
        if len(api_key) < MIN_API_KEY_LENGTH:
            raise AuthError("Invalid API key format")

        rows = await self.store.select("api_keys", eq("key_hash", hash_api_key(api_key)), limit=1)
        if not rows:
            raise AuthError("Invalid API key")

        row = rows[0]
        if row.get("revoked_at") is not None:
            logger.warning(f"Rejected revoked API key {row['id']}")
            raise AuthError("API key has been revoked")

        return AuthContext(wallet_address=row["wallet_address"], api_key_id=row["id"])
