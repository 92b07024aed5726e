"""API dependencies for dependency injection."""
import hmac
from typing import Optional

from fastapi import Depends, Header, Request
from fastapi.security import APIKeyHeader

from app.config import Settings, get_settings
from app.exceptions import AuthError
from app.services.activity import ActivityAggregator
from app.services.approval import TwoFactorApprovalService
from app.services.auth import AuthContext, AuthService
from app.services.outbox import OutboxService
from app.services.swaps import SwapService
from app.services.transactions import TransactionService
from app.services.ward_approval import WardApprovalService
from app.services.wards import WardConfigService
from app.store.base import Store

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def get_store(request: Request) -> Store:
    """Store created at startup and held on the application state."""
    return request.app.state.store


# Service dependencies

def get_auth_service(store: Store = Depends(get_store)) -> AuthService:
    """Get auth service instance."""
    return AuthService(store)


def get_outbox_service(store: Store = Depends(get_store)) -> OutboxService:
    """Get outbox service instance."""
    return OutboxService(store)


def get_ward_approval_service(
    store: Store = Depends(get_store),
    outbox: OutboxService = Depends(get_outbox_service),
    settings: Settings = Depends(get_settings),
) -> WardApprovalService:
    """Get ward approval service instance."""
    return WardApprovalService(store, outbox, settings)


def get_two_factor_service(store: Store = Depends(get_store)) -> TwoFactorApprovalService:
    """Get 2FA approval service instance."""
    return TwoFactorApprovalService(store)


def get_activity_aggregator(
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> ActivityAggregator:
    """Get activity aggregator instance."""
    return ActivityAggregator(store, settings)


def get_transaction_service(
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> TransactionService:
    """Get transaction service instance."""
    return TransactionService(store, settings)


def get_swap_service(
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> SwapService:
    """Get swap service instance."""
    return SwapService(store, settings)


def get_ward_config_service(store: Store = Depends(get_store)) -> WardConfigService:
    """Get ward config service instance."""
    return WardConfigService(store)


# Authentication dependencies

async def get_current_wallet(
    api_key: Optional[str] = Depends(api_key_header),
    auth: AuthService = Depends(get_auth_service),
) -> AuthContext:
    """Resolve the caller's wallet from the X-API-Key header."""
    return await auth.authenticate(api_key)


async def require_internal_secret(
    x_internal_secret: Optional[str] = Header(None, alias="X-Internal-Secret"),
    settings: Settings = Depends(get_settings),
) -> None:
    """Guard for internal maintenance endpoints."""
    if not settings.internal_secret:
        raise AuthError("Internal endpoints are disabled")
    if not x_internal_secret or not hmac.compare_digest(x_internal_secret, settings.internal_secret):
        raise AuthError("Invalid internal secret")
