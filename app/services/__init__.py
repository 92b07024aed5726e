"""Business logic services."""
from app.services.auth import AuthService, AuthContext
from app.services.outbox import OutboxService
from app.services.ward_approval import WardApprovalService
from app.services.approval import TwoFactorApprovalService
from app.services.activity import ActivityAggregator
from app.services.transactions import TransactionService
from app.services.swaps import SwapService
from app.services.wards import WardConfigService

__all__ = [
    "AuthService",
    "AuthContext",
    "OutboxService",
    "WardApprovalService",
    "TwoFactorApprovalService",
    "ActivityAggregator",
    "TransactionService",
    "SwapService",
    "WardConfigService",
]
