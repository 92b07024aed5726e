"""Database models package."""
from app.models.approval import ApprovalRequest, ApprovalStatus
from app.models.ward_approval import (
    WardApprovalRequest,
    WardApprovalStatus,
    VALID_TRANSITIONS,
    INITIAL_STATUSES,
    TERMINAL_STATUSES,
    can_transition,
)
from app.models.transaction import Transaction, TransactionStatus, AccountType, AmountUnit
from app.models.swap import SwapExecution, SwapExecutionStatus, SwapExecutionStep, SwapStepStatus
from app.models.ward import WardConfig, WardStatus
from app.models.outbox import WardApprovalEvent, WardApprovalEventType, OutboxStatus, OUTBOX_CONFLICT_COLUMNS
from app.models.api_key import ApiKey

__all__ = [
    "ApprovalRequest",
    "ApprovalStatus",
    # Ward approvals
    "WardApprovalRequest",
    "WardApprovalStatus",
    "VALID_TRANSITIONS",
    "INITIAL_STATUSES",
    "TERMINAL_STATUSES",
    "can_transition",
    # Activity sources
    "Transaction",
    "TransactionStatus",
    "AccountType",
    "AmountUnit",
    "SwapExecution",
    "SwapExecutionStatus",
    "SwapExecutionStep",
    "SwapStepStatus",
    "WardConfig",
    "WardStatus",
    # Outbox
    "WardApprovalEvent",
    "WardApprovalEventType",
    "OutboxStatus",
    "OUTBOX_CONFLICT_COLUMNS",
    "ApiKey",
]
