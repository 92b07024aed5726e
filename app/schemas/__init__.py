"""Pydantic schemas for API validation."""
from app.schemas.common import (
    ErrorResponse,
    HealthResponse,
    normalize_address,
)
from app.schemas.approval import (
    ApprovalCreate,
    ApprovalUpdate,
    ApprovalResponse,
)
from app.schemas.ward_approval import (
    WardApprovalCreate,
    WardApprovalUpdate,
    WardApprovalResponse,
)
from app.schemas.transaction import (
    TransactionCreate,
    TransactionUpdate,
    TransactionResponse,
)
from app.schemas.swap import (
    SwapCreate,
    SwapUpdate,
    SwapStepUpsert,
    SwapStepResponse,
    SwapResponse,
)
from app.schemas.ward import (
    WardConfigCreate,
    WardConfigUpdate,
    WardConfigResponse,
)
from app.schemas.activity import (
    ActivitySwap,
    ActivitySwapStep,
    ActivityRecord,
    ActivityResponse,
)
from app.schemas.outbox import (
    ReconcileRequest,
    ReconcileResponse,
)

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "normalize_address",
    "ApprovalCreate",
    "ApprovalUpdate",
    "ApprovalResponse",
    "WardApprovalCreate",
    "WardApprovalUpdate",
    "WardApprovalResponse",
    "TransactionCreate",
    "TransactionUpdate",
    "TransactionResponse",
    "SwapCreate",
    "SwapUpdate",
    "SwapStepUpsert",
    "SwapStepResponse",
    "SwapResponse",
    "WardConfigCreate",
    "WardConfigUpdate",
    "WardConfigResponse",
    "ActivitySwap",
    "ActivitySwapStep",
    "ActivityRecord",
    "ActivityResponse",
    "ReconcileRequest",
    "ReconcileResponse",
]
