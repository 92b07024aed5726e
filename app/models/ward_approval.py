"""Ward approval request model and state machine."""
import enum
from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class WardApprovalStatus(str, enum.Enum):
    """
    Ward approval state machine.

    A ward signs first; the guardian then approves or rejects. Either hop may
    additionally require a second-device (2FA) signature, which is collected
    before the status moves on.
    """
    PENDING_WARD_SIG = "pending_ward_sig"
    PENDING_GUARDIAN = "pending_guardian"
    APPROVED = "approved"
    REJECTED = "rejected"
    FAILED = "failed"
    GAS_ERROR = "gas_error"
    EXPIRED = "expired"


INITIAL_STATUSES = frozenset({
    WardApprovalStatus.PENDING_WARD_SIG,
    WardApprovalStatus.PENDING_GUARDIAN,
})

TERMINAL_STATUSES = frozenset({
    WardApprovalStatus.APPROVED,
    WardApprovalStatus.REJECTED,
    WardApprovalStatus.FAILED,
    WardApprovalStatus.GAS_ERROR,
    WardApprovalStatus.EXPIRED,
})


# Valid state transitions
VALID_TRANSITIONS = {
    WardApprovalStatus.PENDING_WARD_SIG: [
        WardApprovalStatus.PENDING_GUARDIAN,  # Ward signed, guardian must decide
        WardApprovalStatus.APPROVED,          # No guardian hop required
        WardApprovalStatus.REJECTED,
        WardApprovalStatus.EXPIRED,
    ],
    WardApprovalStatus.PENDING_GUARDIAN: [
        WardApprovalStatus.APPROVED,
        WardApprovalStatus.REJECTED,
        WardApprovalStatus.FAILED,
        WardApprovalStatus.GAS_ERROR,         # Submission ran out of gas
        WardApprovalStatus.EXPIRED,
    ],
    WardApprovalStatus.APPROVED: [],   # Terminal state
    WardApprovalStatus.REJECTED: [],   # Terminal state
    WardApprovalStatus.FAILED: [],     # Terminal state
    WardApprovalStatus.GAS_ERROR: [],  # Terminal state
    WardApprovalStatus.EXPIRED: [],    # Terminal state
}


def can_transition(current: WardApprovalStatus, new_status: WardApprovalStatus) -> bool:
    """Check if transition from ``current`` to ``new_status`` is valid."""
    return new_status in VALID_TRANSITIONS.get(current, [])


class WardApprovalRequest(Base):
    """Multi-party approval request for a ward's transaction."""
    __tablename__ = "ward_approval_requests"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))

    # Parties
    ward_address: Mapped[str] = mapped_column(String(66), nullable=False, index=True)
    guardian_address: Mapped[str] = mapped_column(String(66), nullable=False, index=True)

    # Transaction details
    action: Mapped[str] = mapped_column(String(64), nullable=False)
    token: Mapped[str] = mapped_column(String(64), nullable=False)
    amount: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)
    amount_unit: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    recipient: Mapped[Optional[str]] = mapped_column(String(66), nullable=True)
    calls_json: Mapped[str] = mapped_column(Text, nullable=False)
    nonce: Mapped[str] = mapped_column(String(80), nullable=False)
    resource_bounds_json: Mapped[str] = mapped_column(Text, nullable=False)
    tx_hash: Mapped[str] = mapped_column(String(66), nullable=False, index=True)

    # Signatures collected along the way
    ward_sig_json: Mapped[str] = mapped_column(Text, nullable=False)
    ward_2fa_sig_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    guardian_sig_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    guardian_2fa_sig_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Required hops, fixed at creation
    needs_ward_2fa: Mapped[bool] = mapped_column(Boolean, nullable=False)
    needs_guardian: Mapped[bool] = mapped_column(Boolean, nullable=False)
    needs_guardian_2fa: Mapped[bool] = mapped_column(Boolean, nullable=False)

    # State machine
    status: Mapped[str] = mapped_column(String(32), default=WardApprovalStatus.PENDING_WARD_SIG.value, index=True)
    event_version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Outcome
    final_tx_hash: Mapped[Optional[str]] = mapped_column(String(66), nullable=True, index=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    responded_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)

    __table_args__ = (
        Index("ix_ward_approvals_guardian_status", "guardian_address", "status"),
        Index("ix_ward_approvals_ward_status", "ward_address", "status"),
    )
