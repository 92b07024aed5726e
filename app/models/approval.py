"""Two-factor (single-party) approval request model."""
import enum
from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class ApprovalStatus(str, enum.Enum):
    """2FA approval status. Everything except PENDING is terminal."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    FAILED = "failed"
    EXPIRED = "expired"


VALID_TRANSITIONS = {
    ApprovalStatus.PENDING: [
        ApprovalStatus.APPROVED,
        ApprovalStatus.REJECTED,
        ApprovalStatus.FAILED,
        ApprovalStatus.EXPIRED,
    ],
    ApprovalStatus.APPROVED: [],
    ApprovalStatus.REJECTED: [],
    ApprovalStatus.FAILED: [],
    ApprovalStatus.EXPIRED: [],
}

TERMINAL_STATUSES = frozenset(status for status, targets in VALID_TRANSITIONS.items() if not targets)


class ApprovalRequest(Base):
    """Approval request waiting on the wallet's second device."""
    __tablename__ = "approval_requests"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    wallet_address: Mapped[str] = mapped_column(String(66), nullable=False, index=True)

    action: Mapped[str] = mapped_column(String(64), nullable=False)
    token: Mapped[str] = mapped_column(String(64), nullable=False)
    amount: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)
    recipient: Mapped[Optional[str]] = mapped_column(String(66), nullable=True)
    calls_json: Mapped[str] = mapped_column(Text, nullable=False)
    sig1_json: Mapped[str] = mapped_column(Text, nullable=False)  # First-device signature
    nonce: Mapped[str] = mapped_column(String(80), nullable=False)
    resource_bounds_json: Mapped[str] = mapped_column(Text, nullable=False)
    tx_hash: Mapped[str] = mapped_column(String(66), nullable=False)

    status: Mapped[str] = mapped_column(String(32), default=ApprovalStatus.PENDING.value, index=True)
    final_tx_hash: Mapped[Optional[str]] = mapped_column(String(66), nullable=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    responded_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    __table_args__ = (
        Index("ix_approval_requests_wallet_status", "wallet_address", "status"),
    )
