"""Outbox of ward approval events awaiting push delivery."""
import enum
from datetime import datetime
from typing import List, Optional
from uuid import uuid4

from sqlalchemy import DateTime, Index, Integer, JSON, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class WardApprovalEventType(str, enum.Enum):
    """Kind of state change an event describes."""
    CREATED = "ward_approval.created"
    STATUS_CHANGED = "ward_approval.status_changed"


class OutboxStatus(str, enum.Enum):
    """
    Delivery status, owned by the external dispatcher.

    The producer only ever writes PENDING.
    """
    PENDING = "pending"
    PROCESSING = "processing"
    RETRY = "retry"
    SENT = "sent"
    DEAD_LETTER = "dead_letter"


OUTBOX_CONFLICT_COLUMNS = "approval_id,event_version,event_type"


class WardApprovalEvent(Base):
    """Durable record of a ward approval state change."""
    __tablename__ = "ward_approval_events_outbox"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    approval_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    event_version: Mapped[int] = mapped_column(Integer, nullable=False)
    event_type: Mapped[str] = mapped_column(String(64), nullable=False)
    target_wallets: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    payload: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    # Dispatcher-owned delivery state
    status: Mapped[str] = mapped_column(String(16), default=OutboxStatus.PENDING.value)
    attempts: Mapped[int] = mapped_column(Integer, default=0)
    next_attempt_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    processing_until: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    lease_token: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    last_error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("approval_id", "event_version", "event_type", name="uq_outbox_approval_version_type"),
        Index("ix_outbox_status_next_attempt", "status", "next_attempt_at"),
    )
