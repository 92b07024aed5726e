"""Swap execution records and their steps."""
import enum
from datetime import datetime
from typing import List, Optional
from uuid import uuid4

from sqlalchemy import DateTime, Integer, JSON, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class SwapExecutionStatus(str, enum.Enum):
    """Overall swap status."""
    PENDING = "pending"
    RUNNING = "running"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class SwapStepStatus(str, enum.Enum):
    """Status of a single swap step attempt."""
    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


class SwapExecution(Base):
    """
    A swap, possibly spanning several transactions.

    Linked to transactions only through the hashes it touches
    (tx_hash, primary_tx_hash, tx_hashes), never by foreign key.
    """
    __tablename__ = "swap_executions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    execution_id: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    wallet_address: Mapped[str] = mapped_column(String(66), nullable=False, index=True)
    ward_address: Mapped[Optional[str]] = mapped_column(String(66), nullable=True, index=True)
    tx_hash: Mapped[Optional[str]] = mapped_column(String(66), nullable=True, index=True)
    primary_tx_hash: Mapped[Optional[str]] = mapped_column(String(66), nullable=True)
    tx_hashes: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    provider: Mapped[str] = mapped_column(String(64), nullable=False)
    sell_token: Mapped[str] = mapped_column(String(64), nullable=False)
    buy_token: Mapped[str] = mapped_column(String(64), nullable=False)
    sell_amount_wei: Mapped[str] = mapped_column(String(80), nullable=False)
    estimated_buy_amount_wei: Mapped[str] = mapped_column(String(80), nullable=False)
    min_buy_amount_wei: Mapped[str] = mapped_column(String(80), nullable=False)
    buy_actual_amount_wei: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)
    failure_step_key: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    failure_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    route_meta: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    status: Mapped[str] = mapped_column(String(16), default=SwapExecutionStatus.PENDING.value)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)


class SwapExecutionStep(Base):
    """One attempt at one step of a swap execution."""
    __tablename__ = "swap_execution_steps"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    execution_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    step_key: Mapped[str] = mapped_column(String(64), nullable=False)
    step_order: Mapped[int] = mapped_column(Integer, nullable=False)
    attempt: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(16), default=SwapStepStatus.PENDING.value)
    tx_hash: Mapped[Optional[str]] = mapped_column(String(66), nullable=True)
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    metadata_json: Mapped[Optional[dict]] = mapped_column("metadata", JSON, nullable=True)
    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    finished_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("execution_id", "step_key", "attempt", name="uq_swap_steps_execution_step_attempt"),
    )
