"""Submitted transaction records."""
import enum
from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class TransactionStatus(str, enum.Enum):
    """On-chain status of a submitted transaction."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class AccountType(str, enum.Enum):
    """Which kind of account submitted the transaction."""
    NORMAL = "normal"
    WARD = "ward"
    GUARDIAN = "guardian"


class AmountUnit(str, enum.Enum):
    """Unit the ``amount`` string is expressed in."""
    TONGO_UNITS = "tongo_units"
    ERC20_WEI = "erc20_wei"
    ERC20_DISPLAY = "erc20_display"


class Transaction(Base):
    """Transaction owned by whichever party submitted it."""
    __tablename__ = "transactions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    wallet_address: Mapped[str] = mapped_column(String(66), nullable=False, index=True)
    tx_hash: Mapped[str] = mapped_column(String(66), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(64), nullable=False)
    token: Mapped[str] = mapped_column(String(64), nullable=False)
    amount: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)
    amount_unit: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    recipient: Mapped[Optional[str]] = mapped_column(String(66), nullable=True)
    recipient_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(16), default=TransactionStatus.PENDING.value, index=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    account_type: Mapped[str] = mapped_column(String(16), default=AccountType.NORMAL.value)
    ward_address: Mapped[Optional[str]] = mapped_column(String(66), nullable=True, index=True)
    fee: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)
    network: Mapped[str] = mapped_column(String(32), nullable=False)
    platform: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)

    __table_args__ = (
        Index("ix_transactions_wallet_created", "wallet_address", "created_at"),
    )
