"""Transaction record schemas."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from app.models.transaction import AccountType, AmountUnit, TransactionStatus
from app.schemas.common import HEX_PATTERN, normalize_address


class TransactionCreate(BaseModel):
    """Schema for saving a submitted transaction."""
    wallet_address: str = Field(..., pattern=HEX_PATTERN)
    tx_hash: str = Field(..., pattern=HEX_PATTERN)
    type: str = Field(..., min_length=1)
    token: str = Field(..., min_length=1)
    amount: Optional[str] = None
    amount_unit: Optional[AmountUnit] = None
    recipient: Optional[str] = None
    recipient_name: Optional[str] = None
    note: Optional[str] = None
    status: TransactionStatus
    error_message: Optional[str] = None
    account_type: AccountType
    ward_address: Optional[str] = Field(None, pattern=HEX_PATTERN)
    fee: Optional[str] = None
    network: str = Field(..., min_length=1)
    platform: Optional[str] = None

    @field_validator("wallet_address", "ward_address")
    @classmethod
    def normalize(cls, v: Optional[str]) -> Optional[str]:
        return normalize_address(v)


class TransactionUpdate(BaseModel):
    """Schema for a transaction status update."""
    status: TransactionStatus
    error_message: Optional[str] = None
    fee: Optional[str] = None


class TransactionResponse(BaseModel):
    """Schema for transaction response."""
    id: str
    wallet_address: str
    tx_hash: str
    type: str
    token: str
    amount: Optional[str] = None
    amount_unit: Optional[str] = None
    recipient: Optional[str] = None
    recipient_name: Optional[str] = None
    note: Optional[str] = None
    status: TransactionStatus
    error_message: Optional[str] = None
    account_type: AccountType
    ward_address: Optional[str] = None
    fee: Optional[str] = None
    network: str
    platform: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
