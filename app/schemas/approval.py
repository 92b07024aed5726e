"""Two-factor approval request schemas."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from app.models.approval import ApprovalStatus
from app.schemas.common import HEX_PATTERN, normalize_address


class ApprovalCreate(BaseModel):
    """Schema for creating a 2FA approval request."""
    wallet_address: str = Field(..., pattern=HEX_PATTERN)
    action: str = Field(..., min_length=1)
    token: str = Field(..., min_length=1)
    amount: Optional[str]
    recipient: Optional[str]
    calls_json: str = Field(..., min_length=1)
    sig1_json: str = Field(..., min_length=1)
    nonce: str = Field(..., min_length=1)
    resource_bounds_json: str = Field(..., min_length=1)
    tx_hash: str = Field(..., pattern=HEX_PATTERN)

    @field_validator("wallet_address")
    @classmethod
    def normalize(cls, v: str) -> str:
        return normalize_address(v)


class ApprovalUpdate(BaseModel):
    """Schema for resolving a 2FA approval request."""
    status: ApprovalStatus
    final_tx_hash: Optional[str] = Field(None, pattern=HEX_PATTERN)
    error_message: Optional[str] = None


class ApprovalResponse(BaseModel):
    """Schema for 2FA approval response."""
    id: str
    wallet_address: str
    action: str
    token: str
    amount: Optional[str] = None
    recipient: Optional[str] = None
    calls_json: str
    sig1_json: str
    nonce: str
    resource_bounds_json: str
    tx_hash: str
    status: ApprovalStatus
    final_tx_hash: Optional[str] = None
    error_message: Optional[str] = None
    created_at: datetime
    responded_at: Optional[datetime] = None

    class Config:
        from_attributes = True
