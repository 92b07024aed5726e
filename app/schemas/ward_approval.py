"""Ward approval request schemas."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from app.models.transaction import AmountUnit
from app.models.ward_approval import WardApprovalStatus
from app.schemas.common import HEX_PATTERN, normalize_address


class WardApprovalCreate(BaseModel):
    """Schema for creating a ward approval request."""
    ward_address: str = Field(..., pattern=HEX_PATTERN)
    guardian_address: str = Field(..., pattern=HEX_PATTERN)
    action: str = Field(..., min_length=1)
    token: str = Field(..., min_length=1)
    amount: Optional[str]
    amount_unit: Optional[AmountUnit] = None
    recipient: Optional[str]
    calls_json: str = Field(..., min_length=1)
    nonce: str = Field(..., min_length=1)
    resource_bounds_json: str = Field(..., min_length=1)
    tx_hash: str = Field(..., pattern=HEX_PATTERN)
    ward_sig_json: str = Field(..., min_length=1)
    needs_ward_2fa: bool
    needs_guardian: bool
    needs_guardian_2fa: bool
    initial_status: Optional[WardApprovalStatus] = None

    @field_validator("ward_address", "guardian_address")
    @classmethod
    def normalize(cls, v: str) -> str:
        return normalize_address(v)

    class Config:
        json_schema_extra = {
            "example": {
                "ward_address": "0x0abc",
                "guardian_address": "0x0def",
                "action": "transfer",
                "token": "STRK",
                "amount": "5",
                "amount_unit": "tongo_units",
                "recipient": None,
                "calls_json": "[]",
                "nonce": "0x1",
                "resource_bounds_json": "{}",
                "tx_hash": "0x123",
                "ward_sig_json": "[\"0x1\",\"0x2\"]",
                "needs_ward_2fa": False,
                "needs_guardian": True,
                "needs_guardian_2fa": False,
            }
        }


# Fields a PATCH may touch besides status
UPDATABLE_FIELDS = (
    "nonce",
    "resource_bounds_json",
    "tx_hash",
    "ward_sig_json",
    "ward_2fa_sig_json",
    "guardian_sig_json",
    "guardian_2fa_sig_json",
    "final_tx_hash",
    "error_message",
)


class WardApprovalUpdate(BaseModel):
    """
    Schema for updating a ward approval request.

    Only fields present in the request body are written; an explicit
    ``null`` clears the column.
    """
    status: Optional[WardApprovalStatus] = None
    nonce: Optional[str] = None
    resource_bounds_json: Optional[str] = None
    tx_hash: Optional[str] = Field(None, pattern=HEX_PATTERN)
    ward_sig_json: Optional[str] = None
    ward_2fa_sig_json: Optional[str] = None
    guardian_sig_json: Optional[str] = None
    guardian_2fa_sig_json: Optional[str] = None
    final_tx_hash: Optional[str] = Field(None, pattern=HEX_PATTERN)
    error_message: Optional[str] = None

    @model_validator(mode="after")
    def status_not_null(self):
        if "status" in self.model_fields_set and self.status is None:
            raise ValueError("status cannot be null")
        return self

    def to_patch(self) -> dict:
        """Only the fields the caller actually sent."""
        return self.model_dump(mode="json", exclude_unset=True)


class WardApprovalResponse(BaseModel):
    """Schema for ward approval response."""
    id: str
    ward_address: str
    guardian_address: str
    action: str
    token: str
    amount: Optional[str] = None
    amount_unit: Optional[str] = None
    recipient: Optional[str] = None
    calls_json: str
    nonce: str
    resource_bounds_json: str
    tx_hash: str
    ward_sig_json: str
    ward_2fa_sig_json: Optional[str] = None
    guardian_sig_json: Optional[str] = None
    guardian_2fa_sig_json: Optional[str] = None
    needs_ward_2fa: bool
    needs_guardian: bool
    needs_guardian_2fa: bool
    status: WardApprovalStatus
    event_version: int
    final_tx_hash: Optional[str] = None
    error_message: Optional[str] = None
    created_at: datetime
    responded_at: Optional[datetime] = None
    updated_at: datetime

    class Config:
        from_attributes = True
