"""Swap execution schemas."""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from app.models.swap import SwapExecutionStatus, SwapStepStatus
from app.schemas.common import HEX_PATTERN, normalize_address


class SwapCreate(BaseModel):
    """Schema for saving a swap execution."""
    execution_id: str = Field(..., min_length=1)
    wallet_address: str = Field(..., pattern=HEX_PATTERN)
    ward_address: Optional[str] = Field(None, pattern=HEX_PATTERN)
    tx_hash: Optional[str] = Field(None, pattern=HEX_PATTERN)
    primary_tx_hash: Optional[str] = Field(None, pattern=HEX_PATTERN)
    tx_hashes: Optional[List[str]] = None
    provider: str = Field(..., min_length=1)
    sell_token: str = Field(..., min_length=1)
    buy_token: str = Field(..., min_length=1)
    sell_amount_wei: str = Field(..., min_length=1)
    estimated_buy_amount_wei: str = Field(..., min_length=1)
    min_buy_amount_wei: str = Field(..., min_length=1)
    buy_actual_amount_wei: Optional[str] = None
    failure_step_key: Optional[str] = None
    failure_reason: Optional[str] = None
    route_meta: Optional[Dict[str, Any]] = None
    status: SwapExecutionStatus
    error_message: Optional[str] = None

    @field_validator("wallet_address", "ward_address")
    @classmethod
    def normalize(cls, v: Optional[str]) -> Optional[str]:
        return normalize_address(v)


class SwapUpdate(BaseModel):
    """Schema for updating a swap execution; unset fields are left alone."""
    status: Optional[SwapExecutionStatus] = None
    tx_hash: Optional[str] = Field(None, pattern=HEX_PATTERN)
    primary_tx_hash: Optional[str] = Field(None, pattern=HEX_PATTERN)
    tx_hashes: Optional[List[str]] = None
    buy_actual_amount_wei: Optional[str] = None
    failure_step_key: Optional[str] = None
    failure_reason: Optional[str] = None
    error_message: Optional[str] = None

    def to_patch(self) -> dict:
        return self.model_dump(mode="json", exclude_unset=True)


class SwapStepUpsert(BaseModel):
    """Schema for recording one swap step attempt."""
    execution_id: str = Field(..., min_length=1)
    step_key: str = Field(..., min_length=1)
    step_order: int = Field(..., ge=0)
    attempt: int = Field(..., ge=0)
    status: SwapStepStatus
    tx_hash: Optional[str] = Field(None, pattern=HEX_PATTERN)
    message: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None


class SwapStepResponse(BaseModel):
    """Schema for swap step response."""
    id: str
    execution_id: str
    step_key: str
    step_order: int
    attempt: int
    status: SwapStepStatus
    tx_hash: Optional[str] = None
    message: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SwapResponse(BaseModel):
    """Schema for swap execution response."""
    id: str
    execution_id: str
    wallet_address: str
    ward_address: Optional[str] = None
    tx_hash: Optional[str] = None
    primary_tx_hash: Optional[str] = None
    tx_hashes: Optional[List[str]] = None
    provider: str
    sell_token: str
    buy_token: str
    sell_amount_wei: str
    estimated_buy_amount_wei: str
    min_buy_amount_wei: str
    buy_actual_amount_wei: Optional[str] = None
    failure_step_key: Optional[str] = None
    failure_reason: Optional[str] = None
    route_meta: Optional[Dict[str, Any]] = None
    status: SwapExecutionStatus
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None
    steps: Optional[List[SwapStepResponse]] = None
