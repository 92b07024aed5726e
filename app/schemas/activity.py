"""Unified activity feed schemas."""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel


class ActivitySwapStep(BaseModel):
    """Swap step as shown in the feed."""
    step_key: str
    step_order: int
    status: str
    tx_hash: Optional[str] = None
    message: Optional[str] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None


class ActivitySwap(BaseModel):
    """Swap execution attached to the transaction that carried it."""
    execution_id: Optional[str] = None
    provider: str
    sell_token: str
    buy_token: str
    sell_amount_wei: str
    estimated_buy_amount_wei: str
    min_buy_amount_wei: str
    buy_actual_amount_wei: Optional[str] = None
    tx_hashes: Optional[List[str]] = None
    primary_tx_hash: Optional[str] = None
    status: Optional[str] = None
    failure_step_key: Optional[str] = None
    failure_reason: Optional[str] = None
    steps: List[ActivitySwapStep] = []


class ActivityRecord(BaseModel):
    """One entry of the activity feed, from a transaction or a ward request."""
    id: str
    source: Literal["transaction", "ward_request"]
    wallet_address: str
    tx_hash: str
    type: str
    token: str
    amount: Optional[str] = None
    amount_unit: Optional[str] = None
    recipient: Optional[str] = None
    recipient_name: Optional[str] = None
    note: Optional[str] = None
    status: Literal["pending", "confirmed", "failed", "rejected", "gas_error", "expired"]
    status_detail: Optional[str] = None
    error_message: Optional[str] = None
    account_type: str
    ward_address: Optional[str] = None
    fee: Optional[str] = None
    network: str
    platform: Optional[str] = None
    created_at: Optional[datetime] = None
    responded_at: Optional[datetime] = None
    swap: Optional[ActivitySwap] = None


class ActivityResponse(BaseModel):
    """Paged activity feed."""
    records: List[ActivityRecord]
    total: int
    has_more: bool
