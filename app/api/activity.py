"""Unified activity feed endpoint."""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.schemas.activity import ActivityResponse
from app.services.activity import ActivityAggregator
from app.services.auth import AuthContext
from app.api.deps import get_activity_aggregator, get_current_wallet

router = APIRouter(prefix="/api/v1/activity", tags=["Activity"])


@router.get("", response_model=ActivityResponse)
async def get_activity(
    wallet: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    offset: Optional[str] = Query(None),
    aggregator: ActivityAggregator = Depends(get_activity_aggregator),
    caller: AuthContext = Depends(get_current_wallet),
):
    """
    Activity feed for a wallet.

    Includes the wallet's own transactions, those it made as a ward, those of
    wards it guards, and ward approval requests it takes part in. Swap details
    are attached to the transaction that carried the swap.
    """
    return await aggregator.get_activity(wallet, limit=limit, offset=offset)
