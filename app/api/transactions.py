"""Transaction record API endpoints."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from app.schemas.transaction import TransactionCreate, TransactionResponse, TransactionUpdate
from app.services.auth import AuthContext
from app.services.transactions import TransactionService
from app.api.deps import get_current_wallet, get_transaction_service

router = APIRouter(prefix="/api/v1/transactions", tags=["Transactions"])


@router.post("", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
async def save_transaction(
    data: TransactionCreate,
    service: TransactionService = Depends(get_transaction_service),
    caller: AuthContext = Depends(get_current_wallet),
):
    """Record a submitted transaction."""
    return await service.save(data)


@router.get("", response_model=List[TransactionResponse])
async def list_transactions(
    wallet: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    offset: Optional[str] = Query(None),
    service: TransactionService = Depends(get_transaction_service),
    caller: AuthContext = Depends(get_current_wallet),
):
    """Transactions visible to a wallet, including those of its managed wards."""
    return await service.list(wallet, limit=limit, offset=offset)


@router.patch("/{tx_hash}", response_model=TransactionResponse)
async def update_transaction(
    tx_hash: str,
    data: TransactionUpdate,
    service: TransactionService = Depends(get_transaction_service),
    caller: AuthContext = Depends(get_current_wallet),
):
    """Update a transaction's status, fee or error message."""
    return await service.update_status(tx_hash, data)
