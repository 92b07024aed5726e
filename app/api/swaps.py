"""Swap execution API endpoints."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from app.exceptions import ValidationError
from app.schemas.swap import SwapCreate, SwapResponse, SwapStepResponse, SwapStepUpsert, SwapUpdate
from app.services.auth import AuthContext
from app.services.swaps import SwapService
from app.api.deps import get_current_wallet, get_swap_service

router = APIRouter(prefix="/api/v1/swaps", tags=["Swaps"])


@router.post("", response_model=SwapResponse, status_code=status.HTTP_201_CREATED)
async def save_swap(
    data: SwapCreate,
    service: SwapService = Depends(get_swap_service),
    caller: AuthContext = Depends(get_current_wallet),
):
    """Record a swap execution."""
    return await service.save(data)


@router.get("", response_model=List[SwapResponse])
async def list_swaps(
    wallet: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    offset: Optional[str] = Query(None),
    service: SwapService = Depends(get_swap_service),
    caller: AuthContext = Depends(get_current_wallet),
):
    """Swap executions visible to a wallet."""
    return await service.list(wallet, limit=limit, offset=offset)


@router.get("/by-execution/{execution_id}", response_model=SwapResponse)
async def get_swap(
    execution_id: str,
    service: SwapService = Depends(get_swap_service),
    caller: AuthContext = Depends(get_current_wallet),
):
    """Get a swap execution with its steps."""
    return await service.get_by_execution(execution_id)


@router.patch("/by-execution/{execution_id}", response_model=SwapResponse)
async def update_swap(
    execution_id: str,
    data: SwapUpdate,
    service: SwapService = Depends(get_swap_service),
    caller: AuthContext = Depends(get_current_wallet),
):
    """Update a swap execution."""
    return await service.update(execution_id, data)


@router.post("/steps", response_model=SwapStepResponse)
async def upsert_swap_step(
    data: SwapStepUpsert,
    response: Response,
    service: SwapService = Depends(get_swap_service),
    caller: AuthContext = Depends(get_current_wallet),
):
    """
    Record a swap step attempt.

    Returns 201 for a new (execution, step, attempt) and 200 when an existing
    attempt was updated.
    """
    row, created = await service.upsert_step(data)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return row


@router.get("/steps", response_model=List[SwapStepResponse])
async def list_swap_steps(
    execution_ids: Optional[str] = Query(None),
    service: SwapService = Depends(get_swap_service),
    caller: AuthContext = Depends(get_current_wallet),
):
    """Steps for a comma-separated list of execution IDs."""
    if not execution_ids:
        raise ValidationError("Missing required query parameter: execution_ids")
    return await service.list_steps([value.strip() for value in execution_ids.split(",")])
