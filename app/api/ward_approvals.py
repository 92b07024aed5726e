"""Ward approval API endpoints."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from app.schemas.ward_approval import WardApprovalCreate, WardApprovalResponse, WardApprovalUpdate
from app.services.auth import AuthContext
from app.services.ward_approval import WardApprovalService
from app.api.deps import get_current_wallet, get_ward_approval_service

router = APIRouter(prefix="/api/v1/ward-approvals", tags=["Ward Approvals"])


@router.post("", response_model=WardApprovalResponse, status_code=status.HTTP_201_CREATED)
async def create_ward_approval(
    data: WardApprovalCreate,
    service: WardApprovalService = Depends(get_ward_approval_service),
    caller: AuthContext = Depends(get_current_wallet),
):
    """
    Create a ward approval request.

    Starts in ``pending_ward_sig`` (or ``pending_guardian`` when the ward has
    already signed) at event version 1.
    """
    return await service.create(data)


@router.get("", response_model=List[WardApprovalResponse])
async def list_ward_approvals(
    ward: Optional[str] = Query(None),
    guardian: Optional[str] = Query(None),
    status_filter: Optional[List[str]] = Query(None, alias="status"),
    include_all: Optional[str] = Query(None),
    updated_after: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    offset: Optional[str] = Query(None),
    service: WardApprovalService = Depends(get_ward_approval_service),
    caller: AuthContext = Depends(get_current_wallet),
):
    """
    List ward approval requests, most recently updated first.

    ``status`` may be repeated and/or comma-separated. When filtering by ward
    or guardian without a status, only open requests are returned unless
    ``include_all`` is set.
    """
    return await service.list(
        ward=ward,
        guardian=guardian,
        statuses=status_filter,
        include_all=include_all,
        updated_after=updated_after,
        limit=limit,
        offset=offset,
    )


@router.get("/history", response_model=List[WardApprovalResponse])
async def ward_approval_history(
    ward: Optional[str] = Query(None),
    guardian: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    offset: Optional[str] = Query(None),
    service: WardApprovalService = Depends(get_ward_approval_service),
    caller: AuthContext = Depends(get_current_wallet),
):
    """All ward approval requests regardless of status, newest first."""
    return await service.history(ward=ward, guardian=guardian, limit=limit, offset=offset)


@router.get("/{approval_id}", response_model=WardApprovalResponse)
async def get_ward_approval(
    approval_id: str,
    service: WardApprovalService = Depends(get_ward_approval_service),
    caller: AuthContext = Depends(get_current_wallet),
):
    """Get ward approval request by ID."""
    return await service.get(approval_id)


@router.patch("/{approval_id}", response_model=WardApprovalResponse)
async def update_ward_approval(
    approval_id: str,
    data: WardApprovalUpdate,
    service: WardApprovalService = Depends(get_ward_approval_service),
    caller: AuthContext = Depends(get_current_wallet),
):
    """
    Update a ward approval request.

    A status change must be reachable from the stored status (409 otherwise).
    If another update changed the request first, the current row is returned
    unchanged with 200.
    """
    return await service.update(approval_id, data.to_patch())
