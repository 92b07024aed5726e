"""Two-factor approval API endpoints."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from app.schemas.approval import ApprovalCreate, ApprovalResponse, ApprovalUpdate
from app.services.approval import TwoFactorApprovalService
from app.services.auth import AuthContext
from app.api.deps import get_current_wallet, get_two_factor_service

router = APIRouter(prefix="/api/v1/approvals", tags=["2FA Approvals"])


@router.post("", response_model=ApprovalResponse, status_code=status.HTTP_201_CREATED)
async def create_approval(
    data: ApprovalCreate,
    service: TwoFactorApprovalService = Depends(get_two_factor_service),
    caller: AuthContext = Depends(get_current_wallet),
):
    """Create a 2FA approval request awaiting the second device."""
    return await service.create(data)


@router.get("", response_model=List[ApprovalResponse])
async def list_approvals(
    wallet: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    service: TwoFactorApprovalService = Depends(get_two_factor_service),
    caller: AuthContext = Depends(get_current_wallet),
):
    """List a wallet's 2FA approval requests, newest first."""
    return await service.list(wallet, status_filter)


@router.get("/{approval_id}", response_model=ApprovalResponse)
async def get_approval(
    approval_id: str,
    service: TwoFactorApprovalService = Depends(get_two_factor_service),
    caller: AuthContext = Depends(get_current_wallet),
):
    """Get 2FA approval request by ID."""
    return await service.get(approval_id)


@router.patch("/{approval_id}", response_model=ApprovalResponse)
async def update_approval(
    approval_id: str,
    data: ApprovalUpdate,
    service: TwoFactorApprovalService = Depends(get_two_factor_service),
    caller: AuthContext = Depends(get_current_wallet),
):
    """Approve, reject, fail or expire a 2FA approval request."""
    return await service.update(approval_id, data)
