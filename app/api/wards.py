"""Ward configuration API endpoints."""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from app.schemas.ward import WardConfigCreate, WardConfigResponse, WardConfigUpdate
from app.services.auth import AuthContext
from app.services.wards import WardConfigService
from app.api.deps import get_current_wallet, get_ward_config_service

router = APIRouter(prefix="/api/v1/wards", tags=["Wards"])


@router.post("", response_model=WardConfigResponse, status_code=status.HTTP_201_CREATED)
async def create_ward(
    data: WardConfigCreate,
    service: WardConfigService = Depends(get_ward_config_service),
    caller: AuthContext = Depends(get_current_wallet),
):
    """Register a ward under its guardian."""
    return await service.create(data)


@router.get("", response_model=List[WardConfigResponse])
async def list_wards(
    guardian: Optional[str] = Query(None),
    service: WardConfigService = Depends(get_ward_config_service),
    caller: AuthContext = Depends(get_current_wallet),
):
    """Wards managed by a guardian, excluding removed ones."""
    return await service.list(guardian)


@router.get("/{ward_address}", response_model=WardConfigResponse)
async def get_ward(
    ward_address: str,
    service: WardConfigService = Depends(get_ward_config_service),
    caller: AuthContext = Depends(get_current_wallet),
):
    """Get ward configuration by ward address."""
    return await service.get(ward_address)


@router.patch("/{ward_address}", response_model=WardConfigResponse)
async def update_ward(
    ward_address: str,
    data: WardConfigUpdate,
    service: WardConfigService = Depends(get_ward_config_service),
    caller: AuthContext = Depends(get_current_wallet),
):
    """Freeze, reactivate or remove a ward."""
    return await service.update(ward_address, data)
