"""Ward configuration schemas."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from app.models.ward import WardStatus
from app.schemas.common import HEX_PATTERN, normalize_address


class WardConfigCreate(BaseModel):
    """Schema for registering a guardian/ward pair."""
    ward_address: str = Field(..., pattern=HEX_PATTERN)
    guardian_address: str = Field(..., pattern=HEX_PATTERN)
    status: WardStatus = WardStatus.ACTIVE

    @field_validator("ward_address", "guardian_address")
    @classmethod
    def normalize(cls, v: str) -> str:
        return normalize_address(v)


class WardConfigUpdate(BaseModel):
    """Schema for updating a ward configuration."""
    status: WardStatus


class WardConfigResponse(BaseModel):
    """Schema for ward configuration response."""
    id: str
    ward_address: str
    guardian_address: str
    status: WardStatus
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
