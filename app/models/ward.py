"""Ward configuration: which guardian manages which ward."""
import enum
from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class WardStatus(str, enum.Enum):
    """Ward account status."""
    ACTIVE = "active"
    FROZEN = "frozen"
    REMOVED = "removed"


class WardConfig(Base):
    """Guardian/ward pairing used to resolve a guardian's managed wards."""
    __tablename__ = "ward_configs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    ward_address: Mapped[str] = mapped_column(String(66), unique=True, nullable=False)
    guardian_address: Mapped[str] = mapped_column(String(66), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(16), default=WardStatus.ACTIVE.value)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
