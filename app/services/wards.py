"""Ward configuration service."""
import logging
from datetime import datetime
from typing import List, Optional

from app.exceptions import NotFoundError, ValidationError
from app.models.ward import WardStatus
from app.schemas.common import normalize_address
from app.schemas.ward import WardConfigCreate, WardConfigUpdate
from app.store.base import Row, Store
from postgrest_adapter.filters import and_, eq

logger = logging.getLogger(__name__)

TABLE = "ward_configs"


class WardConfigService:
    """Service for guardian/ward pairings."""

    def __init__(self, store: Store):
        self.store = store

    async def create(self, data: WardConfigCreate) -> Row:
        """Register a ward under its guardian."""
        row = data.model_dump(mode="json")
        row["created_at"] = datetime.utcnow()
        rows = await self.store.insert(TABLE, row)
        logger.info(f"Ward {data.ward_address} registered under guardian {data.guardian_address}")
        return rows[0]

    async def list(self, guardian: Optional[str]) -> List[Row]:
        """Wards of a guardian that have not been removed, newest first."""
        if not guardian:
            raise ValidationError("Missing required query parameter: guardian")
        filters = and_(
            eq("guardian_address", normalize_address(guardian)),
            f"status=neq.{WardStatus.REMOVED.value}",
        )
        return await self.store.select(TABLE, filters, order_by="created_at.desc")

    async def get(self, ward_address: str) -> Row:
        """Get a ward configuration by ward address."""
        rows = await self.store.select(TABLE, eq("ward_address", normalize_address(ward_address)), limit=1)
        if not rows:
            raise NotFoundError("Ward config not found", {"ward_address": ward_address})
        return rows[0]

    async def update(self, ward_address: str, data: WardConfigUpdate) -> Row:
        """Change a ward's status."""
        values = data.model_dump(mode="json")
        values["updated_at"] = datetime.utcnow()
        rows = await self.store.update(TABLE, eq("ward_address", normalize_address(ward_address)), values)
        if not rows:
            raise NotFoundError("Ward config not found", {"ward_address": ward_address})

        logger.info(f"Ward {ward_address} status -> {data.status.value}")
        return rows[0]
