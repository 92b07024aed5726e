"""Transaction record service."""
import logging
from typing import List, Optional, Union

from app.config import Settings
from app.exceptions import NotFoundError, ValidationError
from app.schemas.common import normalize_address
from app.schemas.transaction import TransactionCreate, TransactionUpdate
from app.services.fanout import fan_out, ownership_predicates, resolve_managed_wards
from app.services.paging import clamp_limit, clamp_offset, sort_newest_first
from app.store.base import Row, Store
from postgrest_adapter.filters import eq

logger = logging.getLogger(__name__)

TABLE = "transactions"


class TransactionService:
    """Service for submitted transaction records."""

    def __init__(self, store: Store, settings: Settings):
        self.store = store
        self.settings = settings

    async def save(self, data: TransactionCreate) -> Row:
        """Record a submitted transaction."""
        row = data.model_dump(mode="json")
        row["wallet_address"] = normalize_address(data.wallet_address)
        row["ward_address"] = normalize_address(data.ward_address) if data.ward_address else None

        rows = await self.store.insert(TABLE, row)
        logger.info(f"Saved transaction {data.tx_hash} for {row['wallet_address']}")
        return rows[0]

    async def list(
        self,
        wallet: Optional[str],
        limit: Union[str, int, None] = None,
        offset: Union[str, int, None] = None,
    ) -> List[Row]:
        """
        Transactions visible to ``wallet``: its own, those it made as a ward,
        and those of the wards it guards. One row per tx_hash, newest first.
        """
        if not wallet:
            raise ValidationError("Missing required query parameter: wallet")
        address = normalize_address(wallet)

        managed = await resolve_managed_wards(self.store, address)
        rows = await fan_out(self.store, TABLE, ownership_predicates(address, managed), "tx_hash")

        limit = clamp_limit(limit, self.settings.activity_default_limit, self.settings.activity_max_limit)
        offset = clamp_offset(offset)
        return sort_newest_first(rows)[offset:offset + limit]

    async def update_status(self, tx_hash: str, data: TransactionUpdate) -> Row:
        """Update status, fee or error of every row carrying ``tx_hash``."""
        values = data.model_dump(mode="json", exclude_unset=True)
        rows = await self.store.update(TABLE, eq("tx_hash", tx_hash), values)
        if not rows:
            raise NotFoundError("Transaction not found", {"tx_hash": tx_hash})

        logger.info(f"Transaction {tx_hash} status -> {data.status.value}")
        return rows[0]
