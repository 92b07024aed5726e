"""Swap execution service."""
import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple, Union

from app.config import Settings
from app.exceptions import NotFoundError, ValidationError
from app.schemas.common import normalize_address
from app.schemas.swap import SwapCreate, SwapStepUpsert, SwapUpdate
from app.services.fanout import fan_out, ownership_predicates, resolve_managed_wards
from app.services.paging import clamp_limit, clamp_offset, sort_newest_first
from app.store.base import Row, Store
from postgrest_adapter.filters import and_, eq, in_

logger = logging.getLogger(__name__)

EXECUTIONS_TABLE = "swap_executions"
STEPS_TABLE = "swap_execution_steps"


def unique_hashes(hashes: Optional[Sequence[str]]) -> List[str]:
    """Non-empty hashes, first occurrence kept."""
    result = []
    for value in hashes or []:
        if value and value not in result:
            result.append(value)
    return result


class SwapService:
    """
    Service for swap executions and their steps.

    A swap is tied to transactions only through the hashes it records, so
    every hash a swap produced must be stored on it.
    """

    def __init__(self, store: Store, settings: Settings):
        self.store = store
        self.settings = settings

    async def save(self, data: SwapCreate) -> Row:
        """Record a swap execution."""
        tx_hashes = unique_hashes(data.tx_hashes)
        primary = data.primary_tx_hash or data.tx_hash or (tx_hashes[0] if tx_hashes else None)

        row = data.model_dump(mode="json")
        row.update({
            "wallet_address": normalize_address(data.wallet_address),
            "ward_address": normalize_address(data.ward_address) if data.ward_address else None,
            "tx_hash": data.tx_hash or primary,
            "primary_tx_hash": primary,
            "tx_hashes": tx_hashes or None,
        })
        rows = await self.store.insert(EXECUTIONS_TABLE, row)
        logger.info(f"Saved swap execution {data.execution_id} ({data.provider})")
        return rows[0]

    async def list(
        self,
        wallet: Optional[str],
        limit: Union[str, int, None] = None,
        offset: Union[str, int, None] = None,
    ) -> List[Row]:
        """Swap executions visible to ``wallet``, newest first."""
        if not wallet:
            raise ValidationError("Missing required query parameter: wallet")
        address = normalize_address(wallet)

        managed = await resolve_managed_wards(self.store, address)
        rows = await fan_out(self.store, EXECUTIONS_TABLE, ownership_predicates(address, managed), "execution_id")

        limit = clamp_limit(limit, self.settings.activity_default_limit, self.settings.activity_max_limit)
        offset = clamp_offset(offset)
        return sort_newest_first(rows)[offset:offset + limit]

    async def update(self, execution_id: str, data: SwapUpdate) -> Row:
        """Patch a swap execution."""
        values = data.to_patch()
        if "tx_hashes" in values and values["tx_hashes"] is not None:
            values["tx_hashes"] = unique_hashes(values["tx_hashes"]) or None
        if not values:
            raise ValidationError("No fields to update")

        rows = await self.store.update(EXECUTIONS_TABLE, eq("execution_id", execution_id), values)
        if not rows:
            raise NotFoundError("Swap execution not found", {"execution_id": execution_id})
        return rows[0]

    async def get_by_execution(self, execution_id: str) -> Row:
        """A swap execution with its steps in step order."""
        rows = await self.store.select(EXECUTIONS_TABLE, eq("execution_id", execution_id), limit=1)
        if not rows:
            raise NotFoundError("Swap execution not found", {"execution_id": execution_id})

        swap = dict(rows[0])
        steps = await self.store.select(STEPS_TABLE, eq("execution_id", execution_id), order_by="created_at.asc")
        swap["steps"] = sorted(steps, key=lambda step: step.get("step_order") or 0)
        return swap

    async def list_steps(self, execution_ids: Sequence[str]) -> List[Row]:
        """Steps of several executions, oldest first."""
        ids = unique_hashes(execution_ids)
        if not ids:
            return []
        return await self.store.select(STEPS_TABLE, in_("execution_id", ids), order_by="created_at.asc")

    async def upsert_step(self, data: SwapStepUpsert) -> Tuple[Row, bool]:
        """
        Record a step attempt, keyed on (execution_id, step_key, attempt).

        Returns the stored row and whether it was newly created.
        """
        row = data.model_dump(mode="json")
        row["updated_at"] = datetime.utcnow()
        row["started_at"] = data.started_at
        row["finished_at"] = data.finished_at

        key = and_(
            eq("execution_id", data.execution_id),
            eq("step_key", data.step_key),
            eq("attempt", data.attempt),
        )
        existing = await self.store.select(STEPS_TABLE, key, order_by="updated_at.desc", limit=1)
        if existing:
            rows = await self.store.update(STEPS_TABLE, eq("id", existing[0]["id"]), row)
            return (rows[0] if rows else existing[0]), False

        rows = await self.store.insert(STEPS_TABLE, row)
        logger.info(f"Swap {data.execution_id} step {data.step_key} attempt {data.attempt}: {data.status.value}")
        return rows[0], True
