"""Unified activity feed.

Merges transactions, swap executions and ward approval requests visible to a
wallet into one paginated, newest-first list with at most one record per
transaction hash.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional, Union

from app.config import Settings
from app.exceptions import ValidationError
from app.models.transaction import AmountUnit, TransactionStatus
from app.models.ward_approval import WardApprovalStatus
from app.schemas.common import normalize_address
from app.services.fanout import fan_out, ownership_predicates, resolve_managed_wards
from app.services.paging import clamp_limit, clamp_offset, sort_newest_first
from app.store.base import Row, Store
from postgrest_adapter.filters import eq, in_

logger = logging.getLogger(__name__)

# Ward request status -> feed status
WARD_STATUS_MAP = {
    WardApprovalStatus.APPROVED.value: "confirmed",
    WardApprovalStatus.REJECTED.value: "rejected",
    WardApprovalStatus.GAS_ERROR.value: "gas_error",
    WardApprovalStatus.FAILED.value: "failed",
    WardApprovalStatus.EXPIRED.value: "expired",
}

WARD_STATUS_NOTES = {
    WardApprovalStatus.PENDING_WARD_SIG.value: "Waiting for ward signature",
    WardApprovalStatus.PENDING_GUARDIAN.value: "Waiting for guardian approval",
    WardApprovalStatus.REJECTED.value: "Request rejected",
    WardApprovalStatus.GAS_ERROR.value: "Gas too low, retry required",
    WardApprovalStatus.EXPIRED.value: "Request expired",
}

WARD_ACTION_TYPES = {
    "deploy": "deploy_ward",
    "deploy_account": "deploy_ward",
    "deploy_contract": "deploy_ward",
    "fund": "fund_ward",
    "configure": "configure_ward",
    "configure_limits": "configure_ward",
}

AMOUNT_UNITS = {unit.value for unit in AmountUnit}


def transaction_status(status: Optional[str]) -> str:
    if status in (TransactionStatus.CONFIRMED.value, TransactionStatus.FAILED.value):
        return status
    return TransactionStatus.PENDING.value


def ward_request_status(status: Optional[str]) -> str:
    return WARD_STATUS_MAP.get(status, "pending")


def ward_action_type(action: Optional[str]) -> str:
    normalized = (action or "").strip().lower()
    if not normalized:
        return "transfer"
    return WARD_ACTION_TYPES.get(normalized, normalized)


def ward_amount_unit(row: Row) -> Optional[str]:
    unit = row.get("amount_unit")
    if unit in AMOUNT_UNITS:
        return unit
    if row.get("action") == "erc20_transfer":
        return AmountUnit.ERC20_DISPLAY.value
    return AmountUnit.TONGO_UNITS.value if row.get("amount") else None


def swap_hashes(swap: Row) -> List[str]:
    """Every transaction hash a swap touched, primary first."""
    hashes = []
    for value in [swap.get("primary_tx_hash"), swap.get("tx_hash"), *(swap.get("tx_hashes") or [])]:
        if value and value not in hashes:
            hashes.append(value)
    return hashes


class ActivityAggregator:
    """Builds the activity feed for a wallet."""

    def __init__(self, store: Store, settings: Settings):
        self.store = store
        self.settings = settings

    async def _swap_steps(self, execution_ids: List[str]) -> Dict[str, List[Row]]:
        if not execution_ids:
            return {}
        try:
            steps = await self.store.select(
                "swap_execution_steps",
                in_("execution_id", execution_ids),
                order_by="created_at.asc",
            )
        except Exception as e:
            logger.warning(f"Swap steps lookup failed: {e}")
            return {}

        by_execution: Dict[str, List[Row]] = {}
        for step in steps:
            by_execution.setdefault(step["execution_id"], []).append(step)
        return by_execution

    def _swap_view(self, swap: Row, steps: List[Row]) -> Dict[str, Any]:
        ordered = sorted(steps, key=lambda step: step.get("step_order") or 0)
        return {
            "execution_id": swap.get("execution_id"),
            "provider": swap.get("provider"),
            "sell_token": swap.get("sell_token"),
            "buy_token": swap.get("buy_token"),
            "sell_amount_wei": swap.get("sell_amount_wei"),
            "estimated_buy_amount_wei": swap.get("estimated_buy_amount_wei"),
            "min_buy_amount_wei": swap.get("min_buy_amount_wei"),
            "buy_actual_amount_wei": swap.get("buy_actual_amount_wei"),
            "tx_hashes": swap.get("tx_hashes"),
            "primary_tx_hash": next(iter(swap_hashes(swap)), None),
            "status": swap.get("status"),
            "failure_step_key": swap.get("failure_step_key"),
            "failure_reason": swap.get("failure_reason"),
            "steps": [
                {
                    "step_key": step.get("step_key"),
                    "step_order": step.get("step_order"),
                    "status": step.get("status"),
                    "tx_hash": step.get("tx_hash"),
                    "message": step.get("message"),
                    "started_at": step.get("started_at"),
                    "finished_at": step.get("finished_at"),
                }
                for step in ordered
            ],
        }

    def _transaction_record(self, tx: Row, swap: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        return {
            "id": tx["tx_hash"],
            "source": "transaction",
            "wallet_address": tx.get("wallet_address"),
            "tx_hash": tx["tx_hash"],
            "type": tx.get("type"),
            "token": tx.get("token"),
            "amount": tx.get("amount"),
            "amount_unit": tx.get("amount_unit"),
            "recipient": tx.get("recipient"),
            "recipient_name": tx.get("recipient_name"),
            "note": tx.get("note"),
            "status": transaction_status(tx.get("status")),
            "error_message": tx.get("error_message"),
            "account_type": tx.get("account_type"),
            "ward_address": tx.get("ward_address"),
            "fee": tx.get("fee"),
            "network": tx.get("network"),
            "platform": tx.get("platform"),
            "created_at": tx.get("created_at"),
            "swap": swap,
        }

    def _ward_record(self, row: Row, viewer: str) -> Dict[str, Any]:
        guardian = normalize_address(row.get("guardian_address"))
        ward = normalize_address(row.get("ward_address"))
        return {
            "id": row["id"],
            "source": "ward_request",
            "wallet_address": guardian if guardian == viewer else ward,
            "tx_hash": row.get("final_tx_hash") or row.get("tx_hash") or "",
            "type": ward_action_type(row.get("action")),
            "token": row.get("token") or "STRK",
            "amount": row.get("amount"),
            "amount_unit": ward_amount_unit(row),
            "recipient": row.get("recipient"),
            "recipient_name": None,
            "note": WARD_STATUS_NOTES.get(row.get("status")),
            "status": ward_request_status(row.get("status")),
            "status_detail": row.get("status"),
            "error_message": row.get("error_message"),
            "account_type": "guardian",
            "ward_address": ward,
            "fee": None,
            "network": self.settings.activity_network,
            "platform": "approval",
            "created_at": row.get("created_at"),
            "responded_at": row.get("responded_at"),
            "swap": None,
        }

    async def get_activity(
        self,
        wallet: Optional[str],
        limit: Union[str, int, None] = None,
        offset: Union[str, int, None] = None,
    ) -> Dict[str, Any]:
        """
        One page of the wallet's activity.

        Returns ``{"records", "total", "has_more"}``.
        """
        if not wallet:
            raise ValidationError("Missing required query parameter: wallet")
        viewer = normalize_address(wallet)
        limit = clamp_limit(limit, self.settings.activity_default_limit, self.settings.activity_max_limit)
        offset = clamp_offset(offset)

        managed = await resolve_managed_wards(self.store, viewer)
        predicates = ownership_predicates(viewer, managed)

        tx_rows, swap_rows, ward_rows = await asyncio.gather(
            fan_out(self.store, "transactions", predicates, "tx_hash"),
            fan_out(self.store, "swap_executions", predicates, "execution_id"),
            fan_out(
                self.store,
                "ward_approval_requests",
                [eq("guardian_address", viewer), eq("ward_address", viewer)],
                "id",
            ),
        )

        steps_by_execution = await self._swap_steps([row["execution_id"] for row in swap_rows])

        # A hash may belong to several swaps; the last one indexed wins
        swaps_by_hash = {}
        for swap in swap_rows:
            view = self._swap_view(swap, steps_by_execution.get(swap["execution_id"], []))
            for tx_hash in swap_hashes(swap):
                swaps_by_hash[tx_hash] = view

        tx_records = [
            self._transaction_record(tx, swaps_by_hash.get(tx["tx_hash"]))
            for tx in tx_rows
        ]

        # At most one record per non-empty hash; the newest ward request wins
        seen_hashes = {tx["tx_hash"] for tx in tx_rows if tx.get("tx_hash")}
        ward_records = []
        for row in sort_newest_first(ward_rows):
            tx_hash = row.get("final_tx_hash") or row.get("tx_hash")
            if tx_hash and tx_hash in seen_hashes:
                continue
            if tx_hash:
                seen_hashes.add(tx_hash)
            ward_records.append(self._ward_record(row, viewer))

        combined = sort_newest_first(tx_records + ward_records)
        total = len(combined)
        logger.debug(
            f"Activity for {viewer}: {len(tx_records)} transactions, "
            f"{len(ward_records)} ward requests, {len(managed)} managed wards"
        )
        return {
            "records": combined[offset:offset + limit],
            "total": total,
            "has_more": offset + limit < total,
        }
