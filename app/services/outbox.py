"""Ward approval event outbox.

Every accepted ward approval state change is recorded as a row in
``ward_approval_events_outbox``. An external dispatcher claims pending rows
and delivers them as push notifications; this module only produces them.

Enqueueing happens after the state write has committed and is not part of
the same transaction, so a crash in between can lose an event.
:meth:`OutboxService.reconcile` rebuilds such events from persisted state.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import NAMESPACE_URL, uuid5

from app.models.outbox import OUTBOX_CONFLICT_COLUMNS, OutboxStatus, WardApprovalEventType
from app.models.ward_approval import WardApprovalStatus
from app.schemas.common import normalize_address
from app.store.base import Row, Store
from postgrest_adapter.filters import and_, gte, in_

logger = logging.getLogger(__name__)

OUTBOX_TABLE = "ward_approval_events_outbox"
APPROVALS_TABLE = "ward_approval_requests"
ENVELOPE_SCHEMA_VERSION = 1

# Keeps in.(...) filters well under URL length limits
_LOOKUP_CHUNK = 100

_STATUS_TEXT = {
    WardApprovalStatus.PENDING_GUARDIAN.value: (
        "Guardian approval required",
        "Ward signature received. Guardian approval is now needed.",
    ),
    WardApprovalStatus.APPROVED.value: (
        "Ward approval completed",
        "The ward approval request has been approved.",
    ),
    WardApprovalStatus.REJECTED.value: (
        "Ward approval rejected",
        "The ward approval request was rejected.",
    ),
    WardApprovalStatus.EXPIRED.value: (
        "Ward approval expired",
        "The ward approval request expired before completion.",
    ),
    WardApprovalStatus.FAILED.value: (
        "Ward approval failed",
        "The ward approval request failed and requires attention.",
    ),
    WardApprovalStatus.GAS_ERROR.value: (
        "Ward approval failed",
        "The ward approval request failed and requires attention.",
    ),
}


def notification_text(event_type: str, status: str) -> tuple:
    """Title and body shown to the user for an event."""
    if event_type == WardApprovalEventType.CREATED.value:
        return (
            "Ward approval required",
            "A new ward approval request is waiting for action.",
        )
    return _STATUS_TEXT.get(
        status,
        ("Ward approval updated", "The ward approval request status has changed."),
    )


def clamp_event_version(value: Any) -> int:
    """Event version as a positive int; missing or garbage becomes 1."""
    try:
        return max(1, int(value))
    except (TypeError, ValueError):
        return 1


def event_id_for(approval_id: str, event_version: int, event_type: str) -> str:
    """
    Stable event id for an (approval, version, type) triple.

    Re-enqueueing an event yields the same id, so a merged outbox row and
    its payload always agree on it.
    """
    return str(uuid5(NAMESPACE_URL, f"ward-approval:{approval_id}:{event_version}:{event_type}"))


def target_wallets(row: Row) -> List[str]:
    """Unique normalized ward and guardian addresses, ward first."""
    wallets = []
    for address in (row.get("ward_address"), row.get("guardian_address")):
        if not address:
            continue
        normalized = normalize_address(address)
        if normalized not in wallets:
            wallets.append(normalized)
    return wallets


def build_envelope(
    event_id: str,
    event_type: str,
    row: Row,
    previous_status: Optional[str] = None,
) -> Dict[str, Any]:
    """Notification envelope stored as the outbox payload."""
    title, body = notification_text(event_type, row.get("status"))
    return {
        "title": title,
        "body": body,
        "data": {
            "schema_version": ENVELOPE_SCHEMA_VERSION,
            "event_id": event_id,
            "approval_id": row["id"],
            "event_type": event_type,
            "event_version": clamp_event_version(row.get("event_version")),
            "status": row.get("status"),
            "previous_status": previous_status,
            "ward_address": normalize_address(row.get("ward_address")),
            "guardian_address": normalize_address(row.get("guardian_address")),
            "action": row.get("action"),
            "token": row.get("token"),
            "amount": row.get("amount"),
        },
    }


class OutboxService:
    """Producer side of the ward approval push outbox."""

    def __init__(self, store: Store):
        self.store = store

    async def enqueue(
        self,
        row: Row,
        event_type: WardApprovalEventType,
        previous_status: Optional[str] = None,
    ) -> Row:
        """
        Record an event for ``row`` at its current ``event_version``.

        Upserts on (approval_id, event_version, event_type), so enqueueing
        the same event twice leaves a single outbox row.
        """
        event_type = WardApprovalEventType(event_type).value
        now = datetime.utcnow()
        version = clamp_event_version(row.get("event_version"))
        event_id = event_id_for(row["id"], version, event_type)

        outbox_row = {
            "id": event_id,
            "approval_id": row["id"],
            "event_version": version,
            "event_type": event_type,
            "target_wallets": target_wallets(row),
            "payload": build_envelope(event_id, event_type, row, previous_status),
            "status": OutboxStatus.PENDING.value,
            "attempts": 0,
            "next_attempt_at": now,
            "processing_until": None,
            "lease_token": None,
            "last_error": None,
            "created_at": now,
            "updated_at": now,
        }
        rows = await self.store.upsert(OUTBOX_TABLE, outbox_row, on_conflict=OUTBOX_CONFLICT_COLUMNS)
        logger.info(
            f"Enqueued {event_type} for ward approval {row['id']} "
            f"(version {outbox_row['event_version']})"
        )
        return rows[0] if rows else outbox_row

    async def enqueue_safely(
        self,
        row: Row,
        event_type: WardApprovalEventType,
        previous_status: Optional[str] = None,
    ) -> Optional[Row]:
        """
        Enqueue without letting a failure reach the caller.

        The state change has already been committed when this runs; losing
        the event is recoverable through :meth:`reconcile`.
        """
        try:
            return await self.enqueue(row, event_type, previous_status)
        except Exception as e:
            logger.warning(f"Failed to enqueue {event_type} for ward approval {row.get('id')}: {e}")
            return None

    async def _existing_keys(self, approval_ids: List[str]) -> set:
        keys = set()
        for start in range(0, len(approval_ids), _LOOKUP_CHUNK):
            chunk = approval_ids[start:start + _LOOKUP_CHUNK]
            rows = await self.store.select(OUTBOX_TABLE, in_("approval_id", chunk))
            for row in rows:
                keys.add((row["approval_id"], clamp_event_version(row.get("event_version"))))
        return keys

    async def reconcile(
        self,
        updated_after: Optional[datetime] = None,
        limit: int = 500,
    ) -> Dict[str, int]:
        """
        Re-derive events missing from the outbox.

        Scans ward approvals (most recently updated first) and enqueues an
        event for every (approval, event_version) pair that has no outbox row:
        ``created`` at version 1, ``status_changed`` otherwise. The previous
        status of a rebuilt event is unknown and left null.
        """
        filters = and_(gte("updated_at", updated_after) if updated_after else None)
        approvals = await self.store.select(
            APPROVALS_TABLE,
            filters or None,
            order_by="updated_at.desc",
            limit=limit,
        )
        existing = await self._existing_keys([row["id"] for row in approvals])

        enqueued = 0
        failed = 0
        for row in approvals:
            version = clamp_event_version(row.get("event_version"))
            if (row["id"], version) in existing:
                continue
            event_type = (
                WardApprovalEventType.CREATED if version == 1
                else WardApprovalEventType.STATUS_CHANGED
            )
            try:
                await self.enqueue(row, event_type)
                enqueued += 1
            except Exception as e:
                failed += 1
                logger.warning(f"Reconcile could not enqueue event for ward approval {row['id']}: {e}")

        result = {"scanned": len(approvals), "enqueued": enqueued, "failed": failed}
        logger.info(f"Outbox reconcile finished: {result}")
        return result
