"""Ward approval service: multi-party approval state machine."""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Union

from app.config import Settings
from app.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.outbox import WardApprovalEventType
from app.models.ward_approval import (
    INITIAL_STATUSES,
    TERMINAL_STATUSES,
    WardApprovalStatus,
    can_transition,
)
from app.schemas.common import normalize_address
from app.schemas.ward_approval import WardApprovalCreate
from app.services.outbox import OutboxService
from app.services.paging import clamp_limit, clamp_offset, is_truthy
from app.store.base import Row, Store
from postgrest_adapter.filters import and_, eq, gte, in_, is_null

logger = logging.getLogger(__name__)

TABLE = "ward_approval_requests"

DEFAULT_LIST_STATUSES = [
    WardApprovalStatus.PENDING_WARD_SIG.value,
    WardApprovalStatus.PENDING_GUARDIAN.value,
]


def parse_statuses(raw: Optional[Sequence[str]]) -> List[str]:
    """
    Flatten repeated and comma-separated ``status`` values.

    Duplicates are dropped keeping first-seen order. Unknown values raise
    :class:`ValidationError`.
    """
    statuses = []
    for value in raw or []:
        for part in value.split(","):
            part = part.strip()
            if part and part not in statuses:
                statuses.append(part)

    valid = {status.value for status in WardApprovalStatus}
    unknown = [status for status in statuses if status not in valid]
    if unknown:
        raise ValidationError("Invalid status filter", {"invalid_statuses": unknown})
    return statuses


def parse_timestamp(raw: Optional[str], field: str) -> Optional[datetime]:
    """ISO 8601 query parameter to datetime."""
    if not raw:
        return None
    try:
        return datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"{field} must be an ISO 8601 datetime", {field: raw})


class WardApprovalService:
    """
    Service for ward approval requests.

    State transitions:
    PENDING_WARD_SIG -> PENDING_GUARDIAN -> APPROVED | REJECTED | FAILED | GAS_ERROR | EXPIRED
    PENDING_WARD_SIG -> APPROVED | REJECTED | EXPIRED

    Every accepted status change bumps ``event_version`` by exactly one. The
    bump is a compare-and-swap on the version read beforehand, so two
    concurrent decisions on the same version cannot both win.
    """

    def __init__(self, store: Store, outbox: OutboxService, settings: Settings):
        self.store = store
        self.outbox = outbox
        self.settings = settings

    async def create(self, data: WardApprovalCreate) -> Row:
        """Create a ward approval request and announce it."""
        initial_status = data.initial_status or WardApprovalStatus.PENDING_WARD_SIG
        if initial_status not in INITIAL_STATUSES:
            raise ValidationError(
                "initial_status must be pending_ward_sig or pending_guardian",
                {"initial_status": initial_status.value},
            )

        now = datetime.utcnow()
        row = data.model_dump(mode="json", exclude={"initial_status"})
        row.update({
            "ward_address": normalize_address(data.ward_address),
            "guardian_address": normalize_address(data.guardian_address),
            "status": initial_status.value,
            "event_version": 1,
            "created_at": now,
            "responded_at": None,
            "updated_at": now,
        })

        rows = await self.store.insert(TABLE, row)
        created = rows[0]
        logger.info(
            f"Ward approval {created['id']} created for ward {created['ward_address']} "
            f"(status {created['status']})"
        )

        await self.outbox.enqueue_safely(created, WardApprovalEventType.CREATED)
        return created

    async def get(self, approval_id: str) -> Row:
        """Get a ward approval request by ID."""
        rows = await self.store.select(TABLE, eq("id", approval_id), limit=1)
        if not rows:
            raise NotFoundError("Ward approval request not found", {"id": approval_id})
        return rows[0]

    async def list(
        self,
        ward: Optional[str] = None,
        guardian: Optional[str] = None,
        statuses: Optional[Sequence[str]] = None,
        include_all: Union[str, bool, None] = None,
        updated_after: Optional[str] = None,
        limit: Union[str, int, None] = None,
        offset: Union[str, int, None] = None,
    ) -> List[Row]:
        """
        List ward approval requests, most recently updated first.

        Scoped to a ward or guardian without an explicit status filter, only
        open requests are returned unless ``include_all`` is set.
        """
        status_filter = parse_statuses(statuses)
        if not status_filter and (ward or guardian) and not is_truthy(include_all):
            status_filter = list(DEFAULT_LIST_STATUSES)

        status_clause = None
        if len(status_filter) == 1:
            status_clause = eq("status", status_filter[0])
        elif status_filter:
            status_clause = in_("status", status_filter)

        since = parse_timestamp(updated_after, "updated_after")
        filters = and_(
            eq("ward_address", normalize_address(ward)) if ward else None,
            eq("guardian_address", normalize_address(guardian)) if guardian else None,
            status_clause,
            gte("updated_at", since) if since else None,
        )

        return await self.store.select(
            TABLE,
            filters or None,
            order_by="updated_at.desc",
            limit=clamp_limit(limit, self.settings.ward_approval_default_limit, self.settings.ward_approval_max_limit),
            offset=clamp_offset(offset),
        )

    async def history(
        self,
        ward: Optional[str] = None,
        guardian: Optional[str] = None,
        limit: Union[str, int, None] = None,
        offset: Union[str, int, None] = None,
    ) -> List[Row]:
        """All requests for a ward and/or guardian, newest first."""
        filters = and_(
            eq("ward_address", normalize_address(ward)) if ward else None,
            eq("guardian_address", normalize_address(guardian)) if guardian else None,
        )
        return await self.store.select(
            TABLE,
            filters or None,
            order_by="created_at.desc",
            limit=clamp_limit(limit, self.settings.ward_approval_default_limit, self.settings.ward_approval_max_limit),
            offset=clamp_offset(offset),
        )

    async def update(self, approval_id: str, patch: Dict[str, Any]) -> Row:
        """
        Apply a patch to a ward approval request.

        A patch whose ``status`` differs from the stored one is a state
        transition: it must be allowed by ``VALID_TRANSITIONS`` and is written
        only if ``event_version`` is still the one that was read. Losing that
        race is not an error; the winner's row is returned instead.

        Any other patch is written as-is and leaves ``event_version`` alone.
        """
        if not patch:
            raise ValidationError("No fields to update")

        current = await self.get(approval_id)
        target = patch.get("status")
        now = datetime.utcnow()

        if target is None or target == current["status"]:
            values = {key: value for key, value in patch.items() if key != "status"}
            values["updated_at"] = now
            rows = await self.store.update(TABLE, eq("id", approval_id), values)
            if not rows:
                raise NotFoundError("Ward approval request not found", {"id": approval_id})
            return rows[0]

        stored_status = WardApprovalStatus(current["status"])
        new_status = WardApprovalStatus(target)
        if not can_transition(stored_status, new_status):
            raise ConflictError(
                f"Cannot transition from {stored_status.value} to {new_status.value}",
                {"current_status": stored_status.value, "requested_status": new_status.value},
            )

        version = current.get("event_version")
        values = dict(patch)
        values["status"] = new_status.value
        values["event_version"] = (version or 1) + 1
        values["updated_at"] = now
        if new_status in TERMINAL_STATUSES and current.get("responded_at") is None:
            values["responded_at"] = now

        cas = and_(
            eq("id", approval_id),
            eq("event_version", version) if version is not None else is_null("event_version"),
        )
        rows = await self.store.update(TABLE, cas, values)
        if not rows:
            logger.warning(
                f"Ward approval {approval_id} changed concurrently; "
                f"{stored_status.value} -> {new_status.value} at version {version} not applied"
            )
            return await self.get(approval_id)

        updated = rows[0]
        logger.info(
            f"Ward approval {approval_id}: {stored_status.value} -> {new_status.value} "
            f"(version {updated['event_version']})"
        )
        await self.outbox.enqueue_safely(
            updated,
            WardApprovalEventType.STATUS_CHANGED,
            previous_status=stored_status.value,
        )
        return updated
