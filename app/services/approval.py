"""Two-factor approval service."""
import logging
from datetime import datetime
from typing import List, Optional

from app.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.approval import TERMINAL_STATUSES, VALID_TRANSITIONS, ApprovalStatus
from app.schemas.approval import ApprovalCreate, ApprovalUpdate
from app.schemas.common import normalize_address
from app.store.base import Row, Store
from postgrest_adapter.filters import and_, eq

logger = logging.getLogger(__name__)

TABLE = "approval_requests"


class TwoFactorApprovalService:
    """
    Service for single-party approvals signed on a second device.

    Unlike ward approvals there is no version column: the transition check
    reads the stored status and the write follows separately, so two
    concurrent resolutions can both pass the check and the last write wins.
    """

    def __init__(self, store: Store):
        self.store = store

    async def create(self, data: ApprovalCreate) -> Row:
        """Create a pending approval request."""
        row = data.model_dump(mode="json")
        row.update({
            "wallet_address": normalize_address(data.wallet_address),
            "status": ApprovalStatus.PENDING.value,
            "created_at": datetime.utcnow(),
        })
        rows = await self.store.insert(TABLE, row)
        created = rows[0]
        logger.info(f"2FA approval {created['id']} created for {created['wallet_address']}")
        return created

    async def list(self, wallet: Optional[str], status: Optional[str] = None) -> List[Row]:
        """Approval requests for a wallet, newest first."""
        if not wallet:
            raise ValidationError("Missing required query parameter: wallet")
        if status:
            try:
                status = ApprovalStatus(status).value
            except ValueError:
                raise ValidationError("Invalid status filter", {"status": status})

        filters = and_(
            eq("wallet_address", normalize_address(wallet)),
            eq("status", status) if status else None,
        )
        return await self.store.select(TABLE, filters, order_by="created_at.desc")

    async def get(self, approval_id: str) -> Row:
        """Get an approval request by ID."""
        rows = await self.store.select(TABLE, eq("id", approval_id), limit=1)
        if not rows:
            raise NotFoundError("Approval request not found", {"id": approval_id})
        return rows[0]

    async def update(self, approval_id: str, data: ApprovalUpdate) -> Row:
        """Resolve an approval request."""
        current = await self.get(approval_id)
        stored_status = ApprovalStatus(current["status"])

        if data.status != stored_status and data.status not in VALID_TRANSITIONS[stored_status]:
            raise ConflictError(
                f"Cannot transition from {stored_status.value} to {data.status.value}",
                {"current_status": stored_status.value, "requested_status": data.status.value},
            )

        values = data.model_dump(mode="json", exclude_unset=True)
        values["status"] = data.status.value
        if data.status in TERMINAL_STATUSES and current.get("responded_at") is None:
            values["responded_at"] = datetime.utcnow()

        rows = await self.store.update(TABLE, eq("id", approval_id), values)
        if not rows:
            raise NotFoundError("Approval request not found", {"id": approval_id})

        logger.info(f"2FA approval {approval_id}: {stored_status.value} -> {data.status.value}")
        return rows[0]
