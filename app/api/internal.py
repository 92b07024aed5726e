"""Internal maintenance endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends

from app.config import Settings, get_settings
from app.schemas.outbox import ReconcileRequest, ReconcileResponse
from app.services.outbox import OutboxService
from app.api.deps import get_outbox_service, require_internal_secret

router = APIRouter(
    prefix="/api/v1/internal",
    tags=["Internal"],
    dependencies=[Depends(require_internal_secret)],
)


@router.post("/outbox/reconcile", response_model=ReconcileResponse)
async def reconcile_outbox(
    data: Optional[ReconcileRequest] = None,
    outbox: OutboxService = Depends(get_outbox_service),
    settings: Settings = Depends(get_settings),
):
    """
    Re-enqueue ward approval events missing from the outbox.

    Safe to run repeatedly; events already in the outbox are skipped.
    """
    data = data or ReconcileRequest()
    return await outbox.reconcile(
        updated_after=data.updated_after,
        limit=data.limit or settings.outbox_reconcile_limit,
    )
