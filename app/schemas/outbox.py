"""Outbox reconciliation schemas."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ReconcileRequest(BaseModel):
    """Reconciliation sweep parameters."""
    updated_after: Optional[datetime] = None
    limit: Optional[int] = Field(None, gt=0)


class ReconcileResponse(BaseModel):
    """Counts produced by a reconciliation sweep."""
    scanned: int
    enqueued: int
    failed: int
