"""Unit tests for the ward approval event outbox."""
import pytest
from datetime import datetime, timedelta

from app.models.outbox import WardApprovalEventType
from app.schemas.ward_approval import WardApprovalCreate
from app.services.outbox import (
    OutboxService,
    build_envelope,
    clamp_event_version,
    notification_text,
    target_wallets,
)
from app.services.ward_approval import WardApprovalService
from postgrest_adapter.filters import eq

OUTBOX = "ward_approval_events_outbox"


class FailingUpsertStore:
    """Store whose upserts always fail."""

    def __init__(self, inner):
        self.inner = inner
        self.calls = 0

    def __getattr__(self, name):
        return getattr(self.inner, name)

    async def upsert(self, table, rows, on_conflict=None):
        self.calls += 1
        raise ConnectionError("outbox unavailable")


def test_clamp_event_version():
    assert clamp_event_version(4) == 4
    assert clamp_event_version("3") == 3
    assert clamp_event_version(0) == 1
    assert clamp_event_version(-2) == 1
    assert clamp_event_version(None) == 1
    assert clamp_event_version("abc") == 1


def test_target_wallets_normalized_and_unique():
    assert target_wallets({"ward_address": "0x00B0B", "guardian_address": "0xA11CE"}) == ["0xb0b", "0xa11ce"]
    assert target_wallets({"ward_address": "0xb0b", "guardian_address": "0x0b0b"}) == ["0xb0b"]
    assert target_wallets({"ward_address": None, "guardian_address": "0xa11ce"}) == ["0xa11ce"]


def test_notification_text():
    assert notification_text("ward_approval.created", "pending_ward_sig") == (
        "Ward approval required",
        "A new ward approval request is waiting for action.",
    )
    assert notification_text("ward_approval.status_changed", "pending_guardian")[0] == "Guardian approval required"
    assert notification_text("ward_approval.status_changed", "gas_error")[0] == "Ward approval failed"
    assert notification_text("ward_approval.status_changed", "pending_ward_sig")[0] == "Ward approval updated"


def test_build_envelope():
    row = {
        "id": "approval-1",
        "event_version": 2,
        "status": "pending_guardian",
        "ward_address": "0x0B0B",
        "guardian_address": "0xA11CE",
        "action": "transfer",
        "token": "STRK",
        "amount": "5",
    }
    envelope = build_envelope("event-1", "ward_approval.status_changed", row, previous_status="pending_ward_sig")

    assert envelope["title"] == "Guardian approval required"
    assert envelope["data"] == {
        "schema_version": 1,
        "event_id": "event-1",
        "approval_id": "approval-1",
        "event_type": "ward_approval.status_changed",
        "event_version": 2,
        "status": "pending_guardian",
        "previous_status": "pending_ward_sig",
        "ward_address": "0xb0b",
        "guardian_address": "0xa11ce",
        "action": "transfer",
        "token": "STRK",
        "amount": "5",
    }


@pytest.mark.asyncio
async def test_enqueue_is_idempotent(outbox, ward_row, store):
    """The same (approval, version, type) leaves a single pending row."""
    [row] = await store.insert("ward_approval_requests", ward_row())

    first = await outbox.enqueue(row, WardApprovalEventType.CREATED)
    second = await outbox.enqueue(row, WardApprovalEventType.CREATED)

    events = await store.select(OUTBOX, eq("approval_id", row["id"]))
    assert len(events) == 1
    assert first["id"] == second["id"] == events[0]["id"]
    assert events[0]["status"] == "pending"
    assert events[0]["attempts"] == 0
    assert events[0]["target_wallets"] == ["0xb0b", "0xa11ce"]
    assert events[0]["payload"]["data"]["approval_id"] == row["id"]
    assert events[0]["payload"]["data"]["event_id"] == events[0]["id"]


@pytest.mark.asyncio
async def test_enqueue_distinguishes_event_type(outbox, ward_row, store):
    [row] = await store.insert("ward_approval_requests", ward_row())

    await outbox.enqueue(row, WardApprovalEventType.CREATED)
    await outbox.enqueue(row, WardApprovalEventType.STATUS_CHANGED)

    events = await store.select(OUTBOX, eq("approval_id", row["id"]))
    assert sorted(e["event_type"] for e in events) == ["ward_approval.created", "ward_approval.status_changed"]


@pytest.mark.asyncio
async def test_enqueue_safely_swallows_failures(ward_row, store):
    [row] = await store.insert("ward_approval_requests", ward_row())
    failing = FailingUpsertStore(store)

    assert await OutboxService(failing).enqueue_safely(row, WardApprovalEventType.CREATED) is None
    assert failing.calls == 1


@pytest.mark.asyncio
async def test_state_change_survives_outbox_failure(ward_payload, store, settings):
    """A failed enqueue never fails the write that triggered it."""
    service = WardApprovalService(store, OutboxService(FailingUpsertStore(store)), settings)

    created = await service.create(WardApprovalCreate(**ward_payload()))
    updated = await service.update(created["id"], {"status": "pending_guardian"})

    assert updated["status"] == "pending_guardian"
    assert updated["event_version"] == 2
    assert await store.select(OUTBOX) == []


@pytest.mark.asyncio
async def test_reconcile_fills_missing_events(ward_payload, store, settings, outbox):
    """Lost events are rebuilt from persisted state, once."""
    lossy = WardApprovalService(store, OutboxService(FailingUpsertStore(store)), settings)
    healthy = WardApprovalService(store, outbox, settings)

    never_announced = await lossy.create(WardApprovalCreate(**ward_payload()))

    announced = await healthy.create(WardApprovalCreate(**ward_payload(tx_hash="0xcafe")))
    await lossy.update(announced["id"], {"status": "pending_guardian"})

    result = await outbox.reconcile()
    assert result == {"scanned": 2, "enqueued": 2, "failed": 0}

    rebuilt = await store.select(OUTBOX, eq("approval_id", never_announced["id"]))
    assert [(e["event_type"], e["event_version"]) for e in rebuilt] == [("ward_approval.created", 1)]

    events = await store.select(OUTBOX, eq("approval_id", announced["id"]), order_by="event_version.asc")
    assert [(e["event_type"], e["event_version"]) for e in events] == [
        ("ward_approval.created", 1),
        ("ward_approval.status_changed", 2),
    ]
    assert events[1]["payload"]["data"]["previous_status"] is None

    assert await outbox.reconcile() == {"scanned": 2, "enqueued": 0, "failed": 0}


@pytest.mark.asyncio
async def test_reconcile_window(outbox, ward_row, store):
    now = datetime.utcnow()
    await store.insert("ward_approval_requests", [
        ward_row(updated_at=now - timedelta(days=2)),
        ward_row(updated_at=now),
    ])

    result = await outbox.reconcile(updated_after=now - timedelta(hours=1))
    assert result == {"scanned": 1, "enqueued": 1, "failed": 0}

    result = await outbox.reconcile(limit=1)
    assert result["scanned"] == 1
    assert result["enqueued"] == 0


@pytest.mark.asyncio
async def test_reconcile_counts_failures(ward_row, store):
    await store.insert("ward_approval_requests", [ward_row(), ward_row()])

    result = await OutboxService(FailingUpsertStore(store)).reconcile()
    assert result == {"scanned": 2, "enqueued": 0, "failed": 2}
