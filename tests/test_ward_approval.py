"""Unit tests for the ward approval state machine."""
import pytest
from datetime import datetime, timedelta

from app.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.ward_approval import (
    TERMINAL_STATUSES,
    VALID_TRANSITIONS,
    WardApprovalStatus,
    can_transition,
)
from app.schemas.ward_approval import WardApprovalCreate
from app.services.outbox import OutboxService
from app.services.ward_approval import WardApprovalService, parse_statuses
from postgrest_adapter.filters import eq

GUARDIAN = "0xa11ce"
WARD = "0xb0b"


class RacingStore:
    """Store wrapper that lets a competing write land just before a conditioned update."""

    def __init__(self, inner, competing_values):
        self.inner = inner
        self.competing_values = competing_values
        self.raced = False

    def __getattr__(self, name):
        return getattr(self.inner, name)

    async def update(self, table, filters, values):
        if "event_version=" in filters and not self.raced:
            self.raced = True
            approval_id = filters.split("&")[0].split("eq.", 1)[1]
            await self.inner.update(table, eq("id", approval_id), self.competing_values)
        return await self.inner.update(table, filters, values)


def test_terminal_statuses_have_no_transitions():
    """Terminal statuses are dead ends."""
    for status in TERMINAL_STATUSES:
        assert VALID_TRANSITIONS[status] == []
    assert can_transition(WardApprovalStatus.PENDING_WARD_SIG, WardApprovalStatus.PENDING_GUARDIAN)
    assert can_transition(WardApprovalStatus.PENDING_GUARDIAN, WardApprovalStatus.GAS_ERROR)
    assert not can_transition(WardApprovalStatus.PENDING_GUARDIAN, WardApprovalStatus.PENDING_WARD_SIG)
    assert not can_transition(WardApprovalStatus.PENDING_WARD_SIG, WardApprovalStatus.FAILED)


def test_parse_statuses_flattens_and_dedupes():
    assert parse_statuses(["approved,rejected", "approved", " expired "]) == [
        "approved", "rejected", "expired",
    ]
    assert parse_statuses(None) == []

    with pytest.raises(ValidationError) as exc:
        parse_statuses(["approved,bogus"])
    assert exc.value.details == {"invalid_statuses": ["bogus"]}


@pytest.mark.asyncio
async def test_create_starts_at_version_one(ward_service, ward_payload, store):
    """A new request is pending the ward's signature and announced once."""
    created = await ward_service.create(WardApprovalCreate(**ward_payload(ward_address="0x000B0B")))

    assert created["status"] == "pending_ward_sig"
    assert created["event_version"] == 1
    assert created["ward_address"] == WARD
    assert created["responded_at"] is None

    events = await store.select("ward_approval_events_outbox", eq("approval_id", created["id"]))
    assert len(events) == 1
    assert events[0]["event_type"] == "ward_approval.created"
    assert events[0]["event_version"] == 1


@pytest.mark.asyncio
async def test_create_with_pending_guardian(ward_service, ward_payload):
    created = await ward_service.create(WardApprovalCreate(**ward_payload(initial_status="pending_guardian")))
    assert created["status"] == "pending_guardian"


@pytest.mark.asyncio
async def test_create_rejects_terminal_initial_status(ward_service, ward_payload, store):
    """Only the two pending statuses can start a request."""
    with pytest.raises(ValidationError):
        await ward_service.create(WardApprovalCreate(**ward_payload(initial_status="approved")))

    assert await store.select("ward_approval_requests") == []


@pytest.mark.asyncio
async def test_full_guardian_flow(ward_service, ward_payload, store):
    """Ward signs, guardian approves; every hop bumps the version once."""
    created = await ward_service.create(WardApprovalCreate(**ward_payload()))

    signed = await ward_service.update(created["id"], {"status": "pending_guardian"})
    assert signed["status"] == "pending_guardian"
    assert signed["event_version"] == 2
    assert signed["responded_at"] is None

    approved = await ward_service.update(created["id"], {
        "status": "approved",
        "guardian_sig_json": "[\"0x3\",\"0x4\"]",
        "final_tx_hash": "0xbeef",
    })
    assert approved["status"] == "approved"
    assert approved["event_version"] == 3
    assert approved["final_tx_hash"] == "0xbeef"
    assert approved["responded_at"] is not None

    events = await store.select(
        "ward_approval_events_outbox",
        eq("approval_id", created["id"]),
        order_by="event_version.asc",
    )
    assert [(e["event_type"], e["event_version"]) for e in events] == [
        ("ward_approval.created", 1),
        ("ward_approval.status_changed", 2),
        ("ward_approval.status_changed", 3),
    ]
    assert events[2]["payload"]["data"]["previous_status"] == "pending_guardian"
    assert events[2]["payload"]["title"] == "Ward approval completed"


@pytest.mark.asyncio
async def test_illegal_transition_is_conflict(ward_service, ward_payload):
    created = await ward_service.create(WardApprovalCreate(**ward_payload()))
    await ward_service.update(created["id"], {"status": "rejected"})

    with pytest.raises(ConflictError) as exc:
        await ward_service.update(created["id"], {"status": "pending_guardian"})
    assert exc.value.details == {"current_status": "rejected", "requested_status": "pending_guardian"}

    current = await ward_service.get(created["id"])
    assert current["status"] == "rejected"
    assert current["event_version"] == 2


@pytest.mark.asyncio
async def test_pending_ward_sig_cannot_fail_directly(ward_service, ward_payload):
    created = await ward_service.create(WardApprovalCreate(**ward_payload()))
    with pytest.raises(ConflictError):
        await ward_service.update(created["id"], {"status": "gas_error"})


@pytest.mark.asyncio
async def test_non_status_patch_keeps_version(ward_service, ward_payload, store):
    """Signature updates and same-status patches do not emit events."""
    created = await ward_service.create(WardApprovalCreate(**ward_payload()))

    updated = await ward_service.update(created["id"], {
        "ward_2fa_sig_json": "[\"0x9\"]",
        "status": "pending_ward_sig",
    })
    assert updated["ward_2fa_sig_json"] == "[\"0x9\"]"
    assert updated["status"] == "pending_ward_sig"
    assert updated["event_version"] == 1
    assert updated["updated_at"] >= created["updated_at"]

    events = await store.select("ward_approval_events_outbox", eq("approval_id", created["id"]))
    assert len(events) == 1


@pytest.mark.asyncio
async def test_empty_patch_rejected(ward_service, ward_payload):
    created = await ward_service.create(WardApprovalCreate(**ward_payload()))
    with pytest.raises(ValidationError):
        await ward_service.update(created["id"], {})


@pytest.mark.asyncio
async def test_update_unknown_request(ward_service):
    with pytest.raises(NotFoundError):
        await ward_service.update("does-not-exist", {"status": "approved"})


@pytest.mark.asyncio
async def test_responded_at_is_set_once(ward_service, ward_row, store):
    """An existing responded_at survives the terminal transition."""
    responded = datetime(2026, 1, 2, 3, 4, 5)
    [row] = await store.insert("ward_approval_requests", ward_row(
        status="pending_guardian",
        event_version=2,
        responded_at=responded,
    ))

    approved = await ward_service.update(row["id"], {"status": "approved"})
    assert approved["responded_at"] == responded


@pytest.mark.asyncio
async def test_concurrent_decision_loses_without_error(ward_payload, store, settings):
    """A decision racing another on the same version returns the winner's row."""
    outbox = OutboxService(store)
    created = await WardApprovalService(store, outbox, settings).create(
        WardApprovalCreate(**ward_payload(initial_status="pending_guardian"))
    )

    racing = RacingStore(store, {"status": "rejected", "event_version": 2})
    service = WardApprovalService(racing, outbox, settings)

    result = await service.update(created["id"], {"status": "approved"})
    assert result["status"] == "rejected"
    assert result["event_version"] == 2

    events = await store.select("ward_approval_events_outbox", eq("approval_id", created["id"]))
    assert [e["event_type"] for e in events] == ["ward_approval.created"]


@pytest.mark.asyncio
async def test_list_defaults_to_open_requests(ward_service, ward_row, store):
    """Scoped listing without a status shows only pending requests."""
    now = datetime.utcnow()
    await store.insert("ward_approval_requests", [
        ward_row(status="pending_ward_sig", updated_at=now - timedelta(minutes=3)),
        ward_row(status="pending_guardian", updated_at=now - timedelta(minutes=1)),
        ward_row(status="approved", updated_at=now),
    ])

    open_requests = await ward_service.list(guardian=GUARDIAN)
    assert [row["status"] for row in open_requests] == ["pending_guardian", "pending_ward_sig"]

    everything = await ward_service.list(guardian=GUARDIAN, include_all="TRUE")
    assert len(everything) == 3

    approved = await ward_service.list(ward=WARD, statuses=["approved"])
    assert [row["status"] for row in approved] == ["approved"]

    unscoped = await ward_service.list()
    assert len(unscoped) == 3


@pytest.mark.asyncio
async def test_list_updated_after_and_paging(ward_service, ward_row, store):
    base = datetime(2026, 3, 1, 12, 0, 0)
    await store.insert("ward_approval_requests", [
        ward_row(status="approved", updated_at=base + timedelta(hours=hour))
        for hour in range(5)
    ])

    recent = await ward_service.list(statuses=["approved"], updated_after="2026-03-01T14:00:00Z")
    assert len(recent) == 3

    page = await ward_service.list(statuses=["approved"], limit="2", offset="1")
    assert [row["updated_at"] for row in page] == [base + timedelta(hours=3), base + timedelta(hours=2)]

    # Unusable paging values fall back to defaults
    assert len(await ward_service.list(statuses=["approved"], limit="abc", offset="-4")) == 5

    with pytest.raises(ValidationError):
        await ward_service.list(updated_after="yesterday")


@pytest.mark.asyncio
async def test_history_includes_every_status(ward_service, ward_row, store):
    now = datetime.utcnow()
    await store.insert("ward_approval_requests", [
        ward_row(status="expired", created_at=now - timedelta(days=1)),
        ward_row(status="pending_ward_sig", created_at=now),
        ward_row(status="approved", ward_address="0xd00d", guardian_address="0xd00d1"),
    ])

    history = await ward_service.history(guardian=GUARDIAN)
    assert [row["status"] for row in history] == ["pending_ward_sig", "expired"]
