"""Pytest configuration and fixtures."""
import pytest
import pytest_asyncio
from datetime import datetime
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import create_async_engine
from httpx import AsyncClient, ASGITransport

from app.config import Settings, get_settings
from app.database import Base
from app.main import app
from app.api.deps import get_store
from app.services.auth import hash_api_key
from app.services.outbox import OutboxService
from app.services.ward_approval import WardApprovalService
from app.store import SQLAlchemyStore


TEST_API_KEY = "test-api-key-0123456789"
TEST_INTERNAL_SECRET = "test-internal-secret"

GUARDIAN = "0xa11ce"
WARD = "0xb0b"


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path):
    """Create test database engine.

    File-backed so that every store operation, which opens its own session,
    sees the same database.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def store(db_engine) -> SQLAlchemyStore:
    """Store over the test database."""
    return SQLAlchemyStore(db_engine)


@pytest.fixture
def settings() -> Settings:
    """Create test settings."""
    return Settings(internal_secret=TEST_INTERNAL_SECRET)


@pytest.fixture
def outbox(store) -> OutboxService:
    return OutboxService(store)


@pytest.fixture
def ward_service(store, outbox, settings) -> WardApprovalService:
    return WardApprovalService(store, outbox, settings)


@pytest.fixture
def ward_payload():
    """Factory for a ward approval create payload."""
    def make(**overrides) -> dict:
        payload = {
            "ward_address": WARD,
            "guardian_address": GUARDIAN,
            "action": "transfer",
            "token": "STRK",
            "amount": "5",
            "amount_unit": "tongo_units",
            "recipient": None,
            "calls_json": "[]",
            "nonce": "0x1",
            "resource_bounds_json": "{}",
            "tx_hash": "0xfeed",
            "ward_sig_json": "[\"0x1\",\"0x2\"]",
            "needs_ward_2fa": False,
            "needs_guardian": True,
            "needs_guardian_2fa": False,
        }
        payload.update(overrides)
        return payload
    return make


@pytest.fixture
def ward_row(ward_payload):
    """Factory for a ward approval row inserted straight into the store."""
    def make(**overrides) -> dict:
        now = datetime.utcnow()
        row = ward_payload()
        row.update({
            "status": "pending_ward_sig",
            "event_version": 1,
            "created_at": now,
            "updated_at": now,
        })
        row.update(overrides)
        return row
    return make


@pytest_asyncio.fixture(scope="function")
async def api_key(store) -> str:
    """Register the test API key for GUARDIAN."""
    await store.insert("api_keys", {
        "wallet_address": GUARDIAN,
        "key_hash": hash_api_key(TEST_API_KEY),
        "created_at": datetime.utcnow(),
    })
    return TEST_API_KEY


@pytest_asyncio.fixture(scope="function")
async def client(store, settings, api_key: str) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client."""
    # Override store and settings dependencies
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_settings] = lambda: settings

    # Unhandled errors are rendered by the app's handler instead of raised
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        client.headers["X-API-Key"] = api_key
        yield client

    app.dependency_overrides.clear()
