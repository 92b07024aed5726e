"""Tests for the PostgREST client."""

from datetime import datetime
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from postgrest_adapter import PostgRESTClient, PostgRESTSettings
from postgrest_adapter.exceptions import (
    PostgRESTAuthError,
    PostgRESTConflictError,
    PostgRESTNotFoundError,
    PostgRESTServerError,
    PostgRESTValidationError,
)


def _response(status: int, json=None) -> httpx.Response:
    return httpx.Response(status, json=json, request=httpx.Request("GET", "/"))


class TestPostgRESTClient:
    """Test store contract methods."""

    @pytest.mark.asyncio
    async def test_context_manager(self, settings: PostgRESTSettings) -> None:
        """Test client works as async context manager."""
        async with PostgRESTClient(settings) as client:
            assert client._client is not None
            assert str(client._client.base_url).endswith("/rest/v1/")

        assert client._client is None

    @pytest.mark.asyncio
    async def test_client_not_initialized_error(self, settings: PostgRESTSettings) -> None:
        """Test error when using client outside context manager."""
        client = PostgRESTClient(settings)

        with pytest.raises(RuntimeError, match="Client not initialized"):
            _ = client.client

    @pytest.mark.asyncio
    async def test_select_passes_filters_and_options(self, settings: PostgRESTSettings) -> None:
        """Test select splits filters into query params alongside order/limit."""
        rows = [{"id": "1", "status": "pending_guardian"}]

        async with PostgRESTClient(settings) as client:
            with patch.object(client._client, "request", new_callable=AsyncMock) as mock_request:
                mock_request.return_value = _response(200, rows)

                result = await client.select(
                    "ward_approval_requests",
                    "guardian_address=eq.0xabc&status=in.(pending_ward_sig,pending_guardian)",
                    order_by="updated_at.desc",
                    limit=50,
                    offset=0,
                )

                assert result == rows
                kwargs = mock_request.call_args.kwargs
                assert kwargs["method"] == "GET"
                assert kwargs["url"] == "/ward_approval_requests"
                assert ("guardian_address", "eq.0xabc") in kwargs["params"]
                assert ("status", "in.(pending_ward_sig,pending_guardian)") in kwargs["params"]
                assert ("order", "updated_at.desc") in kwargs["params"]
                assert ("limit", "50") in kwargs["params"]
                assert ("offset", "0") in kwargs["params"]
                assert kwargs["headers"]["Prefer"] == "return=representation"
                assert kwargs["headers"]["apikey"] == "test-service-role-key"

    @pytest.mark.asyncio
    async def test_update_sends_conditioned_patch(self, settings: PostgRESTSettings) -> None:
        """Test update sends one PATCH carrying the version condition."""
        async with PostgRESTClient(settings) as client:
            with patch.object(client._client, "request", new_callable=AsyncMock) as mock_request:
                mock_request.return_value = _response(200, [])

                result = await client.update(
                    "ward_approval_requests",
                    "id=eq.abc&event_version=eq.1",
                    {"status": "approved", "event_version": 2, "updated_at": datetime(2024, 1, 1)},
                )

                assert result == []
                kwargs = mock_request.call_args.kwargs
                assert kwargs["method"] == "PATCH"
                assert ("event_version", "eq.1") in kwargs["params"]
                assert kwargs["json"]["updated_at"] == "2024-01-01T00:00:00"

    @pytest.mark.asyncio
    async def test_update_requires_filter(self, settings: PostgRESTSettings) -> None:
        """Test unfiltered updates are refused."""
        async with PostgRESTClient(settings) as client:
            with pytest.raises(ValueError):
                await client.update("transactions", "", {"status": "confirmed"})

    @pytest.mark.asyncio
    async def test_upsert_merges_duplicates(self, settings: PostgRESTSettings) -> None:
        """Test upsert sets on_conflict and the merge-duplicates preference."""
        row = {"id": "e1", "approval_id": "a1", "event_version": 1}

        async with PostgRESTClient(settings) as client:
            with patch.object(client._client, "request", new_callable=AsyncMock) as mock_request:
                mock_request.return_value = _response(201, [row])

                result = await client.upsert(
                    "ward_approval_events_outbox", row, "approval_id,event_version,event_type"
                )

                assert result == [row]
                kwargs = mock_request.call_args.kwargs
                assert kwargs["method"] == "POST"
                assert ("on_conflict", "approval_id,event_version,event_type") in kwargs["params"]
                assert "resolution=merge-duplicates" in kwargs["headers"]["Prefer"]

    @pytest.mark.asyncio
    async def test_empty_body_returns_empty_list(self, settings: PostgRESTSettings) -> None:
        """Test 204 responses map to no rows."""
        async with PostgRESTClient(settings) as client:
            with patch.object(client._client, "request", new_callable=AsyncMock) as mock_request:
                mock_request.return_value = httpx.Response(204, request=httpx.Request("DELETE", "/"))

                result = await client.delete("transactions", "tx_hash=eq.0x1")

                assert result == []

    @pytest.mark.asyncio
    async def test_error_401_raises_auth_error(self, settings: PostgRESTSettings) -> None:
        """Test 401 response raises PostgRESTAuthError."""
        async with PostgRESTClient(settings) as client:
            with patch.object(client._client, "request", new_callable=AsyncMock) as mock_request:
                mock_request.return_value = _response(401, {"message": "Invalid API key"})

                with pytest.raises(PostgRESTAuthError) as exc_info:
                    await client.select("transactions")

                assert exc_info.value.status_code == 401
                assert "Invalid API key" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_error_404_raises_not_found(self, settings: PostgRESTSettings) -> None:
        """Test 404 response raises PostgRESTNotFoundError."""
        async with PostgRESTClient(settings) as client:
            with patch.object(client._client, "request", new_callable=AsyncMock) as mock_request:
                mock_request.return_value = _response(404, {"message": "relation does not exist"})

                with pytest.raises(PostgRESTNotFoundError):
                    await client.select("missing_table")

    @pytest.mark.asyncio
    async def test_error_400_raises_validation_error(self, settings: PostgRESTSettings) -> None:
        """Test 400 response raises PostgRESTValidationError."""
        async with PostgRESTClient(settings) as client:
            with patch.object(client._client, "request", new_callable=AsyncMock) as mock_request:
                mock_request.return_value = _response(400, {"message": "failed to parse filter"})

                with pytest.raises(PostgRESTValidationError):
                    await client.select("transactions", "status=eq.pending")

    @pytest.mark.asyncio
    async def test_error_409_raises_conflict_error(self, settings: PostgRESTSettings) -> None:
        """Test 409 response raises PostgRESTConflictError."""
        async with PostgRESTClient(settings) as client:
            with patch.object(client._client, "request", new_callable=AsyncMock) as mock_request:
                mock_request.return_value = _response(409, {"message": "duplicate key value"})

                with pytest.raises(PostgRESTConflictError):
                    await client.insert("swap_executions", {"execution_id": "x"})

    @pytest.mark.asyncio
    async def test_error_500_raises_server_error(self, settings: PostgRESTSettings) -> None:
        """Test 500 response raises PostgRESTServerError."""
        async with PostgRESTClient(settings) as client:
            with patch.object(client._client, "request", new_callable=AsyncMock) as mock_request:
                mock_request.return_value = _response(500, {"message": "boom"})

                with pytest.raises(PostgRESTServerError):
                    await client.select("transactions")
