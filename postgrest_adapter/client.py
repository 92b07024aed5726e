"""PostgREST table client."""

from __future__ import annotations

from typing import Any

import httpx
from pydantic_core import to_jsonable_python
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .auth import MERGE_DUPLICATES, ServiceRoleAuth
from .config import PostgRESTSettings
from .exceptions import (
    PostgRESTAuthError,
    PostgRESTConflictError,
    PostgRESTError,
    PostgRESTNetworkError,
    PostgRESTNotFoundError,
    PostgRESTRateLimitError,
    PostgRESTServerError,
    PostgRESTValidationError,
)
from .filters import split_clauses

Row = dict[str, Any]


class PostgRESTClient:
    """Async client for PostgREST table endpoints.

    Implements the store contract (insert/select/update/delete/upsert) over
    ``{url}/rest/v1/{table}``.

    Usage:
        async with PostgRESTClient(settings) as store:
            rows = await store.select("transactions", "wallet_address=eq.0xabc")
    """

    def __init__(self, settings: PostgRESTSettings | None = None):
        """Initialize client.

        Args:
            settings: PostgREST settings. If not provided, loads from environment.
        """
        self.settings = settings or PostgRESTSettings()
        self.auth = ServiceRoleAuth(self.settings.service_role_key)
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "PostgRESTClient":
        """Enter async context."""
        self._client = httpx.AsyncClient(
            base_url=self.settings.url.rstrip("/") + self.settings.rest_path,
            timeout=httpx.Timeout(self.settings.timeout_seconds),
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context."""
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get HTTP client, ensuring it's initialized."""
        if self._client is None:
            raise RuntimeError(
                "Client not initialized. Use 'async with PostgRESTClient() as client:'"
            )
        return self._client

    def _build_params(
        self,
        filters: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> list[tuple[str, str]]:
        """Turn a filter string plus extra options into query parameters.

        Args:
            filters: PostgREST filter string, e.g. ``id=eq.1&status=eq.pending``.
            extra: Additional parameters (order, limit, offset, on_conflict).

        Returns:
            List of query parameter pairs.
        """
        params = list(split_clauses(filters))
        for key, value in (extra or {}).items():
            if value is not None:
                params.append((key, str(value)))
        return params

    def _handle_error(self, response: httpx.Response) -> None:
        """Raise appropriate exception for error response.

        Args:
            response: HTTP response to check.

        Raises:
            PostgRESTAuthError: For 401/403 responses.
            PostgRESTNotFoundError: For 404 responses.
            PostgRESTValidationError: For 400/422 responses.
            PostgRESTConflictError: For 409 responses.
            PostgRESTRateLimitError: For 429 responses.
            PostgRESTServerError: For 5xx responses.
            PostgRESTError: For other error responses.
        """
        if response.is_success:
            return

        try:
            details = response.json()
        except ValueError:
            details = response.text

        status = response.status_code
        message = f"HTTP {status}"
        if isinstance(details, dict) and details.get("message"):
            message = f"HTTP {status}: {details['message']}"

        if status in (401, 403):
            raise PostgRESTAuthError(message, details, status)
        elif status == 404:
            raise PostgRESTNotFoundError(message, details, status)
        elif status in (400, 422):
            raise PostgRESTValidationError(message, details, status)
        elif status == 409:
            raise PostgRESTConflictError(message, details, status)
        elif status == 429:
            raise PostgRESTRateLimitError(message, details, status)
        elif status >= 500:
            raise PostgRESTServerError(message, details, status)
        else:
            raise PostgRESTError(message, details, status)

    def _create_retry_decorator(self):
        """Create retry decorator with current settings."""
        return retry(
            retry=retry_if_exception_type((PostgRESTServerError, PostgRESTNetworkError)),
            stop=stop_after_attempt(self.settings.retry_attempts),
            wait=wait_exponential(
                min=self.settings.retry_min_wait_seconds,
                max=self.settings.retry_max_wait_seconds,
            ),
            reraise=True,
        )

    async def _request(
        self,
        method: str,
        table: str,
        params: list[tuple[str, str]] | None = None,
        body: Any = None,
        prefer: tuple[str, ...] = (),
    ) -> list[Row]:
        """Make an authenticated request against a table endpoint.

        Args:
            method: HTTP method.
            table: Table name.
            params: Query parameters.
            body: Request body (row or list of rows).
            prefer: Extra ``Prefer`` directives.

        Returns:
            Returned rows; empty for 204 / empty bodies.
        """
        headers = self.auth.get_headers(*prefer)
        payload = to_jsonable_python(body) if body is not None else None

        @self._create_retry_decorator()
        async def _do_request():
            try:
                response = await self.client.request(
                    method=method,
                    url=f"/{table}",
                    params=params or None,
                    headers=headers,
                    json=payload,
                )
            except httpx.TimeoutException as e:
                raise PostgRESTNetworkError(f"Timeout: {e}")
            except httpx.NetworkError as e:
                raise PostgRESTNetworkError(f"Network error: {e}")

            self._handle_error(response)
            if not response.content:
                return []
            data = response.json()
            if isinstance(data, dict):
                return [data]
            return data

        return await _do_request()

    # ==================== Store contract ====================

    async def insert(self, table: str, rows: Row | list[Row]) -> list[Row]:
        """Insert one or more rows.

        Returns:
            The inserted rows as stored.
        """
        return await self._request("POST", table, body=rows)

    async def select(
        self,
        table: str,
        filters: str | None = None,
        *,
        order_by: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
        columns: str | None = None,
    ) -> list[Row]:
        """Select rows matching ``filters``.

        Args:
            table: Table name.
            filters: PostgREST filter string.
            order_by: Ordering, e.g. ``created_at.desc``.
            limit: Maximum number of rows.
            offset: Number of rows to skip.
            columns: Column projection (``select=`` parameter).

        Returns:
            Matching rows.
        """
        params = self._build_params(
            filters,
            {"select": columns, "order": order_by, "limit": limit, "offset": offset},
        )
        return await self._request("GET", table, params=params)

    async def update(self, table: str, filters: str, values: Row) -> list[Row]:
        """Update rows matching ``filters``.

        The filter is evaluated by the database in the same statement as the
        write, so a filter on a version column acts as a compare-and-swap.

        Returns:
            Only the rows that were actually changed.
        """
        if not filters:
            raise ValueError("Refusing to update without a filter")
        return await self._request("PATCH", table, params=self._build_params(filters), body=values)

    async def delete(self, table: str, filters: str) -> list[Row]:
        """Delete rows matching ``filters``.

        Returns:
            The deleted rows.
        """
        if not filters:
            raise ValueError("Refusing to delete without a filter")
        return await self._request("DELETE", table, params=self._build_params(filters))

    async def upsert(
        self,
        table: str,
        rows: Row | list[Row],
        on_conflict: str | None = None,
    ) -> list[Row]:
        """Insert rows, merging into existing rows on conflict.

        Args:
            table: Table name.
            rows: Row or rows to upsert.
            on_conflict: Comma-separated conflict columns.

        Returns:
            The upserted rows.
        """
        params = self._build_params(None, {"on_conflict": on_conflict})
        return await self._request(
            "POST", table, params=params, body=rows, prefer=(MERGE_DUPLICATES,)
        )
