"""Pytest configuration and fixtures."""

import pytest


@pytest.fixture
def service_role_key() -> str:
    """Fake service role key."""
    return "test-service-role-key"


@pytest.fixture
def settings(service_role_key: str):
    """Create test settings."""
    from postgrest_adapter.config import PostgRESTSettings

    return PostgRESTSettings(
        url="https://project.test.supabase.co",
        service_role_key=service_role_key,
        retry_attempts=1,  # Disable retries for faster tests
    )
