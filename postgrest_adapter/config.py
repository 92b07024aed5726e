"""Configuration settings for the PostgREST store adapter."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PostgRESTSettings(BaseSettings):
    """PostgREST (Supabase) connection configuration.

    All settings can be configured via environment variables with SUPABASE_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="SUPABASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    url: str = Field(
        ...,
        description="Project URL, e.g. https://xyz.supabase.co",
    )
    service_role_key: str = Field(
        ...,
        description="Service role key; bypasses row level security",
    )
    rest_path: str = Field(
        default="/rest/v1",
        description="Path prefix of the PostgREST endpoints",
    )
    timeout_seconds: float = Field(
        default=15.0,
        description="HTTP request timeout in seconds",
    )
    retry_attempts: int = Field(
        default=3,
        description="Number of retry attempts for failed requests",
    )
    retry_min_wait_seconds: float = Field(
        default=0.5,
        description="Minimum wait time between retries in seconds",
    )
    retry_max_wait_seconds: float = Field(
        default=5.0,
        description="Maximum wait time between retries in seconds",
    )
