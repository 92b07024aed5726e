"""Common schema definitions."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

# Hex string starting with 0x (any length)
HEX_PATTERN = r"^0x[0-9a-fA-F]+$"


def normalize_address(address: Optional[str]) -> Optional[str]:
    """
    Canonical form of a hex address.

    Lower-cased with leading zeros after ``0x`` stripped, so that
    ``0x000ABC`` and ``0xabc`` compare equal. All-zero becomes ``0x0``.
    """
    if address is None:
        return None
    value = address.strip().lower()
    if not value.startswith("0x"):
        return value
    digits = value[2:].lstrip("0")
    return "0x" + (digits or "0")


class ErrorResponse(BaseModel):
    """Standard error response."""
    correlation_id: str
    error: str
    error_code: str
    details: Optional[dict] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    store_backend: str
    timestamp: datetime = Field(default_factory=datetime.utcnow)
