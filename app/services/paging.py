"""Lenient query parameter parsing shared by list endpoints."""
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

TRUTHY_VALUES = ("1", "true", "yes")


def _as_number(raw: Union[str, int, float, None]) -> Optional[float]:
    if raw is None or raw == "":
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def clamp_limit(raw: Union[str, int, None], default: int, maximum: int) -> int:
    """Positive page size capped at ``maximum``; anything unusable becomes ``default``."""
    value = _as_number(raw)
    if value is None or value <= 0:
        return default
    return min(int(value), maximum)


def clamp_offset(raw: Union[str, int, None]) -> int:
    """Non-negative offset; anything unusable becomes 0."""
    value = _as_number(raw)
    if value is None or value < 0:
        return 0
    return int(value)


def is_truthy(raw: Union[str, bool, None]) -> bool:
    """Query flag semantics: ``1``, ``true`` and ``yes`` (any case) are true."""
    if isinstance(raw, bool):
        return raw
    return (raw or "").strip().lower() in TRUTHY_VALUES


def timestamp(value: Any) -> float:
    """
    Sortable epoch seconds for a stored timestamp.

    Accepts datetimes (naive ones are UTC) and ISO strings. Missing or
    unparseable values sort as 0, i.e. last in a descending sort.
    """
    if not value:
        return 0.0
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return 0.0
    if not isinstance(value, datetime):
        return 0.0
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def sort_newest_first(rows: List[Dict[str, Any]], field: str = "created_at") -> List[Dict[str, Any]]:
    """Stable descending sort on a timestamp field."""
    return sorted(rows, key=lambda row: timestamp(row.get(field)), reverse=True)
