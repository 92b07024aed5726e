"""PostgREST filter grammar.

Filters are ``&``-joined clauses of the form ``column=operator.value``::

    ward_address=eq.0xabc&status=in.(pending_ward_sig,pending_guardian)

Only the subset used by the service is supported: ``eq``, ``neq``, ``gt``,
``gte``, ``lt``, ``lte``, ``in`` and ``is`` (``null``/``true``/``false``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from .exceptions import FilterSyntaxError

COMPARISON_OPERATORS = ("eq", "neq", "gt", "gte", "lt", "lte")
SUPPORTED_OPERATORS = COMPARISON_OPERATORS + ("in", "is")

_IS_VALUES = {"null": None, "true": True, "false": False}


@dataclass(frozen=True)
class Filter:
    """A single parsed filter clause."""

    column: str
    operator: str
    value: Any


@dataclass(frozen=True)
class Order:
    """A parsed ``column.asc|desc`` ordering."""

    column: str
    descending: bool = False


def split_clauses(filters: str | None) -> list[tuple[str, str]]:
    """Split a filter string into ``(column, "op.value")`` pairs.

    Splits on the first ``=`` of each clause only, since values may contain
    further ``=`` characters.
    """
    if not filters:
        return []
    pairs = []
    for part in filters.split("&"):
        if not part:
            continue
        idx = part.find("=")
        if idx <= 0:
            raise FilterSyntaxError("Filter clause must look like column=op.value", part)
        pairs.append((part[:idx], part[idx + 1:]))
    return pairs


def parse_clause(column: str, expression: str) -> Filter:
    """Parse one ``op.value`` expression for ``column``."""
    operator, sep, raw = expression.partition(".")
    if not sep or operator not in SUPPORTED_OPERATORS:
        raise FilterSyntaxError(f"Unsupported filter operator for {column}", expression)

    if operator == "in":
        if not (raw.startswith("(") and raw.endswith(")")):
            raise FilterSyntaxError(f"in filter for {column} must be parenthesised", expression)
        inner = raw[1:-1]
        values = [item.strip() for item in inner.split(",") if item.strip()]
        return Filter(column, operator, values)

    if operator == "is":
        key = raw.lower()
        if key not in _IS_VALUES:
            raise FilterSyntaxError(f"is filter for {column} must be null, true or false", expression)
        return Filter(column, operator, _IS_VALUES[key])

    return Filter(column, operator, raw)


def parse_filters(filters: str | None) -> list[Filter]:
    """Parse a full filter string into :class:`Filter` objects."""
    return [parse_clause(column, expression) for column, expression in split_clauses(filters)]


def parse_order(order_by: str | None) -> list[Order]:
    """Parse ``col.desc,other.asc`` into :class:`Order` objects."""
    if not order_by:
        return []
    orders = []
    for part in order_by.split(","):
        column, _, direction = part.strip().partition(".")
        direction = direction or "asc"
        if not column or direction not in ("asc", "desc"):
            raise FilterSyntaxError("Ordering must look like column.asc or column.desc", part)
        orders.append(Order(column, direction == "desc"))
    return orders


def _format_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def eq(column: str, value: Any) -> str:
    """Build ``column=eq.value``."""
    return f"{column}=eq.{_format_value(value)}"


def gte(column: str, value: Any) -> str:
    """Build ``column=gte.value``."""
    return f"{column}=gte.{_format_value(value)}"


def in_(column: str, values: Iterable[Any]) -> str:
    """Build ``column=in.(a,b,...)``."""
    joined = ",".join(_format_value(value) for value in values)
    return f"{column}=in.({joined})"


def is_null(column: str) -> str:
    """Build ``column=is.null``."""
    return f"{column}=is.null"


def and_(*clauses: str | None) -> str:
    """Join clauses with ``&``, skipping empty ones."""
    return "&".join(clause for clause in clauses if clause)
