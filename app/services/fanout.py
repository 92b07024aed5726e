"""Concurrent multi-predicate reads.

A wallet owns records through three relations: directly, as a ward, and as
the guardian of managed wards. Each relation is one predicate; rows from all
predicates are read in parallel and merged.
"""
import asyncio
import logging
from typing import List, Optional, Sequence

from app.schemas.common import normalize_address
from app.store.base import Row, Store
from postgrest_adapter.filters import eq, in_

logger = logging.getLogger(__name__)

ZERO_ADDRESS = "0x0"


async def resolve_managed_wards(store: Store, guardian: str) -> List[str]:
    """
    Wards configured under ``guardian``.

    Normalized, unique, in first-seen order, never including the zero
    address. A failed lookup yields an empty list.
    """
    try:
        rows = await store.select("ward_configs", eq("guardian_address", normalize_address(guardian)))
    except Exception as e:
        logger.warning(f"Managed ward lookup failed for {guardian}: {e}")
        return []

    wards = []
    for row in rows:
        ward = normalize_address(row.get("ward_address"))
        if ward and ward != ZERO_ADDRESS and ward not in wards:
            wards.append(ward)
    return wards


def ownership_predicates(address: str, managed_wards: Sequence[str]) -> List[str]:
    """Filters selecting records owned by ``address`` through any relation."""
    address = normalize_address(address)
    predicates = [
        eq("wallet_address", address),
        eq("ward_address", address),
    ]
    if managed_wards:
        predicates.append(in_("wallet_address", managed_wards))
    return predicates


async def _read_partial(
    store: Store,
    table: str,
    predicate: str,
    order_by: Optional[str],
) -> List[Row]:
    try:
        return await store.select(table, predicate, order_by=order_by)
    except Exception as e:
        logger.warning(f"Fan-out read on {table} failed for {predicate}: {e}")
        return []


async def fan_out(
    store: Store,
    table: str,
    predicates: Sequence[str],
    dedupe_key: str,
    order_by: Optional[str] = "created_at.desc",
) -> List[Row]:
    """
    Union of ``table`` rows matching any predicate.

    Reads run concurrently. Rows are merged in predicate order and the first
    row seen for each non-empty ``dedupe_key`` wins; rows without a key are
    dropped. A failing predicate contributes nothing instead of failing the
    whole read.
    """
    partials = await asyncio.gather(
        *(_read_partial(store, table, predicate, order_by) for predicate in predicates)
    )

    seen = set()
    merged = []
    for rows in partials:
        for row in rows:
            key = row.get(dedupe_key)
            if not key or key in seen:
                continue
            seen.add(key)
            merged.append(row)
    return merged
