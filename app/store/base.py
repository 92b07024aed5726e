"""Store contract.

Services talk to persistence only through this interface. Rows are plain
dicts keyed by column name and filters use the PostgREST grammar from
``postgrest_adapter.filters``, so the SQLAlchemy backend and the Supabase
REST backend are interchangeable.
"""
from typing import Any, Dict, List, Optional, Protocol, Union, runtime_checkable

Row = Dict[str, Any]


@runtime_checkable
class Store(Protocol):
    """Async table store."""

    async def insert(self, table: str, rows: Union[Row, List[Row]]) -> List[Row]:
        """Insert one or more rows and return them as stored."""
        ...

    async def select(
        self,
        table: str,
        filters: Optional[str] = None,
        *,
        order_by: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Row]:
        """Return rows matching ``filters``."""
        ...

    async def update(self, table: str, filters: str, values: Row) -> List[Row]:
        """
        Apply ``values`` to rows matching ``filters`` in one statement.

        Returns only the rows actually changed, so an empty result on a
        version-conditioned filter means another writer got there first.
        """
        ...

    async def delete(self, table: str, filters: str) -> List[Row]:
        """Delete rows matching ``filters`` and return them."""
        ...

    async def upsert(
        self,
        table: str,
        rows: Union[Row, List[Row]],
        on_conflict: Optional[str] = None,
    ) -> List[Row]:
        """Insert rows, merging into existing rows on the ``on_conflict`` columns."""
        ...
