"""SQLAlchemy implementation of the store contract."""
import logging
from datetime import datetime, timezone
from typing import Any, List, Optional, Union

from sqlalchemy import Column, Table, and_, delete, insert, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncEngine

import app.models  # noqa: F401  (registers every table on Base.metadata)
from app.database import Base, create_session_maker
from app.store.base import Row
from postgrest_adapter.exceptions import FilterSyntaxError
from postgrest_adapter.filters import Filter, parse_filters, parse_order

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class SQLAlchemyStore:
    """
    Store backed by the ORM tables in ``app.models``.

    Every operation opens its own session, so reads issued concurrently with
    ``asyncio.gather`` never share a connection.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_maker = create_session_maker(engine)

    # ==================== Translation ====================

    def _table(self, name: str) -> Table:
        table = Base.metadata.tables.get(name)
        if table is None:
            raise ValueError(f"Unknown table: {name}")
        return table

    def _column(self, table: Table, name: str) -> Column:
        # Rows are keyed by database column name, which can differ from the
        # ORM attribute key (e.g. swap_execution_steps.metadata)
        for column in table.c:
            if column.name == name:
                return column
        raise FilterSyntaxError(f"Unknown column {name} on {table.name}")

    def _coerce(self, column: Column, value: Any) -> Any:
        """Convert a filter/row value to the column's Python type."""
        if value is None:
            return None
        try:
            python_type = column.type.python_type
        except NotImplementedError:
            return value

        if python_type is datetime:
            if isinstance(value, str):
                value = datetime.fromisoformat(value.replace("Z", "+00:00"))
            return _to_naive_utc(value) if isinstance(value, datetime) else value
        if python_type is bool and isinstance(value, str):
            lowered = value.lower()
            if lowered not in ("true", "false"):
                raise FilterSyntaxError(f"Expected boolean for {column.name}", value)
            return lowered == "true"
        if python_type is int and isinstance(value, str):
            try:
                return int(value)
            except ValueError:
                raise FilterSyntaxError(f"Expected integer for {column.name}", value)
        return value

    def _clause(self, table: Table, flt: Filter):
        column = self._column(table, flt.column)
        if flt.operator == "in":
            return column.in_([self._coerce(column, item) for item in flt.value])
        if flt.operator == "is":
            return column.is_(flt.value)

        value = self._coerce(column, flt.value)
        if flt.operator == "eq":
            return column == value
        if flt.operator == "neq":
            return column != value
        if flt.operator == "gt":
            return column > value
        if flt.operator == "gte":
            return column >= value
        if flt.operator == "lt":
            return column < value
        if flt.operator == "lte":
            return column <= value
        raise FilterSyntaxError(f"Unsupported filter operator {flt.operator}")

    def _where(self, table: Table, filters: Optional[str]):
        clauses = [self._clause(table, flt) for flt in parse_filters(filters)]
        return and_(*clauses) if clauses else None

    def _values(self, table: Table, row: Row) -> dict:
        values = {}
        for name, value in row.items():
            column = self._column(table, name)
            values[column] = self._coerce(column, value)
        return values

    @staticmethod
    def _rows(table: Table, result) -> List[Row]:
        return [{column.name: mapping[column] for column in table.c} for mapping in result.mappings().all()]

    @staticmethod
    def _as_list(rows: Union[Row, List[Row]]) -> List[Row]:
        return [rows] if isinstance(rows, dict) else list(rows)

    # ==================== Store contract ====================

    async def insert(self, table: str, rows: Union[Row, List[Row]]) -> List[Row]:
        """Insert one or more rows and return them as stored."""
        tbl = self._table(table)
        created = []
        async with self.session_maker() as session:
            async with session.begin():
                for row in self._as_list(rows):
                    stmt = insert(tbl).values(self._values(tbl, row)).returning(*tbl.c)
                    result = await session.execute(stmt)
                    created.extend(self._rows(tbl, result))
        return created

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
        tbl = self._table(table)
        stmt = select(tbl)
        where = self._where(tbl, filters)
        if where is not None:
            stmt = stmt.where(where)
        for order in parse_order(order_by):
            column = self._column(tbl, order.column)
            stmt = stmt.order_by(column.desc() if order.descending else column.asc())
        if limit is not None:
            stmt = stmt.limit(limit)
        if offset:
            stmt = stmt.offset(offset)

        async with self.session_maker() as session:
            result = await session.execute(stmt)
            return self._rows(tbl, result)

    async def update(self, table: str, filters: str, values: Row) -> List[Row]:
        """
        Apply ``values`` to rows matching ``filters``.

        The filter and the write are one ``UPDATE ... WHERE`` statement, so a
        filter on a version column is a compare-and-swap.
        """
        if not filters:
            raise ValueError("Refusing to update without a filter")
        tbl = self._table(table)
        stmt = (
            update(tbl)
            .where(self._where(tbl, filters))
            .values(self._values(tbl, values))
            .returning(*tbl.c)
        )
        async with self.session_maker() as session:
            async with session.begin():
                result = await session.execute(stmt)
                return self._rows(tbl, result)

    async def delete(self, table: str, filters: str) -> List[Row]:
        """Delete rows matching ``filters`` and return them."""
        if not filters:
            raise ValueError("Refusing to delete without a filter")
        tbl = self._table(table)
        stmt = delete(tbl).where(self._where(tbl, filters)).returning(*tbl.c)
        async with self.session_maker() as session:
            async with session.begin():
                result = await session.execute(stmt)
                return self._rows(tbl, result)

    async def upsert(
        self,
        table: str,
        rows: Union[Row, List[Row]],
        on_conflict: Optional[str] = None,
    ) -> List[Row]:
        """
        Insert rows, merging provided columns into an existing row on conflict.

        ``on_conflict`` names the unique columns to match on; the primary key
        is used when omitted. The primary key of an existing row is kept.
        """
        tbl = self._table(table)
        dialect = self.engine.dialect.name
        dialect_insert = _UPSERT_DIALECTS.get(dialect)
        if dialect_insert is None:
            raise NotImplementedError(f"Upsert is not supported on {dialect}")

        if on_conflict:
            conflict_columns = [self._column(tbl, name.strip()) for name in on_conflict.split(",")]
        else:
            conflict_columns = list(tbl.primary_key.columns)
        skip = set(conflict_columns) | set(tbl.primary_key.columns)

        merged = []
        async with self.session_maker() as session:
            async with session.begin():
                for row in self._as_list(rows):
                    values = self._values(tbl, row)
                    stmt = dialect_insert(tbl).values(values)
                    set_ = {
                        column: stmt.excluded[column.key]
                        for column in values
                        if column not in skip
                    }
                    if set_:
                        stmt = stmt.on_conflict_do_update(index_elements=conflict_columns, set_=set_)
                    else:
                        stmt = stmt.on_conflict_do_nothing(index_elements=conflict_columns)
                    result = await session.execute(stmt.returning(*tbl.c))
                    merged.extend(self._rows(tbl, result))
        logger.debug(f"Upserted {len(merged)} row(s) into {table}")
        return merged
