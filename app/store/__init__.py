"""Row stores shared by the approval and activity services."""
from app.store.base import Row, Store
from app.store.sql import SQLAlchemyStore

__all__ = [
    "Row",
    "Store",
    "SQLAlchemyStore",
]
