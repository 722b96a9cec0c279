"""
Persistence interface consumed by the marketplace core.

Filters are equality matches; a list/tuple/set value means membership. An
update whose filters include the row's current `status` (or
`approval_status`) is a compare-and-swap: it only touches rows still in that
state, and the caller inspects the returned rows to see whether it won.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
import logging

from postgrest.exceptions import APIError
from supabase import Client

from app.core.errors import ConstraintError, PersistenceError, PolicyError

logger = logging.getLogger(__name__)

Row = Dict[str, Any]
Filters = Dict[str, Any]

# Postgres SQLSTATE codes surfaced by PostgREST
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
INSUFFICIENT_PRIVILEGE = "42501"


class Store(ABC):
    @abstractmethod
    def query(self, table: str, filters: Optional[Filters] = None, order_by: Optional[str] = None, desc: bool = False) -> List[Row]:
        ...

    @abstractmethod
    def insert(self, table: str, row: Row) -> Row:
        ...

    @abstractmethod
    def update(self, table: str, filters: Filters, patch: Row) -> List[Row]:
        ...

    @abstractmethod
    def delete(self, table: str, filters: Filters) -> List[Row]:
        ...

    def get(self, table: str, row_id: str) -> Optional[Row]:
        rows = self.query(table, {"id": row_id})
        return rows[0] if rows else None

    def find_one(self, table: str, filters: Filters) -> Optional[Row]:
        rows = self.query(table, filters)
        return rows[0] if rows else None


def translate_api_error(table: str, error: APIError) -> Exception:
    """Map a PostgREST error onto the marketplace error taxonomy."""
    code = getattr(error, "code", None)
    message = getattr(error, "message", None) or str(error)
    if code == UNIQUE_VIOLATION:
        return ConstraintError(f"Duplicate {table} record: {message}")
    if code == FOREIGN_KEY_VIOLATION:
        return ConstraintError(f"Referenced record missing for {table}: {message}")
    if code == INSUFFICIENT_PRIVILEGE:
        return PolicyError(f"Row-level security denied access to {table}")
    return PersistenceError(f"Database error on {table}: {message}")


class SupabaseStore(Store):
    def __init__(self, supabase: Client):
        self.supabase = supabase

    @staticmethod
    def _apply_filters(builder, filters: Optional[Filters]):
        for column, value in (filters or {}).items():
            if isinstance(value, (list, tuple, set)):
                builder = builder.in_(column, list(value))
            elif value is None:
                builder = builder.is_(column, "null")
            else:
                builder = builder.eq(column, value)
        return builder

    def query(self, table: str, filters: Optional[Filters] = None, order_by: Optional[str] = None, desc: bool = False) -> List[Row]:
        try:
            builder = self._apply_filters(self.supabase.table(table).select("*"), filters)
            if order_by:
                builder = builder.order(order_by, desc=desc)
            result = builder.execute()
            return result.data or []
        except APIError as e:
            raise translate_api_error(table, e)

    def insert(self, table: str, row: Row) -> Row:
        try:
            result = self.supabase.table(table).insert(row).execute()
        except APIError as e:
            raise translate_api_error(table, e)
        if not result.data:
            raise PersistenceError(f"Failed to insert into {table}")
        return result.data[0]

    def update(self, table: str, filters: Filters, patch: Row) -> List[Row]:
        try:
            builder = self._apply_filters(self.supabase.table(table).update(patch), filters)
            result = builder.execute()
            return result.data or []
        except APIError as e:
            raise translate_api_error(table, e)

    def delete(self, table: str, filters: Filters) -> List[Row]:
        try:
            builder = self._apply_filters(self.supabase.table(table).delete(), filters)
            result = builder.execute()
            return result.data or []
        except APIError as e:
            raise translate_api_error(table, e)
