"""Thread-safe in-process Store with unique constraints, for local runs and tests."""
import copy
import threading
import uuid
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Tuple

from app.config.permissions_config import UNIQUE_CONSTRAINTS
from app.core.errors import ConstraintError
from app.database.store import Store, Row, Filters

logger = logging.getLogger(__name__)


def _matches(row: Row, filters: Optional[Filters]) -> bool:
    for column, value in (filters or {}).items():
        if isinstance(value, (list, tuple, set)):
            if row.get(column) not in value:
                return False
        elif row.get(column) != value:
            return False
    return True


def _sort_key(value):
    # None sorts first, mixed types compare by string form
    return (value is not None, str(value) if value is not None else "")


class InMemoryStore(Store):
    def __init__(self, unique_constraints: Optional[Dict[str, Sequence[Tuple[str, ...]]]] = None):
        self._lock = threading.Lock()
        self._tables: Dict[str, List[Row]] = {}
        self._unique = unique_constraints if unique_constraints is not None else UNIQUE_CONSTRAINTS

    def _rows(self, table: str) -> List[Row]:
        return self._tables.setdefault(table, [])

    def _check_unique(self, table: str, candidate: Row, ignore_id: Optional[str] = None) -> None:
        for columns in self._unique.get(table, []):
            key = tuple(candidate.get(c) for c in columns)
            if any(v is None for v in key):
                continue
            for existing in self._rows(table):
                if existing["id"] == ignore_id:
                    continue
                if tuple(existing.get(c) for c in columns) == key:
                    raise ConstraintError(
                        f"Duplicate {table} record: ({', '.join(columns)}) already exists"
                    )

    def query(self, table: str, filters: Optional[Filters] = None, order_by: Optional[str] = None, desc: bool = False) -> List[Row]:
        with self._lock:
            rows = [copy.deepcopy(r) for r in self._rows(table) if _matches(r, filters)]
        if order_by:
            rows.sort(key=lambda r: _sort_key(r.get(order_by)), reverse=desc)
        return rows

    def insert(self, table: str, row: Row) -> Row:
        now = datetime.now(timezone.utc).isoformat()
        record = {"id": str(uuid.uuid4()), "created_at": now, "updated_at": now}
        record.update(copy.deepcopy(row))
        with self._lock:
            self._check_unique(table, record)
            self._rows(table).append(record)
            logger.debug(f"Inserted {table} row {record['id']}")
            return copy.deepcopy(record)

    def update(self, table: str, filters: Filters, patch: Row) -> List[Row]:
        updated = []
        with self._lock:
            targets = [r for r in self._rows(table) if _matches(r, filters)]
            for row in targets:
                self._check_unique(table, {**row, **patch}, ignore_id=row["id"])
            for row in targets:
                row.update(copy.deepcopy(patch))
                if "updated_at" not in patch:
                    row["updated_at"] = datetime.now(timezone.utc).isoformat()
                updated.append(copy.deepcopy(row))
        return updated

    def delete(self, table: str, filters: Filters) -> List[Row]:
        with self._lock:
            rows = self._rows(table)
            removed = [r for r in rows if _matches(r, filters)]
            self._tables[table] = [r for r in rows if not _matches(r, filters)]
        return removed
