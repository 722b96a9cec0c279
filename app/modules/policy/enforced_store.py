from typing import List, Optional
import logging

from app.core.errors import NotFoundError
from app.core.identity import Identity
from app.database.store import Store, Row, Filters
from app.modules.policy.engine import PolicyEngine, Operation

logger = logging.getLogger(__name__)


class PolicyEnforcedStore:
    """The persistence operations as seen by one caller, with policy checked before each."""

    def __init__(self, store: Store, identity: Optional[Identity], policy: Optional[PolicyEngine] = None):
        self.store = store
        self.identity = identity
        self.policy = policy or PolicyEngine(store)

    def get(self, table: str, row_id: str) -> Row:
        """Raises NotFoundError for a missing row and PolicyError for a hidden one."""
        row = self.store.get(table, row_id)
        if row is None:
            raise NotFoundError(f"{table} record {row_id} not found")
        self.policy.authorize(Operation.READ, table, self.identity, row)
        return row

    def find_one(self, table: str, filters: Filters) -> Optional[Row]:
        """First matching row, or None. A matching row the caller may not see is a PolicyError."""
        row = self.store.find_one(table, filters)
        if row is None:
            return None
        self.policy.authorize(Operation.READ, table, self.identity, row)
        return row

    def list(self, table: str, filters: Optional[Filters] = None, order_by: Optional[str] = None, desc: bool = False) -> List[Row]:
        """Rows the caller may read. Hidden rows are left out, not reported as a denial."""
        rows = self.store.query(table, filters, order_by=order_by, desc=desc)
        return [
            row for row in rows
            if self.policy.decide(Operation.READ, table, self.identity, row).allowed
        ]

    def insert(self, table: str, row: Row) -> Row:
        self.policy.authorize(Operation.INSERT, table, self.identity, row)
        return self.store.insert(table, row)

    def update(self, table: str, filters: Filters, patch: Row) -> List[Row]:
        """Update every matching row, or none of them if any is denied.

        Each row is checked as it is now and as it would be after the patch,
        so a patch cannot move a row out of the caller's ownership.
        """
        targets = self.store.query(table, filters)
        for row in targets:
            self.policy.authorize_update(table, self.identity, row, {**row, **patch})
        if not targets:
            return []
        # Pin the write to the rows that were checked
        pinned = dict(filters)
        pinned["id"] = [row["id"] for row in targets]
        return self.store.update(table, pinned, patch)

    def delete(self, table: str, filters: Filters) -> List[Row]:
        targets = self.store.query(table, filters)
        for row in targets:
            self.policy.authorize(Operation.DELETE, table, self.identity, row)
        if not targets:
            return []
        return self.store.delete(table, {"id": [row["id"] for row in targets]})
