"""
Authorization policy layer.

Every persistence operation is checked here, in-process, with the caller
identity supplied by the auth subsystem and the row being read or written.
The table -> operation -> rule matrix lives in app.config.permissions_config.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional
import logging

from app.config.permissions_config import TABLE_POLICIES
from app.core.errors import PolicyError, ValidationError
from app.core.identity import Identity
from app.database.store import Store, Row
from app.modules.roles.approval import derive_initial_assignment
from app.modules.roles.schemas import ApprovalStatus, Role

logger = logging.getLogger(__name__)


class Operation(str, Enum):
    READ = "read"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(True, "allowed")


class PolicyEngine:
    def __init__(self, store: Store, bootstrap_superadmin_email: str = ""):
        self.store = store
        self.bootstrap_superadmin_email = bootstrap_superadmin_email
        self._rules: Dict[str, Callable[[Optional[Identity], Row], Decision]] = {
            "anyone": self._anyone,
            "owner": self._owner,
            "owner_or_superadmin": self._owner_or_superadmin,
            "self_or_superadmin": self._owner_or_superadmin,
            "superadmin": self._superadmin,
            "supplier_owner": self._supplier_owner,
            "purchaser_or_supplier": self._purchaser_or_supplier,
            "pending_purchaser_or_supplier": self._pending_purchaser_or_supplier,
            "role_derivation": self._role_derivation,
        }

    def is_superadmin(self, identity: Optional[Identity]) -> bool:
        """Looked up on every call so a revoked role stops working immediately."""
        if identity is None:
            return False
        assignment = self.store.find_one("user_roles", {"user_id": identity.id})
        return bool(
            assignment
            and assignment.get("role") == Role.SUPERADMIN.value
            and assignment.get("approval_status") == ApprovalStatus.APPROVED.value
        )

    def owns_supplier_record(self, identity: Optional[Identity], supplier_id: Any) -> bool:
        if identity is None or not supplier_id:
            return False
        record = self.store.get("suppliers", supplier_id)
        return bool(record and record.get("user_id") == identity.id)

    # Rules

    def _anyone(self, identity, row) -> Decision:
        return ALLOW

    def _owner(self, identity, row) -> Decision:
        if identity is not None and row.get("user_id") == identity.id:
            return ALLOW
        return Decision(False, "caller does not own this record")

    def _superadmin(self, identity, row) -> Decision:
        if self.is_superadmin(identity):
            return ALLOW
        return Decision(False, "superadmin privileges required")

    def _owner_or_superadmin(self, identity, row) -> Decision:
        if self._owner(identity, row) or self.is_superadmin(identity):
            return ALLOW
        return Decision(False, "record belongs to another account")

    def _supplier_owner(self, identity, row) -> Decision:
        if self.owns_supplier_record(identity, row.get("supplier_id")):
            return ALLOW
        return Decision(False, "caller does not own the referenced supplier record")

    def _purchaser_or_supplier(self, identity, row) -> Decision:
        if self._owner(identity, row) or self.owns_supplier_record(identity, row.get("supplier_id")):
            return ALLOW
        return Decision(False, "order belongs to another purchaser and supplier")

    def _pending_purchaser_or_supplier(self, identity, row) -> Decision:
        if self.owns_supplier_record(identity, row.get("supplier_id")):
            return ALLOW
        if self._owner(identity, row):
            if row.get("status") == "pending":
                return ALLOW
            return Decision(False, "purchaser may only change an order while it is pending")
        return Decision(False, "order belongs to another purchaser and supplier")

    def _role_derivation(self, identity, row) -> Decision:
        owner = self._owner(identity, row)
        if not owner:
            return owner
        try:
            role, approval_status = derive_initial_assignment(
                row.get("role"), identity.email or "", self.bootstrap_superadmin_email
            )
        except (ValueError, ValidationError):
            return Decision(False, f"role {row.get('role')!r} cannot be self-assigned")
        if row.get("role") != role.value or row.get("approval_status") != approval_status.value:
            return Decision(False, "role assignment does not match the sign-up derivation rule")
        return ALLOW

    # Entry points

    def decide(self, operation: Operation, table: str, identity: Optional[Identity], row: Row) -> Decision:
        operation = Operation(operation)
        return self._decide_rule(table, operation.value, identity, row)

    def decide_update_check(self, table: str, identity: Optional[Identity], patched_row: Row) -> Decision:
        """Check the row as an update would leave it."""
        policies = TABLE_POLICIES.get(table) or {}
        key = "update_check" if "update_check" in policies else Operation.UPDATE.value
        return self._decide_rule(table, key, identity, patched_row)

    def _decide_rule(self, table: str, key: str, identity: Optional[Identity], row: Row) -> Decision:
        policies = TABLE_POLICIES.get(table)
        if policies is None:
            return Decision(False, f"no policy defined for {table}")
        rule = policies.get(key)
        if rule is None:
            return Decision(False, f"{key} is not permitted on {table}")
        return self._rules[rule](identity, row)

    def authorize(self, operation: Operation, table: str, identity: Optional[Identity], row: Row) -> None:
        self._raise_if_denied(Operation(operation).value, table, identity, self.decide(operation, table, identity, row))

    def authorize_update(self, table: str, identity: Optional[Identity], current_row: Row, patched_row: Row) -> None:
        self._raise_if_denied("update", table, identity, self.decide(Operation.UPDATE, table, identity, current_row))
        self._raise_if_denied("update", table, identity, self.decide_update_check(table, identity, patched_row))

    def _raise_if_denied(self, action: str, table: str, identity: Optional[Identity], decision: Decision) -> None:
        if decision.allowed:
            return
        caller = identity.id if identity else "anonymous"
        logger.info(f"Denied {action} on {table} for {caller}: {decision.reason}")
        raise PolicyError(f"Not allowed to {action} {table}: {decision.reason}")
