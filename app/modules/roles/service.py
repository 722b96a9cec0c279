from datetime import datetime, timezone
from typing import Dict, List, Optional
import logging

from app.core.errors import ConstraintError, NotFoundError, PolicyError
from app.core.identity import Identity
from app.database.store import Store, Row
from app.modules.policy.engine import PolicyEngine
from app.modules.policy.enforced_store import PolicyEnforcedStore
from app.modules.roles.approval import validate_transition
from app.modules.roles.schemas import (
    ApprovalDecisionResponse, ApprovalStatus, Role,
    RoleAssignmentResponse, RoleAssignmentWithProfile
)

logger = logging.getLogger(__name__)

PROFILE_TABLES = {
    Role.SUPPLIER.value: "supplier_profiles",
    Role.VENDOR.value: "vendor_profiles",
}


class RoleService:
    def __init__(self, store: Store, policy: Optional[PolicyEngine] = None, allow_reconsideration: bool = False):
        self.store = store
        self.policy = policy or PolicyEngine(store)
        self.allow_reconsideration = allow_reconsideration

    def _repo(self, identity: Identity) -> PolicyEnforcedStore:
        return PolicyEnforcedStore(self.store, identity, self.policy)

    def get_assignment(self, identity: Identity, user_id: str) -> RoleAssignmentResponse:
        """Role assignment of an account (self or superadmin)"""
        row = self._repo(identity).find_one("user_roles", {"user_id": user_id})
        if not row:
            raise NotFoundError(f"No role assignment for account {user_id}")
        return RoleAssignmentResponse(**row)

    def find_assignment(self, identity: Identity, user_id: str) -> Optional[RoleAssignmentResponse]:
        row = self._repo(identity).find_one("user_roles", {"user_id": user_id})
        return RoleAssignmentResponse(**row) if row else None

    def _require_superadmin(self, identity: Identity, action: str) -> None:
        if not self.policy.is_superadmin(identity):
            logger.info(f"Account {identity.id} attempted to {action} without superadmin privileges")
            raise PolicyError(f"Only superadmins can {action}")

    def _attach_profiles(self, repo: PolicyEnforcedStore, rows: List[Row]) -> List[RoleAssignmentWithProfile]:
        profiles: Dict[str, Row] = {}
        for role, table in PROFILE_TABLES.items():
            user_ids = [r["user_id"] for r in rows if r.get("role") == role]
            if user_ids:
                for profile in repo.list(table, {"user_id": user_ids}):
                    profiles[profile["user_id"]] = profile
        return [RoleAssignmentWithProfile(**row, profile=profiles.get(row["user_id"])) for row in rows]

    def list_assignments(self, identity: Identity, role: Optional[Role] = None, approval_status: Optional[ApprovalStatus] = None) -> List[RoleAssignmentWithProfile]:
        """All accounts with their role and profile (superadmin only)"""
        self._require_superadmin(identity, "list accounts")
        filters = {}
        if role:
            filters["role"] = Role(role).value
        if approval_status:
            filters["approval_status"] = ApprovalStatus(approval_status).value
        repo = self._repo(identity)
        rows = repo.list("user_roles", filters, order_by="created_at", desc=True)
        return self._attach_profiles(repo, rows)

    def list_pending_suppliers(self, identity: Identity) -> List[RoleAssignmentWithProfile]:
        """Suppliers waiting for a decision, newest first"""
        return self.list_assignments(identity, role=Role.SUPPLIER, approval_status=ApprovalStatus.PENDING)

    def approve_supplier(self, identity: Identity, user_id: str) -> ApprovalDecisionResponse:
        return self._decide(identity, user_id, ApprovalStatus.APPROVED)

    def reject_supplier(self, identity: Identity, user_id: str) -> ApprovalDecisionResponse:
        return self._decide(identity, user_id, ApprovalStatus.REJECTED)

    def _decide(self, identity: Identity, user_id: str, target: ApprovalStatus) -> ApprovalDecisionResponse:
        action = "approve suppliers" if target == ApprovalStatus.APPROVED else "reject suppliers"
        self._require_superadmin(identity, action)

        repo = self._repo(identity)
        current = repo.find_one("user_roles", {"user_id": user_id})
        if not current:
            raise NotFoundError(f"No role assignment for account {user_id}")

        previous = ApprovalStatus(current["approval_status"])
        validate_transition(Role(current["role"]), previous, target, self.allow_reconsideration)

        # Compare-and-swap on the status read above
        rows = repo.update(
            "user_roles",
            {"user_id": user_id, "approval_status": previous.value},
            {"approval_status": target.value, "updated_at": datetime.now(timezone.utc).isoformat()},
        )
        if not rows:
            raise ConstraintError(f"Approval status of account {user_id} changed concurrently; reload and retry")

        logger.info(f"Superadmin {identity.id} moved supplier {user_id} from {previous.value} to {target.value}")
        return ApprovalDecisionResponse(
            user_id=user_id,
            previous_status=previous,
            approval_status=target,
            message=f"Supplier {target.value}",
        )
