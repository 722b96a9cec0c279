from datetime import datetime, timezone
from typing import List, Optional
import logging

from app.core.errors import NotFoundError, ValidationError
from app.core.identity import Identity
from app.database.store import Store
from app.modules.policy.engine import PolicyEngine
from app.modules.policy.enforced_store import PolicyEnforcedStore
from app.modules.provisioning.service import ProvisioningService
from app.modules.roles.schemas import ApprovalStatus, Role
from app.modules.suppliers.schemas import SupplierRecordResponse, SupplierRecordUpdate, SupplierStatus

logger = logging.getLogger(__name__)


def approved_supplier_account_ids(store: Store) -> List[str]:
    """Accounts whose supplier role has been approved (role rows are read with system rights)"""
    rows = store.query("user_roles", {
        "role": Role.SUPPLIER.value,
        "approval_status": ApprovalStatus.APPROVED.value,
    })
    return [r["user_id"] for r in rows]


class SupplierService:
    def __init__(self, store: Store, provisioning: ProvisioningService, policy: Optional[PolicyEngine] = None):
        self.store = store
        self.provisioning = provisioning
        self.policy = policy or provisioning.policy

    def _repo(self, identity: Identity) -> PolicyEnforcedStore:
        return PolicyEnforcedStore(self.store, identity, self.policy)

    def list_suppliers(
        self,
        identity: Identity,
        status: Optional[SupplierStatus] = None,
        approved_only: bool = False
    ) -> List[SupplierRecordResponse]:
        """List supplier business records (public marketplace directory)"""
        filters = {}
        if status:
            filters["status"] = SupplierStatus(status).value
        if approved_only:
            filters["user_id"] = approved_supplier_account_ids(self.store)
        rows = self._repo(identity).list("suppliers", filters, order_by="name")
        return [SupplierRecordResponse(**row) for row in rows]

    def get_supplier(self, identity: Identity, supplier_id: str) -> SupplierRecordResponse:
        return SupplierRecordResponse(**self._repo(identity).get("suppliers", supplier_id))

    def get_my_record(self, identity: Identity) -> Optional[SupplierRecordResponse]:
        row = self._repo(identity).find_one("suppliers", {"user_id": identity.id})
        return SupplierRecordResponse(**row) if row else None

    def ensure_business_record(self, identity: Identity, account_id: Optional[str] = None) -> SupplierRecordResponse:
        return SupplierRecordResponse(**self.provisioning.ensure_business_record(identity, account_id))

    def update_my_record(self, identity: Identity, record_data: SupplierRecordUpdate) -> SupplierRecordResponse:
        """Update the caller's business record"""
        changes = record_data.model_dump(exclude_unset=True, mode="json")
        if "name" in changes and not (changes["name"] or "").strip():
            raise ValidationError("Supplier name cannot be empty")
        repo = self._repo(identity)
        if not changes:
            record = self.get_my_record(identity)
            if record is None:
                raise NotFoundError("Supplier record not found")
            return record

        changes["updated_at"] = datetime.now(timezone.utc).isoformat()
        rows = repo.update("suppliers", {"user_id": identity.id}, changes)
        if not rows:
            raise NotFoundError("Supplier record not found")
        logger.info(f"Account {identity.id} updated supplier record {rows[0]['id']}")
        return SupplierRecordResponse(**rows[0])
