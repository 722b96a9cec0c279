from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union
import logging

from app.core.errors import NotFoundError, ValidationError
from app.core.identity import Identity
from app.database.store import Store
from app.modules.policy.engine import PolicyEngine
from app.modules.policy.enforced_store import PolicyEnforcedStore
from app.modules.profiles.schemas import ProfileUpdate, SupplierProfileResponse, VendorProfileResponse
from app.modules.provisioning.service import SUPPLIER_PROFILE_FIELDS, VENDOR_PROFILE_FIELDS
from app.modules.roles.schemas import Role

logger = logging.getLogger(__name__)

ProfileResponse = Union[SupplierProfileResponse, VendorProfileResponse]

_PROFILES = {
    Role.SUPPLIER: ("supplier_profiles", SupplierProfileResponse, SUPPLIER_PROFILE_FIELDS),
    Role.VENDOR: ("vendor_profiles", VendorProfileResponse, VENDOR_PROFILE_FIELDS),
}


class ProfileService:
    def __init__(self, store: Store, policy: Optional[PolicyEngine] = None):
        self.store = store
        self.policy = policy or PolicyEngine(store)

    def _repo(self, identity: Identity) -> PolicyEnforcedStore:
        return PolicyEnforcedStore(self.store, identity, self.policy)

    def _role_of(self, repo: PolicyEnforcedStore, user_id: str) -> Role:
        assignment = repo.find_one("user_roles", {"user_id": user_id})
        if not assignment:
            raise NotFoundError(f"No role assignment for account {user_id}")
        return Role(assignment["role"])

    def find_profile(self, identity: Identity, user_id: str, role: Role) -> Optional[Dict[str, Any]]:
        """Raw profile row for the role, or None (superadmins have none)"""
        if Role(role) not in _PROFILES:
            return None
        table = _PROFILES[Role(role)][0]
        return self._repo(identity).find_one(table, {"user_id": user_id})

    def get_profile(self, identity: Identity, user_id: str) -> ProfileResponse:
        """Profile of an account (owner or superadmin)"""
        repo = self._repo(identity)
        role = self._role_of(repo, user_id)
        if role not in _PROFILES:
            raise NotFoundError(f"Accounts with role {role.value} have no profile")
        table, schema, _ = _PROFILES[role]
        row = repo.find_one(table, {"user_id": user_id})
        if not row:
            raise NotFoundError(f"Profile not found for account {user_id}")
        return schema(**row)

    def update_my_profile(self, identity: Identity, profile_data: ProfileUpdate) -> ProfileResponse:
        """Update the caller's own profile; fields of the other profile kind are rejected"""
        repo = self._repo(identity)
        role = self._role_of(repo, identity.id)
        if role not in _PROFILES:
            raise NotFoundError(f"Accounts with role {role.value} have no profile")
        table, schema, fields = _PROFILES[role]

        changes = profile_data.model_dump(exclude_unset=True)
        foreign = sorted(set(changes) - set(fields))
        if foreign:
            raise ValidationError(f"Fields not valid for a {role.value} profile: {', '.join(foreign)}")
        if not changes:
            return self.get_profile(identity, identity.id)

        changes["updated_at"] = datetime.now(timezone.utc).isoformat()
        rows = repo.update(table, {"user_id": identity.id}, changes)
        if not rows:
            raise NotFoundError(f"Profile not found for account {identity.id}")
        logger.info(f"Account {identity.id} updated its {role.value} profile")
        return schema(**rows[0])
