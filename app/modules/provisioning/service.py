"""
Sign-up provisioning and lazy derivation of supplier business records.

Sign-up writes the role assignment, the matching profile and (for suppliers)
the business record as one unit: if a later step fails, the rows already
written are deleted again before the error propagates.
"""
from typing import List, Optional, Tuple
import logging

from app.core.errors import ConstraintError, NotFoundError, PersistenceError
from app.core.identity import Identity
from app.database.store import Store, Row
from app.modules.policy.engine import PolicyEngine
from app.modules.policy.enforced_store import PolicyEnforcedStore
from app.modules.provisioning.schemas import SignUpRequest, SignUpResponse
from app.modules.roles.approval import derive_initial_assignment
from app.modules.roles.schemas import Role

logger = logging.getLogger(__name__)

SUPPLIER_PROFILE_FIELDS = (
    "full_name", "business_name", "business_type", "business_address",
    "contact_number", "fssai_license", "other_certifications", "avatar_url",
)
VENDOR_PROFILE_FIELDS = ("full_name", "company_name", "contact_number", "avatar_url")


def business_record_from_profile(user_id: str, profile: Row, email: Optional[str] = None) -> Row:
    """Supplier business record synthesized from the profile's current values."""
    return {
        "user_id": user_id,
        "name": profile.get("business_name") or profile.get("full_name") or email or "Unnamed supplier",
        "contact_phone": profile.get("contact_number"),
        "contact_email": email,
        "address": profile.get("business_address"),
        "status": "active",
    }


class ProvisioningService:
    def __init__(self, store: Store, bootstrap_superadmin_email: str = ""):
        self.store = store
        self.bootstrap_superadmin_email = bootstrap_superadmin_email
        self.policy = PolicyEngine(store, bootstrap_superadmin_email)

    def _repo(self, identity: Identity) -> PolicyEnforcedStore:
        return PolicyEnforcedStore(self.store, identity, self.policy)

    def sign_up(self, identity: Identity, request: SignUpRequest) -> SignUpResponse:
        """Create the role assignment and profile rows for a freshly authenticated account."""
        role, approval_status = derive_initial_assignment(
            request.role, identity.email or "", self.bootstrap_superadmin_email
        )
        if role != request.role:
            logger.info(f"Account {identity.id} matches the bootstrap superadmin; requested role {request.role.value} ignored")

        repo = self._repo(identity)
        created: List[Tuple[str, str]] = []
        try:
            assignment = repo.insert("user_roles", {
                "user_id": identity.id,
                "role": role.value,
                "approval_status": approval_status.value,
            })
            created.append(("user_roles", assignment["id"]))

            if role == Role.SUPPLIER:
                profile_data = request.model_dump(include=set(SUPPLIER_PROFILE_FIELDS))
                profile = repo.insert("supplier_profiles", {"user_id": identity.id, **profile_data})
                created.append(("supplier_profiles", profile["id"]))
                record = repo.insert("suppliers", business_record_from_profile(identity.id, profile, identity.email))
                created.append(("suppliers", record["id"]))
            elif role == Role.VENDOR:
                profile_data = request.model_dump(include=set(VENDOR_PROFILE_FIELDS))
                profile = repo.insert("vendor_profiles", {"user_id": identity.id, **profile_data})
                created.append(("vendor_profiles", profile["id"]))
        except Exception:
            self._roll_back(identity, created)
            raise

        logger.info(f"Provisioned account {identity.id} as {role.value} ({approval_status.value})")
        return SignUpResponse(
            user_id=identity.id,
            email=identity.email,
            role=role,
            approval_status=approval_status,
            message="Account provisioned" if approval_status.value == "approved" else "Account provisioned; awaiting approval",
        )

    def _roll_back(self, identity: Identity, created: List[Tuple[str, str]]) -> None:
        if not created:
            return
        logger.warning(f"Sign-up for {identity.id} failed; removing {len(created)} partial record(s)")
        for table, row_id in reversed(created):
            try:
                self.store.delete(table, {"id": row_id})
            except Exception as e:
                logger.error(f"Rollback of {table} {row_id} for {identity.id} failed: {e}")
                raise PersistenceError(
                    f"Sign-up failed and could not be rolled back; partial {table} record {row_id} remains"
                ) from e

    def ensure_business_record(self, identity: Identity, account_id: Optional[str] = None) -> Row:
        """Return the account's supplier business record, creating it from the profile if missing.

        Idempotent under concurrency: the unique constraint on suppliers.user_id
        decides the winner and the loser re-reads the winner's row.
        """
        account_id = account_id or identity.id
        repo = self._repo(identity)
        existing = repo.find_one("suppliers", {"user_id": account_id})
        if existing:
            return existing

        profile = repo.find_one("supplier_profiles", {"user_id": account_id})
        if not profile:
            raise NotFoundError(f"Supplier profile not found for account {account_id}")

        email = identity.email if account_id == identity.id else None
        try:
            record = repo.insert("suppliers", business_record_from_profile(account_id, profile, email))
            logger.info(f"Created supplier business record {record['id']} for account {account_id}")
            return record
        except ConstraintError:
            winner = repo.find_one("suppliers", {"user_id": account_id})
            if winner is None:
                raise
            logger.info(f"Supplier business record for {account_id} was created concurrently; reusing {winner['id']}")
            return winner
