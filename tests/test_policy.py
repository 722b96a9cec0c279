import pytest

from app.core.errors import NotFoundError, PolicyError
from app.core.identity import Identity
from app.modules.policy.engine import Operation
from app.modules.policy.enforced_store import PolicyEnforcedStore
from app.modules.roles.schemas import Role
from tests.conftest import BOOTSTRAP_EMAIL, make_identity


def repo_for(store, policy, identity):
    return PolicyEnforcedStore(store, identity, policy)


class TestRoleAssignmentInsert:
    """user_roles rows may only be self-inserted with the derived role and status."""

    def test_supplier_must_start_pending(self, store, policy):
        caller = make_identity("acme")
        row = {"user_id": caller.id, "role": "supplier", "approval_status": "approved"}

        assert not policy.decide(Operation.INSERT, "user_roles", caller, row)

    def test_vendor_starts_approved(self, store, policy):
        caller = make_identity("bistro")
        row = {"user_id": caller.id, "role": "vendor", "approval_status": "approved"}

        assert policy.decide(Operation.INSERT, "user_roles", caller, row)

    def test_superadmin_cannot_be_self_assigned(self, store, policy):
        caller = make_identity("mallory")
        row = {"user_id": caller.id, "role": "superadmin", "approval_status": "approved"}

        decision = policy.decide(Operation.INSERT, "user_roles", caller, row)

        assert not decision
        assert "cannot be self-assigned" in decision.reason

    def test_bootstrap_email_gets_superadmin(self, store, policy):
        caller = Identity(id="founder-id", email=BOOTSTRAP_EMAIL.upper())
        row = {"user_id": caller.id, "role": "superadmin", "approval_status": "approved"}

        assert policy.decide(Operation.INSERT, "user_roles", caller, row)

    def test_cannot_insert_for_another_account(self, store, policy):
        caller = make_identity("bistro")
        row = {"user_id": "someone-else", "role": "vendor", "approval_status": "approved"}

        with pytest.raises(PolicyError):
            repo_for(store, policy, caller).insert("user_roles", row)
        assert store.query("user_roles") == []


class TestRowVisibility:
    def test_profiles_visible_to_owner_and_superadmin_only(self, store, policy, sign_up, superadmin):
        vendor = sign_up("bistro", Role.VENDOR, company_name="Bistro Ltd")
        other = sign_up("cafe", Role.VENDOR)
        profile = store.find_one("vendor_profiles", {"user_id": vendor.id})

        assert repo_for(store, policy, vendor).get("vendor_profiles", profile["id"])["company_name"] == "Bistro Ltd"
        assert repo_for(store, policy, superadmin).get("vendor_profiles", profile["id"])
        with pytest.raises(PolicyError):
            repo_for(store, policy, other).get("vendor_profiles", profile["id"])

    def test_list_leaves_out_hidden_rows(self, store, policy, sign_up):
        vendor = sign_up("bistro", Role.VENDOR)
        other = sign_up("cafe", Role.VENDOR)

        rows = repo_for(store, policy, other).list("vendor_profiles")

        assert [r["user_id"] for r in rows] == [other.id]
        assert vendor.id not in [r["user_id"] for r in rows]

    def test_missing_row_is_not_found(self, store, policy, sign_up):
        vendor = sign_up("bistro", Role.VENDOR)

        with pytest.raises(NotFoundError):
            repo_for(store, policy, vendor).get("suppliers", "no-such-id")

    def test_supplier_directory_is_public(self, store, policy, sign_up):
        sign_up("acme", Role.SUPPLIER, business_name="Acme Foods")

        rows = repo_for(store, policy, None).list("suppliers")

        assert [r["name"] for r in rows] == ["Acme Foods"]


class TestWrites:
    def test_role_update_requires_superadmin(self, store, policy, sign_up, superadmin):
        supplier = sign_up("acme", Role.SUPPLIER)

        with pytest.raises(PolicyError):
            repo_for(store, policy, supplier).update(
                "user_roles", {"user_id": supplier.id}, {"approval_status": "approved"}
            )
        rows = repo_for(store, policy, superadmin).update(
            "user_roles", {"user_id": supplier.id}, {"approval_status": "approved"}
        )
        assert rows[0]["approval_status"] == "approved"

    def test_products_only_under_own_supplier_record(self, store, policy, sign_up):
        sign_up("acme", Role.SUPPLIER)
        rival = sign_up("rival", Role.SUPPLIER)
        acme_record = store.find_one("suppliers", {"user_id": "acme-id"})

        with pytest.raises(PolicyError):
            repo_for(store, policy, rival).insert(
                "products", {"supplier_id": acme_record["id"], "name": "Fake", "sku": "SKU-X", "unit_price": "1.00"}
            )

    def test_supplier_records_cannot_be_deleted(self, store, policy, sign_up):
        supplier = sign_up("acme", Role.SUPPLIER)

        with pytest.raises(PolicyError):
            repo_for(store, policy, supplier).delete("suppliers", {"user_id": supplier.id})
        assert store.find_one("suppliers", {"user_id": supplier.id})

    def test_update_cannot_hand_row_to_someone_else(self, store, policy, sign_up):
        vendor = sign_up("bistro", Role.VENDOR)

        with pytest.raises(PolicyError):
            repo_for(store, policy, vendor).update(
                "vendor_profiles", {"user_id": vendor.id}, {"user_id": "someone-else"}
            )
        assert store.find_one("vendor_profiles", {"user_id": vendor.id})

    def test_purchaser_changes_only_pending_orders(self, store, policy, vendor):
        pending = store.insert("orders", {"user_id": vendor.id, "supplier_id": "s1", "status": "pending"})
        confirmed = store.insert("orders", {"user_id": vendor.id, "supplier_id": "s1", "status": "confirmed"})

        assert policy.decide(Operation.UPDATE, "orders", vendor, pending)
        assert not policy.decide(Operation.UPDATE, "orders", vendor, confirmed)

    def test_unknown_table_is_denied(self, store, policy, vendor):
        assert not policy.decide(Operation.READ, "payments", vendor, {})


class TestSuperadminCheck:
    def test_rejected_or_missing_assignment_is_not_superadmin(self, store, policy, superadmin):
        assert policy.is_superadmin(superadmin)
        assert not policy.is_superadmin(make_identity("nobody"))
        assert not policy.is_superadmin(None)

        store.update("user_roles", {"user_id": superadmin.id}, {"approval_status": "rejected"})
        assert not policy.is_superadmin(superadmin)
