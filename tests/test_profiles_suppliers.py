import pytest

from app.core.errors import NotFoundError, PolicyError, ValidationError
from app.modules.profiles.schemas import ProfileUpdate
from app.modules.profiles.service import ProfileService
from app.modules.roles.schemas import Role
from app.modules.suppliers.schemas import SupplierRecordUpdate, SupplierStatus
from app.modules.suppliers.service import SupplierService


@pytest.fixture
def profile_service(store, policy):
    return ProfileService(store, policy)


@pytest.fixture
def supplier_service(store, provisioning):
    return SupplierService(store, provisioning)


class TestProfiles:
    def test_update_own_profile(self, profile_service, sign_up):
        vendor = sign_up("bistro", Role.VENDOR, company_name="Bistro Ltd")

        updated = profile_service.update_my_profile(vendor, ProfileUpdate(company_name="Bistro Group"))

        assert updated.company_name == "Bistro Group"

    def test_fields_of_other_profile_kind_rejected(self, profile_service, sign_up):
        vendor = sign_up("bistro", Role.VENDOR)

        with pytest.raises(ValidationError):
            profile_service.update_my_profile(vendor, ProfileUpdate(fssai_license="FS-123"))

    def test_superadmin_reads_any_profile(self, profile_service, sign_up, superadmin):
        supplier = sign_up("acme", Role.SUPPLIER, business_name="Acme Foods")
        vendor = sign_up("bistro", Role.VENDOR)

        assert profile_service.get_profile(superadmin, supplier.id).business_name == "Acme Foods"
        with pytest.raises(PolicyError):
            profile_service.get_profile(vendor, supplier.id)

    def test_superadmin_has_no_profile(self, profile_service, superadmin):
        with pytest.raises(NotFoundError):
            profile_service.get_profile(superadmin, superadmin.id)


class TestSupplierRecords:
    def test_approved_only_directory(self, supplier_service, sign_up, approved_supplier, vendor):
        sign_up("farm", Role.SUPPLIER, business_name="Green Farm")

        everyone = supplier_service.list_suppliers(vendor)
        approved = supplier_service.list_suppliers(vendor, approved_only=True)

        assert [s.name for s in everyone] == ["Acme Foods", "Green Farm"]
        assert [s.name for s in approved] == ["Acme Foods"]

    def test_update_own_record(self, supplier_service, approved_supplier):
        record = supplier_service.update_my_record(
            approved_supplier, SupplierRecordUpdate(website="https://acme.io", status=SupplierStatus.INACTIVE)
        )

        assert record.website == "https://acme.io"
        assert record.status == SupplierStatus.INACTIVE

    def test_blank_name_rejected(self, supplier_service, approved_supplier):
        with pytest.raises(ValidationError):
            supplier_service.update_my_record(approved_supplier, SupplierRecordUpdate(name=" "))

    def test_vendor_has_no_record(self, supplier_service, vendor):
        assert supplier_service.get_my_record(vendor) is None
        with pytest.raises(NotFoundError):
            supplier_service.update_my_record(vendor, SupplierRecordUpdate(name="Bistro"))
