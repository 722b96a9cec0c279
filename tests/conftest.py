import pytest
from decimal import Decimal

from app.core.identity import Identity
from app.database.memory_store import InMemoryStore
from app.modules.catalog.schemas import ProductCreate
from app.modules.catalog.service import CatalogService
from app.modules.orders.service import OrderService
from app.modules.provisioning.schemas import SignUpRequest
from app.modules.provisioning.service import ProvisioningService
from app.modules.roles.schemas import Role
from app.modules.roles.service import RoleService

BOOTSTRAP_EMAIL = "founder@acme.io"


def make_identity(name: str) -> Identity:
    return Identity(id=f"{name}-id", email=f"{name}@acme.io")


@pytest.fixture
def store():
    """Fresh in-memory store with the marketplace unique constraints."""
    return InMemoryStore()


@pytest.fixture
def provisioning(store):
    return ProvisioningService(store, BOOTSTRAP_EMAIL)


@pytest.fixture
def policy(provisioning):
    return provisioning.policy


@pytest.fixture
def role_service(store, policy):
    return RoleService(store, policy)


@pytest.fixture
def catalog_service(store, provisioning):
    return CatalogService(store, provisioning)


@pytest.fixture
def order_service(store, policy):
    return OrderService(store, policy)


@pytest.fixture
def sign_up(provisioning):
    """Provision an account: sign_up("acme", Role.SUPPLIER, business_name="Acme")."""
    def _sign_up(name, role, **fields):
        identity = make_identity(name)
        provisioning.sign_up(identity, SignUpRequest(role=role, **fields))
        return identity
    return _sign_up


@pytest.fixture
def superadmin(provisioning):
    identity = Identity(id="founder-id", email=BOOTSTRAP_EMAIL)
    provisioning.sign_up(identity, SignUpRequest(role=Role.VENDOR))
    return identity


@pytest.fixture
def approved_supplier(sign_up, superadmin, role_service):
    supplier = sign_up("acme", Role.SUPPLIER, business_name="Acme Foods", contact_number="555-0100")
    role_service.approve_supplier(superadmin, supplier.id)
    return supplier


@pytest.fixture
def vendor(sign_up):
    return sign_up("bistro", Role.VENDOR, company_name="Bistro Ltd")


@pytest.fixture
def product(catalog_service, approved_supplier):
    return catalog_service.create_product(
        approved_supplier,
        ProductCreate(name="Basmati rice 5kg", unit_price=Decimal("25.00"), stock_quantity=40),
    )
