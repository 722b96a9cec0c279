from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from slowapi.middleware import SlowAPIMiddleware

from app.config import settings
from app.core.dependencies import get_auth_service, get_current_identity, get_policy_engine, get_provisioning_service
from app.database.supabase_client import get_store
from app.main import app, limiter
from app.modules.auth.service import AuthService
from app.modules.roles.schemas import Role
from tests.conftest import make_identity

API = "/api/v1"


@pytest.fixture
def client(store, policy, provisioning):
    limiter.reset()
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_policy_engine] = lambda: policy
    app.dependency_overrides[get_provisioning_service] = lambda: provisioning
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def as_user():
    """Authenticate subsequent requests as the given identity."""
    def _as_user(identity):
        app.dependency_overrides[get_current_identity] = lambda: identity
    return _as_user


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"

    def test_ready(self, client):
        assert client.get("/ready").json() == {"status": "ready"}

    def test_rate_limit_applies_to_every_route(self):
        assert any(m.cls is SlowAPIMiddleware for m in app.user_middleware)


class TestAccounts:
    def test_provision_and_me(self, client, as_user):
        supplier = make_identity("acme")
        as_user(supplier)

        created = client.post(f"{API}/auth/provision", json={"role": "supplier", "business_name": "Acme Foods"})
        me = client.get(f"{API}/auth/me")

        assert created.status_code == 201
        assert created.json()["approval_status"] == "pending"
        body = me.json()
        assert body["role"]["role"] == "supplier"
        assert body["profile"]["business_name"] == "Acme Foods"
        assert body["is_approved"] is False

    def test_me_without_assignment(self, client, as_user):
        as_user(make_identity("newcomer"))

        body = client.get(f"{API}/auth/me").json()

        assert body["role"] is None
        assert body["is_approved"] is False

    def test_reset_password_uses_default_redirect(self, client, provisioning):
        supabase = MagicMock()
        app.dependency_overrides[get_auth_service] = lambda: AuthService(supabase, provisioning)

        response = client.post(f"{API}/auth/reset-password", json={"email": "ann@acme.io"})

        assert response.status_code == 200
        supabase.auth.reset_password_for_email.assert_called_once_with(
            "ann@acme.io", {"redirect_to": settings.password_reset_redirect_url}
        )

    def test_resend_verification(self, client, provisioning):
        supabase = MagicMock()
        app.dependency_overrides[get_auth_service] = lambda: AuthService(supabase, provisioning)

        response = client.post(f"{API}/auth/resend-verification", json={"email": "ann@acme.io"})

        assert response.status_code == 200
        supabase.auth.resend.assert_called_once_with({"type": "signup", "email": "ann@acme.io"})


class TestApproval:
    def test_non_superadmin_is_forbidden(self, client, as_user, sign_up):
        supplier = sign_up("acme", Role.SUPPLIER)
        rival = sign_up("rival", Role.SUPPLIER)
        as_user(rival)

        response = client.post(f"{API}/roles/{supplier.id}/approve")

        assert response.status_code == 403
        assert response.json()["category"] == "forbidden"

    def test_superadmin_approves(self, client, as_user, sign_up, superadmin):
        supplier = sign_up("acme", Role.SUPPLIER)
        as_user(superadmin)

        pending = client.get(f"{API}/roles/pending").json()
        response = client.post(f"{API}/roles/{supplier.id}/approve")

        assert [p["user_id"] for p in pending] == [supplier.id]
        assert response.status_code == 200
        assert response.json()["approval_status"] == "approved"

    def test_second_decision_is_rejected(self, client, as_user, sign_up, superadmin):
        supplier = sign_up("acme", Role.SUPPLIER)
        as_user(superadmin)
        client.post(f"{API}/roles/{supplier.id}/reject")

        response = client.post(f"{API}/roles/{supplier.id}/approve")

        assert response.status_code == 422
        assert response.json()["category"] == "validation"


class TestCatalogAndOrders:
    def test_vendor_cannot_create_products(self, client, as_user, vendor):
        as_user(vendor)

        response = client.post(f"{API}/products", json={"name": "Rice", "unit_price": "10.00"})

        assert response.status_code == 403

    def test_order_flow(self, client, as_user, approved_supplier, vendor):
        as_user(approved_supplier)
        product = client.post(f"{API}/products", json={"name": "Rice", "unit_price": "25.00", "stock_quantity": 50})
        assert product.status_code == 201
        product_id = product.json()["id"]

        as_user(vendor)
        assert [p["id"] for p in client.get(f"{API}/products").json()] == [product_id]
        placed = client.post(f"{API}/orders", json={"product_id": product_id, "quantity": 4})
        assert placed.status_code == 201
        order = placed.json()
        assert Decimal(str(order["total_amount"])) == Decimal("100.00")

        as_user(approved_supplier)
        advanced = client.post(f"{API}/orders/{order['id']}/advance")
        assert advanced.json()["status"] == "confirmed"

        as_user(vendor)
        cancelled = client.post(f"{API}/orders/{order['id']}/cancel")
        assert cancelled.status_code == 422
        assert cancelled.json()["category"] == "validation"

    def test_status_patch(self, client, as_user, approved_supplier, vendor, product):
        as_user(vendor)
        order = client.post(f"{API}/orders", json={"product_id": product.id}).json()

        as_user(approved_supplier)
        skipped = client.patch(f"{API}/orders/{order['id']}/status", json={"status": "shipped"})
        confirmed = client.patch(f"{API}/orders/{order['id']}/status", json={"status": "confirmed"})

        assert skipped.status_code == 422
        assert confirmed.status_code == 200
        assert confirmed.json()["status"] == "confirmed"

    def test_unknown_order(self, client, as_user, vendor):
        as_user(vendor)

        response = client.get(f"{API}/orders/missing")

        assert response.status_code == 404
        assert response.json() == {"detail": "orders record missing not found", "category": "not_found"}

    def test_malformed_body(self, client, as_user, vendor, product):
        as_user(vendor)

        response = client.post(f"{API}/orders", json={"product_id": product.id, "quantity": "lots"})

        assert response.status_code == 422
        assert response.json()["category"] == "validation"
