from unittest.mock import MagicMock

import pytest

from app.core.errors import AuthError, ConstraintError, PersistenceError, ValidationError
from app.modules.auth.schemas import LoginRequest, RegisterRequest
from app.modules.auth.service import AuthService, clear_auth_cache
from app.modules.roles.schemas import ApprovalStatus, Role


def auth_user(user_id="u-1", email="ann@acme.io"):
    return MagicMock(id=user_id, email=email, user_metadata={})


@pytest.fixture(autouse=True)
def empty_cache():
    clear_auth_cache()
    yield
    clear_auth_cache()


@pytest.fixture
def supabase():
    return MagicMock()


@pytest.fixture
def auth_service(supabase, provisioning):
    return AuthService(supabase, provisioning)


class TestRegister:
    def test_creates_account_then_provisions(self, auth_service, supabase, store):
        supabase.auth.sign_up.return_value = MagicMock(user=auth_user())

        result = auth_service.register(RegisterRequest(
            email="ann@acme.io", password="s3cret!", role=Role.SUPPLIER, business_name="Ann's Dairy"
        ))

        assert result.user_id == "u-1"
        assert result.approval_status == ApprovalStatus.PENDING
        assert store.find_one("suppliers", {"user_id": "u-1"})["name"] == "Ann's Dairy"
        payload = supabase.auth.sign_up.call_args[0][0]
        assert payload["email"] == "ann@acme.io"

    def test_existing_email(self, auth_service, supabase, store):
        supabase.auth.sign_up.side_effect = Exception("User already registered")

        with pytest.raises(ConstraintError):
            auth_service.register(RegisterRequest(email="ann@acme.io", password="x", role=Role.VENDOR))
        assert store.query("user_roles") == []

    def test_auth_outage(self, auth_service, supabase):
        supabase.auth.sign_up.side_effect = Exception("503 Service Unavailable")

        with pytest.raises(PersistenceError):
            auth_service.register(RegisterRequest(email="ann@acme.io", password="x", role=Role.VENDOR))

    def test_superadmin_request_never_reaches_auth(self, auth_service, supabase, store):
        with pytest.raises(ValidationError):
            auth_service.register(RegisterRequest(email="mallory@acme.io", password="x", role=Role.SUPERADMIN))

        supabase.auth.sign_up.assert_not_called()
        assert store.query("user_roles") == []

    def test_bootstrap_email_may_register_as_superadmin(self, auth_service, supabase, store):
        supabase.auth.sign_up.return_value = MagicMock(user=auth_user("u-9", "founder@acme.io"))

        result = auth_service.register(RegisterRequest(email="founder@acme.io", password="x", role=Role.SUPERADMIN))

        supabase.auth.sign_up.assert_called_once()
        assert result.role == Role.SUPERADMIN


class TestLogin:
    def test_returns_token(self, auth_service, supabase):
        supabase.auth.sign_in_with_password.return_value = MagicMock(
            user=auth_user(), session=MagicMock(access_token="jwt-token")
        )

        token = auth_service.login(LoginRequest(email="ann@acme.io", password="x"))

        assert token.access_token == "jwt-token"
        assert token.user_id == "u-1"

    def test_bad_credentials(self, auth_service, supabase):
        supabase.auth.sign_in_with_password.side_effect = Exception("Invalid login credentials")

        with pytest.raises(AuthError):
            auth_service.login(LoginRequest(email="ann@acme.io", password="wrong"))


class TestCurrentUser:
    def test_identity_is_cached(self, auth_service, supabase):
        supabase.auth.get_user.return_value = MagicMock(user=auth_user())

        first = auth_service.get_current_user("jwt-token")
        second = auth_service.get_current_user("jwt-token")

        assert first.id == second.id == "u-1"
        assert first.email == "ann@acme.io"
        supabase.auth.get_user.assert_called_once_with(jwt="jwt-token")

    def test_expired_token(self, auth_service, supabase):
        supabase.auth.get_user.side_effect = Exception("JWT expired")

        with pytest.raises(AuthError):
            auth_service.get_current_user("old-token")

    def test_logout_drops_cached_identity(self, auth_service, supabase):
        supabase.auth.get_user.return_value = MagicMock(user=auth_user())
        auth_service.get_current_user("jwt-token")

        assert auth_service.logout("jwt-token")
        auth_service.get_current_user("jwt-token")

        assert supabase.auth.get_user.call_count == 2


class TestRecovery:
    def test_reset_password_sends_redirect(self, auth_service, supabase):
        auth_service.reset_password("ann@acme.io", "https://app.acme.io/reset-password")

        supabase.auth.reset_password_for_email.assert_called_once_with(
            "ann@acme.io", {"redirect_to": "https://app.acme.io/reset-password"}
        )

    def test_reset_password_without_redirect(self, auth_service, supabase):
        auth_service.reset_password("ann@acme.io")

        supabase.auth.reset_password_for_email.assert_called_once_with("ann@acme.io", {})

    def test_reset_password_rate_limited(self, auth_service, supabase):
        supabase.auth.reset_password_for_email.side_effect = Exception("Email rate limit exceeded")

        with pytest.raises(ConstraintError):
            auth_service.reset_password("ann@acme.io")

    def test_reset_password_outage(self, auth_service, supabase):
        supabase.auth.reset_password_for_email.side_effect = Exception("503 Service Unavailable")

        with pytest.raises(PersistenceError):
            auth_service.reset_password("ann@acme.io")

    def test_resend_verification(self, auth_service, supabase):
        auth_service.resend_verification("ann@acme.io")

        supabase.auth.resend.assert_called_once_with({"type": "signup", "email": "ann@acme.io"})

    def test_resend_verification_outage(self, auth_service, supabase):
        supabase.auth.resend.side_effect = Exception("503 Service Unavailable")

        with pytest.raises(PersistenceError):
            auth_service.resend_verification("ann@acme.io")
