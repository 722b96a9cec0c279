import hashlib
import time
import logging
from supabase import Client
from app.core.errors import AuthError, ConstraintError, PersistenceError
from app.core.identity import Identity
from app.modules.auth.schemas import LoginRequest, RegisterRequest, TokenResponse
from app.modules.provisioning.schemas import SignUpRequest, SignUpResponse
from app.modules.provisioning.service import ProvisioningService
from app.modules.roles.approval import derive_initial_assignment
from typing import Dict, Optional

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500


def clear_auth_cache() -> None:
    _AUTH_USER_CACHE.clear()


class AuthService:
    def __init__(self, supabase: Client, provisioning: Optional[ProvisioningService] = None):
        self.supabase = supabase
        self.provisioning = provisioning

    def register(self, register_data: RegisterRequest) -> SignUpResponse:
        """Create the Supabase Auth account, then provision its role and profile rows"""
        # Unassignable roles fail before any auth account is created
        derive_initial_assignment(
            register_data.role, register_data.email, self.provisioning.bootstrap_superadmin_email
        )
        try:
            auth_response = self.supabase.auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {
                    "data": {"full_name": register_data.full_name} if register_data.full_name else {}
                }
            })
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise ConstraintError("User already exists")
            raise PersistenceError(f"Registration failed: {error_message}")

        if not auth_response.user:
            raise AuthError("Failed to register user")

        identity = Identity(
            id=auth_response.user.id,
            email=auth_response.user.email or register_data.email,
        )
        sign_up = SignUpRequest(**register_data.model_dump(exclude={"email", "password"}))
        return self.provisioning.sign_up(identity, sign_up)

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Authenticate user using Supabase Auth"""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise AuthError("Invalid email or password")
            raise PersistenceError(f"Login failed: {error_message}")

        if not auth_response.user or not auth_response.session:
            raise AuthError("Invalid credentials")

        return TokenResponse(
            access_token=auth_response.session.access_token,
            token_type="bearer",
            user_id=auth_response.user.id,
            email=auth_response.user.email or login_data.email
        )

    def get_current_user(self, token: str) -> Identity:
        """Resolve the caller identity from a Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
        cache_key = hashlib.sha256(token.encode()).hexdigest()
        now = time.monotonic()
        if cache_key in _AUTH_USER_CACHE:
            identity, expiry = _AUTH_USER_CACHE[cache_key]
            if now < expiry:
                return identity
            del _AUTH_USER_CACHE[cache_key]
        try:
            user_response = self.supabase.auth.get_user(jwt=token)
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise AuthError("Invalid or expired token")
            raise AuthError("Authentication failed")
        if not user_response or not user_response.user:
            raise AuthError("Invalid or expired token")
        user = user_response.user
        identity = Identity(
            id=user.id,
            email=user.email,
            user_metadata=user.user_metadata or {},
        )
        if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
            _AUTH_USER_CACHE[cache_key] = (identity, now + _AUTH_CACHE_TTL_SEC)
        return identity

    def logout(self, token: str) -> bool:
        """Logout user using Supabase Auth"""
        _AUTH_USER_CACHE.pop(hashlib.sha256(token.encode()).hexdigest(), None)
        try:
            # Supabase Auth tokens are stateless JWTs, so logout is mainly client-side
            self.supabase.auth.sign_out()
            return True
        except Exception as e:
            logger.warning(f"Supabase sign_out failed: {e}")
            return False

    def reset_password(self, email: str, redirect_to: Optional[str] = None) -> None:
        """Send a password reset email; the link lands on `redirect_to`"""
        options = {"redirect_to": redirect_to} if redirect_to else {}
        try:
            self.supabase.auth.reset_password_for_email(email, options)
        except Exception as e:
            error_message = str(e)
            if "rate limit" in error_message.lower():
                raise ConstraintError("Too many reset requests; try again later")
            raise PersistenceError(f"Password reset failed: {error_message}")
        logger.info("Password reset email requested")

    def resend_verification(self, email: str) -> None:
        """Resend the sign-up confirmation email"""
        try:
            self.supabase.auth.resend({"type": "signup", "email": email})
        except Exception as e:
            error_message = str(e)
            if "rate limit" in error_message.lower():
                raise ConstraintError("Too many verification requests; try again later")
            raise PersistenceError(f"Resending verification failed: {error_message}")
        logger.info("Sign-up verification email resent")
