from fastapi import APIRouter, Depends
from app.database.store import Store
from app.database.supabase_client import get_store
from app.config import settings
from app.modules.auth.schemas import (
    LoginRequest, MeResponse, MessageResponse, PasswordResetRequest,
    RegisterRequest, ResendVerificationRequest, TokenResponse,
)
from app.modules.auth.service import AuthService
from app.modules.provisioning.schemas import SignUpRequest, SignUpResponse
from app.modules.provisioning.service import ProvisioningService
from app.modules.policy.engine import PolicyEngine
from app.modules.profiles.service import ProfileService
from app.modules.roles.approval import is_approved
from app.modules.roles.service import RoleService
from app.core.dependencies import (
    get_auth_service, get_current_identity, get_current_token,
    get_policy_engine, get_provisioning_service,
)
from app.core.identity import Identity

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=SignUpResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new account and provision its role, profile and supplier record"""
    return service.register(register_data)


@router.post("/provision", response_model=SignUpResponse, status_code=201)
async def provision(
    request: SignUpRequest,
    identity: Identity = Depends(get_current_identity),
    service: ProvisioningService = Depends(get_provisioning_service)
):
    """Provision an authenticated account that has no role assignment yet"""
    return service.sign_up(identity, request)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    reset_data: PasswordResetRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Email a password reset link"""
    service.reset_password(reset_data.email, reset_data.redirect_to or settings.password_reset_redirect_url)
    return MessageResponse(message="If the account exists, a reset link has been sent")


@router.post("/resend-verification", response_model=MessageResponse)
async def resend_verification(
    resend_data: ResendVerificationRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Resend the sign-up confirmation email"""
    service.resend_verification(resend_data.email)
    return MessageResponse(message="Verification email sent")


@router.get("/me", response_model=MeResponse)
async def get_me(
    identity: Identity = Depends(get_current_identity),
    store: Store = Depends(get_store),
    policy: PolicyEngine = Depends(get_policy_engine)
):
    """Current account with its role assignment and profile (for frontend UI)."""
    assignment = RoleService(store, policy).find_assignment(identity, identity.id)
    if assignment is None:
        return MeResponse(id=identity.id, email=identity.email)
    profile = ProfileService(store, policy).find_profile(identity, identity.id, assignment.role)
    return MeResponse(
        id=identity.id,
        email=identity.email,
        role=assignment,
        profile=profile,
        is_approved=is_approved(assignment.role, assignment.approval_status),
    )
