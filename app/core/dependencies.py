"""
Core dependencies for caller identity and policy checking
"""

from fastapi import Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from supabase import Client
import logging

from app.config import settings
from app.core.errors import PolicyError
from app.core.identity import Identity
from app.database.store import Store
from app.database.supabase_client import get_supabase, get_store
from app.modules.auth.service import AuthService
from app.modules.policy.engine import PolicyEngine
from app.modules.provisioning.service import ProvisioningService
from app.modules.roles.schemas import Role

logger = logging.getLogger(__name__)

security = HTTPBearer()


def get_policy_engine(store: Store = Depends(get_store)) -> PolicyEngine:
    return PolicyEngine(store, settings.bootstrap_superadmin_email)


def get_provisioning_service(store: Store = Depends(get_store)) -> ProvisioningService:
    return ProvisioningService(store, settings.bootstrap_superadmin_email)


def get_auth_service(
    supabase: Client = Depends(get_supabase),
    provisioning: ProvisioningService = Depends(get_provisioning_service)
) -> AuthService:
    return AuthService(supabase, provisioning)


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


def get_current_identity(
    token: str = Depends(get_current_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> Identity:
    """Caller identity verified by Supabase Auth; never taken from the request body"""
    return auth_service.get_current_user(token)


def require_superadmin(
    identity: Identity = Depends(get_current_identity),
    policy: PolicyEngine = Depends(get_policy_engine)
) -> Identity:
    """Dependency that admits approved superadmins only (checked against user_roles on every request)"""
    if not policy.is_superadmin(identity):
        raise PolicyError("Superadmin privileges required")
    return identity


def require_role(*roles: Role):
    """Factory function to create a role check dependency"""
    allowed = {Role(r).value for r in roles}

    def check_role(
        identity: Identity = Depends(get_current_identity),
        store: Store = Depends(get_store)
    ) -> Identity:
        assignment = store.find_one("user_roles", {"user_id": identity.id})
        if not assignment or assignment.get("role") not in allowed:
            raise PolicyError(f"This action requires one of the roles: {', '.join(sorted(allowed))}")
        return identity
    return check_role
