from fastapi import APIRouter, Depends
from app.config import settings
from app.config.permissions_config import get_policy_matrix
from app.core.dependencies import get_current_identity, get_policy_engine, require_superadmin
from app.core.identity import Identity
from app.database.store import Store
from app.database.supabase_client import get_store
from app.modules.policy.engine import PolicyEngine
from app.modules.roles.schemas import (
    ApprovalDecisionResponse, ApprovalStatus, Role,
    RoleAssignmentResponse, RoleAssignmentWithProfile
)
from app.modules.roles.service import RoleService
from typing import List, Optional

router = APIRouter(prefix="/roles", tags=["roles"])


def get_role_service(
    store: Store = Depends(get_store),
    policy: PolicyEngine = Depends(get_policy_engine)
) -> RoleService:
    return RoleService(store, policy, allow_reconsideration=settings.allow_approval_reconsideration)


@router.get("/me", response_model=RoleAssignmentResponse)
async def get_my_role(
    identity: Identity = Depends(get_current_identity),
    service: RoleService = Depends(get_role_service)
):
    """Role and approval status of the caller"""
    return service.get_assignment(identity, identity.id)


@router.get("/policies")
async def get_policies(
    identity: Identity = Depends(require_superadmin)
):
    """Table access matrix enforced by the policy layer"""
    return get_policy_matrix()


@router.get("", response_model=List[RoleAssignmentWithProfile])
async def list_roles(
    role: Optional[Role] = None,
    approval_status: Optional[ApprovalStatus] = None,
    identity: Identity = Depends(get_current_identity),
    service: RoleService = Depends(get_role_service)
):
    """List every account with role and profile (superadmin only)"""
    return service.list_assignments(identity, role=role, approval_status=approval_status)


@router.get("/pending", response_model=List[RoleAssignmentWithProfile])
async def list_pending_suppliers(
    identity: Identity = Depends(get_current_identity),
    service: RoleService = Depends(get_role_service)
):
    """Suppliers awaiting approval (superadmin only)"""
    return service.list_pending_suppliers(identity)


@router.get("/{user_id}", response_model=RoleAssignmentResponse)
async def get_role(
    user_id: str,
    identity: Identity = Depends(get_current_identity),
    service: RoleService = Depends(get_role_service)
):
    """Role of an account (self or superadmin)"""
    return service.get_assignment(identity, user_id)


@router.post("/{user_id}/approve", response_model=ApprovalDecisionResponse)
async def approve_supplier(
    user_id: str,
    identity: Identity = Depends(get_current_identity),
    service: RoleService = Depends(get_role_service)
):
    """Approve a pending supplier (superadmin only)"""
    return service.approve_supplier(identity, user_id)


@router.post("/{user_id}/reject", response_model=ApprovalDecisionResponse)
async def reject_supplier(
    user_id: str,
    identity: Identity = Depends(get_current_identity),
    service: RoleService = Depends(get_role_service)
):
    """Reject a pending supplier (superadmin only)"""
    return service.reject_supplier(identity, user_id)
