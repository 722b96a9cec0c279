from fastapi import APIRouter, Depends
from app.core.dependencies import get_current_identity, get_policy_engine
from app.core.identity import Identity
from app.database.store import Store
from app.database.supabase_client import get_store
from app.modules.policy.engine import PolicyEngine
from app.modules.profiles.schemas import ProfileUpdate, SupplierProfileResponse, VendorProfileResponse
from app.modules.profiles.service import ProfileService
from typing import Union

router = APIRouter(prefix="/profiles", tags=["profiles"])

ProfileResponse = Union[SupplierProfileResponse, VendorProfileResponse]


def get_profile_service(
    store: Store = Depends(get_store),
    policy: PolicyEngine = Depends(get_policy_engine)
) -> ProfileService:
    return ProfileService(store, policy)


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    identity: Identity = Depends(get_current_identity),
    service: ProfileService = Depends(get_profile_service)
):
    """Profile of the caller"""
    return service.get_profile(identity, identity.id)


@router.put("/me", response_model=ProfileResponse)
async def update_my_profile(
    profile_data: ProfileUpdate,
    identity: Identity = Depends(get_current_identity),
    service: ProfileService = Depends(get_profile_service)
):
    """Update the caller's profile"""
    return service.update_my_profile(identity, profile_data)


@router.get("/{user_id}", response_model=ProfileResponse)
async def get_profile(
    user_id: str,
    identity: Identity = Depends(get_current_identity),
    service: ProfileService = Depends(get_profile_service)
):
    """Profile of an account (owner or superadmin)"""
    return service.get_profile(identity, user_id)
