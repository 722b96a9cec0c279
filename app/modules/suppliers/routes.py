from fastapi import APIRouter, Depends
from app.core.dependencies import get_current_identity, get_policy_engine, get_provisioning_service
from app.core.errors import NotFoundError
from app.core.identity import Identity
from app.database.store import Store
from app.database.supabase_client import get_store
from app.modules.policy.engine import PolicyEngine
from app.modules.provisioning.service import ProvisioningService
from app.modules.suppliers.schemas import SupplierRecordResponse, SupplierRecordUpdate, SupplierStatus
from app.modules.suppliers.service import SupplierService
from typing import List, Optional

router = APIRouter(prefix="/suppliers", tags=["suppliers"])


def get_supplier_service(
    store: Store = Depends(get_store),
    provisioning: ProvisioningService = Depends(get_provisioning_service),
    policy: PolicyEngine = Depends(get_policy_engine)
) -> SupplierService:
    return SupplierService(store, provisioning, policy)


@router.get("", response_model=List[SupplierRecordResponse])
async def list_suppliers(
    status: Optional[SupplierStatus] = None,
    approved_only: bool = False,
    identity: Identity = Depends(get_current_identity),
    service: SupplierService = Depends(get_supplier_service)
):
    """List supplier business records"""
    return service.list_suppliers(identity, status=status, approved_only=approved_only)


@router.get("/me", response_model=SupplierRecordResponse)
async def get_my_supplier_record(
    identity: Identity = Depends(get_current_identity),
    service: SupplierService = Depends(get_supplier_service)
):
    """Business record of the caller"""
    record = service.get_my_record(identity)
    if record is None:
        raise NotFoundError("Supplier record not found")
    return record


@router.put("/me", response_model=SupplierRecordResponse)
async def update_my_supplier_record(
    record_data: SupplierRecordUpdate,
    identity: Identity = Depends(get_current_identity),
    service: SupplierService = Depends(get_supplier_service)
):
    """Update the caller's business record"""
    return service.update_my_record(identity, record_data)


@router.post("/ensure", response_model=SupplierRecordResponse)
async def ensure_my_supplier_record(
    identity: Identity = Depends(get_current_identity),
    service: SupplierService = Depends(get_supplier_service)
):
    """Return the caller's business record, deriving it from the profile if missing"""
    return service.ensure_business_record(identity)


@router.post("/{user_id}/ensure", response_model=SupplierRecordResponse)
async def ensure_supplier_record(
    user_id: str,
    identity: Identity = Depends(get_current_identity),
    service: SupplierService = Depends(get_supplier_service)
):
    """Ensure the business record of an account exists (creation is limited to the account itself)"""
    return service.ensure_business_record(identity, user_id)


@router.get("/{supplier_id}", response_model=SupplierRecordResponse)
async def get_supplier(
    supplier_id: str,
    identity: Identity = Depends(get_current_identity),
    service: SupplierService = Depends(get_supplier_service)
):
    """Get supplier business record by ID"""
    return service.get_supplier(identity, supplier_id)
