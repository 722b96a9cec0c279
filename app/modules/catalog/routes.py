from fastapi import APIRouter, Depends
from app.core.dependencies import get_current_identity, get_provisioning_service, require_role
from app.core.identity import Identity
from app.database.store import Store
from app.database.supabase_client import get_store
from app.modules.catalog.schemas import ProductCreate, ProductResponse, ProductStatus, ProductUpdate
from app.modules.catalog.service import CatalogService
from app.modules.provisioning.service import ProvisioningService
from app.modules.roles.schemas import Role
from typing import List, Optional

router = APIRouter(prefix="/products", tags=["products"])


def get_catalog_service(
    store: Store = Depends(get_store),
    provisioning: ProvisioningService = Depends(get_provisioning_service)
) -> CatalogService:
    return CatalogService(store, provisioning)


@router.get("", response_model=List[ProductResponse])
async def list_products(
    status: Optional[ProductStatus] = None,
    search: Optional[str] = None,
    low_stock: bool = False,
    identity: Identity = Depends(get_current_identity),
    service: CatalogService = Depends(get_catalog_service)
):
    """List catalog items visible to the caller's role"""
    return service.list_products(identity, status=status, search=search, low_stock=low_stock)


@router.post("", response_model=ProductResponse, status_code=201)
async def create_product(
    product_data: ProductCreate,
    identity: Identity = Depends(require_role(Role.SUPPLIER)),
    service: CatalogService = Depends(get_catalog_service)
):
    """Create a catalog item (suppliers only; SKU generated when omitted)"""
    return service.create_product(identity, product_data)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: str,
    identity: Identity = Depends(get_current_identity),
    service: CatalogService = Depends(get_catalog_service)
):
    """Get catalog item by ID"""
    return service.get_product(identity, product_id)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    product_data: ProductUpdate,
    identity: Identity = Depends(get_current_identity),
    service: CatalogService = Depends(get_catalog_service)
):
    """Update a catalog item owned by the caller"""
    return service.update_product(identity, product_id, product_data)


@router.delete("/{product_id}", status_code=204)
async def delete_product(
    product_id: str,
    identity: Identity = Depends(get_current_identity),
    service: CatalogService = Depends(get_catalog_service)
):
    """Delete a catalog item owned by the caller"""
    service.delete_product(identity, product_id)
    return None
