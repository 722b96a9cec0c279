from fastapi import APIRouter, Depends
from app.core.dependencies import get_current_identity, get_policy_engine, require_role
from app.core.identity import Identity
from app.database.store import Store
from app.database.supabase_client import get_store
from app.modules.orders.schemas import OrderCreate, OrderResponse, OrderStatus, OrderStatusUpdate
from app.modules.orders.service import OrderService
from app.modules.policy.engine import PolicyEngine
from app.modules.roles.schemas import Role
from typing import List, Optional

router = APIRouter(prefix="/orders", tags=["orders"])


def get_order_service(
    store: Store = Depends(get_store),
    policy: PolicyEngine = Depends(get_policy_engine)
) -> OrderService:
    return OrderService(store, policy)


@router.get("", response_model=List[OrderResponse])
async def list_orders(
    status: Optional[OrderStatus] = None,
    identity: Identity = Depends(get_current_identity),
    service: OrderService = Depends(get_order_service)
):
    """List orders placed by the caller, or received by the caller's supplier record"""
    return service.list_orders(identity, status=status)


@router.post("", response_model=OrderResponse, status_code=201)
async def place_order(
    order_data: OrderCreate,
    identity: Identity = Depends(require_role(Role.VENDOR)),
    service: OrderService = Depends(get_order_service)
):
    """Place an order (vendors only)"""
    return service.place_order(identity, order_data)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str,
    identity: Identity = Depends(get_current_identity),
    service: OrderService = Depends(get_order_service)
):
    return service.get_order(identity, order_id)


@router.post("/{order_id}/advance", response_model=OrderResponse)
async def advance_order(
    order_id: str,
    identity: Identity = Depends(get_current_identity),
    service: OrderService = Depends(get_order_service)
):
    """Move the order to its next fulfilment step (supplier only)"""
    return service.advance_order(identity, order_id)


@router.post("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: str,
    identity: Identity = Depends(get_current_identity),
    service: OrderService = Depends(get_order_service)
):
    """Cancel a pending order (purchaser only)"""
    return service.cancel_order(identity, order_id)


@router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str,
    status_data: OrderStatusUpdate,
    identity: Identity = Depends(get_current_identity),
    service: OrderService = Depends(get_order_service)
):
    """Request a specific status; rejected unless it is a legal move for the caller"""
    return service.transition_order(identity, order_id, status_data.status)
