from datetime import datetime, timezone
from typing import List, Optional
import logging

from app.core.errors import ConstraintError, PolicyError, ValidationError
from app.core.identity import Identity
from app.database.store import Store, Row
from app.modules.catalog.schemas import ProductStatus
from app.modules.catalog.service import CENT, to_money
from app.modules.orders.schemas import OrderCreate, OrderResponse, OrderStatus
from app.modules.orders.workflow import Actor, next_status, validate_transition
from app.modules.policy.engine import PolicyEngine
from app.modules.policy.enforced_store import PolicyEnforcedStore
from app.modules.roles.schemas import ApprovalStatus, Role
from app.modules.suppliers.schemas import SupplierStatus

logger = logging.getLogger(__name__)


class OrderService:
    def __init__(self, store: Store, policy: Optional[PolicyEngine] = None):
        self.store = store
        self.policy = policy or PolicyEngine(store)

    def _repo(self, identity: Identity) -> PolicyEnforcedStore:
        return PolicyEnforcedStore(self.store, identity, self.policy)

    def place_order(self, identity: Identity, order_data: OrderCreate) -> OrderResponse:
        """Place an order for a catalog item; the item's current price is locked in"""
        if order_data.quantity is None or order_data.quantity <= 0:
            raise ValidationError("quantity must be a positive integer")

        assignment = self.store.find_one("user_roles", {"user_id": identity.id})
        if not assignment or assignment.get("role") != Role.VENDOR.value:
            raise PolicyError("Only vendors can place orders")

        repo = self._repo(identity)
        product = repo.get("products", order_data.product_id)
        if product.get("status") != ProductStatus.ACTIVE.value or not self._supplier_can_sell(product):
            raise ValidationError("Product is not available for ordering")

        unit_price = to_money(product["unit_price"])
        total_amount = (unit_price * order_data.quantity).quantize(CENT)
        now = datetime.now(timezone.utc).isoformat()
        row = repo.insert("orders", {
            "user_id": identity.id,
            "product_id": product["id"],
            "supplier_id": product["supplier_id"],
            "quantity": order_data.quantity,
            "unit_price": str(unit_price),
            "total_amount": str(total_amount),
            "status": OrderStatus.PENDING.value,
            "order_date": now,
            "expected_delivery": order_data.expected_delivery.isoformat() if order_data.expected_delivery else None,
            "notes": order_data.notes,
        })
        logger.info(f"Account {identity.id} placed order {row['id']} for product {product['id']} (total {total_amount})")
        return OrderResponse(**row)

    def _supplier_can_sell(self, product: Row) -> bool:
        """Same visibility rule as the vendor catalog: active record, approved owner"""
        record = self.store.get("suppliers", product.get("supplier_id"))
        if not record or record.get("status") != SupplierStatus.ACTIVE.value:
            return False
        assignment = self.store.find_one("user_roles", {"user_id": record["user_id"]})
        return bool(
            assignment
            and assignment.get("role") == Role.SUPPLIER.value
            and assignment.get("approval_status") == ApprovalStatus.APPROVED.value
        )

    def get_order(self, identity: Identity, order_id: str) -> OrderResponse:
        return OrderResponse(**self._repo(identity).get("orders", order_id))

    def list_orders(self, identity: Identity, status: Optional[OrderStatus] = None) -> List[OrderResponse]:
        """Orders the caller placed, or orders for the caller's supplier record"""
        filters = {}
        assignment = self.store.find_one("user_roles", {"user_id": identity.id})
        if assignment and assignment.get("role") == Role.SUPPLIER.value:
            record = self.store.find_one("suppliers", {"user_id": identity.id})
            if record is None:
                return []
            filters["supplier_id"] = record["id"]
        else:
            filters["user_id"] = identity.id
        if status:
            filters["status"] = OrderStatus(status).value
        rows = self._repo(identity).list("orders", filters, order_by="created_at", desc=True)
        return [OrderResponse(**row) for row in rows]

    def advance_order(self, identity: Identity, order_id: str) -> OrderResponse:
        """Move an order one step along pending -> confirmed -> shipped -> delivered (supplier only)"""
        order = self._repo(identity).get("orders", order_id)
        if not self.policy.owns_supplier_record(identity, order.get("supplier_id")):
            raise PolicyError("Only the supplier of this order can advance it")
        target = next_status(order["status"])
        if target is None:
            raise ValidationError(f"Order is already {order['status']}")
        return self._apply(identity, order, Actor.SUPPLIER, target)

    def cancel_order(self, identity: Identity, order_id: str) -> OrderResponse:
        """Cancel a pending order (purchaser only)"""
        order = self._repo(identity).get("orders", order_id)
        if order.get("user_id") != identity.id:
            raise PolicyError("Only the purchaser of this order can cancel it")
        return self._apply(identity, order, Actor.PURCHASER, OrderStatus.CANCELLED)

    def transition_order(self, identity: Identity, order_id: str, target: OrderStatus) -> OrderResponse:
        """Apply a requested status if the state machine allows it for the caller"""
        target = OrderStatus(target)
        order = self._repo(identity).get("orders", order_id)
        is_purchaser = order.get("user_id") == identity.id
        is_supplier = self.policy.owns_supplier_record(identity, order.get("supplier_id"))
        if target == OrderStatus.CANCELLED and is_purchaser:
            actor = Actor.PURCHASER
        elif is_supplier:
            actor = Actor.SUPPLIER
        elif is_purchaser:
            actor = Actor.PURCHASER
        else:
            raise PolicyError("Order belongs to another purchaser and supplier")
        return self._apply(identity, order, actor, target)

    def _apply(self, identity: Identity, order: Row, actor: Actor, target: OrderStatus) -> OrderResponse:
        current = OrderStatus(order["status"])
        validate_transition(actor, current, target)
        # Compare-and-swap: only applies if nobody moved the order since it was read
        rows = self._repo(identity).update(
            "orders",
            {"id": order["id"], "status": current.value},
            {"status": target.value, "updated_at": datetime.now(timezone.utc).isoformat()},
        )
        if not rows:
            raise ConstraintError(f"Order {order['id']} changed concurrently; reload and retry")
        logger.info(f"{actor.value.capitalize()} {identity.id} moved order {order['id']} from {current.value} to {target.value}")
        return OrderResponse(**rows[0])
