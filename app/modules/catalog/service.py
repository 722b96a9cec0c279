from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional
import random
import string
import time
import logging

from app.core.errors import ConstraintError, NotFoundError, ValidationError
from app.core.identity import Identity
from app.database.store import Store, Row
from app.modules.catalog.schemas import ProductCreate, ProductResponse, ProductStatus, ProductUpdate
from app.modules.policy.enforced_store import PolicyEnforcedStore
from app.modules.provisioning.service import ProvisioningService
from app.modules.roles.schemas import Role
from app.modules.suppliers.schemas import SupplierStatus
from app.modules.suppliers.service import approved_supplier_account_ids

logger = logging.getLogger(__name__)

SKU_ATTEMPTS = 3
CENT = Decimal("0.01")


def generate_sku() -> str:
    """SKU-<last 6 digits of the ms timestamp>-<3 random uppercase alphanumerics>"""
    timestamp = str(int(time.time() * 1000))[-6:]
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=3))
    return f"SKU-{timestamp}-{suffix}"


def to_money(value: Any, field: str = "unit_price") -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field} must be a number")
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a number")
    if amount < 0:
        raise ValidationError(f"{field} cannot be negative")
    return amount.quantize(CENT)


def _validate_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    if "name" in data and not (data["name"] or "").strip():
        raise ValidationError("Product name cannot be empty")
    if "unit_price" in data:
        if data["unit_price"] is None:
            raise ValidationError("unit_price is required")
        data["unit_price"] = str(to_money(data["unit_price"]))
    for field in ("stock_quantity", "min_stock_level"):
        if field in data:
            if data[field] is None or data[field] < 0:
                raise ValidationError(f"{field} cannot be negative")
    if "sku" in data and not (data["sku"] or "").strip():
        raise ValidationError("SKU cannot be blank")
    if "status" in data:
        if data["status"] is None:
            raise ValidationError("status cannot be empty")
        data["status"] = ProductStatus(data["status"]).value
    return data


class CatalogService:
    def __init__(self, store: Store, provisioning: ProvisioningService):
        self.store = store
        self.provisioning = provisioning
        self.policy = provisioning.policy

    def _repo(self, identity: Identity) -> PolicyEnforcedStore:
        return PolicyEnforcedStore(self.store, identity, self.policy)

    def _role_of(self, identity: Identity) -> Optional[Row]:
        return self.store.find_one("user_roles", {"user_id": identity.id})

    def create_product(self, identity: Identity, product_data: ProductCreate) -> ProductResponse:
        """Create a catalog item under the caller's supplier business record"""
        data = product_data.model_dump(mode="json")
        if not data.get("sku"):
            data.pop("sku", None)
        data = _validate_fields(data)
        record = self.provisioning.ensure_business_record(identity)
        data["supplier_id"] = record["id"]

        repo = self._repo(identity)
        if data.get("sku"):
            return ProductResponse(**repo.insert("products", data))

        for attempt in range(1, SKU_ATTEMPTS + 1):
            data["sku"] = generate_sku()
            try:
                row = repo.insert("products", data)
                logger.info(f"Supplier {record['id']} created product {row['id']} ({row['sku']})")
                return ProductResponse(**row)
            except ConstraintError:
                logger.warning(f"Generated SKU {data['sku']} collided (attempt {attempt}/{SKU_ATTEMPTS})")
        raise ConstraintError("Could not generate a unique SKU; supply one explicitly")

    def get_product(self, identity: Identity, product_id: str) -> ProductResponse:
        return ProductResponse(**self._repo(identity).get("products", product_id))

    def update_product(self, identity: Identity, product_id: str, product_data: ProductUpdate) -> ProductResponse:
        """Update a catalog item owned by the caller"""
        changes = _validate_fields(product_data.model_dump(exclude_unset=True, mode="json"))
        repo = self._repo(identity)
        if not changes:
            return self.get_product(identity, product_id)
        changes["updated_at"] = datetime.now(timezone.utc).isoformat()
        rows = repo.update("products", {"id": product_id}, changes)
        if not rows:
            raise NotFoundError(f"products record {product_id} not found")
        return ProductResponse(**rows[0])

    def delete_product(self, identity: Identity, product_id: str) -> bool:
        rows = self._repo(identity).delete("products", {"id": product_id})
        if not rows:
            raise NotFoundError(f"products record {product_id} not found")
        logger.info(f"Account {identity.id} deleted product {product_id}")
        return True

    def list_products(
        self,
        identity: Identity,
        status: Optional[ProductStatus] = None,
        search: Optional[str] = None,
        low_stock: bool = False
    ) -> List[ProductResponse]:
        """Catalog as seen by the caller's role.

        Suppliers see their own items, vendors see active items of approved
        suppliers, superadmins see everything.
        """
        assignment = self._role_of(identity)
        role = assignment.get("role") if assignment else None
        filters: Dict[str, Any] = {}

        if role == Role.SUPPLIER.value:
            record = self.store.find_one("suppliers", {"user_id": identity.id})
            if record is None:
                return []
            filters["supplier_id"] = record["id"]
        elif role != Role.SUPERADMIN.value:
            suppliers = self.store.query("suppliers", {
                "user_id": approved_supplier_account_ids(self.store),
                "status": SupplierStatus.ACTIVE.value,
            })
            filters["supplier_id"] = [s["id"] for s in suppliers]
            filters["status"] = ProductStatus.ACTIVE.value

        if status:
            if "status" in filters and filters["status"] != ProductStatus(status).value:
                return []
            filters["status"] = ProductStatus(status).value

        rows = self._repo(identity).list("products", filters, order_by="created_at", desc=True)
        products = [ProductResponse(**row) for row in rows]

        if search:
            term = search.lower()
            products = [
                p for p in products
                if term in p.name.lower()
                or term in (p.description or "").lower()
                or term in p.sku.lower()
            ]
        if low_stock:
            products = [p for p in products if p.is_low_stock]
        return products
