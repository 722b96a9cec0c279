from pydantic import BaseModel, computed_field
from typing import Optional
from datetime import datetime
from decimal import Decimal
from enum import Enum


class ProductStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class ProductCreate(BaseModel):
    name: str
    description: Optional[str] = None
    unit_price: Decimal
    stock_quantity: int = 0
    min_stock_level: int = 10
    sku: Optional[str] = None  # generated when omitted
    image_url: Optional[str] = None
    status: ProductStatus = ProductStatus.ACTIVE


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    unit_price: Optional[Decimal] = None
    stock_quantity: Optional[int] = None
    min_stock_level: Optional[int] = None
    sku: Optional[str] = None
    image_url: Optional[str] = None
    status: Optional[ProductStatus] = None


class ProductResponse(BaseModel):
    id: str
    supplier_id: str
    name: str
    description: Optional[str] = None
    unit_price: Decimal
    stock_quantity: int = 0
    min_stock_level: int = 10
    sku: str
    image_url: Optional[str] = None
    status: ProductStatus = ProductStatus.ACTIVE
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @computed_field
    @property
    def is_low_stock(self) -> bool:
        return self.stock_quantity <= self.min_stock_level

    class Config:
        from_attributes = True
