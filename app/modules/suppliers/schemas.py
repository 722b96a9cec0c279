from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from enum import Enum


class SupplierStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class SupplierRecordResponse(BaseModel):
    id: str
    user_id: str
    name: str
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    address: Optional[str] = None
    logo_url: Optional[str] = None
    website: Optional[str] = None
    status: SupplierStatus = SupplierStatus.ACTIVE
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SupplierRecordUpdate(BaseModel):
    name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    address: Optional[str] = None
    logo_url: Optional[str] = None
    website: Optional[str] = None
    status: Optional[SupplierStatus] = None
