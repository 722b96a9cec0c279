from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class SupplierProfileResponse(BaseModel):
    id: str
    user_id: str
    full_name: Optional[str] = None
    business_name: Optional[str] = None
    business_type: Optional[str] = None
    business_address: Optional[str] = None
    contact_number: Optional[str] = None
    fssai_license: Optional[str] = None
    other_certifications: Optional[List[str]] = None
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class VendorProfileResponse(BaseModel):
    id: str
    user_id: str
    full_name: Optional[str] = None
    company_name: Optional[str] = None
    contact_number: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    business_name: Optional[str] = None
    business_type: Optional[str] = None
    business_address: Optional[str] = None
    fssai_license: Optional[str] = None
    other_certifications: Optional[List[str]] = None
    company_name: Optional[str] = None
    contact_number: Optional[str] = None
    avatar_url: Optional[str] = None
