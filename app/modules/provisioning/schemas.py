from pydantic import BaseModel
from typing import Optional, List
from app.modules.roles.schemas import Role, ApprovalStatus


class ProfileFields(BaseModel):
    full_name: Optional[str] = None
    # supplier
    business_name: Optional[str] = None
    business_type: Optional[str] = None
    business_address: Optional[str] = None
    fssai_license: Optional[str] = None
    other_certifications: Optional[List[str]] = None
    # vendor
    company_name: Optional[str] = None
    # shared
    contact_number: Optional[str] = None
    avatar_url: Optional[str] = None


class SignUpRequest(ProfileFields):
    role: Role


class SignUpResponse(BaseModel):
    user_id: str
    email: Optional[str] = None
    role: Role
    approval_status: ApprovalStatus
    message: str
