from pydantic import BaseModel
from typing import Optional, Dict, Any
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    SUPPLIER = "supplier"
    VENDOR = "vendor"
    SUPERADMIN = "superadmin"


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class RoleAssignmentResponse(BaseModel):
    id: str
    user_id: str
    role: Role
    approval_status: ApprovalStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RoleAssignmentWithProfile(RoleAssignmentResponse):
    profile: Optional[Dict[str, Any]] = None


class ApprovalDecisionResponse(BaseModel):
    user_id: str
    previous_status: ApprovalStatus
    approval_status: ApprovalStatus
    message: str
