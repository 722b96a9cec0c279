from pydantic import BaseModel, EmailStr
from typing import Optional, Dict, Any
from app.modules.provisioning.schemas import SignUpRequest
from app.modules.roles.schemas import RoleAssignmentResponse


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str


class RegisterRequest(SignUpRequest):
    email: EmailStr
    password: str


class MeResponse(BaseModel):
    id: str
    email: Optional[str] = None
    role: Optional[RoleAssignmentResponse] = None
    profile: Optional[Dict[str, Any]] = None
    is_approved: bool = False


class PasswordResetRequest(BaseModel):
    email: EmailStr
    redirect_to: Optional[str] = None  # defaults to settings.password_reset_redirect_url


class ResendVerificationRequest(BaseModel):
    email: EmailStr


class MessageResponse(BaseModel):
    message: str
