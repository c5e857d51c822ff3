"""Login and session schemas"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=1024)
    mfa_code: Optional[str] = Field(None, alias="mfaCode", max_length=16)

    class Config:
        populate_by_name = True


class UserResponse(BaseModel):
    """Public profile of an admin identity. Never includes hashes or MFA secrets."""

    id: str
    email: str
    full_name: str
    role_id: Optional[str]
    is_super_admin: bool
    mfa_enabled: bool
    last_login_at: Optional[datetime]

    class Config:
        from_attributes = True


class LoginResponse(BaseModel):
    token: str
    user: UserResponse


class LogoutResponse(BaseModel):
    success: bool = True
    message: str = "Logged out successfully"


class MeResponse(UserResponse):
    permissions: List[str] = Field(default_factory=list, description="Currently granted permission names")
