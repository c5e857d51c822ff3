"""Role and permission schemas"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class PermissionResponse(BaseModel):
    id: str
    name: str
    category: str
    description: Optional[str]

    class Config:
        from_attributes = True


class RoleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    identifier: str = Field(..., min_length=1, max_length=50, pattern=r"^[a-z0-9_]+$")
    description: Optional[str] = None
    permissions: List[str] = Field(default_factory=list, description="Permission names to grant")


class RolePermissionsUpdate(BaseModel):
    permissions: List[str] = Field(..., description="Complete set of permission names to grant")


class RoleResponse(BaseModel):
    id: str
    name: str
    identifier: str
    description: Optional[str]
    is_active: bool
    permissions: List[str]
    created_at: datetime
