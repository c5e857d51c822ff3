"""Legal module schemas"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ModuleResponse(BaseModel):
    id: str
    identifier: str
    name: str
    description: Optional[str]
    category: str
    version: str
    is_active: bool
    is_core: bool
    config: Dict[str, Any]
    dependencies: List[str]
    updated_at: datetime

    class Config:
        from_attributes = True


class ModuleToggleRequest(BaseModel):
    enabled: bool


class ModuleConfigRequest(BaseModel):
    config: Dict[str, Any] = Field(..., description="Replaces the module's whole config object")


class ModuleDependenciesResponse(BaseModel):
    identifier: str
    dependencies: List[str]
    dependents: List[str] = Field(..., description="Active modules that depend on this one")
