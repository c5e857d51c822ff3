"""Legal module endpoints"""
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from lexiom_admin.api.deps import AdminContext, client_origin, get_audit_recorder, require_permissions
from lexiom_admin.database import get_db
from lexiom_admin.errors import NotFoundError
from lexiom_admin.models.legal_module import LegalModule
from lexiom_admin.schemas.module import (
    ModuleConfigRequest,
    ModuleDependenciesResponse,
    ModuleResponse,
    ModuleToggleRequest,
)
from lexiom_admin.services.audit import AuditRecorder
from lexiom_admin.utils.logger import logger

router = APIRouter(prefix="/modules", tags=["modules"])


def _get_module(db: Session, identifier: str) -> LegalModule:
    module = db.query(LegalModule).filter(LegalModule.identifier == identifier).first()
    if not module:
        raise NotFoundError(f"Module '{identifier}' not found")
    return module


@router.get("")
def list_modules(
    ctx: AdminContext = Depends(require_permissions("modules:read")),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """List all modules by category"""
    modules = db.query(LegalModule).order_by(LegalModule.category, LegalModule.name).all()
    return {"modules": [ModuleResponse.model_validate(m) for m in modules]}


@router.post("/{identifier}/toggle")
def toggle_module(
    identifier: str,
    body: ModuleToggleRequest,
    request: Request,
    ctx: AdminContext = Depends(require_permissions("modules:update")),
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
) -> Dict[str, Any]:
    """Activate or deactivate a module for the whole platform"""
    module = _get_module(db, identifier)
    previous = module.is_active
    module.is_active = body.enabled
    db.commit()

    logger.info(
        f"Module {'activated' if body.enabled else 'deactivated'}: {identifier}",
        extra={"admin_id": ctx.id, "resource_type": "legal_module", "resource_id": identifier},
    )

    ip, user_agent = client_origin(request)
    audit.record(
        actor_id=ctx.id,
        action="module_activated" if body.enabled else "module_deactivated",
        resource_type="legal_module",
        resource_id=identifier,
        old_values={"is_active": previous},
        new_values={"is_active": body.enabled},
        ip=ip,
        user_agent=user_agent,
    )
    return {"success": True}


@router.put("/{identifier}/config")
def update_module_config(
    identifier: str,
    body: ModuleConfigRequest,
    request: Request,
    ctx: AdminContext = Depends(require_permissions("modules:update")),
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
) -> Dict[str, Any]:
    """Replace a module's configuration object"""
    module = _get_module(db, identifier)
    previous = dict(module.config or {})
    module.config = body.config
    db.commit()

    ip, user_agent = client_origin(request)
    audit.record(
        actor_id=ctx.id,
        action="module_config_updated",
        resource_type="legal_module",
        resource_id=identifier,
        old_values={"config": previous},
        new_values={"config": body.config},
        ip=ip,
        user_agent=user_agent,
    )
    return {"success": True}


@router.get("/{identifier}/dependencies", response_model=ModuleDependenciesResponse)
def get_module_dependencies(
    identifier: str,
    ctx: AdminContext = Depends(require_permissions("modules:read")),
    db: Session = Depends(get_db),
) -> ModuleDependenciesResponse:
    """Modules this one needs, and active modules that need this one"""
    module = _get_module(db, identifier)

    active = db.query(LegalModule).filter(LegalModule.is_active == True).all()  # noqa: E712
    dependents = sorted(m.identifier for m in active if identifier in (m.dependencies or []))

    return ModuleDependenciesResponse(
        identifier=identifier,
        dependencies=list(module.dependencies or []),
        dependents=dependents,
    )
