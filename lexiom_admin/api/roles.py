"""Role and permission management endpoints"""
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from lexiom_admin.api.deps import AdminContext, client_origin, get_audit_recorder, require_permissions
from lexiom_admin.database import get_db
from lexiom_admin.errors import NotFoundError, ValidationError
from lexiom_admin.models.role import Permission, Role
from lexiom_admin.repositories.role_repository import RoleRepository
from lexiom_admin.schemas.role import PermissionResponse, RoleCreate, RolePermissionsUpdate, RoleResponse
from lexiom_admin.services.audit import AuditRecorder

router = APIRouter(tags=["roles"])


def _role_response(role: Role) -> RoleResponse:
    return RoleResponse(
        id=role.id,
        name=role.name,
        identifier=role.identifier,
        description=role.description,
        is_active=role.is_active,
        permissions=sorted(g.permission.name for g in role.grants if g.granted),
        created_at=role.created_at,
    )


def _resolve_permissions(roles: RoleRepository, names: List[str]) -> List[Permission]:
    """Look up permission rows by name; unknown names are a client error."""
    permissions = roles.get_permissions_by_name(names)
    unknown = set(names) - {p.name for p in permissions}
    if unknown:
        raise ValidationError(f"Unknown permissions: {', '.join(sorted(unknown))}")
    return permissions


def _get_role(roles: RoleRepository, role_id: str) -> Role:
    role = roles.get(role_id)
    if not role:
        raise NotFoundError(f"Role '{role_id}' not found")
    return role


@router.get("/roles")
def list_roles(
    ctx: AdminContext = Depends(require_permissions("permissions:read")),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    return {"roles": [_role_response(r) for r in RoleRepository(db).list_roles()]}


@router.post("/roles", status_code=status.HTTP_201_CREATED)
def create_role(
    body: RoleCreate,
    request: Request,
    ctx: AdminContext = Depends(require_permissions("permissions:update")),
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
) -> Dict[str, Any]:
    """Create a role, optionally with its initial permission grants"""
    roles = RoleRepository(db)
    if roles.get_by_identifier(body.identifier):
        raise ValidationError(f"Role identifier '{body.identifier}' already exists")

    permissions = _resolve_permissions(roles, body.permissions)
    role = Role(name=body.name, identifier=body.identifier, description=body.description)
    role = roles.create(role)
    if permissions:
        roles.replace_grants(role, permissions)

    ip, user_agent = client_origin(request)
    audit.record(
        actor_id=ctx.id,
        action="role_created",
        resource_type="role",
        resource_id=role.id,
        new_values={
            "name": role.name,
            "identifier": role.identifier,
            "permissions": sorted(p.name for p in permissions),
        },
        ip=ip,
        user_agent=user_agent,
    )
    return {"role": _role_response(role)}


@router.put("/roles/{role_id}/permissions")
def update_role_permissions(
    role_id: str,
    body: RolePermissionsUpdate,
    request: Request,
    ctx: AdminContext = Depends(require_permissions("permissions:update")),
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
) -> Dict[str, Any]:
    """Replace the role's granted set. Takes effect on the next request of every holder."""
    roles = RoleRepository(db)
    role = _get_role(roles, role_id)
    permissions = _resolve_permissions(roles, body.permissions)

    previous = sorted(roles.granted_permissions(role.id))
    roles.replace_grants(role, permissions)

    ip, user_agent = client_origin(request)
    audit.record(
        actor_id=ctx.id,
        action="role_permissions_updated",
        resource_type="role",
        resource_id=role.id,
        old_values={"permissions": previous},
        new_values={"permissions": sorted(p.name for p in permissions)},
        ip=ip,
        user_agent=user_agent,
    )
    return {"success": True, "role": _role_response(role)}


@router.delete("/roles/{role_id}")
def delete_role(
    role_id: str,
    request: Request,
    ctx: AdminContext = Depends(require_permissions("permissions:update")),
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
) -> Dict[str, Any]:
    """Delete a role. Holders keep their account but lose the role's grants."""
    roles = RoleRepository(db)
    role = _get_role(roles, role_id)
    snapshot = {"name": role.name, "identifier": role.identifier}
    roles.delete(role)

    ip, user_agent = client_origin(request)
    audit.record(
        actor_id=ctx.id,
        action="role_deleted",
        resource_type="role",
        resource_id=role_id,
        old_values=snapshot,
        ip=ip,
        user_agent=user_agent,
    )
    return {"success": True}


@router.get("/permissions")
def list_permissions(
    ctx: AdminContext = Depends(require_permissions("permissions:read")),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Permission catalogue, grouped by category"""
    return {
        "permissions": [PermissionResponse.model_validate(p) for p in RoleRepository(db).list_permissions()]
    }
