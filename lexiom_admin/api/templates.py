"""Legal template endpoints"""
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from lexiom_admin.api.deps import AdminContext, client_origin, get_audit_recorder, require_permissions
from lexiom_admin.database import get_db
from lexiom_admin.errors import NotFoundError
from lexiom_admin.models.legal_template import LegalTemplate
from lexiom_admin.schemas.template import TemplateCreate, TemplateResponse, TemplateUpdate
from lexiom_admin.services.audit import AuditRecorder
from lexiom_admin.utils.clock import utcnow

router = APIRouter(prefix="/legal-templates", tags=["templates"])


def _get_template(db: Session, template_id: str) -> LegalTemplate:
    template = db.query(LegalTemplate).filter(LegalTemplate.id == template_id).first()
    if not template:
        raise NotFoundError(f"Template '{template_id}' not found")
    return template


@router.get("")
def list_templates(
    ctx: AdminContext = Depends(require_permissions("templates:read")),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    templates = db.query(LegalTemplate).order_by(LegalTemplate.updated_at.desc()).all()
    return {"templates": [TemplateResponse.model_validate(t) for t in templates]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_template(
    body: TemplateCreate,
    request: Request,
    ctx: AdminContext = Depends(require_permissions("templates:create")),
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
) -> Dict[str, Any]:
    """Create a template. New templates start unapproved."""
    template = LegalTemplate(**body.model_dump(), created_by=ctx.id)
    db.add(template)
    db.commit()
    db.refresh(template)

    ip, user_agent = client_origin(request)
    audit.record(
        actor_id=ctx.id,
        action="legal_template_created",
        resource_type="legal_template",
        resource_id=template.id,
        new_values=body.model_dump(exclude={"content"}),
        ip=ip,
        user_agent=user_agent,
    )
    return {"template": TemplateResponse.model_validate(template)}


@router.put("/{template_id}")
def update_template(
    template_id: str,
    body: TemplateUpdate,
    request: Request,
    ctx: AdminContext = Depends(require_permissions("templates:update")),
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
) -> Dict[str, Any]:
    """Partially update a template"""
    template = _get_template(db, template_id)
    updates = body.model_dump(exclude_unset=True)
    previous = {field: getattr(template, field) for field in updates}

    for field, value in updates.items():
        setattr(template, field, value)
    db.commit()
    db.refresh(template)

    ip, user_agent = client_origin(request)
    audit.record(
        actor_id=ctx.id,
        action="legal_template_updated",
        resource_type="legal_template",
        resource_id=template.id,
        old_values=previous,
        new_values=updates,
        ip=ip,
        user_agent=user_agent,
    )
    return {"success": True, "template": TemplateResponse.model_validate(template)}


@router.post("/{template_id}/approve")
def approve_template(
    template_id: str,
    request: Request,
    ctx: AdminContext = Depends(require_permissions("templates:update")),
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
) -> Dict[str, Any]:
    """Mark a template approved by the caller"""
    template = _get_template(db, template_id)
    template.is_approved = True
    template.approved_by = ctx.id
    template.approved_at = utcnow()
    db.commit()
    db.refresh(template)

    ip, user_agent = client_origin(request)
    audit.record(
        actor_id=ctx.id,
        action="legal_template_approved",
        resource_type="legal_template",
        resource_id=template.id,
        new_values={"is_approved": True},
        ip=ip,
        user_agent=user_agent,
    )
    return {"success": True, "template": TemplateResponse.model_validate(template)}


@router.delete("/{template_id}")
def delete_template(
    template_id: str,
    request: Request,
    ctx: AdminContext = Depends(require_permissions("templates:delete")),
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
) -> Dict[str, Any]:
    template = _get_template(db, template_id)
    snapshot = {"name": template.name, "category": template.category}
    db.delete(template)
    db.commit()

    ip, user_agent = client_origin(request)
    audit.record(
        actor_id=ctx.id,
        action="legal_template_deleted",
        resource_type="legal_template",
        resource_id=template_id,
        old_values=snapshot,
        ip=ip,
        user_agent=user_agent,
    )
    return {"success": True}
