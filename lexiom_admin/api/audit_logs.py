"""Audit log endpoints"""
import csv
import io
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from lexiom_admin.api.deps import AdminContext, require_permissions
from lexiom_admin.config import settings
from lexiom_admin.database import get_db
from lexiom_admin.repositories.audit_repository import AuditLogFilters, AuditLogRepository
from lexiom_admin.schemas.audit_log import AuditLogPage, AuditLogResponse
from lexiom_admin.utils.clock import utcnow
from lexiom_admin.utils.logger import logger

router = APIRouter(prefix="/audit-logs", tags=["audit"])

EXPORT_COLUMNS = ["id", "user_id", "action", "resource_type", "resource_id", "created_at"]

# Leading characters a spreadsheet would evaluate as a formula
_FORMULA_PREFIXES = ("=", "+", "-", "@")


def _csv_cell(value: Any) -> str:
    if value is None:
        return ""
    text = value.isoformat() if isinstance(value, datetime) else str(value)
    if text.startswith(_FORMULA_PREFIXES):
        return "\t" + text
    return text


def _filters(
    action: Optional[str] = Query(None, description="Exact action name"),
    resource_type: Optional[str] = Query(None, description="Exact resource type"),
    search: Optional[str] = Query(None, max_length=100, description="Substring of action or resource type"),
    start_date: Optional[datetime] = Query(None, description="Inclusive lower bound (ISO 8601)"),
    end_date: Optional[datetime] = Query(None, description="Inclusive upper bound (ISO 8601)"),
) -> AuditLogFilters:
    return AuditLogFilters(
        action=action,
        resource_type=resource_type,
        search=search,
        start_date=start_date,
        end_date=end_date,
    )


@router.get("", response_model=AuditLogPage)
def list_audit_logs(
    filters: AuditLogFilters = Depends(_filters),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    ctx: AdminContext = Depends(require_permissions("audit:read")),
    db: Session = Depends(get_db),
) -> AuditLogPage:
    """
    Query audit events, newest first.

    Requires `audit:read`. Entries are append-only; there is no endpoint that
    edits or deletes them.
    """
    rows, total = AuditLogRepository(db).search(filters, offset=(page - 1) * limit, limit=limit)
    return AuditLogPage(
        logs=[AuditLogResponse.model_validate(row) for row in rows],
        total=total,
        page=page,
        limit=limit,
    )


@router.get("/export")
def export_audit_logs(
    filters: AuditLogFilters = Depends(_filters),
    ctx: AdminContext = Depends(require_permissions("audit:read")),
    db: Session = Depends(get_db),
) -> Response:
    """
    Download matching audit events as CSV.

    The header row is always present, even when nothing matches. At most
    AUDIT_EXPORT_MAX_ROWS rows are exported, newest first.
    """
    rows, total = AuditLogRepository(db).search(filters, offset=0, limit=settings.AUDIT_EXPORT_MAX_ROWS)

    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(EXPORT_COLUMNS)
    for row in rows:
        writer.writerow([_csv_cell(getattr(row, column)) for column in EXPORT_COLUMNS])

    logger.info(
        f"Audit log exported: {len(rows)} of {total} rows",
        extra={"admin_id": ctx.id, "action": "audit_export"},
    )

    filename = f"audit-logs-{utcnow().strftime('%Y%m%d-%H%M%S')}.csv"
    return Response(
        content=buf.getvalue(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
