"""Audit sink and audit log queries."""
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Protocol, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from lexiom_admin.models.audit_log import AuditLog


class AuditSink(Protocol):
    """Append-only destination for audit events."""

    def append(self, entry: AuditLog) -> None:
        ...


class SqlAuditSink:
    """Writes audit events to the ``audit_logs`` table in their own transaction.

    Callers commit their primary change before recording, so a failure here
    only rolls back the audit row itself.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def append(self, entry: AuditLog) -> None:
        try:
            self.db.add(entry)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise


@dataclass
class AuditLogFilters:
    action: Optional[str] = None
    resource_type: Optional[str] = None
    search: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class AuditLogRepository:
    """Read side of the audit log. There is intentionally no update or delete."""

    def __init__(self, db: Session) -> None:
        self.db = db

    @staticmethod
    def _apply_filters(query, filters: AuditLogFilters):
        if filters.action:
            query = query.where(AuditLog.action == filters.action)
        if filters.resource_type:
            query = query.where(AuditLog.resource_type == filters.resource_type)
        if filters.search:
            pattern = f"%{filters.search}%"
            query = query.where(
                or_(AuditLog.action.ilike(pattern), AuditLog.resource_type.ilike(pattern))
            )
        if filters.start_date:
            query = query.where(AuditLog.created_at >= filters.start_date)
        if filters.end_date:
            query = query.where(AuditLog.created_at <= filters.end_date)
        return query

    def search(self, filters: AuditLogFilters, offset: int, limit: int) -> Tuple[List[AuditLog], int]:
        """Return one page of matching events (newest first) and the total match count."""
        total = self.db.execute(
            self._apply_filters(select(func.count()).select_from(AuditLog), filters)
        ).scalar_one()

        rows = self.db.execute(
            self._apply_filters(select(AuditLog), filters)
            .order_by(AuditLog.created_at.desc())
            .offset(offset)
            .limit(limit)
        ).scalars()
        return list(rows), total
