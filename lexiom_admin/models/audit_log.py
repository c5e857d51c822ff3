"""Audit log model"""
from sqlalchemy import Column, DateTime, ForeignKey, JSON, String, Text

from lexiom_admin.database import Base
from lexiom_admin.utils.clock import utcnow
from lexiom_admin.models.admin_user import generate_uuid_string


class AuditLog(Base):
    """AuditLog model - append-only record of administrative actions.

    Rows are inserted by :class:`lexiom_admin.services.audit.AuditRecorder` and
    never updated or deleted; no route exposes a mutation.
    """

    __tablename__ = "audit_logs"

    id = Column(String(36), primary_key=True, default=generate_uuid_string)
    user_id = Column(String(36), ForeignKey("admin_users.id", ondelete="SET NULL"), nullable=True, index=True)
    action = Column(String(100), nullable=False, index=True)
    resource_type = Column(String(100), nullable=False, index=True)
    resource_id = Column(String(100), nullable=True)
    old_values = Column(JSON, nullable=True)
    new_values = Column(JSON, nullable=True)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
