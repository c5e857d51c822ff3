"""LegalTemplate model"""
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text

from lexiom_admin.database import Base
from lexiom_admin.utils.clock import utcnow
from lexiom_admin.models.admin_user import generate_uuid_string


class LegalTemplate(Base):
    """A document template that must be approved before it is offered to tenants"""

    __tablename__ = "legal_templates"

    id = Column(String(36), primary_key=True, default=generate_uuid_string)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=False, index=True)
    content = Column(Text, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    is_approved = Column(Boolean, default=False, nullable=False)
    approved_by = Column(String(36), ForeignKey("admin_users.id", ondelete="SET NULL"), nullable=True)
    approved_at = Column(DateTime, nullable=True)
    created_by = Column(String(36), ForeignKey("admin_users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
