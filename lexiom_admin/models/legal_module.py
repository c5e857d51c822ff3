"""LegalModule model"""
from sqlalchemy import Boolean, Column, DateTime, JSON, String, Text

from lexiom_admin.database import Base
from lexiom_admin.utils.clock import utcnow
from lexiom_admin.models.admin_user import generate_uuid_string


class LegalModule(Base):
    """A product module that can be switched on or off for the whole platform"""

    __tablename__ = "legal_modules"

    id = Column(String(36), primary_key=True, default=generate_uuid_string)
    identifier = Column(String(50), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(50), nullable=False, index=True)
    version = Column(String(20), default="1.0.0", nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    is_core = Column(Boolean, default=False, nullable=False)
    config = Column(JSON, default=dict, nullable=False)
    dependencies = Column(JSON, default=list, nullable=False)  # list of module identifiers
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
