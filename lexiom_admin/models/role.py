"""Role, Permission and grant models for RBAC"""
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from lexiom_admin.database import Base
from lexiom_admin.utils.clock import utcnow
from lexiom_admin.models.admin_user import generate_uuid_string


class Role(Base):
    """A named role. Its permissions are the granted rows in ``role_permissions``."""

    __tablename__ = "roles"

    id = Column(String(36), primary_key=True, default=generate_uuid_string)
    name = Column(String(100), nullable=False)
    identifier = Column(String(50), unique=True, nullable=False, index=True)  # e.g. content_manager
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    grants = relationship("RolePermission", back_populates="role", cascade="all, delete-orphan")
    admin_users = relationship("AdminUser", back_populates="role")


class Permission(Base):
    """A permission identifier of the form ``resource:action``."""

    __tablename__ = "permissions"

    id = Column(String(36), primary_key=True, default=generate_uuid_string)
    name = Column(String(100), unique=True, nullable=False, index=True)   # modules:read
    category = Column(String(50), nullable=False)                          # modules
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class RolePermission(Base):
    """Grant relation. Only rows with ``granted=True`` count towards a role's set."""

    __tablename__ = "role_permissions"
    __table_args__ = (UniqueConstraint("role_id", "permission_id", name="uq_role_permission"),)

    id = Column(Integer, primary_key=True)
    role_id = Column(String(36), ForeignKey("roles.id", ondelete="CASCADE"), nullable=False, index=True)
    permission_id = Column(String(36), ForeignKey("permissions.id", ondelete="CASCADE"), nullable=False, index=True)
    granted = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    role = relationship("Role", back_populates="grants")
    permission = relationship("Permission")
