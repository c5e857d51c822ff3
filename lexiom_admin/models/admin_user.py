"""AdminUser model: admin identities with lockout and MFA state"""
import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from lexiom_admin.database import Base
from lexiom_admin.utils.clock import utcnow


def generate_uuid_string():
    """Generate UUID as string for SQLite compatibility"""
    return str(uuid.uuid4())


class AdminUser(Base):
    """An admin identity.

    Provisioned outside the login flow (``seed_admin.py`` or the hosting store);
    the login state machine only mutates ``login_attempts``, ``locked_until`` and
    ``last_login_at``, and MFA setup/disable mutates the ``mfa_*`` columns.
    ``locked_until`` in the future blocks every login attempt.
    """

    __tablename__ = "admin_users"

    id = Column(String(36), primary_key=True, default=generate_uuid_string)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False)
    role_id = Column(String(36), ForeignKey("roles.id", ondelete="SET NULL"), nullable=True, index=True)
    is_super_admin = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    mfa_enabled = Column(Boolean, default=False, nullable=False)
    mfa_secret = Column(String(255), nullable=True)
    login_attempts = Column(Integer, default=0, nullable=False)
    locked_until = Column(DateTime, nullable=True)                 # naive UTC
    last_login_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    role = relationship("Role", back_populates="admin_users")
