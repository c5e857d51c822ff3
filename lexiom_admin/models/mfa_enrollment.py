"""Pending MFA enrollment model"""
from sqlalchemy import Column, DateTime, ForeignKey, String

from lexiom_admin.database import Base
from lexiom_admin.utils.clock import utcnow


class MFAEnrollment(Base):
    """A TOTP secret generated by ``POST /admin/mfa/setup`` but not yet confirmed.

    Kept apart from ``admin_users`` so an unconfirmed secret can never be used
    at login. One row per admin; a new setup replaces it, confirmation deletes it.
    """

    __tablename__ = "mfa_enrollments"

    admin_user_id = Column(String(36), ForeignKey("admin_users.id", ondelete="CASCADE"), primary_key=True)
    secret = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
