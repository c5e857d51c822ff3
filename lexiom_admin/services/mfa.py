"""MFA enrollment: setup, confirmation and removal of an admin's TOTP secret"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy.orm import Session

from lexiom_admin.config import settings
from lexiom_admin.errors import ValidationError
from lexiom_admin.models.admin_user import AdminUser
from lexiom_admin.models.mfa_enrollment import MFAEnrollment
from lexiom_admin.repositories.admin_user_repository import AdminUserRepository
from lexiom_admin.services.audit import AuditRecorder
from lexiom_admin.utils.clock import utcnow
from lexiom_admin.utils.totp import generate_qr_code_base64, generate_totp_secret, get_totp_provisioning_uri, verify_totp


@dataclass
class MFASetup:
    secret: str
    otpauth_url: str
    qr_code: str


class MFAService:
    """Two-step enrollment.

    ``setup`` only stores a pending secret; the identity keeps logging in
    without MFA until ``confirm`` proves the authenticator app produces valid
    codes for it.
    """

    def __init__(
        self,
        db: Session,
        audit: AuditRecorder,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.db = db
        self.users = AdminUserRepository(db)
        self.audit = audit
        self.clock = clock

    def setup(self, user: AdminUser) -> MFASetup:
        if user.mfa_enabled:
            raise ValidationError("MFA is already enabled")

        secret = generate_totp_secret()
        uri = get_totp_provisioning_uri(secret, user.email)

        enrollment = self.db.get(MFAEnrollment, user.id)
        if enrollment is None:
            enrollment = MFAEnrollment(admin_user_id=user.id)
            self.db.add(enrollment)
        enrollment.secret = secret
        enrollment.created_at = self.clock()
        self.db.commit()

        return MFASetup(secret=secret, otpauth_url=uri, qr_code=generate_qr_code_base64(uri))

    def confirm(
        self,
        user: AdminUser,
        code: str,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> AdminUser:
        """Attach the pending secret once ``code`` verifies against it.

        A wrong code leaves the pending secret in place for another try.
        """
        enrollment = self.db.get(MFAEnrollment, user.id)
        if enrollment is None:
            raise ValidationError("No pending MFA setup")

        if enrollment.created_at + timedelta(seconds=settings.MFA_PENDING_TTL_SECONDS) < self.clock():
            self.db.delete(enrollment)
            self.db.commit()
            raise ValidationError("MFA setup expired, start again")

        if not verify_totp(enrollment.secret, code):
            raise ValidationError("Invalid MFA code")

        secret = enrollment.secret
        self.db.delete(enrollment)
        user = self.users.set_mfa(user, secret)

        self.audit.record(
            actor_id=user.id,
            action="mfa_enabled",
            resource_type="admin_user",
            resource_id=user.id,
            old_values={"mfa_enabled": False},
            new_values={"mfa_enabled": True},
            ip=ip,
            user_agent=user_agent,
        )
        return user

    def disable(
        self,
        user: AdminUser,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> AdminUser:
        if not user.mfa_enabled:
            raise ValidationError("MFA is not enabled")

        user = self.users.set_mfa(user, None)

        self.audit.record(
            actor_id=user.id,
            action="mfa_disabled",
            resource_type="admin_user",
            resource_id=user.id,
            old_values={"mfa_enabled": True},
            new_values={"mfa_enabled": False},
            ip=ip,
            user_agent=user_agent,
        )
        return user
