"""Login state machine.

    Unauthenticated --(password ok, no MFA)-------------------> Authenticated
    Unauthenticated --(password ok, MFA on)--> MFAPending --(code ok)--> Authenticated
    any invalid attempt --> FailureRecorded --(attempts >= max)--> Locked

``Locked`` rejects every attempt, without looking at the password, until
``locked_until`` has passed.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from lexiom_admin.config import settings
from lexiom_admin.errors import AuthenticationError, LockedError, MFARequiredError
from lexiom_admin.middleware.monitoring import record_login_outcome
from lexiom_admin.models.admin_user import AdminUser
from lexiom_admin.repositories.admin_user_repository import AdminUserRepository
from lexiom_admin.services.audit import AuditRecorder
from lexiom_admin.utils.clock import utcnow
from lexiom_admin.utils.jwt_utils import create_session_token
from lexiom_admin.utils.logger import logger
from lexiom_admin.utils.passwords import DUMMY_PASSWORD_HASH, PasswordCheckTimeout, verify_password_bounded
from lexiom_admin.utils.totp import verify_totp

INVALID_CREDENTIALS = "Invalid credentials"


@dataclass
class LoginResult:
    token: str
    user: AdminUser


class LoginService:
    """Validates credentials, enforces lockout and MFA, and issues session tokens."""

    def __init__(
        self,
        users: AdminUserRepository,
        audit: AuditRecorder,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.users = users
        self.audit = audit
        self.clock = clock

    def login(
        self,
        email: str,
        password: str,
        mfa_code: Optional[str] = None,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> LoginResult:
        """Run one login attempt.

        Raises:
            AuthenticationError: unknown/inactive identity, wrong password, bad MFA code,
                or a password check that timed out. Always the same message.
            LockedError: the identity is locked.
            MFARequiredError: password ok but the identity needs a TOTP code.
        """
        now = self.clock()
        user = self.users.get_by_email(email)

        if user is None or not user.is_active:
            self._check_password(password, DUMMY_PASSWORD_HASH)
            self._fail("unknown_or_inactive")

        if user.locked_until is not None and user.locked_until > now:
            record_login_outcome("locked")
            logger.warning(
                "Login rejected: account locked",
                extra={"admin_id": user.id, "action": "admin_login", "outcome": "locked"},
            )
            raise LockedError()

        if not self._check_password(password, user.password_hash):
            attempts = self.users.record_failed_attempt(
                user.id,
                now,
                max_attempts=settings.LOGIN_MAX_ATTEMPTS,
                lockout=timedelta(minutes=settings.LOGIN_LOCKOUT_MINUTES),
            )
            if attempts >= settings.LOGIN_MAX_ATTEMPTS:
                logger.warning(
                    f"Account locked after {attempts} failed attempts",
                    extra={"admin_id": user.id, "action": "admin_login", "outcome": "lockout"},
                )
            self._fail("bad_password", admin_id=user.id)

        if user.mfa_enabled:
            if not mfa_code:
                record_login_outcome("mfa_required")
                raise MFARequiredError()
            if not verify_totp(user.mfa_secret, mfa_code):
                self._fail("bad_mfa_code", admin_id=user.id)

        self.users.record_successful_login(user.id, now)
        token = create_session_token(user.id, user.email, user.is_super_admin)

        self.audit.record(
            actor_id=user.id,
            action="admin_login",
            resource_type="admin_user",
            resource_id=user.id,
            ip=ip,
            user_agent=user_agent,
        )
        record_login_outcome("success")

        return LoginResult(token=token, user=self.users.get_by_id(user.id))

    @staticmethod
    def _check_password(password: str, password_hash: str) -> bool:
        try:
            return verify_password_bounded(password, password_hash)
        except PasswordCheckTimeout:
            # Fail closed; a slow hash is not held against the identity.
            record_login_outcome("timeout")
            raise AuthenticationError(INVALID_CREDENTIALS)

    @staticmethod
    def _fail(reason: str, admin_id: Optional[str] = None):
        record_login_outcome(reason)
        logger.info(
            "Login failed",
            extra={"admin_id": admin_id, "action": "admin_login", "outcome": reason},
        )
        raise AuthenticationError(INVALID_CREDENTIALS)
