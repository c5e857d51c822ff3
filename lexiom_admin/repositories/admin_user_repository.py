"""Repository for admin identities (the credential store)."""
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from lexiom_admin.models.admin_user import AdminUser


class AdminUserRepository:
    """Data access layer for admin identities.

    Lockout bookkeeping is done with single-statement conditional updates so
    concurrent failures on the same row serialize at the store, not in process.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_by_email(self, email: str) -> Optional[AdminUser]:
        return self.db.execute(
            select(AdminUser).where(func.lower(AdminUser.email) == email.strip().lower())
        ).scalar_one_or_none()

    def get_by_id(self, admin_id: str) -> Optional[AdminUser]:
        return self.db.get(AdminUser, admin_id)

    def record_failed_attempt(
        self,
        admin_id: str,
        now: datetime,
        max_attempts: int,
        lockout: timedelta,
    ) -> int:
        """Increment the failure counter and lock the row once it reaches ``max_attempts``.

        Returns:
            The counter value after the increment.
        """
        self.db.execute(
            update(AdminUser)
            .where(AdminUser.id == admin_id)
            .values(login_attempts=AdminUser.login_attempts + 1)
            .execution_options(synchronize_session=False)
        )
        self.db.execute(
            update(AdminUser)
            .where(AdminUser.id == admin_id, AdminUser.login_attempts >= max_attempts)
            .values(locked_until=now + lockout)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()

        return self.db.execute(
            select(AdminUser.login_attempts).where(AdminUser.id == admin_id)
        ).scalar_one()

    def record_successful_login(self, admin_id: str, now: datetime) -> None:
        self.db.execute(
            update(AdminUser)
            .where(AdminUser.id == admin_id)
            .values(login_attempts=0, locked_until=None, last_login_at=now)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()

    def set_mfa(self, user: AdminUser, secret: Optional[str]) -> AdminUser:
        """Attach (``secret``) or clear (``None``) the identity's TOTP secret."""
        user.mfa_secret = secret
        user.mfa_enabled = secret is not None
        self.db.commit()
        self.db.refresh(user)
        return user
