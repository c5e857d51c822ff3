"""Password hashing with bcrypt, plus a time-bounded verification wrapper"""
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError

import bcrypt

from lexiom_admin.config import settings
from lexiom_admin.utils.logger import logger

# bcrypt is intentionally slow; run comparisons on a small dedicated pool so a
# stalled hash cannot hold a request thread past PASSWORD_VERIFY_TIMEOUT_SECONDS.
_hash_executor = ThreadPoolExecutor(
    max_workers=settings.PASSWORD_HASH_WORKERS,
    thread_name_prefix="password-verify",
)


class PasswordCheckTimeout(Exception):
    """The password comparison did not finish within the configured bound."""


def hash_password(password: str) -> str:
    """Hash a plain-text password with bcrypt."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)).decode()


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain-text password against a bcrypt hash.

    Malformed hashes and over-long passwords (bcrypt rejects > 72 bytes) are a
    mismatch, never an error.
    """
    try:
        return bcrypt.checkpw(plain_password.encode(), hashed_password.encode())
    except ValueError:
        return False


def verify_password_bounded(plain_password: str, hashed_password: str) -> bool:
    """:func:`verify_password` with a hard timeout.

    Raises:
        PasswordCheckTimeout: the comparison exceeded PASSWORD_VERIFY_TIMEOUT_SECONDS.
            Callers must treat this as a denial.
    """
    future = _hash_executor.submit(verify_password, plain_password, hashed_password)
    try:
        return future.result(timeout=settings.PASSWORD_VERIFY_TIMEOUT_SECONDS)
    except FutureTimeoutError:
        future.cancel()
        logger.warning(
            "Password verification timed out",
            extra={"action": "verify_password", "outcome": "timeout"},
        )
        raise PasswordCheckTimeout()


# Compared against when the email is unknown so that response timing does not
# reveal whether an account exists.
DUMMY_PASSWORD_HASH = hash_password("lexiom-admin-timing-equaliser")
