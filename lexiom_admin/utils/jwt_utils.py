"""JWT keypair management plus session token signing and verification"""
import uuid
from datetime import datetime, timezone
from typing import Any, Dict

from jose import JWTError, jwt

from lexiom_admin.config import settings
from lexiom_admin.errors import AuthenticationError
from lexiom_admin.utils.logger import logger

# ---------------------------------------------------------------------------
# Keypair management
# ---------------------------------------------------------------------------

_private_key: Any = None   # cryptography RSAPrivateKey object
_public_key: Any = None    # cryptography RSAPublicKey object

TOKEN_TYPE_ADMIN = "admin"


def _load_keypair() -> None:
    """Load or auto-generate the RSA keypair.

    Reads JWT_PRIVATE_KEY from settings (PEM string).
    If absent, generates a fresh RSA-2048 keypair, logs the private key PEM
    so the operator can paste it into .env to make it persistent across restarts.
    """
    global _private_key, _public_key

    from cryptography.hazmat.primitives import serialization
    from cryptography.hazmat.primitives.asymmetric import rsa

    if settings.JWT_PRIVATE_KEY:
        pem = settings.JWT_PRIVATE_KEY.encode()
        _private_key = serialization.load_pem_private_key(pem, password=None)
        _public_key = _private_key.public_key()
        logger.info("JWT keypair loaded from JWT_PRIVATE_KEY setting")
    else:
        _private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        _public_key = _private_key.public_key()

        pem_str = _private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption(),
        ).decode()

        logger.warning(
            "JWT_PRIVATE_KEY not set; auto-generated RSA-2048 keypair for this process. "
            "All sessions will be invalidated on restart. "
            "Set the following in .env to persist the key:\n"
            f"JWT_PRIVATE_KEY=\"{pem_str.strip()}\""
        )


def get_private_key() -> Any:
    """Return the loaded private key, initialising on first call."""
    if _private_key is None:
        _load_keypair()
    return _private_key


def get_public_key() -> Any:
    """Return the loaded public key, initialising on first call."""
    if _public_key is None:
        _load_keypair()
    return _public_key


# ---------------------------------------------------------------------------
# Token creation
# ---------------------------------------------------------------------------

def create_session_token(admin_id: str, email: str, is_super_admin: bool) -> str:
    """Sign and return an admin session token.

    The expiry is fixed at JWT_ADMIN_EXPIRE_SECONDS from now. Tokens are
    stateless: there is no server-side session record or revocation list.

    Args:
        admin_id:       Identity id, stored as the ``sub`` claim.
        email:          Identity email, informational.
        is_super_admin: Informational only; authorization always re-reads the
                        identity row.

    Returns:
        Signed JWT string.
    """
    now = int(datetime.now(timezone.utc).timestamp())

    payload: Dict[str, Any] = {
        "sub": admin_id,
        "email": email,
        "is_super_admin": is_super_admin,
        "type": TOKEN_TYPE_ADMIN,
        "jti": str(uuid.uuid4()),
        "iat": now,
        "exp": now + settings.JWT_ADMIN_EXPIRE_SECONDS,
    }

    if settings.JWT_KEY_ID:
        payload["kid"] = settings.JWT_KEY_ID

    return jwt.encode(payload, get_private_key(), algorithm=settings.JWT_ALGORITHM)


# ---------------------------------------------------------------------------
# Token verification
# ---------------------------------------------------------------------------

def decode_session_token(token: str) -> Dict[str, Any]:
    """Verify a session token and return its payload.

    Checks signature, expiry (jose handles ``exp``), token type and the
    presence of a subject. Nothing is looked up in the store here.

    Raises:
        AuthenticationError: on any verification failure.
    """
    try:
        payload = jwt.decode(
            token,
            get_public_key(),
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError as exc:
        logger.debug(f"JWT decode failed: {exc}")
        raise AuthenticationError("Invalid or expired token")

    if payload.get("type") != TOKEN_TYPE_ADMIN or not payload.get("sub"):
        raise AuthenticationError("Invalid or expired token")

    return payload
