"""
TOTP (RFC 6238) helpers for admin MFA.

Compatible with Google Authenticator, Authy and other authenticator apps:
30-second step, 6 digits, SHA-1.
"""
import base64
import io
from typing import Optional

import pyotp
import qrcode

from lexiom_admin.config import settings


def generate_totp_secret() -> str:
    """
    Generate a new TOTP secret for MFA enrollment.

    Returns:
        Base32-encoded secret (32 characters).
    """
    return pyotp.random_base32()


def get_totp_provisioning_uri(secret: str, email: str, issuer: Optional[str] = None) -> str:
    """
    Generate an ``otpauth://`` provisioning URI for authenticator apps.

    Args:
        secret: Base32-encoded TOTP secret.
        email: Admin email (displayed in the authenticator app).
        issuer: Application name; defaults to MFA_ISSUER.
    """
    return pyotp.TOTP(secret).provisioning_uri(name=email, issuer_name=issuer or settings.MFA_ISSUER)


def generate_qr_code_base64(uri: str) -> str:
    """
    Render the provisioning URI as a PNG QR code.

    Returns:
        ``data:image/png;base64,...`` string, ready for an ``<img src>``.
    """
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=4,
    )
    qr.add_data(uri)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    b64 = base64.b64encode(buffer.getvalue()).decode("utf-8")
    return f"data:image/png;base64,{b64}"


def verify_totp(secret: str, code: str, window: Optional[int] = None) -> bool:
    """
    Verify a TOTP code against the secret.

    Args:
        secret: Base32-encoded TOTP secret.
        code: 6-digit code entered by the admin (spaces are ignored).
        window: Number of adjacent 30-second steps accepted on each side;
            defaults to MFA_VALID_WINDOW (1 = +-30s).

    Returns:
        True if the code is valid, False otherwise.
    """
    if not secret or not code:
        return False

    code = "".join(filter(str.isdigit, code))
    if len(code) != 6:
        return False

    if window is None:
        window = settings.MFA_VALID_WINDOW

    return pyotp.TOTP(secret).verify(code, valid_window=window)
