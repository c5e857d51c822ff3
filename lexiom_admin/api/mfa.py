"""MFA enrollment endpoints for the signed-in admin"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from lexiom_admin.api.deps import AdminContext, client_origin, get_audit_recorder, get_current_admin
from lexiom_admin.database import get_db
from lexiom_admin.errors import AuthenticationError
from lexiom_admin.models.admin_user import AdminUser
from lexiom_admin.repositories.admin_user_repository import AdminUserRepository
from lexiom_admin.schemas.mfa import MFASetupResponse, MFAStatusResponse, MFAVerifyRequest
from lexiom_admin.services.audit import AuditRecorder
from lexiom_admin.services.mfa import MFAService
from lexiom_admin.utils.logger import logger

router = APIRouter(prefix="/admin/mfa", tags=["mfa"])


def _load_user(db: Session, ctx: AdminContext) -> AdminUser:
    user = AdminUserRepository(db).get_by_id(ctx.id)
    if user is None:
        raise AuthenticationError("Invalid or inactive admin user")
    return user


@router.post("/setup", response_model=MFASetupResponse)
def setup_mfa(
    ctx: AdminContext = Depends(get_current_admin),
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
) -> MFASetupResponse:
    """
    Start MFA enrollment.

    Returns a fresh TOTP secret, its `otpauth://` URL and a QR code to scan.
    MFA is not active until the first code is confirmed at POST /admin/mfa/verify.
    Calling setup again replaces any pending secret.
    """
    setup = MFAService(db, audit).setup(_load_user(db, ctx))

    logger.info(
        "MFA setup started",
        extra={"admin_id": ctx.id, "action": "mfa_setup"},
    )

    return MFASetupResponse(secret=setup.secret, qrCode=setup.qr_code, otpauthUrl=setup.otpauth_url)


@router.post("/verify", response_model=MFAStatusResponse)
def verify_mfa(
    body: MFAVerifyRequest,
    request: Request,
    ctx: AdminContext = Depends(get_current_admin),
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
) -> MFAStatusResponse:
    """Confirm the pending secret with a code from the authenticator app and enable MFA."""
    ip, user_agent = client_origin(request)
    user = MFAService(db, audit).confirm(_load_user(db, ctx), body.totpCode, ip=ip, user_agent=user_agent)
    return MFAStatusResponse(mfa_enabled=user.mfa_enabled)


@router.post("/disable", response_model=MFAStatusResponse)
def disable_mfa(
    request: Request,
    ctx: AdminContext = Depends(get_current_admin),
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
) -> MFAStatusResponse:
    """Remove the TOTP secret from the caller's account. 400 if MFA is not enabled."""
    ip, user_agent = client_origin(request)
    user = MFAService(db, audit).disable(_load_user(db, ctx), ip=ip, user_agent=user_agent)
    return MFAStatusResponse(mfa_enabled=user.mfa_enabled)
