"""Admin login, logout and session profile endpoints"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from lexiom_admin.api.deps import AdminContext, client_origin, get_audit_recorder, get_current_admin
from lexiom_admin.database import get_db
from lexiom_admin.errors import AuthenticationError
from lexiom_admin.middleware.rate_limit import LOGIN_RATE_LIMIT, limiter
from lexiom_admin.repositories.admin_user_repository import AdminUserRepository
from lexiom_admin.repositories.role_repository import RoleRepository
from lexiom_admin.schemas.auth import LoginRequest, LoginResponse, LogoutResponse, MeResponse, UserResponse
from lexiom_admin.services.audit import AuditRecorder
from lexiom_admin.services.login import LoginService
from lexiom_admin.utils.logger import logger

router = APIRouter(prefix="/admin", tags=["authentication"])


# ---------------------------------------------------------------------------
# POST /admin/login
# ---------------------------------------------------------------------------

@router.post("/login", response_model=LoginResponse)
@limiter.limit(LOGIN_RATE_LIMIT)
def login(
    request: Request,
    payload: LoginRequest,
    db: Session = Depends(get_db),
    audit: AuditRecorder = Depends(get_audit_recorder),
) -> LoginResponse:
    """Exchange email + password (+ TOTP code when MFA is on) for a session token.

    - **200**: `{token, user}`; use as `Authorization: Bearer <token>` for 24 h.
    - **400** with `mfaRequired: true`: password accepted, resend with `mfaCode`.
    - **401**: invalid credentials. Never says which part was wrong.
    - **423**: too many failures, account locked for 30 minutes.
    - **429**: login rate limit for this IP exceeded.
    """
    ip, user_agent = client_origin(request)
    result = LoginService(AdminUserRepository(db), audit).login(
        payload.email,
        payload.password,
        mfa_code=payload.mfa_code,
        ip=ip,
        user_agent=user_agent,
    )

    logger.info(
        f"Admin logged in: {result.user.email}",
        extra={"admin_id": result.user.id, "action": "admin_login", "client": ip, "outcome": "success"},
    )

    return LoginResponse(token=result.token, user=UserResponse.model_validate(result.user))


# ---------------------------------------------------------------------------
# POST /admin/logout
# ---------------------------------------------------------------------------

@router.post("/logout", response_model=LogoutResponse)
def logout(
    request: Request,
    ctx: AdminContext = Depends(get_current_admin),
    audit: AuditRecorder = Depends(get_audit_recorder),
) -> LogoutResponse:
    """Record the logout. Sessions are stateless: the client discards its token."""
    ip, user_agent = client_origin(request)
    audit.record(
        actor_id=ctx.id,
        action="admin_logout",
        resource_type="admin_user",
        resource_id=ctx.id,
        ip=ip,
        user_agent=user_agent,
    )
    return LogoutResponse()


# ---------------------------------------------------------------------------
# GET /admin/me
# ---------------------------------------------------------------------------

@router.get("/me", response_model=MeResponse)
def me(
    ctx: AdminContext = Depends(get_current_admin),
    db: Session = Depends(get_db),
) -> MeResponse:
    """Profile of the caller plus the permissions currently in effect for them."""
    user = AdminUserRepository(db).get_by_id(ctx.id)
    if user is None:
        raise AuthenticationError("Invalid or inactive admin user")

    roles = RoleRepository(db)
    if ctx.is_super_admin:
        permissions = [p.name for p in roles.list_permissions()]
    else:
        permissions = roles.granted_permissions(ctx.role_id)

    return MeResponse(
        **UserResponse.model_validate(user).model_dump(),
        permissions=sorted(permissions),
    )
