"""API dependencies for authentication and authorization.

Every protected route resolves the caller from ``Authorization: Bearer <JWT>``:

1. no credentials                     → 401 "No token provided"
2. bad signature / expired / wrong type → 401, no identity lookup
3. identity missing or deactivated    → 401, even if the token is still valid

The resolved identity is returned as an immutable :class:`AdminContext` and
passed down the call chain; nothing is stored in module or process state.

RBAC
----
Use :func:`require_permissions` for permission-gated endpoints. Any one of the
listed permissions is sufficient; super-admins bypass the check; an empty list
means "any authenticated admin".
"""
from typing import Callable, NamedTuple, Optional, Tuple

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from lexiom_admin.database import get_db
from lexiom_admin.errors import AuthenticationError, AuthorizationError
from lexiom_admin.middleware.monitoring import record_authorization_denial
from lexiom_admin.repositories.admin_user_repository import AdminUserRepository
from lexiom_admin.repositories.audit_repository import AuditSink, SqlAuditSink
from lexiom_admin.repositories.role_repository import RoleRepository
from lexiom_admin.services.audit import AuditRecorder
from lexiom_admin.services.rbac import authorize
from lexiom_admin.utils.jwt_utils import decode_session_token
from lexiom_admin.utils.logger import logger

_bearer_scheme = HTTPBearer(auto_error=False)


class AdminContext(NamedTuple):
    """Resolved admin identity for the current request."""
    id: str
    email: str
    full_name: str
    role_id: Optional[str]
    is_super_admin: bool


# ---------------------------------------------------------------------------
# Audit wiring
# ---------------------------------------------------------------------------

def get_audit_sink(db: Session = Depends(get_db)) -> AuditSink:
    """Audit sink for this request. Overridden in tests with an in-memory double."""
    return SqlAuditSink(db)


def get_audit_recorder(sink: AuditSink = Depends(get_audit_sink)) -> AuditRecorder:
    return AuditRecorder(sink)


def client_origin(request: Request) -> Tuple[Optional[str], Optional[str]]:
    """(ip, user agent) of the caller, for audit events"""
    ip = request.client.host if request.client else None
    return ip, request.headers.get("user-agent")


# ---------------------------------------------------------------------------
# Session verification
# ---------------------------------------------------------------------------

def get_current_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    db: Session = Depends(get_db),
) -> AdminContext:
    """Verify the bearer token and re-check that its identity is still active."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("No token provided")

    payload = decode_session_token(credentials.credentials)

    user = AdminUserRepository(db).get_by_id(payload["sub"])
    if user is None or not user.is_active:
        logger.info(
            "Token rejected: identity missing or inactive",
            extra={"admin_id": payload["sub"], "action": "verify_token", "outcome": "inactive"},
        )
        raise AuthenticationError("Invalid or inactive admin user")

    return AdminContext(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        role_id=user.role_id,
        is_super_admin=user.is_super_admin,
    )


# ---------------------------------------------------------------------------
# Permission-gated dependency factory
# ---------------------------------------------------------------------------

def require_permissions(*permissions: str) -> Callable:
    """Return a FastAPI dependency that enforces any-of ``permissions``.

    Usage::

        @router.post("/modules/{identifier}/toggle")
        def toggle(ctx: AdminContext = Depends(require_permissions("modules:update"))):
            ...

    Returns:
        A FastAPI-injectable callable that resolves to :class:`AdminContext` or raises 403.
    """
    required = frozenset(permissions)

    def _permission_dep(
        ctx: AdminContext = Depends(get_current_admin),
        db: Session = Depends(get_db),
    ) -> AdminContext:
        if not authorize(RoleRepository(db), ctx.role_id, ctx.is_super_admin, required):
            record_authorization_denial()
            logger.info(
                "Authorization denied",
                extra={"admin_id": ctx.id, "action": "authorize", "outcome": ",".join(sorted(required))},
            )
            raise AuthorizationError()
        return ctx

    # Give FastAPI a unique name so it doesn't collapse distinct dependencies
    _permission_dep.__name__ = "require_" + "_".join(
        p.replace(":", "_") for p in sorted(required)
    ) or "require_authenticated"
    return _permission_dep
