"""Database models"""
from lexiom_admin.models.admin_user import AdminUser
from lexiom_admin.models.audit_log import AuditLog
from lexiom_admin.models.legal_module import LegalModule
from lexiom_admin.models.legal_template import LegalTemplate
from lexiom_admin.models.mfa_enrollment import MFAEnrollment
from lexiom_admin.models.role import Permission, Role, RolePermission

__all__ = [
    "AdminUser",
    "AuditLog",
    "LegalModule",
    "LegalTemplate",
    "MFAEnrollment",
    "Permission",
    "Role",
    "RolePermission",
]
