"""Data access layer"""
from lexiom_admin.repositories.admin_user_repository import AdminUserRepository
from lexiom_admin.repositories.audit_repository import AuditLogFilters, AuditLogRepository, AuditSink, SqlAuditSink
from lexiom_admin.repositories.role_repository import RoleRepository

__all__ = [
    "AdminUserRepository",
    "AuditLogFilters",
    "AuditLogRepository",
    "AuditSink",
    "RoleRepository",
    "SqlAuditSink",
]
