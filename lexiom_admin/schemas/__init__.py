"""Pydantic schemas for request/response validation"""
from lexiom_admin.schemas.audit_log import AuditLogPage, AuditLogResponse
from lexiom_admin.schemas.auth import LoginRequest, LoginResponse, LogoutResponse, MeResponse, UserResponse
from lexiom_admin.schemas.mfa import MFASetupResponse, MFAStatusResponse, MFAVerifyRequest

__all__ = [
    "LoginRequest",
    "LoginResponse",
    "LogoutResponse",
    "MeResponse",
    "UserResponse",
    "MFASetupResponse",
    "MFAVerifyRequest",
    "MFAStatusResponse",
    "AuditLogResponse",
    "AuditLogPage",
]
