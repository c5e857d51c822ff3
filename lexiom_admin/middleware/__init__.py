"""Middleware modules for production-ready features"""
from lexiom_admin.middleware.monitoring import (
    MonitoringMiddleware,
    SecurityHeadersMiddleware,
    record_audit_failure,
    record_authorization_denial,
    record_login_outcome,
    record_rate_limited,
)
from lexiom_admin.middleware.rate_limit import LOGIN_RATE_LIMIT, enforce_api_rate_limit, limiter

__all__ = [
    "MonitoringMiddleware",
    "SecurityHeadersMiddleware",
    "record_audit_failure",
    "record_authorization_denial",
    "record_login_outcome",
    "record_rate_limited",
    "LOGIN_RATE_LIMIT",
    "enforce_api_rate_limit",
    "limiter",
]
