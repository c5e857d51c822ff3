"""Monitoring and observability middleware"""
import time
import uuid
from typing import Callable
from fastapi import Request, Response
from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware
from lexiom_admin.utils.logger import logger


# ===== Prometheus Metrics =====

# Request metrics
http_requests_total = Counter(
    "lexiom_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"]
)

http_request_duration_seconds = Histogram(
    "lexiom_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"]
)

# Auth metrics
login_attempts_total = Counter(
    "lexiom_login_attempts_total",
    "Login attempts by outcome",
    ["outcome"]  # success, bad_password, unknown_or_inactive, bad_mfa_code, mfa_required, locked, timeout
)

authorization_denials_total = Counter(
    "lexiom_authorization_denials_total",
    "Requests rejected by the permission resolver"
)

rate_limited_total = Counter(
    "lexiom_rate_limited_total",
    "Requests rejected by the rate limiter",
    ["endpoint"]
)

audit_write_failures_total = Counter(
    "lexiom_audit_write_failures_total",
    "Audit events that could not be written",
    ["action"]
)

# Error metrics
http_errors_total = Counter(
    "lexiom_http_errors_total",
    "Total HTTP errors",
    ["method", "endpoint", "status"]
)


def endpoint_label(request: Request) -> str:
    """Route template of the matched route, so ids in the path never become label values"""
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    return path or "unmatched"


class MonitoringMiddleware(BaseHTTPMiddleware):
    """Middleware for monitoring and metrics collection"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and collect metrics"""
        start_time = time.time()

        # Extract request details
        method = request.method
        path = request.url.path

        # Add request ID for tracing
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id

        try:
            # Process request
            response = await call_next(request)
            status = response.status_code
            endpoint = endpoint_label(request)

            # Record metrics
            duration = time.time() - start_time
            http_requests_total.labels(
                method=method,
                endpoint=endpoint,
                status=status
            ).inc()

            http_request_duration_seconds.labels(
                method=method,
                endpoint=endpoint
            ).observe(duration)

            # Log slow requests
            if duration > 1.0:  # More than 1 second
                logger.warning(
                    f"Slow request detected: {method} {path}",
                    extra={
                        "request_id": request_id,
                        "method": method,
                        "path": path,
                        "duration": duration,
                        "status": status
                    }
                )

            # Track errors
            if status >= 400:
                http_errors_total.labels(
                    method=method,
                    endpoint=endpoint,
                    status=status
                ).inc()

            # Add custom headers
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{duration:.3f}s"

            return response

        except Exception as e:
            # Record error metrics
            duration = time.time() - start_time
            http_errors_total.labels(
                method=method,
                endpoint=endpoint_label(request),
                status=500
            ).inc()

            logger.error(
                f"Request failed: {method} {path}",
                extra={
                    "request_id": request_id,
                    "method": method,
                    "path": path,
                    "duration": duration,
                    "error": str(e)
                },
                exc_info=True
            )
            raise


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add standard security headers to every response."""

    def __init__(self, app, enable_hsts: bool = False):
        super().__init__(app)
        self.enable_hsts = enable_hsts

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if self.enable_hsts:
            response.headers["Strict-Transport-Security"] = "max-age=63072000; includeSubDomains"
        return response


def record_login_outcome(outcome: str):
    """Record a login attempt outcome"""
    login_attempts_total.labels(outcome=outcome).inc()


def record_authorization_denial():
    """Record a 403 from the permission resolver"""
    authorization_denials_total.inc()


def record_rate_limited(endpoint: str):
    """Record a request rejected by the rate limiter"""
    rate_limited_total.labels(endpoint=endpoint).inc()


def record_audit_failure(action: str):
    """Record an audit event that could not be written"""
    audit_write_failures_total.labels(action=action).inc()
