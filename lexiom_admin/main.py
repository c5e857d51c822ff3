"""FastAPI application entry point"""
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi.errors import RateLimitExceeded

from lexiom_admin import __version__
from lexiom_admin.api import audit_logs, auth, health, mfa, modules, roles, templates
from lexiom_admin.config import settings
from lexiom_admin.errors import AdminAPIError, InternalError, RateLimitedError, ValidationError
from lexiom_admin.middleware.monitoring import MonitoringMiddleware, SecurityHeadersMiddleware, record_rate_limited
from lexiom_admin.middleware.rate_limit import enforce_api_rate_limit, limiter
from lexiom_admin.utils.logger import logger, setup_logging

# Setup logging
setup_logging(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    # Startup
    logger.info("Lexiom admin API starting up", extra={
        "version": __version__,
        "environment": settings.ENVIRONMENT,
        "log_level": settings.LOG_LEVEL,
        "rate_limiting": settings.RATE_LIMIT_ENABLED,
        "monitoring": settings.METRICS_ENABLED,
    })
    yield
    # Shutdown
    logger.info("Lexiom admin API shutting down")


# Create FastAPI app
app = FastAPI(
    title="Lexiom Admin",
    description="Authentication, authorization and audit core of the Lexiom admin panel",
    version=__version__,
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
    lifespan=lifespan,
)

# ===== Middleware Setup =====
# Starlette runs the last-added middleware first.

# @limiter.limit on the login route looks the limiter up here
app.state.limiter = limiter

app.add_middleware(SecurityHeadersMiddleware, enable_hsts=settings.is_production)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
)

# Monitoring middleware
if settings.METRICS_ENABLED:
    app.add_middleware(MonitoringMiddleware)

    # Prometheus metrics
    instrumentator = Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        should_respect_env_var=True,
        should_instrument_requests_inprogress=True,
        excluded_handlers=["/metrics", "/health", "/health/ready", "/health/live"],
        inprogress_name="lexiom_requests_inprogress",
        inprogress_labels=True,
    )
    instrumentator.instrument(app)
    instrumentator.expose(app, endpoint=settings.METRICS_PATH, include_in_schema=False)

# ===== Route Setup =====

# Health probes and /metrics stay outside the general API rate limit
app.include_router(health.router)

api_dependencies = [Depends(enforce_api_rate_limit)]
for api_router in (auth.router, mfa.router, audit_logs.router, modules.router, roles.router, templates.router):
    app.include_router(api_router, dependencies=api_dependencies)


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "service": "Lexiom Admin",
        "version": __version__,
        "status": "operational",
        "health": "/health",
        "metrics": settings.METRICS_PATH if settings.METRICS_ENABLED else None,
    }


# ===== Error Handlers =====

def _error_response(exc: AdminAPIError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """Handle rate limit exceeded errors"""
    record_rate_limited(request.url.path)
    logger.warning(
        "Rate limit exceeded",
        extra={
            "path": request.url.path,
            "method": request.method,
            "client": request.client.host if request.client else "unknown",
        },
    )
    return _error_response(RateLimitedError(extra={"detail": str(exc.detail)}))


@app.exception_handler(AdminAPIError)
async def admin_api_error_handler(request: Request, exc: AdminAPIError):
    """Render taxonomy errors as {"error", "message", ...}"""
    if exc.status_code >= 500:
        logger.error(
            f"Request failed: {exc.message}",
            extra={"path": request.url.path, "method": request.method},
        )
    return _error_response(exc)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed input is rejected before any business logic runs"""
    details = [
        {"field": ".".join(str(part) for part in err.get("loc", ())), "message": err.get("msg", "")}
        for err in exc.errors()
    ]
    return _error_response(ValidationError("Invalid request", extra={"details": details}))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for uncaught errors"""
    logger.error(
        f"Unhandled exception: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
        },
        exc_info=True,
    )
    error = InternalError()
    if settings.expose_error_detail:
        error.extra = {"detail": str(exc)}
    return _error_response(error)
