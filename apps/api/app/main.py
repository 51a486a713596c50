"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from app.core.config import settings
from app.db.session import engine
from app.services.errors import (
    InvalidRequestError,
    NotFoundError,
    OnboardingServiceError,
    StateConflictError,
)

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

# ============================================================================
# Rate Limiting
# ============================================================================

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from app.core.rate_limit import limiter


# ============================================================================
# FastAPI App
# ============================================================================

app = FastAPI(
    title="VoiceStack Onboarding API",
    description="Multi-tenant location onboarding and provisioning API",
    version=settings.VERSION,
    docs_url="/docs" if settings.ENV == "dev" else None,
    redoc_url="/redoc" if settings.ENV == "dev" else None,
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware - must be added before routers
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Actor-Id", "X-Actor-Role"],
)


@app.exception_handler(OnboardingServiceError)
async def onboarding_service_error_handler(request: Request, exc: OnboardingServiceError):
    """Fallback for service errors a router did not translate itself."""
    if isinstance(exc, NotFoundError):
        status_code = 404
    elif isinstance(exc, StateConflictError):
        status_code = 409
    elif isinstance(exc, InvalidRequestError):
        status_code = 400
    else:
        status_code = 500
        logger.error(f"Unhandled onboarding service error on {request.url.path}: {exc}")
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


# ============================================================================
# Routers
# ============================================================================

from app.routers import accounts, approvals, devices, extensions, onboarding, provisioning, validation

app.include_router(onboarding.router)
app.include_router(devices.router)
app.include_router(extensions.router)
app.include_router(approvals.router)
app.include_router(validation.router)
app.include_router(provisioning.router)

# Account and location dashboards
app.include_router(accounts.router)


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health")
def health():
    """
    Health check endpoint.

    Verifies database connectivity and returns environment info.
    """
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    return {"status": "ok", "env": settings.ENV, "version": settings.VERSION}
