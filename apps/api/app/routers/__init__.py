"""API routers."""

from app.routers.accounts import router as accounts_router
from app.routers.approvals import router as approvals_router
from app.routers.devices import router as devices_router
from app.routers.extensions import router as extensions_router
from app.routers.onboarding import router as onboarding_router
from app.routers.provisioning import router as provisioning_router
from app.routers.validation import router as validation_router

__all__ = [
    "accounts_router",
    "approvals_router",
    "devices_router",
    "extensions_router",
    "onboarding_router",
    "provisioning_router",
    "validation_router",
]
