"""API route modules."""

from vault_api.routes.health import router as health_router
from vault_api.routes.vault import router as vault_router

__all__ = ["health_router", "vault_router"]
