"""FastAPI application configuration.

Main entry point for the Cockpit Vault REST API.
Wires the vault routers, the error handler, rate limiting, security
headers, HTTPS enforcement and CORS.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from vault_api.dependencies import limiter
from vault_api.routes import health_router, vault_router
from vault_core import (
    AlreadyInitializedError,
    EntryNotFoundError,
    InvalidCredentialsError,
    InvalidEntryError,
    StorageUnavailableError,
    VaultError,
    VaultLockedError,
    VaultService,
    WeakPasswordError,
)
from vault_core.config import CORS_ORIGINS, REQUIRE_HTTPS


logger = logging.getLogger(__name__)

# Most specific first: StorageCorruptedError resolves through StorageUnavailableError
ERROR_STATUS_CODES = (
    (WeakPasswordError, status.HTTP_400_BAD_REQUEST),
    (InvalidEntryError, status.HTTP_400_BAD_REQUEST),
    (InvalidCredentialsError, status.HTTP_401_UNAUTHORIZED),
    (EntryNotFoundError, status.HTTP_404_NOT_FOUND),
    (AlreadyInitializedError, status.HTTP_409_CONFLICT),
    (VaultLockedError, status.HTTP_423_LOCKED),
    (StorageUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def status_code_for(error: VaultError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def handle_vault_error(request: Request, exc: VaultError) -> JSONResponse:
    """Turn a vault error into a JSON response.

    Only the exception's safe message and code leave the process.
    """
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error("Vault request failed: %s %s -> %s", request.method, request.url.path, exc.code)
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.detail, "error": exc.code},
    )


def create_app(service: Optional[VaultService] = None) -> FastAPI:
    """Build the API application.

    Args:
        service: Vault service to serve; a default-configured one if omitted
    """
    vault_service = service if service is not None else VaultService()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Handle startup and shutdown events."""
        yield
        app.state.vault_service.sessions.clear()

    app = FastAPI(
        title="Cockpit Vault API",
        description="""
        Encrypted password vault with:
        - AES-256-GCM authenticated encryption
        - PBKDF2 key derivation with a separate verification hash
        - Time-boxed server-side unlock sessions
        - SIEM-compatible audit logging
        - Rate limiting for brute force protection
        """,
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.vault_service = vault_service

    # Attach rate limiter to app
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(VaultError, handle_vault_error)

    # HTTPS enforcement middleware
    @app.middleware("http")
    async def enforce_https(request: Request, call_next) -> Response:
        """Enforce HTTPS connections when REQUIRE_HTTPS is enabled.

        Health checks are exempted to allow load balancer probes.
        X-Forwarded-Proto is honoured for TLS-terminating reverse proxies.
        """
        if REQUIRE_HTTPS and request.url.path not in ["/", "/api/health"]:
            forwarded_proto = request.headers.get("X-Forwarded-Proto", "")
            is_https = (
                request.url.scheme == "https" or
                forwarded_proto.lower() == "https"
            )

            if not is_https:
                return JSONResponse(
                    status_code=403,
                    content={
                        "detail": "HTTPS required. This API requires secure connections.",
                        "error": "https_required"
                    }
                )

        return await call_next(request)

    # Security headers middleware
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next) -> Response:
        """Add OWASP-recommended security headers to all responses.

        Vault responses carry secrets, so caching is disabled everywhere.
        """
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Content-Security-Policy"] = "default-src 'self'; frame-ancestors 'none'"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, private"
        response.headers["Pragma"] = "no-cache"
        response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"

        return response

    # CORS configuration - explicitly restricted
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=[
            "Authorization",
            "Content-Type",
            "Accept",
            "Origin",
            "X-Requested-With",
        ],
        max_age=600,  # Cache preflight requests for 10 minutes
    )

    # Register routers
    app.include_router(health_router)
    app.include_router(vault_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    uvicorn.run(app, host="127.0.0.1", port=8000)
