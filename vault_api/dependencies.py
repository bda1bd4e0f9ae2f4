"""FastAPI dependencies for caller identity and the vault service.

The dashboard's login issues bearer JWTs; every vault endpoint resolves the
token into the caller's email identity before touching the vault.
"""

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from slowapi import Limiter
from slowapi.util import get_remote_address

from vault_core import VaultService
from vault_core.jwt_auth import (
    InvalidTokenError,
    MissingSecretKeyError,
    TokenExpiredError,
    verify_identity_token,
)


security_bearer = HTTPBearer(auto_error=False)

# Rate limiter configuration
# Uses client IP for rate limit tracking
limiter = Limiter(key_func=get_remote_address)


def get_caller_identity(
    bearer_credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_bearer),
) -> str:
    """Dependency resolving the bearer token into a caller identity.

    Returns:
        Caller email address

    Raises:
        HTTPException: 401 if the token is missing, invalid or expired
        HTTPException: 500 if token verification is not configured
    """
    if not bearer_credentials or not bearer_credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return verify_identity_token(bearer_credentials.credentials)
    except TokenExpiredError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except MissingSecretKeyError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Token authentication not configured"
        )


def get_vault_service(request: Request) -> VaultService:
    """Dependency returning the application's vault service."""
    return request.app.state.vault_service
