"""Caller identity tokens.

The dashboard login issues HS256 JWTs carrying the caller's email address.
The vault only reads the identity back out of them; it never sees the
dashboard login itself.

SECURITY FEATURES:
- Cryptographically secure secret key requirement
- Expiry enforced on every verification
- Optional allow-list of identities
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from vault_core.config import (
    ALLOWED_EMAILS,
    JWT_ALGORITHM,
    JWT_IDENTITY_CLAIM,
    JWT_SECRET_KEY,
)


DEFAULT_TOKEN_LIFETIME = timedelta(days=7)


class JWTError(Exception):
    """Base exception for JWT-related errors."""
    pass


class TokenExpiredError(JWTError):
    """Token has expired."""
    pass


class InvalidTokenError(JWTError):
    """Token is invalid, malformed, or names an identity that is not allowed."""
    pass


class MissingSecretKeyError(JWTError):
    """JWT_SECRET_KEY not configured."""
    pass


def _get_secret_key(secret_key: Optional[str] = None) -> str:
    """Get JWT secret key with validation.

    Raises:
        MissingSecretKeyError: If no secret key is configured
    """
    key = secret_key or JWT_SECRET_KEY
    if key:
        return key

    raise MissingSecretKeyError(
        "JWT_SECRET_KEY environment variable not set. "
        "Generate one with: python -c \"import secrets; print(secrets.token_hex(32))\""
    )


def create_identity_token(
    email: str,
    expires_in: timedelta = DEFAULT_TOKEN_LIFETIME,
    secret_key: Optional[str] = None
) -> str:
    """Issue a token for an identity.

    Args:
        email: Caller identity
        expires_in: Token lifetime
        secret_key: Override for the configured secret

    Returns:
        Encoded JWT string
    """
    now = datetime.now(timezone.utc)
    payload = {
        JWT_IDENTITY_CLAIM: email.lower(),
        "iat": now,
        "exp": now + expires_in,
    }
    return jwt.encode(payload, _get_secret_key(secret_key), algorithm=JWT_ALGORITHM)


def verify_identity_token(
    token: str,
    secret_key: Optional[str] = None,
    allowed: Optional[set[str]] = None
) -> str:
    """Verify a token and return the caller identity.

    Args:
        token: Encoded JWT
        secret_key: Override for the configured secret
        allowed: Override for the configured allow-list

    Returns:
        Lowercased email identity

    Raises:
        TokenExpiredError: If the token has expired
        InvalidTokenError: If the token is invalid or the identity not allowed
        MissingSecretKeyError: If no secret is configured
    """
    try:
        payload = jwt.decode(
            token,
            _get_secret_key(secret_key),
            algorithms=[JWT_ALGORITHM],
            options={"require": ["exp", JWT_IDENTITY_CLAIM]},
        )
    except jwt.ExpiredSignatureError:
        raise TokenExpiredError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise InvalidTokenError(f"Invalid token: {e}")

    identity = payload[JWT_IDENTITY_CLAIM]
    if not isinstance(identity, str) or not identity:
        raise InvalidTokenError("Token carries no identity")

    identity = identity.lower()
    allow_list = ALLOWED_EMAILS if allowed is None else allowed
    if allow_list and identity not in allow_list:
        raise InvalidTokenError("Identity not allowed")

    return identity
