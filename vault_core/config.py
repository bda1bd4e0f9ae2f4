"""Centralized configuration constants.

All configurable values in one place for easy maintenance.
Security-sensitive settings can be overridden via environment variables.
"""

import os

# Directories
VAULT_DIR = os.environ.get("VAULT_DIR", "data")
LOG_DIR = os.environ.get("VAULT_LOG_DIR", "logs")

# File paths
VAULT_FILE = os.environ.get("VAULT_FILE", os.path.join(VAULT_DIR, "vault.json"))
AUDIT_LOG_FILE = os.path.join(LOG_DIR, "vault_events.jsonl")

# Audit log rotation
AUDIT_LOG_MAX_BYTES = int(os.environ.get("AUDIT_LOG_MAX_BYTES", 10 * 1024 * 1024))  # 10MB default
AUDIT_LOG_BACKUP_COUNT = int(os.environ.get("AUDIT_LOG_BACKUP_COUNT", 5))

# Key derivation - OWASP 2023 recommendations
# The verification hash must stay slower than the encryption key derivation.
SALT_LENGTH = 16
ENCRYPTION_KEY_LENGTH = 32
VERIFICATION_HASH_LENGTH = 64
ENCRYPTION_KDF_ITERATIONS = int(os.environ.get("ENCRYPTION_KDF_ITERATIONS", "600000"))
VERIFICATION_KDF_ITERATIONS = int(os.environ.get("VERIFICATION_KDF_ITERATIONS", "700000"))

# AES-GCM parameters
IV_LENGTH = 12
AUTH_TAG_LENGTH = 16

# Master password policy
MIN_MASTER_PASSWORD_LENGTH = 8

# Unlock sessions expire a fixed time after unlock, not after last access
SESSION_TTL_SECONDS = int(os.environ.get("SESSION_TTL_SECONDS", "300"))

# Storage
STORAGE_RETRY_ATTEMPTS = 1
RECORD_VERSION = 1

# Password generation
MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 128
DEFAULT_PASSWORD_LENGTH = 16

# Identity tokens issued by the dashboard login (magic link flow)
# SECURITY: In production, set JWT_SECRET_KEY via environment variable
# Generate with: python -c "import secrets; print(secrets.token_hex(32))"
JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", None)
JWT_ALGORITHM = "HS256"
JWT_IDENTITY_CLAIM = "email"

# Comma-separated allow-list of identities; empty means any valid token
_allowed_emails_env = os.environ.get("ALLOWED_EMAILS", "")
ALLOWED_EMAILS: set[str] = set(
    email.strip().lower() for email in _allowed_emails_env.split(",") if email.strip()
)

# HTTPS enforcement
# Set REQUIRE_HTTPS=true in production to reject non-HTTPS requests
REQUIRE_HTTPS = os.environ.get("REQUIRE_HTTPS", "false").lower() == "true"

# Brute force protection on the unlock endpoint (slowapi syntax)
UNLOCK_RATE_LIMIT = os.environ.get("UNLOCK_RATE_LIMIT", "10/minute")

_cors_origins_env = os.environ.get("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")
CORS_ORIGINS: list[str] = [o.strip() for o in _cors_origins_env.split(",") if o.strip()]
