"""Password Vault Core Package.

Provides modular components for the encrypted password vault:
- config: Centralized configuration constants
- exceptions: Vault error taxonomy
- crypto: Key derivation and authenticated encryption
- storage: Atomic vault record persistence
- sessions: In-memory unlock sessions
- entries: Credential entry model and validation
- generator: Random password generation
- audit: Security event logging
- jwt_auth: Caller identity tokens
- service: Vault operations
"""

# Configuration constants
from vault_core.config import (
    VAULT_FILE,
    AUDIT_LOG_FILE,
    LOG_DIR,
    MIN_MASTER_PASSWORD_LENGTH,
    ENCRYPTION_KDF_ITERATIONS,
    VERIFICATION_KDF_ITERATIONS,
    SESSION_TTL_SECONDS,
    MIN_PASSWORD_LENGTH,
    MAX_PASSWORD_LENGTH,
    DEFAULT_PASSWORD_LENGTH,
)

# Errors
from vault_core.exceptions import (
    VaultError,
    WeakPasswordError,
    AlreadyInitializedError,
    InvalidCredentialsError,
    VaultLockedError,
    EntryNotFoundError,
    InvalidEntryError,
    TamperOrWrongKeyError,
    StorageUnavailableError,
    StorageCorruptedError,
)

# Components
from vault_core.crypto import KeyDerivation, AuthenticatedCipher, EncryptedPayload
from vault_core.storage import VaultRecord, VaultStore
from vault_core.sessions import SessionRegistry
from vault_core.entries import CredentialEntry
from vault_core.generator import generate_password
from vault_core.audit import log_security_event, get_security_events
from vault_core.service import VaultService

__all__ = [
    # Config
    "VAULT_FILE",
    "AUDIT_LOG_FILE",
    "LOG_DIR",
    "MIN_MASTER_PASSWORD_LENGTH",
    "ENCRYPTION_KDF_ITERATIONS",
    "VERIFICATION_KDF_ITERATIONS",
    "SESSION_TTL_SECONDS",
    "MIN_PASSWORD_LENGTH",
    "MAX_PASSWORD_LENGTH",
    "DEFAULT_PASSWORD_LENGTH",
    # Errors
    "VaultError",
    "WeakPasswordError",
    "AlreadyInitializedError",
    "InvalidCredentialsError",
    "VaultLockedError",
    "EntryNotFoundError",
    "InvalidEntryError",
    "TamperOrWrongKeyError",
    "StorageUnavailableError",
    "StorageCorruptedError",
    # Components
    "KeyDerivation",
    "AuthenticatedCipher",
    "EncryptedPayload",
    "VaultRecord",
    "VaultStore",
    "SessionRegistry",
    "CredentialEntry",
    "generate_password",
    "log_security_event",
    "get_security_events",
    "VaultService",
]
